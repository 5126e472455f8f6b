"""
Data types used throughout the transformer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Literal, Optional, Tuple, Union


class Effort(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"

    @classmethod
    def parse(cls, value: Any) -> Optional["Effort"]:
        """
        Lenient parse of a request/tag effort value.
        "none", "minimal" and anything unrecognised map to None.
        """
        if isinstance(value, Effort):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class ReasoningSource(str, Enum):
    """Precedence levels, highest first."""
    force_permanent = "force_permanent"
    ultrathink = "ultrathink"
    user_tags = "user_tags"
    global_override = "global_override"
    model_config = "model_config"
    native = "native"


@dataclass(frozen=True)
class PlainText:
    text: str


@dataclass(frozen=True)
class Blocks:
    """
    Ordered content blocks, kept exactly as received.
    Items are usually dicts like {"type": "text", "text": "..."} or
    {"type": "image_url", ...}; non-text items are carried through untouched.
    """
    items: Tuple[Any, ...]


Content = Union[PlainText, Blocks]


@dataclass(frozen=True)
class RequestedReasoning:
    """What the client asked for in its `reasoning` block."""
    enabled: Optional[bool] = None
    effort: Optional[Effort] = None

    @classmethod
    def from_request(cls, request: Dict[str, Any]) -> "RequestedReasoning":
        block = request.get("reasoning")
        if not isinstance(block, dict):
            return cls()
        enabled = block.get("enabled")
        return cls(
            enabled=enabled if isinstance(enabled, bool) else None,
            effort=Effort.parse(block.get("effort")),
        )


TraceEventType = Literal[
    "TransformerStarted",
    "RequestReceived",
    "ReasoningDecided",
    "PromptEnhanced",
    "PromptUnchanged",
    "FormatterMissing",
    "MutationSkipped",
    "RequestTransformed",
    "ResponsePassed",
    "TraceRotated",
]

@dataclass(frozen=True)
class TraceEvent:
    request_id: int  # 0 for lifecycle events
    type: TraceEventType
    ts_utc: str  # ISO8601
    payload: Dict[str, Any]
    prev_hash: Optional[str] = None
    hash: Optional[str] = None
