"""Data models for model profiles and global overrides."""


from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

ZAI_PROVIDER = "Z.AI"
UNKNOWN_PROVIDER = "Unknown"
UNKNOWN_MODEL = "unknown"

# Fallback output cap for models missing from the table (128K).
DEFAULT_MAX_TOKENS = 128 * 1024


@dataclass(frozen=True)
class ModelProfile:
    """
    Static facts about one model.
    context_window is informational only; nothing enforces it.
    """
    name: str
    max_tokens: int
    context_window: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    reasoning: bool = False  # native reasoning support
    keyword_detection: bool = False  # keyword-triggered prompt enhancement by default
    provider: str = UNKNOWN_PROVIDER


UNKNOWN_PROFILE = ModelProfile(name=UNKNOWN_MODEL, max_tokens=DEFAULT_MAX_TOKENS)

BUILTIN_PROFILES: Dict[str, ModelProfile] = {
    "glm-4.6": ModelProfile(
        name="glm-4.6",
        max_tokens=128 * 1024,
        context_window=200 * 1024,
        temperature=1.0,
        top_p=0.95,
        reasoning=True,
        keyword_detection=True,
        provider=ZAI_PROVIDER,
    ),
    "glm-4.5": ModelProfile(
        name="glm-4.5",
        max_tokens=96 * 1024,
        context_window=128 * 1024,
        temperature=0.6,
        top_p=0.95,
        reasoning=True,
        keyword_detection=True,
        provider=ZAI_PROVIDER,
    ),
    "glm-4.5-air": ModelProfile(
        name="glm-4.5-air",
        max_tokens=96 * 1024,
        context_window=128 * 1024,
        temperature=0.6,
        top_p=0.95,
        reasoning=True,
        keyword_detection=True,
        provider=ZAI_PROVIDER,
    ),
    "glm-4.5v": ModelProfile(
        name="glm-4.5v",
        max_tokens=16 * 1024,
        context_window=128 * 1024,
        temperature=0.6,
        top_p=0.95,
        reasoning=True,
        keyword_detection=True,
        provider=ZAI_PROVIDER,
    ),
}


@dataclass(frozen=True)
class GlobalOverrides:
    """
    Operator-level values applied across all models.
    None defers to the model profile; anything else, False included, wins.
    """
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    reasoning: Optional[bool] = None
    keyword_detection: Optional[bool] = None


@dataclass(frozen=True)
class EffectiveModelConfig:
    model_name: str
    profile: ModelProfile
    max_tokens: int
    temperature: Optional[float]
    top_p: Optional[float]
    reasoning: bool
    keyword_detection: bool
    reasoning_override: Optional[bool] = None
    known: bool = True

    @property
    def provider(self) -> str:
        return self.profile.provider
