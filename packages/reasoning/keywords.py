"""
Trigger phrases for prompt enhancement.

Matching is a plain case-insensitive substring search with no word
boundaries, so "think" also matches inside "thinking" or "rethink".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

# Forces reasoning on with high effort regardless of any other setting.
ULTRATHINK = "ultrathink"

DEFAULT_KEYWORDS: Tuple[str, ...] = (
    # counting
    "how many", "how much", "count", "number of", "total of", "amount of",
    # analysis and reasoning
    "analyze", "analysis", "reason", "reasoning", "think", "thinking",
    "deduce", "deduction", "infer", "inference",
    # calculation and problem solving
    "calculate", "calculation", "solve", "solution", "determine",
    # detailed explanations
    "explain", "explanation", "demonstrate", "demonstration",
    "detail", "detailed", "step by step", "step-by-step",
    # identification and search
    "identify", "find", "search", "locate", "enumerate", "list",
    # precision
    "letters", "characters", "digits", "numbers", "figures",
    "positions", "position", "index", "indices",
    # comparison and evaluation
    "compare", "comparison", "evaluate", "evaluation",
    "verify", "verification", "check",
)


def contains_ultrathink(text: str) -> bool:
    return bool(text) and ULTRATHINK in text.lower()


@dataclass(frozen=True)
class KeywordSet:
    keywords: Tuple[str, ...] = DEFAULT_KEYWORDS

    @classmethod
    def build(cls, custom: Optional[Iterable[str]] = None, override: bool = False) -> "KeywordSet":
        """
        override=False: defaults followed by custom keywords.
        override=True: custom keywords only (may be empty, which disables matching).
        """
        base: Iterable[str] = () if override else DEFAULT_KEYWORDS
        seen = set()
        ordered = []
        for k in list(base) + list(custom or ()):
            k = k.strip().lower()
            if not k or k in seen:
                continue
            seen.add(k)
            ordered.append(k)
        return cls(keywords=tuple(ordered))

    def first_match(self, text: str) -> Optional[str]:
        if not text:
            return None
        lowered = text.lower()
        for k in self.keywords:
            if k in lowered:
                return k
        return None

    def __contains__(self, keyword: object) -> bool:
        return isinstance(keyword, str) and keyword.lower() in self.keywords

    def __iter__(self) -> Iterator[str]:
        return iter(self.keywords)

    def __len__(self) -> int:
        return len(self.keywords)
