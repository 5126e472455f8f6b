"""
Inline control tags typed by the user, e.g. "<Thinking:On><Effort:High> explain this".

Recognised forms (case-insensitive, anywhere in the text, any order):
  <Thinking:On>  <Thinking:Off>
  <Effort:Low>   <Effort:Medium>   <Effort:High>

Anything else, including "<Thinking:On" or "< Thinking : On >", is ordinary text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional
import re

from packages.core.types import Effort

CONTROL_TAG_RE = re.compile(
    r"<(?:thinking:(?P<thinking>on|off)|effort:(?P<effort>low|medium|high))>",
    re.IGNORECASE,
)
# Same tags plus the spaces/tabs right after them, so "a <Thinking:On> b" becomes "a b".
_STRIP_RE = re.compile(CONTROL_TAG_RE.pattern + r"[ \t]*", re.IGNORECASE)


@dataclass(frozen=True)
class TagScan:
    thinking: Optional[bool] = None
    effort: Optional[Effort] = None
    count: int = 0

    @property
    def found(self) -> bool:
        return self.count > 0

    def then(self, later: "TagScan") -> "TagScan":
        """Combine with a scan of text that comes after this one."""
        return TagScan(
            thinking=later.thinking if later.thinking is not None else self.thinking,
            effort=later.effort if later.effort is not None else self.effort,
            count=self.count + later.count,
        )


def scan_tags(text: str) -> TagScan:
    """Later tags of the same kind override earlier ones."""
    if not text:
        return TagScan()
    thinking: Optional[bool] = None
    effort: Optional[Effort] = None
    count = 0
    for m in CONTROL_TAG_RE.finditer(text):
        count += 1
        if m.group("thinking"):
            thinking = m.group("thinking").lower() == "on"
        else:
            effort = Effort.parse(m.group("effort"))
    return TagScan(thinking=thinking, effort=effort, count=count)


def scan_all(texts: Iterable[str]) -> TagScan:
    """Scan each text on its own; a tag never spans two texts."""
    result = TagScan()
    for text in texts:
        result = result.then(scan_tags(text))
    return result


def strip_tags(text: str) -> str:
    """Remove each tag and the spaces/tabs after it. Other whitespace is kept."""
    if not text:
        return text
    return _STRIP_RE.sub("", text)
