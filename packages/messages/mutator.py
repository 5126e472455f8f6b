"""
Message Mutator.

Finds the message a request's reasoning decision applies to, reads its text,
and builds a rewritten copy. Reading and rewriting are separate pure steps;
nothing here mutates the caller's messages.

Content is either a plain string or an ordered list of typed blocks:
    "explain this"
    [{"type": "text", "text": "explain this"}, {"type": "image_url", ...}]
Anything else cannot be scanned or rewritten.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from packages.core.types import Blocks, Content, PlainText
from packages.messages.tags import TagScan, scan_all, strip_tags

TEXT_BLOCK = "text"

REASONING_INSTRUCTION = (
    "\n\n[IMPORTANT: This question requires careful analysis. "
    "Think step by step and show your detailed reasoning before answering.]\n\n"
)


class ContentNotParsable(ValueError):
    """Message content is neither a string nor a sequence of blocks."""


def parse_content(raw: Any) -> Optional[Content]:
    if isinstance(raw, str):
        return PlainText(raw)
    if isinstance(raw, (list, tuple)):
        return Blocks(tuple(raw))
    return None


def to_raw(content: Content) -> Any:
    if isinstance(content, PlainText):
        return content.text
    return list(content.items)


def _is_text_block(block: Any) -> bool:
    return (
        isinstance(block, dict)
        and block.get("type") == TEXT_BLOCK
        and isinstance(block.get("text"), str)
        and bool(block["text"])
    )


def is_eligible(message: Any, ignore_system_messages: bool = True) -> bool:
    if not isinstance(message, dict):
        return False
    role = message.get("role")
    if role == "user":
        return True
    return role == "system" and not ignore_system_messages


def find_target(messages: Any, ignore_system_messages: bool = True) -> Optional[int]:
    """Index of the most recent eligible message, or None."""
    if not isinstance(messages, (list, tuple)):
        return None
    for i in range(len(messages) - 1, -1, -1):
        if is_eligible(messages[i], ignore_system_messages):
            return i
    return None


def text_parts(content: Optional[Content]) -> Tuple[str, ...]:
    if content is None:
        return ()
    if isinstance(content, PlainText):
        return (content.text,)
    return tuple(b["text"] for b in content.items if _is_text_block(b))


def extract_text(content: Optional[Content]) -> str:
    """Scanning text: the string itself, or text blocks joined by one space."""
    return " ".join(text_parts(content))


def scan_content_tags(content: Optional[Content]) -> TagScan:
    """Tags are read block by block, the same units strip_content_tags edits."""
    return scan_all(text_parts(content))


def strip_content_tags(content: Content) -> Content:
    if isinstance(content, PlainText):
        return PlainText(strip_tags(content.text))
    items: List[Any] = []
    for b in content.items:
        if isinstance(b, dict) and b.get("type") == TEXT_BLOCK and isinstance(b.get("text"), str):
            stripped = strip_tags(b["text"])
            if stripped != b["text"]:
                b = {**b, "text": stripped}
        items.append(b)
    return Blocks(tuple(items))


def prepend_instruction(content: Content, instruction: str) -> Content:
    """Plain text gets a prefix; block content only on its first text block."""
    if isinstance(content, PlainText):
        return PlainText(instruction + content.text)
    items = list(content.items)
    for i, b in enumerate(items):
        if _is_text_block(b):
            items[i] = {**b, "text": instruction + b["text"]}
            break
    return Blocks(tuple(items))


def rewrite(
    message: Dict[str, Any],
    instruction: Optional[str] = None,
    *,
    remove_tags: bool = True,
) -> Dict[str, Any]:
    """
    Return a new message with control tags removed (when remove_tags) and
    `instruction` prepended (when given). Tags are removed before the
    instruction is added.

    Raises ContentNotParsable if the content can't be handled.
    """
    content = parse_content(message.get("content"))
    if content is None:
        raise ContentNotParsable(f"unsupported content type: {type(message.get('content')).__name__}")
    if remove_tags:
        content = strip_content_tags(content)
    if instruction:
        content = prepend_instruction(content, instruction)
    return {**message, "content": to_raw(content)}


def replace_at(messages: Sequence[Any], index: int, message: Dict[str, Any]) -> List[Any]:
    out = list(messages)
    out[index] = message
    return out
