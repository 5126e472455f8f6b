"""
Docstring for packages.messages
"""

from .tags import TagScan, scan_all, scan_tags, strip_tags
from .mutator import (
    REASONING_INSTRUCTION,
    ContentNotParsable,
    extract_text,
    find_target,
    parse_content,
    scan_content_tags,
    rewrite,
)

__all__ = [
    "TagScan",
    "scan_all",
    "scan_tags",
    "strip_tags",
    "REASONING_INSTRUCTION",
    "ContentNotParsable",
    "extract_text",
    "find_target",
    "parse_content",
    "scan_content_tags",
    "rewrite",
]
