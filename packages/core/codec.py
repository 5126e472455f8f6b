"""
Canonical JSON encoding and stable hashing.

Used by the trace writer for hash chaining and by the transformer to
fingerprint message text without writing it to disk.
"""

from __future__ import annotations

import json
import hashlib
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any

def canonicalize(obj: Any) -> Any:
    if is_dataclass(obj) and not isinstance(obj, type):
        return canonicalize(asdict(obj))
    if isinstance(obj, Enum):
        return canonicalize(obj.value)
    if isinstance(obj, dict):
        return {str(k): canonicalize(obj[k]) for k in sorted(obj.keys(), key=str)}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(x) for x in obj]
    return obj

def canonical_json_bytes(obj: Any) -> bytes:
    canon = canonicalize(obj)
    s = json.dumps(canon, separators=(",", ":"), ensure_ascii=False)
    return s.encode("utf-8")

def stable_sha256(obj: Any) -> str:
    return hashlib.sha256(canonical_json_bytes(obj)).hexdigest()

def fingerprint(obj: Any, length: int = 16) -> str:
    """Short stable digest, e.g. for identifying a message in the trace."""
    return stable_sha256(obj)[:length]
