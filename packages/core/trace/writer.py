"""
Append-only transform trace with hash chaining and size-based rotation.
Each entry is a JSON object with fields:
  - request_id: int (0 for lifecycle events)
  - type: str
  - ts_utc: str (ISO 8601 UTC timestamp)
  - payload: Dict[str, Any] (redacted)
  - prev_hash: Optional[str] (hash of previous entry in the same file)
  - hash: str (SHA-256 hash of the entry excluding the hash field itself)

When the file reaches max_bytes it is renamed to <stem>-part<N><suffix> and
a fresh chain starts in the original path with a TraceRotated event.
"""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
import json
import re
import threading
import time

from packages.core.codec import stable_sha256, canonical_json_bytes
from packages.core.types import TraceEvent

DEFAULT_MAX_BYTES = 10 * 1024 * 1024

REDACT_PATTERNS = [
    re.compile(r"(?i)(api[_-]?key\s*[:=]\s*)(['\"][^'\"]+['\"])"),
    re.compile(r"(?i)(authorization\s*[:=]\s*)(['\"][^'\"]+['\"])"),
    re.compile(r"(?i)bearer\s+[A-Za-z0-9._\-]{16,}"),
    re.compile(r"(?i)sk-[A-Za-z0-9]{20,}"),
]


def redact_text(s: str) -> str:
    out = s
    for pat in REDACT_PATTERNS:
        out = pat.sub("[REDACTED]", out)
    return out


def _utc_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def _redact_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    def walk(v: Any) -> Any:
        if isinstance(v, str):
            return redact_text(v)
        if isinstance(v, dict):
            return {k: walk(v[k]) for k in v}
        if isinstance(v, (list, tuple)):
            return [walk(x) for x in v]
        return v

    return walk(payload)  # type: ignore[return-value]


class TraceWriter:
    """
    Append-only JSONL trace with hash chaining.

    File format: one JSON object per line:
      { request_id, type, ts_utc, payload, prev_hash, hash }

    Appends are serialized with a lock so one writer can be shared by
    concurrent transform calls.
    """

    def __init__(self, path: Path, max_bytes: int = DEFAULT_MAX_BYTES) -> None:
        if max_bytes <= 0:
            raise ValueError("max_bytes must be > 0")
        self.path = path
        self.max_bytes = max_bytes
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._parts = 0
        self._last_hash: Optional[str] = None
        if self.path.exists():
            # Resume the chain of an existing file.
            self._last_hash = _read_last_hash(self.path)

    def append(self, request_id: int, type: str, payload: Dict[str, Any]) -> TraceEvent:
        with self._lock:
            rotated = self._rotate_if_full()
            if rotated is not None:
                self._write_event(0, "TraceRotated", {"part": self._parts, "previous": rotated.name})
            return self._write_event(request_id, type, payload)

    def _rotate_if_full(self) -> Optional[Path]:
        if not self.path.exists() or self.path.stat().st_size < self.max_bytes:
            return None
        self._parts += 1
        target = self._part_path(self._parts)
        while target.exists():
            self._parts += 1
            target = self._part_path(self._parts)
        self.path.replace(target)
        self._last_hash = None
        return target

    def _part_path(self, n: int) -> Path:
        return self.path.with_name(f"{self.path.stem}-part{n}{self.path.suffix}")

    def _write_event(self, request_id: int, type: str, payload: Dict[str, Any]) -> TraceEvent:
        ev = TraceEvent(
            request_id=request_id,
            type=type,  # type: ignore[arg-type]
            ts_utc=_utc_iso(),
            payload=_redact_payload(payload),
            prev_hash=self._last_hash,
            hash=None,
        )
        # Hash is computed over the canonical form with hash=None.
        ev_dict = asdict(ev)
        ev_dict["hash"] = None
        h = stable_sha256(ev_dict)
        ev = TraceEvent(**{**asdict(ev), "hash": h})
        line = canonical_json_bytes(asdict(ev)).decode("utf-8")
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
        self._last_hash = h
        return ev


class NullTraceWriter:
    """Stand-in used when tracing is disabled."""

    path: Optional[Path] = None

    def append(self, request_id: int, type: str, payload: Dict[str, Any]) -> None:
        return None


def _read_last_hash(path: Path) -> Optional[str]:
    try:
        with path.open("rb") as f:
            f.seek(0, 2)
            size = f.tell()
            if size == 0:
                return None
            # Last ~8KB is enough for the final line.
            f.seek(max(0, size - 8192))
            tail = f.read().decode("utf-8", errors="ignore").splitlines()
            for line in reversed(tail):
                line = line.strip()
                if not line:
                    continue
                obj = json.loads(line)
                return obj.get("hash")
    except (OSError, ValueError):
        return None
    return None


def verify_trace_log(path: Path) -> Tuple[bool, Optional[str]]:
    """
    Verify hash chain and hashes of a single trace file.
    Returns (ok, error_message).
    """
    if not path.exists():
        return False, "trace log does not exist"

    prev: Optional[str] = None
    for line_no, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        if not line.strip():
            continue
        try:
            obj = json.loads(line)
        except ValueError:
            return False, f"invalid JSON at line {line_no}"
        if obj.get("prev_hash") != prev:
            return False, f"prev_hash mismatch at line {line_no}"
        expected_hash = obj.get("hash")
        obj2 = dict(obj)
        obj2["hash"] = None
        actual = stable_sha256(obj2)
        if expected_hash != actual:
            return False, f"hash mismatch at line {line_no}"
        prev = expected_hash
    return True, None
