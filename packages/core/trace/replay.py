"""Replay a transform trace to verify integrity and request ordering.

"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Set
import json

from .writer import verify_trace_log
from packages.core.codec import stable_sha256

OPENING_EVENTS = {"TransformerStarted", "TraceRotated"}


@dataclass(frozen=True)
class ReplayResult:
    ok: bool
    error: Optional[str] = None
    events: int = 0
    requests: int = 0
    enhanced: int = 0
    replay_state_hash: Optional[str] = None


def replay_trace_log(path: Path) -> ReplayResult:
    ok, err = verify_trace_log(path)
    if not ok:
        return ReplayResult(ok=False, error=f"trace verification failed: {err}")

    lines = [ln for ln in path.read_text(encoding="utf-8").splitlines() if ln.strip()]
    if not lines:
        return ReplayResult(ok=False, error="empty trace log")

    first = json.loads(lines[0])
    if first.get("type") not in OPENING_EVENTS:
        return ReplayResult(ok=False, error="first event must be TransformerStarted or TraceRotated")
    # A rotation continuation may finish requests received in the previous part.
    continuation = first.get("type") == "TraceRotated"

    state_hash = "GENESIS"
    received: Set[int] = set()
    finished: Set[int] = set()
    enhanced = 0

    for i, ln in enumerate(lines, start=1):
        ev = json.loads(ln)
        etype = ev.get("type")
        ehash = ev.get("hash")
        rid = ev.get("request_id")
        if not etype or not ehash or not isinstance(rid, int):
            return ReplayResult(ok=False, error=f"missing type/hash/request_id at line {i}")

        if etype == "RequestReceived":
            if rid in received:
                return ReplayResult(ok=False, error=f"duplicate request id {rid} at line {i}")
            received.add(rid)
        elif etype == "RequestTransformed":
            if rid not in received and not continuation:
                return ReplayResult(ok=False, error=f"request {rid} transformed before it was received (line {i})")
            if rid in finished:
                return ReplayResult(ok=False, error=f"request {rid} transformed twice (line {i})")
            finished.add(rid)
        elif etype == "PromptEnhanced":
            enhanced += 1

        state_hash = stable_sha256({"prev": state_hash, "event_hash": ehash, "type": etype})

    return ReplayResult(
        ok=True,
        events=len(lines),
        requests=len(finished),
        enhanced=enhanced,
        replay_state_hash=state_hash,
    )
