"""
Trace helpers for the router app. No side effects on import.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Union

from packages.config.options import TransformerOptions
from packages.core.trace import NullTraceWriter, TraceWriter

Trace = Union[TraceWriter, NullTraceWriter]


def session_stamp(now: Optional[datetime] = None) -> str:
    """File-name safe UTC timestamp, e.g. 2025-01-31T09-15-02."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H-%M-%S")


def get_trace_writer(options: TransformerOptions, stamp: Optional[str] = None) -> Trace:
    if not options.trace:
        return NullTraceWriter()
    name = f"zai-transformer-{stamp or session_stamp()}.jsonl"
    return TraceWriter(options.trace_dir / name, max_bytes=options.max_log_size)
