"""
Docstring for packages.core.trace
"""

from .writer import NullTraceWriter, TraceWriter, redact_text, verify_trace_log
from .replay import replay_trace_log, ReplayResult

__all__ = [
    'TraceWriter',
    'NullTraceWriter',
    'redact_text',
    'verify_trace_log',
    'replay_trace_log',
    'ReplayResult',
]
