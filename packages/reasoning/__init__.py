"""
Docstring for packages.reasoning
"""

from .engine import PRECEDENCE, ReasoningDecision, ReasoningEngine, Signals
from .keywords import DEFAULT_KEYWORDS, ULTRATHINK, KeywordSet, contains_ultrathink

__all__ = [
    "PRECEDENCE",
    "ReasoningDecision",
    "ReasoningEngine",
    "Signals",
    "DEFAULT_KEYWORDS",
    "ULTRATHINK",
    "KeywordSet",
    "contains_ultrathink",
]
