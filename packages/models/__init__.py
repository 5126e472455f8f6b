"""
Docstring for packages.models
"""

from .profiles import (
    BUILTIN_PROFILES,
    DEFAULT_MAX_TOKENS,
    UNKNOWN_MODEL,
    UNKNOWN_PROFILE,
    EffectiveModelConfig,
    GlobalOverrides,
    ModelProfile,
)
from .resolver import ConfigResolver
from .formatters import FormatterRegistry

__all__ = [
    "BUILTIN_PROFILES",
    "DEFAULT_MAX_TOKENS",
    "UNKNOWN_MODEL",
    "UNKNOWN_PROFILE",
    "EffectiveModelConfig",
    "GlobalOverrides",
    "ModelProfile",
    "ConfigResolver",
    "FormatterRegistry",
]
