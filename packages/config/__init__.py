"""
Docstring for packages.config
"""

from .options import TransformerOptions, env_flag, load_options

__all__ = [
    "TransformerOptions",
    "env_flag",
    "load_options",
]
