"""
Operator options for the transformer.

Options arrive from the host router as a mapping with camelCase keys, e.g.

    {"overrideMaxTokens": 65536, "overrideReasoning": false,
     "customKeywords": ["prove"], "forcePermanentThinking": true}

Every option is optional. They are validated once, at construction, and are
immutable afterwards. Tracing can also be switched on from the environment:
  - ZAI_TRACE=true      enable the JSONL trace when `debug` is not given
  - ZAI_TRACE_DIR=...   trace directory when `logDir` is not given
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple
import os

import yaml  # requires pyyaml

from packages.core.trace.writer import DEFAULT_MAX_BYTES
from packages.models.profiles import GlobalOverrides

TRACE_ENV = "ZAI_TRACE"
TRACE_DIR_ENV = "ZAI_TRACE_DIR"
DEFAULT_TRACE_DIR = Path("~/.claude-code-router/logs")


def env_flag(name: str, default: str = "false", environ: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if environ is None else environ
    v = env.get(name, default).strip().lower()
    return v in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class TransformerOptions:
    override_max_tokens: Optional[int] = None
    override_temperature: Optional[float] = None
    override_top_p: Optional[float] = None
    override_reasoning: Optional[bool] = None
    override_keyword_detection: Optional[bool] = None
    custom_keywords: Tuple[str, ...] = ()
    override_keywords: bool = False  # True: custom keywords replace the defaults
    force_permanent_thinking: bool = False
    ignore_system_messages: bool = True
    profiles_path: Optional[Path] = None
    trace: bool = False
    trace_dir: Path = DEFAULT_TRACE_DIR
    max_log_size: int = DEFAULT_MAX_BYTES

    @classmethod
    def from_mapping(
        cls,
        options: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "TransformerOptions":
        """
        Build options from the host's mapping. Unknown keys are ignored so
        hosts can pass their own bookkeeping through; wrong types raise
        ValueError.
        """
        o = dict(options or {})
        env = os.environ if environ is None else environ

        if "debug" in o and o["debug"] is not None:
            trace = _bool(o, "debug")
        else:
            trace = env_flag(TRACE_ENV, environ=env)

        log_dir = o.get("logDir") or env.get(TRACE_DIR_ENV) or DEFAULT_TRACE_DIR
        profiles_path = o.get("profilesPath")

        return cls(
            override_max_tokens=_positive_int(o, "overrideMaxTokens"),
            override_temperature=_number(o, "overrideTemperature"),
            override_top_p=_number(o, "overrideTopP"),
            override_reasoning=_opt_bool(o, "overrideReasoning"),
            override_keyword_detection=_opt_bool(o, "overrideKeywordDetection"),
            custom_keywords=_keywords(o),
            override_keywords=_bool(o, "overrideKeywords"),
            force_permanent_thinking=_bool(o, "forcePermanentThinking"),
            ignore_system_messages=_bool(o, "ignoreSystemMessages", default=True),
            profiles_path=Path(profiles_path).expanduser() if profiles_path else None,
            trace=trace,
            trace_dir=Path(log_dir).expanduser(),
            max_log_size=_positive_int(o, "maxLogSize") or DEFAULT_MAX_BYTES,
        )

    def global_overrides(self) -> GlobalOverrides:
        return GlobalOverrides(
            max_tokens=self.override_max_tokens,
            temperature=self.override_temperature,
            top_p=self.override_top_p,
            reasoning=self.override_reasoning,
            keyword_detection=self.override_keyword_detection,
        )


def load_options(path: Path, environ: Optional[Mapping[str, str]] = None) -> TransformerOptions:
    """
    Read options from YAML. Accepts either a top-level `options:` mapping or
    a flat mapping of option keys.
    """
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"options file must contain a mapping: {path}")
    raw = data.get("options", data)
    if not isinstance(raw, dict):
        raise ValueError(f"'options' must be a mapping: {path}")
    opts = dict(raw)
    # Relative profile paths are relative to the options file.
    pp = opts.get("profilesPath")
    if pp and not Path(str(pp)).expanduser().is_absolute():
        opts["profilesPath"] = str(path.parent / str(pp))
    return TransformerOptions.from_mapping(opts, environ=environ)


def _positive_int(o: Mapping[str, Any], key: str) -> Optional[int]:
    v = o.get(key)
    if v is None:
        return None
    if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
        raise ValueError(f"{key} must be a positive integer, got {v!r}")
    return v


def _number(o: Mapping[str, Any], key: str) -> Optional[float]:
    v = o.get(key)
    if v is None:
        return None
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ValueError(f"{key} must be a number, got {v!r}")
    return float(v)


def _opt_bool(o: Mapping[str, Any], key: str) -> Optional[bool]:
    v = o.get(key)
    if v is None:
        return None
    if not isinstance(v, bool):
        raise ValueError(f"{key} must be true or false, got {v!r}")
    return v


def _bool(o: Mapping[str, Any], key: str, default: bool = False) -> bool:
    v = _opt_bool(o, key)
    return default if v is None else v


def _keywords(o: Mapping[str, Any]) -> Tuple[str, ...]:
    v = o.get("customKeywords")
    if v is None:
        return ()
    if isinstance(v, str) or not isinstance(v, (list, tuple)):
        raise ValueError("customKeywords must be a list of strings")
    out = []
    for k in v:
        if not isinstance(k, str):
            raise ValueError(f"customKeywords entries must be strings, got {k!r}")
        out.append(k)
    return tuple(out)
