"""Configuration Resolver
Resolves a model name to its profile and merges global overrides into it.
"""


from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml  # requires pyyaml

from packages.models.profiles import (
    BUILTIN_PROFILES,
    UNKNOWN_MODEL,
    UNKNOWN_PROFILE,
    EffectiveModelConfig,
    GlobalOverrides,
    ModelProfile,
)

# YAML keys accepted for a profile entry -> ModelProfile field.
_PROFILE_KEYS = {
    "maxTokens": "max_tokens",
    "max_tokens": "max_tokens",
    "contextWindow": "context_window",
    "context_window": "context_window",
    "temperature": "temperature",
    "topP": "top_p",
    "top_p": "top_p",
    "reasoning": "reasoning",
    "keywordDetection": "keyword_detection",
    "keyword_detection": "keyword_detection",
    "provider": "provider",
}


def _pick(override: Any, default: Any) -> Any:
    return override if override is not None else default


@dataclass(frozen=True)
class ConfigResolver:
    profiles: Dict[str, ModelProfile]
    overrides: GlobalOverrides = field(default_factory=GlobalOverrides)

    @classmethod
    def default(cls, overrides: Optional[GlobalOverrides] = None) -> "ConfigResolver":
        return cls(profiles=dict(BUILTIN_PROFILES), overrides=overrides or GlobalOverrides())

    @classmethod
    def load(cls, path: Path, overrides: Optional[GlobalOverrides] = None) -> "ConfigResolver":
        """
        Layer profiles from a YAML file over the built-in table.

        models:
          glm-4.6:
            maxTokens: 65536
          my-model:
            maxTokens: 8192
            reasoning: false
        """
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"profiles file must contain a mapping: {path}")
        models_raw = data.get("models") or {}
        if not isinstance(models_raw, dict):
            raise ValueError(f"'models' must be a mapping: {path}")

        profiles = dict(BUILTIN_PROFILES)
        for name, cfg in models_raw.items():
            if cfg is None:
                continue
            name_s = str(name).strip()
            if not name_s:
                raise ValueError("model name must not be empty")
            profiles[name_s] = _profile_from_mapping(name_s, cfg, base=profiles.get(name_s))
        return cls(profiles=profiles, overrides=overrides or GlobalOverrides())

    def profile_for(self, model_name: Optional[str]) -> ModelProfile:
        if not model_name:
            return UNKNOWN_PROFILE
        return self.profiles.get(model_name, UNKNOWN_PROFILE)

    def resolve(self, model_name: Optional[str]) -> EffectiveModelConfig:
        """
        Each field independently: a non-None override wins, else the profile value.
        Unknown models resolve against the fallback profile; this never raises.
        """
        name = model_name or UNKNOWN_MODEL
        profile = self.profile_for(model_name)
        o = self.overrides
        return EffectiveModelConfig(
            model_name=name,
            profile=profile,
            max_tokens=_pick(o.max_tokens, profile.max_tokens),
            temperature=_pick(o.temperature, profile.temperature),
            top_p=_pick(o.top_p, profile.top_p),
            reasoning=_pick(o.reasoning, profile.reasoning),
            keyword_detection=_pick(o.keyword_detection, profile.keyword_detection),
            reasoning_override=o.reasoning,
            known=profile is not UNKNOWN_PROFILE,
        )


def _profile_from_mapping(name: str, cfg: Any, base: Optional[ModelProfile]) -> ModelProfile:
    if not isinstance(cfg, dict):
        raise ValueError(f"profile for {name!r} must be a mapping")

    values: Dict[str, Any] = {}
    if base is not None:
        values = {f.name: getattr(base, f.name) for f in fields(ModelProfile)}
    values["name"] = name

    for key, raw in cfg.items():
        attr = _PROFILE_KEYS.get(str(key))
        if attr is None:
            raise ValueError(f"unknown key {key!r} in profile {name!r}")
        values[attr] = _coerce(name, attr, raw)

    if "max_tokens" not in values:
        raise ValueError(f"profile {name!r} is missing maxTokens")
    return ModelProfile(**values)


def _coerce(name: str, attr: str, raw: Any) -> Any:
    if attr in ("max_tokens", "context_window"):
        if raw is None and attr == "context_window":
            return None
        if isinstance(raw, bool) or not isinstance(raw, int) or raw <= 0:
            raise ValueError(f"{attr} for {name!r} must be a positive integer")
        return raw
    if attr in ("temperature", "top_p"):
        if raw is None:
            return None
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise ValueError(f"{attr} for {name!r} must be a number")
        return float(raw)
    if attr in ("reasoning", "keyword_detection"):
        if not isinstance(raw, bool):
            raise ValueError(f"{attr} for {name!r} must be true or false")
        return raw
    return str(raw)
