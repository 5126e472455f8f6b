"""Tests for ConfigResolver."""


from __future__ import annotations

from pathlib import Path

import pytest

from packages.models import (
    DEFAULT_MAX_TOKENS,
    UNKNOWN_PROFILE,
    ConfigResolver,
    GlobalOverrides,
)


def test_known_model_uses_profile_values():
    cfg = ConfigResolver.default().resolve("glm-4.6")
    assert cfg.known is True
    assert cfg.max_tokens == 131072
    assert cfg.temperature == 1.0
    assert cfg.top_p == 0.95
    assert cfg.reasoning is True
    assert cfg.keyword_detection is True
    assert cfg.provider == "Z.AI"


@pytest.mark.parametrize("name,max_tokens", [
    ("glm-4.5", 98304),
    ("glm-4.5-air", 98304),
    ("glm-4.5v", 16384),
])
def test_builtin_token_limits(name, max_tokens):
    assert ConfigResolver.default().resolve(name).max_tokens == max_tokens


@pytest.mark.parametrize("name", ["foo-bar", "", None, "GLM-4.6"])
def test_unknown_models_fall_back_without_error(name):
    cfg = ConfigResolver.default().resolve(name)
    assert cfg.known is False
    assert cfg.profile is UNKNOWN_PROFILE
    assert cfg.max_tokens == DEFAULT_MAX_TOKENS
    assert cfg.temperature is None
    assert cfg.top_p is None
    assert cfg.reasoning is False
    assert cfg.keyword_detection is False


def test_empty_name_resolves_to_sentinel():
    assert ConfigResolver.default().resolve(None).model_name == "unknown"


def test_overrides_win_field_by_field():
    r = ConfigResolver.default(GlobalOverrides(max_tokens=4096, top_p=0.5))
    cfg = r.resolve("glm-4.6")
    assert cfg.max_tokens == 4096
    assert cfg.top_p == 0.5
    # untouched fields stay on the profile
    assert cfg.temperature == 1.0
    assert cfg.reasoning is True


def test_false_override_is_not_ignored():
    r = ConfigResolver.default(GlobalOverrides(reasoning=False, keyword_detection=False))
    cfg = r.resolve("glm-4.6")
    assert cfg.reasoning is False
    assert cfg.keyword_detection is False
    assert cfg.reasoning_override is False


def test_zero_temperature_override_is_applied():
    cfg = ConfigResolver.default(GlobalOverrides(temperature=0.0)).resolve("glm-4.5")
    assert cfg.temperature == 0.0


def test_yaml_profiles_layer_over_builtins(tmp_path: Path):
    path = tmp_path / "profiles.yaml"
    path.write_text(
        """
models:
  glm-4.6:
    maxTokens: 65536
  my-model:
    max_tokens: 8192
    topP: 0.8
    reasoning: true
    provider: Z.AI
""".strip(),
        encoding="utf-8",
    )

    r = ConfigResolver.load(path)
    glm = r.resolve("glm-4.6")
    assert glm.max_tokens == 65536
    assert glm.temperature == 1.0  # kept from the built-in entry

    mine = r.resolve("my-model")
    assert mine.known is True
    assert mine.max_tokens == 8192
    assert mine.top_p == 0.8
    assert mine.temperature is None
    assert mine.reasoning is True
    assert mine.keyword_detection is False
    assert mine.provider == "Z.AI"

    assert r.resolve("glm-4.5").max_tokens == 98304


def test_yaml_empty_file_gives_builtins(tmp_path: Path):
    path = tmp_path / "profiles.yaml"
    path.write_text("", encoding="utf-8")
    r = ConfigResolver.load(path)
    assert set(r.profiles) == {"glm-4.6", "glm-4.5", "glm-4.5-air", "glm-4.5v"}


@pytest.mark.parametrize("body", [
    "models:\n  x:\n    temperature: 0.5\n",
    "models:\n  x:\n    maxTokens: 0\n",
    "models:\n  x:\n    maxTokens: 10\n    reasoning: maybe\n",
    "models:\n  x:\n    maxTokens: 10\n    colour: blue\n",
    "models:\n  - glm-4.6\n",
    "- just a list\n",
])
def test_yaml_rejects_malformed_profiles(tmp_path: Path, body):
    path = tmp_path / "profiles.yaml"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(ValueError):
        ConfigResolver.load(path)
