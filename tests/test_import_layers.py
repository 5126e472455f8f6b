"""
Tests to ensure the package layers only import downwards:
core <- models/messages/config <- reasoning <- apps.
Keeps the decision code free of the host-facing app and avoids cycles
between the engine and the message helpers.
"""

from __future__ import annotations

from pathlib import Path
import re

ROOT = Path(__file__).resolve().parents[1]

# package dir -> top-level modules it must never import
FORBIDDEN = {
    "packages/core": ["apps", "packages.models", "packages.messages", "packages.reasoning", "packages.config"],
    "packages/models": ["apps", "packages.messages", "packages.reasoning", "packages.config"],
    "packages/messages": ["apps", "packages.reasoning", "packages.models", "packages.config"],
    "packages/config": ["apps", "packages.reasoning", "packages.messages"],
    "packages/reasoning": ["apps", "packages.config"],
}


def _imports(text: str, module: str) -> bool:
    pat = re.compile(rf"^\s*(?:import|from)\s+{re.escape(module)}(?:[\s.]|$)", re.M)
    return bool(pat.search(text))


def test_packages_import_downwards_only():
    offenders: list[str] = []
    for rel, banned in FORBIDDEN.items():
        for path in sorted((ROOT / rel).rglob("*.py")):
            text = path.read_text(encoding="utf-8", errors="ignore")
            for module in banned:
                if _imports(text, module):
                    offenders.append(f"{path.relative_to(ROOT).as_posix()} -> {module}")
    assert not offenders, f"Layering violations: {offenders}"
