"""Provider-specific thinking markers.
A formatter returns the top-level request fields that switch a provider's
reasoning mode on."""


from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from packages.models.profiles import ZAI_PROVIDER

ReasoningFormatter = Callable[[str], Dict[str, Any]]


def zai_thinking(model_name: str) -> Dict[str, Any]:
    # https://docs.z.ai/guides/overview/concept-param#thinking
    return {"thinking": {"type": "enabled"}}


BUILTIN_FORMATTERS: Dict[str, ReasoningFormatter] = {
    ZAI_PROVIDER: zai_thinking,
}


@dataclass(frozen=True)
class FormatterRegistry:
    """
    Provider name -> formatter.
    A provider without a formatter still gets a reasoning decision; the
    request simply carries no marker.
    """

    formatters: Dict[str, ReasoningFormatter] = field(default_factory=lambda: dict(BUILTIN_FORMATTERS))

    def get(self, provider: str) -> Optional[ReasoningFormatter]:
        return self.formatters.get(provider)

    def supports(self, provider: str) -> bool:
        return provider in self.formatters

    def marker_for(self, provider: str, model_name: str) -> Dict[str, Any]:
        fmt = self.get(provider)
        if fmt is None:
            return {}
        return fmt(model_name)
