"""
Reasoning decision engine for deciding, per request, whether the model
reasons, at what effort, and whether the target message gets the reasoning
instruction.

Precedence (first level that applies wins):
  0. force_permanent  - forcePermanentThinking option: ON, effort high
  1. ultrathink       - "ultrathink" in the target text: ON, effort high
  2. user_tags        - <Thinking:On|Off> / <Effort:...> in the target text
  3. global_override  - overrideReasoning is set
  4. model_config     - the profile reasons natively, or the client didn't say
  5. native           - the client's own reasoning.enabled, unchanged

Ensures:
  - Levels 0 and 1 always rewrite the target message.
  - Below that, the message is rewritten only when reasoning is ON, keyword
    detection is ON and a keyword appears in the target text.
  - The instruction is added at most once, whatever fired.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from packages.core.types import Effort, ReasoningSource, RequestedReasoning
from packages.messages.mutator import (
    extract_text,
    find_target,
    parse_content,
    scan_content_tags,
    strip_content_tags,
)
from packages.messages.tags import TagScan
from packages.models.formatters import FormatterRegistry
from packages.models.profiles import EffectiveModelConfig
from packages.reasoning.keywords import KeywordSet, contains_ultrathink

Verdict = Tuple[bool, Optional[Effort]]


@dataclass(frozen=True)
class Signals:
    """Everything a precedence rule may look at for one request."""
    requested: RequestedReasoning
    config: EffectiveModelConfig
    tags: TagScan
    ultrathink: bool
    force_permanent: bool


Rule = Callable[[Signals], Optional[Verdict]]


def _force_permanent(s: Signals) -> Optional[Verdict]:
    if s.force_permanent:
        return True, Effort.high
    return None


def _ultrathink(s: Signals) -> Optional[Verdict]:
    if s.ultrathink:
        return True, Effort.high
    return None


def _user_tags(s: Signals) -> Optional[Verdict]:
    t = s.tags
    if t.thinking is None and t.effort is None:
        return None
    if t.thinking is False:
        return False, None
    return True, t.effort or s.requested.effort


def _global_override(s: Signals) -> Optional[Verdict]:
    if s.config.reasoning_override is None:
        return None
    return s.config.reasoning_override, s.requested.effort


def _model_config(s: Signals) -> Optional[Verdict]:
    if not (s.config.profile.reasoning or s.requested.enabled is None):
        return None
    if s.requested.enabled is False:
        return False, None
    return s.config.profile.reasoning, s.requested.effort


def _native(s: Signals) -> Optional[Verdict]:
    return bool(s.requested.enabled), s.requested.effort


PRECEDENCE: Tuple[Tuple[ReasoningSource, Rule], ...] = (
    (ReasoningSource.force_permanent, _force_permanent),
    (ReasoningSource.ultrathink, _ultrathink),
    (ReasoningSource.user_tags, _user_tags),
    (ReasoningSource.global_override, _global_override),
    (ReasoningSource.model_config, _model_config),
    (ReasoningSource.native, _native),
)

# Levels that rewrite the prompt without needing a keyword.
FORCING_SOURCES = frozenset({ReasoningSource.force_permanent, ReasoningSource.ultrathink})


@dataclass(frozen=True)
class ReasoningDecision:
    reasoning: bool
    effort: Optional[Effort]
    source: ReasoningSource
    rewrite_prompt: bool = False
    target_index: Optional[int] = None
    thinking_format_applies: bool = False
    keyword_detection: bool = False
    matched_keyword: Optional[str] = None
    tags: TagScan = field(default_factory=TagScan)
    content_valid: bool = True

    @property
    def mutates_message(self) -> bool:
        """True when the target message has to be replaced in the outbound request."""
        if self.target_index is None or not self.content_valid:
            return False
        return self.rewrite_prompt or self.tags.found


class ReasoningEngine:
    """
    Defaults:
      - built-in keyword list
      - Z.AI formatter only
      - system messages are never the target
    """
    def __init__(
        self,
        keywords: Optional[KeywordSet] = None,
        formatters: Optional[FormatterRegistry] = None,
        force_permanent_thinking: bool = False,
        ignore_system_messages: bool = True,
        rules: Sequence[Tuple[ReasoningSource, Rule]] = PRECEDENCE,
    ) -> None:
        self.keywords = keywords or KeywordSet()
        self.formatters = formatters or FormatterRegistry()
        self.force_permanent_thinking = force_permanent_thinking
        self.ignore_system_messages = ignore_system_messages
        self.rules = tuple(rules)

    def resolve(self, signals: Signals) -> Tuple[ReasoningSource, bool, Optional[Effort]]:
        for source, rule in self.rules:
            verdict = rule(signals)
            if verdict is not None:
                on, effort = verdict
                return source, on, effort if on else None
        # Unreachable with the default rules: `native` always answers.
        return ReasoningSource.native, False, None

    def decide(self, request: Dict[str, Any], config: EffectiveModelConfig) -> ReasoningDecision:
        messages = request.get("messages")
        target = find_target(messages, self.ignore_system_messages)
        content = parse_content(messages[target].get("content")) if target is not None else None

        tags = scan_content_tags(content)
        # Keywords and "ultrathink" are looked for in the text the model will see.
        text = extract_text(strip_content_tags(content) if tags.found else content)

        signals = Signals(
            requested=RequestedReasoning.from_request(request),
            config=config,
            tags=tags,
            ultrathink=contains_ultrathink(text),
            force_permanent=self.force_permanent_thinking,
        )
        source, on, effort = self.resolve(signals)

        matched: Optional[str] = None
        if source in FORCING_SOURCES:
            rewrite = bool(text.strip())
        else:
            if on and config.keyword_detection:
                matched = self.keywords.first_match(text)
            rewrite = matched is not None

        return ReasoningDecision(
            reasoning=on,
            effort=effort,
            source=source,
            rewrite_prompt=rewrite,
            target_index=target,
            thinking_format_applies=on and self.formatters.supports(config.provider),
            keyword_detection=config.keyword_detection,
            matched_keyword=matched,
            tags=tags,
            content_valid=target is None or content is not None,
        )
