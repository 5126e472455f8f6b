"""
Z.AI request transformer: the object the host router loads.

Per request: resolve the model config -> decide reasoning -> rewrite the
target message when the decision calls for it -> assemble a new outbound
request. The caller's request, provider descriptor and context are read,
never modified. Tracing is a side channel; it never changes the result.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Mapping, Optional, Union
import itertools

from apps.router.trace import Trace, get_trace_writer
from packages.core.trace import NullTraceWriter
from packages.config.options import TransformerOptions
from packages.core.codec import fingerprint
from packages.messages.mutator import (
    REASONING_INSTRUCTION,
    ContentNotParsable,
    extract_text,
    parse_content,
    replace_at,
    rewrite,
)
from packages.models.formatters import FormatterRegistry
from packages.models.profiles import EffectiveModelConfig, UNKNOWN_MODEL
from packages.models.resolver import ConfigResolver
from packages.reasoning.engine import ReasoningDecision, ReasoningEngine
from packages.reasoning.keywords import KeywordSet

PREVIEW_CHARS = 80


def _preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _text_summary(raw: Any) -> Dict[str, Any]:
    text = extract_text(parse_content(raw))
    return {"chars": len(text), "preview": _preview(text), "sha": fingerprint(text)}


def _reasoning_block(block: Any, decision: ReasoningDecision) -> Optional[Dict[str, Any]]:
    """
    Outbound `reasoning` block, or None to leave the client's value as is.
    `enabled` always carries the verdict; a resolved effort is added when ON.
    With no client block, one is only created to carry an effort.
    """
    has_block = isinstance(block, dict)
    if decision.reasoning:
        if decision.effort is None and not has_block:
            return None
        out = {**(block if has_block else {}), "enabled": True}
        if decision.effort is not None:
            out["effort"] = decision.effort.value
        return out
    if not has_block:
        return None
    return {**block, "enabled": False}


def _provider_name(provider: Any) -> Optional[str]:
    if provider is None:
        return None
    if isinstance(provider, Mapping):
        name = provider.get("name")
    else:
        name = getattr(provider, "name", None)
    return name if isinstance(name, str) else None


class ZaiTransformer:
    name = "zai"

    def __init__(
        self,
        options: Union[TransformerOptions, Mapping[str, Any], None] = None,
        *,
        trace: Optional[Trace] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        if isinstance(options, TransformerOptions):
            self.options = options
        else:
            self.options = TransformerOptions.from_mapping(options, environ=environ)
        o = self.options

        overrides = o.global_overrides()
        if o.profiles_path is not None:
            self.resolver = ConfigResolver.load(o.profiles_path, overrides)
        else:
            self.resolver = ConfigResolver.default(overrides)
        self.keywords = KeywordSet.build(o.custom_keywords, override=o.override_keywords)
        self.formatters = FormatterRegistry()
        self.engine = ReasoningEngine(
            keywords=self.keywords,
            formatters=self.formatters,
            force_permanent_thinking=o.force_permanent_thinking,
            ignore_system_messages=o.ignore_system_messages,
        )

        if trace is None:
            try:
                trace = get_trace_writer(o)
            except OSError:
                # Unusable log directory: run without a trace.
                trace = NullTraceWriter()
        self._trace = trace
        self._ids = itertools.count(1)
        self._last_request_id = 0

        self._record(
            0,
            "TransformerStarted",
            {
                "transformer": self.name,
                "models": sorted(self.resolver.profiles),
                "overrides": asdict(overrides),
                "keywords": len(self.keywords),
                "custom_keywords": list(o.custom_keywords),
                "override_keywords": o.override_keywords,
                "force_permanent_thinking": o.force_permanent_thinking,
                "ignore_system_messages": o.ignore_system_messages,
                "max_log_size": o.max_log_size,
            },
        )

    def _record(self, request_id: int, type: str, payload: Dict[str, Any]) -> None:
        try:
            self._trace.append(request_id, type, payload)
        except (OSError, TypeError, ValueError, RecursionError):
            # Tracing must never fail a request.
            pass

    def transform_request_in(
        self,
        request: Dict[str, Any],
        provider: Any = None,
        context: Any = None,
    ) -> Dict[str, Any]:
        rid = next(self._ids)
        self._last_request_id = rid

        model_name = request.get("model") or UNKNOWN_MODEL
        config = self.resolver.resolve(model_name)
        messages = request.get("messages")
        tools = request.get("tools")

        self._record(
            rid,
            "RequestReceived",
            {
                "model": model_name,
                "known_model": config.known,
                "provider": _provider_name(provider),
                "max_tokens": request.get("max_tokens"),
                "reasoning": request.get("reasoning"),
                "messages": len(messages) if isinstance(messages, list) else None,
                "stream": request.get("stream"),
                "tools": len(tools) if isinstance(tools, list) else None,
            },
        )

        decision = self.engine.decide(request, config)
        self._record(
            rid,
            "ReasoningDecided",
            {
                "source": decision.source,
                "reasoning": decision.reasoning,
                "effort": decision.effort,
                "keyword_detection": decision.keyword_detection,
                "matched_keyword": decision.matched_keyword,
                "tags": decision.tags.count,
                "rewrite_prompt": decision.rewrite_prompt,
                "target_index": decision.target_index,
            },
        )

        out = self._assemble(rid, request, config, decision)

        self._record(
            rid,
            "RequestTransformed",
            {
                "max_tokens": out["max_tokens"],
                "temperature": out.get("temperature"),
                "top_p": out.get("top_p"),
                "thinking": out.get("thinking"),
                "messages_replaced": out.get("messages") is not messages,
            },
        )
        return out

    def _assemble(
        self,
        rid: int,
        request: Dict[str, Any],
        config: EffectiveModelConfig,
        decision: ReasoningDecision,
    ) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(request)
        out["max_tokens"] = config.max_tokens
        if config.temperature is not None:
            out["temperature"] = config.temperature
        if config.top_p is not None:
            out["top_p"] = config.top_p
        out["do_sample"] = True

        if decision.thinking_format_applies:
            out.update(self.formatters.marker_for(config.provider, config.model_name))
        elif decision.reasoning:
            self._record(rid, "FormatterMissing", {"provider": config.provider, "model": config.model_name})

        reasoning = _reasoning_block(request.get("reasoning"), decision)
        if reasoning is not None:
            out["reasoning"] = reasoning

        messages = request.get("messages")
        i = decision.target_index
        if i is None:
            return out

        if not decision.content_valid:
            self._record(rid, "MutationSkipped", {"index": i, "content_type": type(messages[i].get("content")).__name__})
            return out
        if not decision.mutates_message:
            self._record(rid, "PromptUnchanged", {"index": i, "text": _text_summary(messages[i].get("content"))})
            return out

        instruction = REASONING_INSTRUCTION if decision.rewrite_prompt else None
        try:
            new_message = rewrite(messages[i], instruction, remove_tags=decision.tags.found)
        except ContentNotParsable as e:
            self._record(rid, "MutationSkipped", {"index": i, "error": str(e)})
            return out

        out["messages"] = replace_at(messages, i, new_message)
        payload = {
            "index": i,
            "source": decision.source,
            "matched_keyword": decision.matched_keyword,
            "tags_stripped": decision.tags.count,
            "before": _text_summary(messages[i].get("content")),
            "after": _text_summary(new_message.get("content")),
        }
        self._record(rid, "PromptEnhanced" if instruction else "PromptUnchanged", payload)
        return out

    def transform_response_out(self, response: Any) -> Any:
        """Returns the provider's response unchanged."""
        payload: Dict[str, Any] = {"response_type": type(response).__name__}
        if isinstance(response, Mapping):
            choices = response.get("choices")
            if isinstance(choices, list):
                payload["finish_reasons"] = [
                    c.get("finish_reason") for c in choices if isinstance(c, Mapping)
                ]
            if isinstance(response.get("usage"), Mapping):
                payload["usage"] = dict(response["usage"])
        self._record(self._last_request_id, "ResponsePassed", payload)
        return response
