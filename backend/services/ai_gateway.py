"""OpenAI-compatible chat completion client for the documentation agent."""
from __future__ import annotations

import json
import logging
import re
import time
from typing import Any

import openai
from openai import AsyncOpenAI

from backend import config
from backend.errors import GenerationError
from backend.observability import record_ai_call, start_span

logger = logging.getLogger("docready.ai")

_JSON_BLOCK_RE = re.compile(r"\{[\s\S]*\}")

_SUGGESTED_ACTION_HINTS: list[tuple[str, tuple[str, ...]]] = [
    ("generate_kb_article", ("kb article", "knowledge base")),
    ("generate_quickstart", ("quick start",)),
    ("generate_sop", ("sop", "procedure")),
    ("analyze_context", ("coverage", "analyze")),
    ("identify_gaps", ("gap",)),
]


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Parse the outermost ``{...}`` block of a model reply, or None when there is none."""
    match = _JSON_BLOCK_RE.search(text or "")
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_suggested_actions(text: str) -> list[str]:
    blob = (text or "").lower()
    actions: list[str] = []
    if "generate" in blob and "manual" in blob:
        actions.append("generate_manual_section")
    for action, hints in _SUGGESTED_ACTION_HINTS:
        if any(hint in blob for hint in hints):
            actions.append(action)
    return actions


class AIGateway:
    """Thin wrapper over ``AsyncOpenAI`` pointed at the hosted LLM gateway."""

    def __init__(
        self,
        client: Any | None = None,
        *,
        model: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        self._client = client
        self.model = model or config.AI_MODEL
        self.api_key = config.AI_API_KEY if api_key is None else api_key
        self.base_url = base_url or config.AI_GATEWAY_URL
        self.timeout = float(timeout or config.AI_TIMEOUT_SECONDS)

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client
        if not self.api_key:
            raise GenerationError("AI configuration missing")
        self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def _create(
        self,
        messages: list[dict[str, str]],
        failure_message: str,
        *,
        explain_quota_errors: bool = True,
    ) -> str:
        client = self._get_client()
        started = time.monotonic()
        result = "error"
        try:
            with start_span("ai.chat_completion", {"ai.model": self.model, "ai.messages": len(messages)}):
                response = await client.chat.completions.create(model=self.model, messages=messages)
            result = "ok"
        except openai.APIStatusError as exc:
            if explain_quota_errors and exc.status_code == 429:
                logger.warning("AI gateway rate limited: %s", exc.message)
                raise GenerationError("Rate limit exceeded. Please try again later.") from exc
            if explain_quota_errors and exc.status_code == 402:
                raise GenerationError("AI credits exhausted. Please add funds to continue.") from exc
            logger.error("AI API error: %s %s", exc.status_code, exc.message)
            raise GenerationError(failure_message) from exc
        except openai.APIError as exc:
            logger.error("AI API error: %s", exc)
            raise GenerationError(failure_message) from exc
        finally:
            record_ai_call(self.model, result, (time.monotonic() - started) * 1000)

        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""
        return choices[0].message.content or ""

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        return await self._create(messages, "AI generation failed")

    async def chat(self, messages: list[dict[str, str]]) -> str:
        # Chat callers only ever see the generic failure message.
        return await self._create(messages, "Chat generation failed", explain_quota_errors=False)


_gateway: AIGateway | None = None


def get_ai_gateway() -> AIGateway:
    global _gateway
    if _gateway is None:
        _gateway = AIGateway()
    return _gateway
