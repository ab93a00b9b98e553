"""
Remote suggestion providers (one class per SDK, registered in factory.py).

LLM_PROVIDER=anthropic → ClaudeService, LLM_PROVIDER=openai → OpenAIService.
timeout / max_retries / max_tokens 都来自 settings.LLM_*。

SDK 的所有异常都转成 UpstreamUnavailableError，调用方只需要处理这一种。
"""

import logging
import os

from django.conf import settings

from ..exceptions import UpstreamUnavailableError
from .base import BaseLLMService
from .types import LLMResponse

logger = logging.getLogger(__name__)


def _client_options():
    return {
        "timeout": getattr(settings, "LLM_TIMEOUT_SECONDS", 10),
        "max_retries": getattr(settings, "LLM_MAX_RETRIES", 1),
    }


def _max_tokens():
    return getattr(settings, "LLM_MAX_TOKENS", 500)


# ── ClaudeService ──────────────────────────────────────────────────────────
#
# 使用 Anthropic SDK。
# 环境变量：ANTHROPIC_API_KEY
# 模型：claude-sonnet-4-20250514（可通过 ANTHROPIC_MODEL 覆盖）

class ClaudeService(BaseLLMService):

    DEFAULT_MODEL = "claude-sonnet-4-20250514"

    def complete(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        import anthropic

        api_key = os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise UpstreamUnavailableError("ANTHROPIC_API_KEY is not set", code="UPSTREAM_NOT_CONFIGURED")

        model = os.getenv("ANTHROPIC_MODEL", self.DEFAULT_MODEL)
        client = anthropic.Anthropic(api_key=api_key, **_client_options())

        try:
            response = client.messages.create(
                model=model,
                max_tokens=_max_tokens(),
                temperature=0,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except anthropic.APIError as exc:
            logger.warning("[ClaudeService] request failed: %s", exc)
            raise UpstreamUnavailableError(f"Anthropic request failed: {exc}") from exc

        text = "".join(block.text for block in response.content if getattr(block, "type", "") == "text")
        return LLMResponse(content=text, model=model)


# ── OpenAIService ──────────────────────────────────────────────────────────
#
# 使用 OpenAI SDK。
# 环境变量：OPENAI_API_KEY
# 模型：gpt-4o（可通过 OPENAI_MODEL 覆盖）

class OpenAIService(BaseLLMService):

    DEFAULT_MODEL = "gpt-4o"

    def complete(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        import openai

        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise UpstreamUnavailableError("OPENAI_API_KEY is not set", code="UPSTREAM_NOT_CONFIGURED")

        model = os.getenv("OPENAI_MODEL", self.DEFAULT_MODEL)
        client = openai.OpenAI(api_key=api_key, **_client_options())

        try:
            response = client.chat.completions.create(
                model=model,
                max_tokens=_max_tokens(),
                temperature=0,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user",   "content": user_prompt},
                ],
            )
        except openai.OpenAIError as exc:
            logger.warning("[OpenAIService] request failed: %s", exc)
            raise UpstreamUnavailableError(f"OpenAI request failed: {exc}") from exc

        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=model,
        )
