"""
LLM_PROVIDER → service instance.

加新供应商：services.py 里写一个 BaseLLMService 子类，再在 _build_registry 里登记。
views 和搜索核心都不用动。
"""

from django.conf import settings

from ..exceptions import UpstreamUnavailableError
from .base import BaseLLMService


def _build_registry() -> dict[str, type[BaseLLMService]]:
    # SDK 在第一次请求时才 import
    from .services import ClaudeService, OpenAIService

    return {
        "anthropic": ClaudeService,
        "openai":    OpenAIService,
    }


def get_llm_service() -> BaseLLMService:
    """
    Service for settings.LLM_PROVIDER.

    LLM_PROVIDER 为空（或 "none"）表示只用本地 catalog。

    Raises:
        UpstreamUnavailableError: 未启用远程建议，或 LLM_PROVIDER 未知。
            两种情况 view 层都按降级处理。
    """
    provider = (getattr(settings, "LLM_PROVIDER", "anthropic") or "").lower()
    if provider in ("", "none"):
        raise UpstreamUnavailableError("Remote suggestions are disabled", code="UPSTREAM_DISABLED")

    registry = _build_registry()
    service_cls = registry.get(provider)

    if service_cls is None:
        raise UpstreamUnavailableError(
            f"Unknown LLM_PROVIDER: {provider!r}",
            code="UPSTREAM_NOT_CONFIGURED",
            detail={"known_providers": list(registry.keys())},
        )

    return service_cls()
