"""
BaseLLMService: 所有远程建议服务的抽象基类。

每个新 LLM 只需：
1. 继承 BaseLLMService
2. 实现 complete()
3. 在 factory.py 的 _build_registry 注册一行

LLM 只负责给出“药名列表”；药名最终都要经过本地 catalog（get_by_names）解析，
返回给前端的永远是 catalog 里的记录，不是模型生成的文本。
"""

import json
import re
from abc import ABC, abstractmethod

from ..exceptions import UpstreamUnavailableError
from .prompts import SYSTEM_PROMPT, build_diagnosis_prompt
from .types import LLMResponse, MedicationNames

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def parse_medication_names(content: str) -> list[str]:
    """
    Pull the medication name list out of a model reply.

    Accepts ``{"medications": [...]}`` (optionally inside a ```json fence or
    surrounded by chatter) or a bare JSON list. Raises UpstreamUnavailableError
    when nothing usable is found.
    """
    text = _FENCE_RE.sub("", (content or "").strip())
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        found = _OBJECT_RE.search(text)
        if not found:
            raise UpstreamUnavailableError(
                message="Suggestion service returned no JSON.",
                code="UPSTREAM_BAD_RESPONSE",
            )
        try:
            data = json.loads(found.group(0))
        except json.JSONDecodeError as exc:
            raise UpstreamUnavailableError(
                message="Suggestion service returned malformed JSON.",
                code="UPSTREAM_BAD_RESPONSE",
            ) from exc

    if isinstance(data, dict):
        data = data.get("medications")
    if not isinstance(data, list):
        raise UpstreamUnavailableError(
            message="Suggestion service response has no medication list.",
            code="UPSTREAM_BAD_RESPONSE",
        )

    names = []
    for item in data:
        if isinstance(item, dict):
            item = item.get("name")
        if isinstance(item, str) and item.strip() and item.strip() not in names:
            names.append(item.strip())
    return names


class BaseLLMService(ABC):

    @abstractmethod
    def complete(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        """
        调用 LLM，返回标准 LLMResponse。

        Raises:
            UpstreamUnavailableError: 未配置 API key、网络 / SDK 异常。
                view 层捕获后降级到本地 indication 匹配。
        """

    def suggest_medications(self, diagnosis: str, symptoms=None, max_names: int = 10) -> MedicationNames:
        """diagnosis (+ symptoms) → 药名列表。"""
        response = self.complete(SYSTEM_PROMPT, build_diagnosis_prompt(diagnosis, symptoms, max_names))
        names = parse_medication_names(response.content)
        return MedicationNames(names=names[:max_names], model=response.model)
