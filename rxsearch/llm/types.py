"""
LLM 层的标准响应结构。

所有 LLMService 实现的 complete() 都返回 LLMResponse；
suggest_medications() 在此基础上解析出 MedicationNames。
view 层只认识这两个格式，不知道背后用的是哪家 LLM。
"""

from dataclasses import dataclass, field


@dataclass
class LLMResponse:
    content: str       # 生成的文本内容
    model: str         # 实际使用的模型名，写进日志


@dataclass
class MedicationNames:
    names: list[str] = field(default_factory=list)
    model: str = ""
