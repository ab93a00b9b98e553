"""
搜索结果的标准结构。

MedicationSuggestion / TestSuggestion：shaper 的输出，每次请求新建，从不持久化。
AutocompleteEntry：带显式 kind 的 tagged union，serializer 按 kind 做穷尽 match，
不再靠“某个字段存不存在”来猜结果类型。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..catalog.types import MedicationRecord, TestRecord
from .matcher import MatchStrength


@dataclass(frozen=True)
class Alternative:
    record: MedicationRecord
    shared_category: str


@dataclass(frozen=True)
class MedicationSuggestion:
    record: MedicationRecord
    strength: MatchStrength
    confidence: float
    reasoning: str
    dosage_suggestion: str
    frequency_suggestion: str
    precautions: tuple[str, ...] = ()
    alternatives: tuple[Alternative, ...] = ()
    age_group: Optional[str] = None
    allergy_alert: bool = False


@dataclass(frozen=True)
class TestSuggestion:
    record: TestRecord
    strength: MatchStrength
    confidence: float
    reasoning: str
    preparation_summary: str
    fasting_required: bool

    __test__ = False


class EntryKind(str, Enum):
    HEURISTIC = "heuristic_suggestion"   # shaper 输出
    FALLBACK = "fallback"                # 本地 store 平铺结果，未经 shaper
    COMPLETION = "completion"            # 仅名字补全


Payload = Union[MedicationSuggestion, TestSuggestion, MedicationRecord, TestRecord, str]


@dataclass(frozen=True)
class AutocompleteEntry:
    kind: EntryKind
    payload: Payload

    @property
    def label(self) -> str:
        match self.kind:
            case EntryKind.HEURISTIC:
                return self.payload.record.name
            case EntryKind.FALLBACK:
                return self.payload.name
            case EntryKind.COMPLETION:
                return self.payload


@dataclass(frozen=True)
class SearchOutcome:
    """Entries after truncation plus the candidate count before it."""

    entries: tuple[AutocompleteEntry, ...]
    total: int

    def __len__(self):
        return len(self.entries)
