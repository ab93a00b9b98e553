"""
ClinicalContext: 调用方可选传入的患者信息。

只影响 shaper 的 confidence 和措辞，永远不影响匹配和排序。
解析宽松：字段类型不对（比如 age="abc"）就当作没传，不抛异常。
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

PEDIATRIC = "pediatric"
GERIATRIC = "geriatric"


def _number(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or math.isnan(value) or math.isinf(value) or value < 0:
        return None
    return value


def _strings(value) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        return ()
    return tuple(v.strip() for v in value if isinstance(v, str) and v.strip())


@dataclass(frozen=True)
class ClinicalContext:
    age: Optional[float] = None
    weight: Optional[float] = None
    allergies: frozenset = field(default_factory=frozenset)
    diagnosis: str = ""
    symptoms: tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["ClinicalContext"]:
        """
        Build a context from a request mapping. Returns None for anything that is not a mapping.

        Each malformed field is dropped on its own; the rest of the context is kept.
        """
        if not isinstance(payload, Mapping):
            return None

        age = _number(payload.get("age"))
        if payload.get("age") is not None and age is None:
            logger.debug("[ClinicalContext] ignoring malformed age %r", payload.get("age"))

        diagnosis = payload.get("diagnosis")
        return cls(
            age=age,
            weight=_number(payload.get("weight")),
            allergies=frozenset(a.lower() for a in _strings(payload.get("allergies"))),
            diagnosis=diagnosis.strip() if isinstance(diagnosis, str) else "",
            symptoms=_strings(payload.get("symptoms")),
        )

    def age_group(self, pediatric_below: float, geriatric_above: float) -> Optional[str]:
        """'pediatric' when age < pediatric_below, 'geriatric' when age > geriatric_above."""
        if self.age is None:
            return None
        if self.age < pediatric_below:
            return PEDIATRIC
        if self.age > geriatric_above:
            return GERIATRIC
        return None

    def matching_allergy(self, terms) -> Optional[str]:
        """
        First allergy that overlaps any of ``terms`` (substring either way, case-insensitive).
        """
        if not self.allergies:
            return None
        lowered = [t.lower() for t in terms if t]
        for allergy in sorted(self.allergies):
            if any(allergy in term or term in allergy for term in lowered):
                return allergy
        return None
