"""
Catalog record dataclasses: 搜索核心唯一认识的数据结构。

两个平行变体（药品 / 检查）形状相同：id、name、aliases、categories、popularity_score，
再加各自的专属字段。所有记录 frozen，序列字段一律 tuple，进程生命周期内不可变。

Matcher 只通过 match_aliases / match_categories 访问可搜索字段，
不关心具体是哪种记录。
"""

from dataclasses import dataclass
from enum import Enum


class TestType(str, Enum):
    LABORATORY = "Laboratory"
    IMAGING = "Imaging"
    SPECIAL_TEST = "Special Test"
    PROCEDURE = "Procedure"

    # pytest 会尝试收集 Test* 开头的类
    __test__ = False


@dataclass(frozen=True)
class MedicationRecord:
    id: str
    name: str
    categories: tuple[str, ...]
    popularity_score: float = 0
    generic_name: str = ""
    aliases: tuple[str, ...] = ()
    dosage_forms: tuple[str, ...] = ()
    strengths: tuple[str, ...] = ()
    contraindications: tuple[str, ...] = ()
    route: str = ""
    indications: tuple[str, ...] = ()   # 诊断关键词，只给 indication fallback 用

    @property
    def match_aliases(self) -> tuple[str, ...]:
        """Generic name counts as an alias for matching."""
        return tuple(a for a in (self.generic_name, *self.aliases) if a)

    @property
    def match_categories(self) -> tuple[str, ...]:
        return self.categories


@dataclass(frozen=True)
class TestRecord:
    id: str
    name: str
    categories: tuple[str, ...]
    type: TestType
    popularity_score: float = 0
    aliases: tuple[str, ...] = ()
    preparation: tuple[str, ...] = ()
    fasting_required: bool = False
    description: str = ""
    normal_range: str = ""
    sample_type: str = ""
    turnaround_time: str = ""

    __test__ = False

    @property
    def match_aliases(self) -> tuple[str, ...]:
        return self.aliases

    @property
    def match_categories(self) -> tuple[str, ...]:
        """Test type ("Imaging", "Laboratory", ...) matches at category level."""
        return (*self.categories, self.type.value)

