"""
CatalogStore: 内存中的只读记录集合。

构造时校验一次（id 唯一、name 非空、至少一个 category），之后只提供读取。
没有 insert / update / delete：catalog 编辑不属于搜索核心。
所有查找方法对“找不到”返回空结果或 None，从不抛异常。
"""

import logging
from typing import Iterable, Iterator, Optional, Sequence

from ..exceptions import CatalogLoadError
from .types import MedicationRecord, TestRecord, TestType

logger = logging.getLogger(__name__)

CatalogRecord = MedicationRecord | TestRecord


class CatalogStore:

    def __init__(self, records: Iterable[CatalogRecord], name: str = "catalog"):
        self.name = name
        self._records: tuple[CatalogRecord, ...] = tuple(records)
        self._by_id: dict[str, CatalogRecord] = {}

        errors = []
        for index, record in enumerate(self._records):
            if not record.id:
                errors.append({"index": index, "message": "Record id must not be empty."})
            elif record.id in self._by_id:
                errors.append({"index": index, "id": record.id, "message": "Duplicate record id."})
            else:
                self._by_id[record.id] = record

            if not (record.name or "").strip():
                errors.append({"index": index, "id": record.id, "message": "Record name must not be empty."})
            if not record.categories:
                errors.append({"index": index, "id": record.id, "message": "Record needs at least one category."})

        if errors:
            raise CatalogLoadError(
                message=f"Catalog {name!r} failed validation.",
                code="CATALOG_INVALID",
                detail={"errors": errors},
            )

        logger.debug("[CatalogStore] %s: %d records", name, len(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[CatalogRecord]:
        return iter(self._records)

    def get_all(self) -> tuple[CatalogRecord, ...]:
        """Every record, in insertion order."""
        return self._records

    def get_by_id(self, record_id: str) -> Optional[CatalogRecord]:
        return self._by_id.get(record_id)

    def get_by_ids(self, ids: Iterable[str]) -> list[CatalogRecord]:
        """
        Records whose id is in ``ids``, in catalog order (not in ``ids`` order).
        Unknown ids are skipped.
        """
        wanted = set(ids)
        return [r for r in self._records if r.id in wanted]

    def get_by_names(self, names: Sequence[str]) -> list[CatalogRecord]:
        """
        Case-insensitive substring match of each record name against any of ``names``.
        A record matching several names is returned once.
        """
        needles = [n.lower().strip() for n in names if isinstance(n, str) and n.strip()]
        if not needles:
            return []

        results = []
        seen = set()
        for record in self._records:
            name = record.name.lower()
            if record.id not in seen and any(needle in name for needle in needles):
                seen.add(record.id)
                results.append(record)
        return results

    def get_by_category(self, category: str) -> list[CatalogRecord]:
        needle = (category or "").lower().strip()
        if not needle:
            return []
        return [
            r for r in self._records
            if any(needle in c.lower() for c in r.categories)
        ]

    def get_by_type(self, test_type: TestType | str) -> list[TestRecord]:
        """Tests of the given type. Medication catalogs always return []."""
        try:
            wanted = TestType(test_type)
        except ValueError:
            return []
        return [
            r for r in self._records
            if isinstance(r, TestRecord) and r.type is wanted
        ]
