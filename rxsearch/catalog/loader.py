"""
JSON 数据集 → CatalogStore。

数据集是一个 JSON 数组，每个元素是一条记录。字段缺失或类型不对一律 CatalogLoadError，
在启动时 fail fast，而不是等到某个请求才发现。
"""

import json
import logging
import math
from pathlib import Path
from typing import Any, Callable

from ..exceptions import CatalogLoadError
from .store import CatalogStore
from .types import MedicationRecord, TestRecord, TestType

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_MEDICATION_CATALOG = DATA_DIR / "medications.json"
DEFAULT_TEST_CATALOG = DATA_DIR / "tests.json"


def _str_tuple(raw: dict, key: str) -> tuple[str, ...]:
    value = raw.get(key) or []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{key!r} must be a list of strings")
    return tuple(v.strip() for v in value if v.strip())


def _required_str(raw: dict, key: str) -> str:
    value = raw[key]
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{key!r} must be a non-empty string")
    return value.strip()


def _optional_str(raw: dict, key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key!r} must be a string")
    return value.strip()


def _flag(raw: dict, key: str) -> bool:
    value = raw.get(key, False)
    if not isinstance(value, bool):
        raise ValueError(f"{key!r} must be true or false")
    return value


def _popularity(raw: dict) -> float:
    value = raw.get("popularity_score", raw.get("popular_score", 0))
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("'popularity_score' must be a number")
    if math.isnan(value) or math.isinf(value):
        raise ValueError("'popularity_score' must be finite")
    return value


def parse_medication(raw: dict) -> MedicationRecord:
    return MedicationRecord(
        id=_required_str(raw, "id"),
        name=_required_str(raw, "name"),
        generic_name=_optional_str(raw, "generic_name"),
        aliases=_str_tuple(raw, "aliases"),
        categories=_str_tuple(raw, "category"),
        dosage_forms=_str_tuple(raw, "dosage_forms"),
        strengths=_str_tuple(raw, "strengths"),
        contraindications=_str_tuple(raw, "contraindications"),
        route=_optional_str(raw, "route"),
        indications=_str_tuple(raw, "indications"),
        popularity_score=_popularity(raw),
    )


def parse_test(raw: dict) -> TestRecord:
    return TestRecord(
        id=_required_str(raw, "id"),
        name=_required_str(raw, "name"),
        aliases=_str_tuple(raw, "aliases"),
        categories=_str_tuple(raw, "category"),
        type=TestType(raw["type"]),
        preparation=_str_tuple(raw, "preparation"),
        fasting_required=_flag(raw, "fasting_required"),
        description=_optional_str(raw, "description"),
        normal_range=_optional_str(raw, "normal_range"),
        sample_type=_optional_str(raw, "sample_type"),
        turnaround_time=_optional_str(raw, "turnaround_time"),
        popularity_score=_popularity(raw),
    )


def _load(path: Path | str, parse: Callable[[dict], Any], name: str) -> CatalogStore:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw_records = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogLoadError(
            message=f"Could not read {name} catalog from {path}: {exc}",
            detail={"path": str(path)},
        ) from exc

    if not isinstance(raw_records, list):
        raise CatalogLoadError(
            message=f"{name} catalog must be a JSON array.",
            code="CATALOG_INVALID",
            detail={"path": str(path)},
        )

    records = []
    errors = []
    for index, raw in enumerate(raw_records):
        try:
            if not isinstance(raw, dict):
                raise ValueError("record must be an object")
            records.append(parse(raw))
        except (KeyError, TypeError, ValueError) as exc:
            errors.append({"index": index, "message": str(exc)})

    if errors:
        raise CatalogLoadError(
            message=f"{name} catalog has {len(errors)} malformed record(s).",
            code="CATALOG_INVALID",
            detail={"path": str(path), "errors": errors},
        )

    store = CatalogStore(records, name=name)
    logger.info("[catalog] loaded %d %s records from %s", len(store), name, path)
    return store


def load_medication_catalog(path: Path | str = DEFAULT_MEDICATION_CATALOG) -> CatalogStore:
    return _load(path, parse_medication, "medications")


def load_test_catalog(path: Path | str = DEFAULT_TEST_CATALOG) -> CatalogStore:
    return _load(path, parse_test, "tests")
