"""
CatalogRegistry: 进程级 catalog 持有者（composition root 在 apps.py 里创建它）。

不用模块级全局单例：registry 显式构造、显式注入到 view，测试里可以直接换成小 catalog。

热更新：reload() 先完整加载新数据，再一次性替换 snapshot 引用。
正在处理的请求拿的是旧 snapshot，永远看不到半更新状态。
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from ..exceptions import ValidationError
from .loader import (
    DEFAULT_MEDICATION_CATALOG,
    DEFAULT_TEST_CATALOG,
    load_medication_catalog,
    load_test_catalog,
)
from .store import CatalogStore

logger = logging.getLogger(__name__)

MEDICINES = "medicines"
TESTS = "tests"


@dataclass(frozen=True)
class CatalogSnapshot:
    medications: CatalogStore
    tests: CatalogStore


class CatalogRegistry:

    def __init__(self, snapshot: CatalogSnapshot, medication_path=None, test_path=None):
        self._snapshot = snapshot
        self._medication_path = medication_path
        self._test_path = test_path
        self._reload_lock = threading.Lock()

    @classmethod
    def from_stores(cls, medications: CatalogStore, tests: CatalogStore) -> "CatalogRegistry":
        return cls(CatalogSnapshot(medications=medications, tests=tests))

    @classmethod
    def from_paths(cls, medication_path: Path | str = DEFAULT_MEDICATION_CATALOG,
                   test_path: Path | str = DEFAULT_TEST_CATALOG) -> "CatalogRegistry":
        """Load both datasets. Raises CatalogLoadError on any problem."""
        snapshot = CatalogSnapshot(
            medications=load_medication_catalog(medication_path),
            tests=load_test_catalog(test_path),
        )
        return cls(snapshot, medication_path=medication_path, test_path=test_path)

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def medications(self) -> CatalogStore:
        return self._snapshot.medications

    @property
    def tests(self) -> CatalogStore:
        return self._snapshot.tests

    def get_store(self, kind: str) -> CatalogStore:
        stores = {
            MEDICINES: self._snapshot.medications,
            TESTS:     self._snapshot.tests,
        }
        store = stores.get(kind)
        if store is None:
            raise ValidationError(
                message=f"Unknown catalog: {kind!r}.",
                code="UNKNOWN_CATALOG",
                detail={"known_catalogs": list(stores.keys())},
            )
        return store

    def reload(self) -> CatalogSnapshot:
        """
        Re-read the datasets from disk and swap the snapshot.

        Only registries built with from_paths() can reload. If loading fails
        the CatalogLoadError propagates and the old snapshot stays in place.
        """
        if self._medication_path is None or self._test_path is None:
            raise RuntimeError("Registry was not built from files; nothing to reload")

        # 单写者；读者不加锁
        with self._reload_lock:
            snapshot = CatalogSnapshot(
                medications=load_medication_catalog(self._medication_path),
                tests=load_test_catalog(self._test_path),
            )
            self._snapshot = snapshot

        logger.info(
            "[CatalogRegistry] reloaded: %d medications, %d tests",
            len(snapshot.medications), len(snapshot.tests),
        )
        return snapshot
