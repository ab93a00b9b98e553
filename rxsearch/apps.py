"""
Composition root.

The catalogs are loaded once here, when Django starts. A missing or malformed
dataset raises CatalogLoadError and stops the process, rather than failing
individual requests later.
"""

import logging

from django.apps import AppConfig
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)


class RxSearchConfig(AppConfig):
    name = 'rxsearch'
    verbose_name = 'Medication & test search'

    registry = None
    policy = None

    def ready(self):
        from .catalog.registry import CatalogRegistry
        from .search.shaper import ShaperPolicy

        try:
            self.policy = ShaperPolicy.from_settings(settings)
        except (KeyError, ValueError) as exc:
            raise ImproperlyConfigured(f"Invalid SEARCH_* settings: {exc}") from exc

        self.registry = CatalogRegistry.from_paths(
            settings.RXSEARCH_MEDICATION_CATALOG,
            settings.RXSEARCH_TEST_CATALOG,
        )
        logger.info(
            "[rxsearch] ready: %d medications, %d tests",
            len(self.registry.medications), len(self.registry.tests),
        )
