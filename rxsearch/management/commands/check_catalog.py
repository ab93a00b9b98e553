"""
python manage.py check_catalog [--medications PATH] [--tests PATH]

加载并校验两个数据集，打印每个 type / category 的记录数。
部署前跑一次：数据集有问题时这里就失败，而不是等服务启动。
"""

from collections import Counter

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from rxsearch.catalog.registry import CatalogRegistry
from rxsearch.exceptions import CatalogLoadError


class Command(BaseCommand):
    help = "Load and validate the medication and test catalogs."

    def add_arguments(self, parser):
        parser.add_argument('--medications', default=str(settings.RXSEARCH_MEDICATION_CATALOG))
        parser.add_argument('--tests', default=str(settings.RXSEARCH_TEST_CATALOG))

    def handle(self, *args, **options):
        try:
            registry = CatalogRegistry.from_paths(options['medications'], options['tests'])
        except CatalogLoadError as exc:
            errors = (exc.detail or {}).get('errors', [])
            for error in errors[:20]:
                self.stderr.write(f"  {error}")
            raise CommandError(exc.message) from exc

        medications = registry.medications
        tests = registry.tests

        self.stdout.write(f"medications: {len(medications)} records")
        for category, count in sorted(Counter(c for r in medications for c in r.categories).items()):
            self.stdout.write(f"  {category}: {count}")

        self.stdout.write(f"tests: {len(tests)} records")
        for test_type, count in sorted(Counter(r.type.value for r in tests).items()):
            self.stdout.write(f"  {test_type}: {count}")

        self.stdout.write(self.style.SUCCESS("Catalogs OK"))
