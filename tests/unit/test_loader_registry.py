"""
JSON 数据集加载 + CatalogRegistry（get_store / reload）。

坏数据在加载时 fail fast；reload 失败时旧 snapshot 保持不变。
"""
import json

import pytest

from rxsearch.catalog.loader import (
    load_medication_catalog,
    load_test_catalog,
    parse_medication,
    parse_test,
)
from rxsearch.catalog.registry import MEDICINES, TESTS, CatalogRegistry
from rxsearch.catalog.types import TestType
from rxsearch.exceptions import CatalogLoadError, ValidationError


def write_json(path, data):
    path.write_text(json.dumps(data), encoding='utf-8')
    return path


MED = {'id': 'm1', 'name': 'Amoxicillin', 'category': ['Antibiotic'], 'popularity_score': 90}
TEST = {'id': 't1', 'name': 'CBC', 'category': ['Blood Test'], 'type': 'Laboratory', 'popularity_score': 95}


class TestParsers:

    def test_parse_medication_minimal(self):
        record = parse_medication(MED)
        assert record.id == 'm1'
        assert record.categories == ('Antibiotic',)
        assert record.aliases == ()
        assert record.popularity_score == 90

    def test_single_category_string_accepted(self):
        record = parse_medication({**MED, 'category': 'Antibiotic'})
        assert record.categories == ('Antibiotic',)

    def test_legacy_popular_score_key(self):
        raw = {k: v for k, v in MED.items() if k != 'popularity_score'}
        assert parse_medication({**raw, 'popular_score': 12}).popularity_score == 12

    def test_non_numeric_popularity_rejected(self):
        with pytest.raises(ValueError):
            parse_medication({**MED, 'popularity_score': 'high'})

    def test_bool_popularity_rejected(self):
        with pytest.raises(ValueError):
            parse_medication({**MED, 'popularity_score': True})

    @pytest.mark.parametrize('key, value', [
        ('name', None), ('name', 5), ('name', '  '), ('id', None),
    ])
    def test_id_and_name_must_be_strings(self, key, value):
        with pytest.raises(ValueError):
            parse_medication({**MED, key: value})

    def test_non_string_optional_field_rejected(self):
        with pytest.raises(ValueError):
            parse_medication({**MED, 'generic_name': 5})
        with pytest.raises(ValueError):
            parse_test({**TEST, 'description': ['CBC']})

    def test_null_optional_field_is_blank(self):
        assert parse_medication({**MED, 'route': None}).route == ''

    @pytest.mark.parametrize('popularity', [float('nan'), float('inf')])
    def test_non_finite_popularity_rejected(self, popularity):
        with pytest.raises(ValueError):
            parse_medication({**MED, 'popularity_score': popularity})

    def test_parse_test(self):
        record = parse_test({**TEST, 'fasting_required': True, 'preparation': ['Fast 8h']})
        assert record.type is TestType.LABORATORY
        assert record.fasting_required is True
        assert record.preparation == ('Fast 8h',)

    def test_fasting_flag_must_be_bool(self):
        assert parse_test(TEST).fasting_required is False
        with pytest.raises(ValueError):
            parse_test({**TEST, 'fasting_required': 'false'})

    def test_unknown_test_type_rejected(self):
        with pytest.raises(ValueError):
            parse_test({**TEST, 'type': 'Ultrasound'})


class TestLoadCatalog:

    def test_bundled_datasets_load(self):
        medications = load_medication_catalog()
        tests = load_test_catalog()
        assert len(medications) >= 30
        assert len(tests) >= 70

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogLoadError) as exc_info:
            load_medication_catalog(tmp_path / 'nope.json')
        assert exc_info.value.code == 'CATALOG_LOAD_FAILED'

    def test_invalid_json(self, tmp_path):
        path = tmp_path / 'meds.json'
        path.write_text('[{"id": ', encoding='utf-8')
        with pytest.raises(CatalogLoadError):
            load_medication_catalog(path)

    def test_root_must_be_array(self, tmp_path):
        path = write_json(tmp_path / 'meds.json', {'medications': [MED]})
        with pytest.raises(CatalogLoadError) as exc_info:
            load_medication_catalog(path)
        assert exc_info.value.code == 'CATALOG_INVALID'

    def test_malformed_records_reported_by_index(self, tmp_path):
        path = write_json(tmp_path / 'meds.json', [MED, {'id': 'm2'}, 'not a record'])
        with pytest.raises(CatalogLoadError) as exc_info:
            load_medication_catalog(path)

        errors = exc_info.value.detail['errors']
        assert [e['index'] for e in errors] == [1, 2]

    def test_null_name_fails_load(self, tmp_path):
        path = write_json(tmp_path / 'meds.json', [{**MED, 'name': None}])
        with pytest.raises(CatalogLoadError) as exc_info:
            load_medication_catalog(path)
        assert exc_info.value.detail['errors'][0]['index'] == 0

    def test_numeric_generic_name_reported(self, tmp_path):
        path = write_json(tmp_path / 'meds.json', [MED, {**MED, 'id': 'm2', 'generic_name': 5}])
        with pytest.raises(CatalogLoadError) as exc_info:
            load_medication_catalog(path)
        assert [e['index'] for e in exc_info.value.detail['errors']] == [1]

    def test_nan_popularity_in_file_rejected(self, tmp_path):
        path = tmp_path / 'meds.json'
        path.write_text('[{"id": "m1", "name": "X", "category": ["A"], "popularity_score": NaN}]', encoding='utf-8')
        with pytest.raises(CatalogLoadError):
            load_medication_catalog(path)

    def test_duplicate_ids_rejected(self, tmp_path):
        path = write_json(tmp_path / 'meds.json', [MED, MED])
        with pytest.raises(CatalogLoadError):
            load_medication_catalog(path)


class TestCatalogRegistry:

    def test_get_store(self, registry, medication_store, test_store):
        assert registry.get_store(MEDICINES) is medication_store
        assert registry.get_store(TESTS) is test_store

    def test_unknown_catalog(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            registry.get_store('devices')
        assert exc_info.value.code == 'UNKNOWN_CATALOG'
        assert exc_info.value.detail == {'known_catalogs': [MEDICINES, TESTS]}

    def test_registry_from_stores_cannot_reload(self, registry):
        with pytest.raises(RuntimeError):
            registry.reload()

    def test_reload_swaps_snapshot(self, tmp_path):
        med_path = write_json(tmp_path / 'meds.json', [MED])
        test_path = write_json(tmp_path / 'tests.json', [TEST])
        registry = CatalogRegistry.from_paths(med_path, test_path)
        old = registry.snapshot

        write_json(med_path, [MED, {**MED, 'id': 'm2', 'name': 'Azithromycin'}])
        new = registry.reload()

        assert registry.snapshot is new
        assert len(registry.medications) == 2
        # 旧 snapshot 本身没有被修改
        assert len(old.medications) == 1

    def test_failed_reload_keeps_old_snapshot(self, tmp_path):
        med_path = write_json(tmp_path / 'meds.json', [MED])
        test_path = write_json(tmp_path / 'tests.json', [TEST])
        registry = CatalogRegistry.from_paths(med_path, test_path)
        old = registry.snapshot

        med_path.write_text('not json', encoding='utf-8')
        with pytest.raises(CatalogLoadError):
            registry.reload()

        assert registry.snapshot is old
