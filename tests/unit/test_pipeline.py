"""
SearchPipeline end to end (Matcher → Ranker → Shaper), no HTTP.

前半部分是搜索核心必须满足的性质，用打包的完整数据集跑；
后半部分是具体场景，用 conftest 里的小 catalog。
"""
from dataclasses import asdict
from unittest.mock import patch

import pytest

from rxsearch.catalog.registry import MEDICINES, TESTS, CatalogRegistry
from rxsearch.catalog.store import CatalogStore
from rxsearch.search.matcher import MatchStrength
from rxsearch.search.pipeline import SearchPipeline
from rxsearch.search.types import EntryKind, SearchOutcome
from tests.conftest import MedicationFactory


def ids(outcome):
    return [e.payload.record.id for e in outcome.entries]


@pytest.fixture
def full_pipeline(default_registry):
    return SearchPipeline(default_registry)


@pytest.fixture
def pair_pipeline(amoxicillin, co_amoxiclav, test_store):
    registry = CatalogRegistry.from_stores(CatalogStore([amoxicillin, co_amoxiclav]), test_store)
    return SearchPipeline(registry)


# ===================================================================
# Properties
# ===================================================================

class TestSearchProperties:

    @pytest.mark.parametrize('query', ['amox', '', 'antibiotic', 'pain', 'zzz'])
    def test_deterministic(self, full_pipeline, query):
        context = {'age': 70, 'allergies': ['penicillin']}
        first = full_pipeline.search_medications(query, context, 10)
        second = full_pipeline.search_medications(query, context, 10)
        assert first == second

    def test_case_insensitive(self, full_pipeline):
        results = [ids(full_pipeline.search_medications(q, limit=10)) for q in ('ASPIRIN', 'aspirin', 'Aspirin')]
        assert results[0] == results[1] == results[2]
        assert results[0]

    @pytest.mark.parametrize('limit', [0, 1, 3, 10, 500])
    def test_bounded(self, full_pipeline, limit):
        for query in ('', 'a', 'tablet', 'in'):
            assert len(full_pipeline.search_medications(query, limit=limit)) <= limit
            assert len(full_pipeline.search_tests(query, limit=limit)) <= limit

    def test_zero_limit_is_empty(self, full_pipeline):
        assert full_pipeline.search_medications('amox', limit=0).entries == ()
        assert full_pipeline.autocomplete_medications('zzz', limit=0).entries == ()

    def test_empty_query_sorted_by_popularity(self, full_pipeline, default_registry):
        outcome = full_pipeline.search_medications('', limit=10)
        scores = [e.payload.record.popularity_score for e in outcome.entries]

        assert len(outcome) == min(len(default_registry.medications), 10)
        assert scores == sorted(scores, reverse=True)
        assert {e.payload.strength for e in outcome.entries} == {MatchStrength.NEUTRAL}
        assert outcome.total == len(default_registry.medications)

    def test_exact_beats_more_popular_category_match(self):
        exact = MedicationFactory(id='x1', name='Statin', categories=('Other',), popularity_score=1)
        popular = MedicationFactory(id='x2', name='Atorva', categories=('Statin drugs',), popularity_score=99)
        registry = CatalogRegistry.from_stores(CatalogStore([popular, exact]), CatalogStore([]))

        outcome = SearchPipeline(registry).search_medications('statin')
        assert ids(outcome) == ['x1', 'x2']

    def test_no_mutation(self, full_pipeline, default_registry):
        before = [asdict(r) for r in default_registry.medications.get_all()]
        for query in ('', 'amox', 'pain', 'zzz'):
            full_pipeline.search_medications(query, {'age': 5, 'allergies': ['aspirin']}, 50)
            full_pipeline.suggest_for_diagnosis('hypertension and pain', None, 50)
        after = [asdict(r) for r in default_registry.medications.get_all()]
        assert before == after

    def test_graceful_miss(self, full_pipeline):
        assert full_pipeline.search_medications('zzznonexistentdrugzzz').entries == ()
        assert full_pipeline.completions('zzznonexistentdrugzzz').entries == ()
        assert full_pipeline.autocomplete_medications('zzznonexistentdrugzzz').entries == ()


# ===================================================================
# Scenarios
# ===================================================================

class TestScenarios:

    def test_amox_returns_both_by_popularity(self, pair_pipeline):
        outcome = pair_pipeline.search_medications('amox', limit=10)
        assert ids(outcome) == ['m1', 'm2']
        assert {e.payload.strength for e in outcome.entries} == {MatchStrength.NAME_PARTIAL}

    def test_alias_query(self, pair_pipeline):
        outcome = pair_pipeline.search_medications('Amoxil', limit=10)
        assert ids(outcome) == ['m1']
        assert outcome.entries[0].payload.strength is MatchStrength.ALIAS_PARTIAL

    def test_empty_query_limit_one(self, pair_pipeline):
        assert ids(pair_pipeline.search_medications('', limit=1)) == ['m1']

    def test_cbc_passes_fasting_through(self, pipeline):
        outcome = pipeline.search_tests('cbc', limit=10)
        suggestion = outcome.entries[0].payload

        assert suggestion.record.id == 't001'
        assert suggestion.fasting_required is False

    def test_test_type_query(self, pipeline):
        outcome = pipeline.search_tests('imaging')
        assert ids(outcome) == ['t003']
        assert outcome.entries[0].payload.strength is MatchStrength.CATEGORY_PARTIAL

    def test_context_changes_confidence_not_order(self, pipeline):
        plain = pipeline.search_medications('antibiotic')
        child = pipeline.search_medications('antibiotic', {'age': 6})

        assert ids(plain) == ids(child)
        assert all(c.payload.confidence < p.payload.confidence
                   for p, c in zip(plain.entries, child.entries))

    def test_default_limit_applies(self, registry):
        pipeline = SearchPipeline(registry, default_limit=2)
        assert len(pipeline.search_medications('')) == 2
        assert pipeline.search_medications('').total == 5


class TestAutocomplete:

    def test_heuristic_entries(self, pipeline):
        outcome = pipeline.autocomplete_medications('amox')
        assert {e.kind for e in outcome.entries} == {EntryKind.HEURISTIC}

    def test_completions_when_nothing_ranked(self, pipeline):
        empty = SearchOutcome(entries=(), total=0)
        with patch.object(SearchPipeline, 'search_medications', return_value=empty):
            outcome = pipeline.autocomplete_medications('amox')

        assert [(e.kind, e.payload) for e in outcome.entries] == [
            (EntryKind.COMPLETION, 'Amoxicillin'),
            (EntryKind.COMPLETION, 'Amoxicillin-Clavulanate'),
        ]

    def test_tests_completions_when_nothing_ranked(self, pipeline):
        empty = SearchOutcome(entries=(), total=0)
        with patch.object(SearchPipeline, 'search_tests', return_value=empty):
            outcome = pipeline.autocomplete_tests('lipid')
        assert [e.payload for e in outcome.entries] == ['Lipid Profile']


class TestLocalSuggestions:

    def test_unshaped_records(self, pipeline):
        outcome = pipeline.local_suggestions(MEDICINES, 'amox')
        assert [(e.kind, e.payload.id) for e in outcome.entries] == [
            (EntryKind.FALLBACK, 'm1'),
            (EntryKind.FALLBACK, 'm2'),
        ]

    def test_category_filter_before_limit(self, pipeline):
        outcome = pipeline.local_suggestions(MEDICINES, '', limit=1, category='macrolide')
        assert [e.payload.id for e in outcome.entries] == ['m5']
        assert outcome.total == 1

    def test_type_filter(self, pipeline):
        outcome = pipeline.local_suggestions(TESTS, '', test_type='imaging')
        assert [e.payload.id for e in outcome.entries] == ['t003']

    def test_type_filter_excludes_medications(self, pipeline):
        assert pipeline.local_suggestions(MEDICINES, '', test_type='imaging').entries == ()


class TestDiagnosisSuggestions:

    def test_suggest_for_names_resolves_against_catalog(self, pipeline):
        outcome = pipeline.suggest_for_names(['Azithromycin', 'Unobtainium'])
        assert ids(outcome) == ['m5']
        assert outcome.entries[0].payload.reasoning == 'Standard medication'

    def test_suggest_for_names_orders_by_popularity(self, pipeline):
        outcome = pipeline.suggest_for_names(['Co-Amoxi', 'Azithromycin', 'Amoxicillin'])
        # "amoxicillin" 同时命中 m1 和 m2
        assert ids(outcome) == ['m1', 'm5', 'm2']

    def test_suggest_for_diagnosis_by_indication(self, pipeline):
        outcome = pipeline.suggest_for_diagnosis('Fever and PAIN after surgery')
        assert ids(outcome) == ['m3', 'm4']

    def test_suggest_for_diagnosis_no_match(self, pipeline):
        outcome = pipeline.suggest_for_diagnosis('broken leg')
        assert outcome.entries == ()
        assert outcome.total == 0

    def test_context_applied(self, pipeline):
        outcome = pipeline.suggest_for_diagnosis('pneumonia', {'allergies': ['macrolide']})
        assert outcome.entries[0].payload.allergy_alert is True
