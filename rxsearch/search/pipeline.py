"""
SearchPipeline: query + context → Matcher → Ranker → Shaper → entries.

每次调用只读取一次 registry.snapshot，整个调用都用同一个 snapshot，
即使中途发生 reload 也不会混用新旧数据。

纯同步、无 I/O、无副作用：同样的 catalog + query + context + limit
永远得到同样的输出。timestamp 之类的字段由 view 层添加。
"""

import logging
from typing import Optional

from ..catalog.registry import MEDICINES, TESTS
from .completion import suggest_completions
from .context import ClinicalContext
from .indications import match_indications
from .matcher import MatchStrength, match
from .ranker import rank
from .shaper import ShaperPolicy, SuggestionShaper
from .types import AutocompleteEntry, EntryKind, SearchOutcome

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10


def _as_context(context) -> Optional[ClinicalContext]:
    if context is None or isinstance(context, ClinicalContext):
        return context
    return ClinicalContext.from_payload(context)


class SearchPipeline:

    def __init__(self, registry, policy: Optional[ShaperPolicy] = None, default_limit: int = DEFAULT_LIMIT):
        self.registry = registry
        self.policy = policy or ShaperPolicy()
        self.default_limit = default_limit

    def _limit(self, limit) -> int:
        return self.default_limit if limit is None else limit

    # ── ranked, shaped suggestions ─────────────────────────────────────────

    def search_medications(self, query, context=None, limit: Optional[int] = None) -> SearchOutcome:
        store = self.registry.snapshot.medications
        context = _as_context(context)
        candidates = match(store.get_all(), query)
        ranked = rank(candidates, self._limit(limit))

        shaper = SuggestionShaper(store, self.policy)
        entries = tuple(
            AutocompleteEntry(EntryKind.HEURISTIC, shaper.shape_medication(record, strength, context))
            for record, strength in ranked
        )
        logger.debug("[search] medications q=%r candidates=%d returned=%d", query, len(candidates), len(entries))
        return SearchOutcome(entries=entries, total=len(candidates))

    def search_tests(self, query, limit: Optional[int] = None) -> SearchOutcome:
        store = self.registry.snapshot.tests
        candidates = match(store.get_all(), query)
        ranked = rank(candidates, self._limit(limit))

        shaper = SuggestionShaper(store, self.policy)
        entries = tuple(
            AutocompleteEntry(EntryKind.HEURISTIC, shaper.shape_test(record, strength))
            for record, strength in ranked
        )
        logger.debug("[search] tests q=%r candidates=%d returned=%d", query, len(candidates), len(entries))
        return SearchOutcome(entries=entries, total=len(candidates))

    # ── flat local search and completions ──────────────────────────────────

    def local_suggestions(self, kind: str, query, limit: Optional[int] = None,
                          category: str = "", test_type: str = "") -> SearchOutcome:
        """
        Matched and ranked records with no shaping (the degraded path).

        ``category`` / ``test_type`` are optional case-insensitive substring
        filters applied to the candidates before ranking.
        """
        store = self.registry.get_store(kind)
        candidates = match(store.get_all(), query)
        if category:
            needle = category.lower()
            candidates = [
                (r, s) for r, s in candidates
                if any(needle in c.lower() for c in r.categories)
            ]
        if test_type:
            needle = test_type.lower()
            candidates = [
                (r, s) for r, s in candidates
                if needle in getattr(getattr(r, "type", None), "value", "").lower()
            ]
        entries = tuple(
            AutocompleteEntry(EntryKind.FALLBACK, record)
            for record, _ in rank(candidates, self._limit(limit))
        )
        return SearchOutcome(entries=entries, total=len(candidates))

    def completions(self, query, limit: Optional[int] = None, kind: str = MEDICINES) -> SearchOutcome:
        store = self.registry.get_store(kind)
        names = suggest_completions(store.get_all(), query, self._limit(limit))
        entries = tuple(AutocompleteEntry(EntryKind.COMPLETION, name) for name in names)
        return SearchOutcome(entries=entries, total=len(entries))

    def autocomplete_medications(self, query, context=None, limit: Optional[int] = None) -> SearchOutcome:
        """Shaped suggestions, or name completions when nothing matched."""
        outcome = self.search_medications(query, context, limit)
        if outcome.entries or self._limit(limit) <= 0:
            return outcome

        completions = self.completions(query, limit)
        if completions.entries:
            logger.info("[search] no ranked match for %r, returning %d completions", query, len(completions))
        return completions

    def autocomplete_tests(self, query, limit: Optional[int] = None) -> SearchOutcome:
        outcome = self.search_tests(query, limit)
        if outcome.entries or self._limit(limit) <= 0:
            return outcome
        return self.completions(query, limit, kind=TESTS)

    # ── diagnosis-driven suggestions ───────────────────────────────────────

    def suggest_for_names(self, names, context=None, limit: Optional[int] = None) -> SearchOutcome:
        """
        Resolve free-text medication names (e.g. from a remote model) to catalog
        records and shape them. Names that match nothing are dropped.
        """
        store = self.registry.snapshot.medications
        records = store.get_by_names(names)
        return self._shape_neutral(store, records, context, limit)

    def suggest_for_diagnosis(self, diagnosis, context=None, limit: Optional[int] = None) -> SearchOutcome:
        """Local indication-keyword match for a diagnosis."""
        store = self.registry.snapshot.medications
        records = match_indications(store.get_all(), diagnosis)
        return self._shape_neutral(store, records, context, limit)

    def _shape_neutral(self, store, records, context, limit) -> SearchOutcome:
        context = _as_context(context)
        shaper = SuggestionShaper(store, self.policy)
        ranked = rank([(r, MatchStrength.NEUTRAL) for r in records], self._limit(limit))
        entries = tuple(
            AutocompleteEntry(EntryKind.HEURISTIC, shaper.shape_medication(record, strength, context))
            for record, strength in ranked
        )
        return SearchOutcome(entries=entries, total=len(records))
