"""
Heuristic suggestion shaping.

Turns a ranked catalog record into a suggestion DTO: confidence from the match
strength, wording hints, precautions and same-category alternatives. Patient
context only changes confidence and wording here, never which records match.

The age and allergy rules are labels for the prescriber's UI, not dosing logic.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..catalog.types import MedicationRecord, TestRecord
from .context import ClinicalContext
from .matcher import MatchStrength
from .ranker import by_popularity
from .types import Alternative, MedicationSuggestion, TestSuggestion

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = {
    MatchStrength.EXACT: 0.95,
    MatchStrength.NAME_PARTIAL: 0.8,
    MatchStrength.ALIAS_PARTIAL: 0.7,
    MatchStrength.CATEGORY_PARTIAL: 0.55,
    MatchStrength.NEUTRAL: 0.5,
}

MEDICATION_REASONS = {
    MatchStrength.EXACT: "Exact name match",
    MatchStrength.NAME_PARTIAL: "Name matches search",
    MatchStrength.ALIAS_PARTIAL: "Matched generic or brand name",
    MatchStrength.CATEGORY_PARTIAL: "Matched therapeutic category",
    MatchStrength.NEUTRAL: "Standard medication",
}

TEST_REASONS = {
    MatchStrength.EXACT: "Exact name match",
    MatchStrength.NAME_PARTIAL: "Name matches search",
    MatchStrength.ALIAS_PARTIAL: "Matched alternate name",
    MatchStrength.CATEGORY_PARTIAL: "Matched test category or type",
    MatchStrength.NEUTRAL: "Commonly ordered test",
}

DEFAULT_FREQUENCY = "As directed by physician"


@dataclass(frozen=True)
class ShaperPolicy:
    """
    Tunable heuristics. Base confidences must strictly decrease from EXACT to
    NEUTRAL and stay within [0, 1]; anything else is a configuration error.
    """

    confidence: dict = field(default_factory=lambda: dict(DEFAULT_CONFIDENCE))
    pediatric_age: float = 12
    geriatric_age: float = 65
    age_factor: float = 0.9
    allergy_factor: float = 0.5
    max_precautions: int = 3
    max_alternatives: int = 3

    def __post_init__(self):
        merged = dict(DEFAULT_CONFIDENCE)
        for key, value in self.confidence.items():
            merged[MatchStrength[key] if isinstance(key, str) else MatchStrength(key)] = value
        object.__setattr__(self, "confidence", merged)

        ordered = [merged[s] for s in sorted(MatchStrength, reverse=True)]
        if any(not 0 <= v <= 1 for v in ordered):
            raise ValueError(f"Confidence values must be within [0, 1]: {ordered}")
        if any(a <= b for a, b in zip(ordered, ordered[1:])):
            raise ValueError(f"Confidence values must strictly decrease EXACT → NEUTRAL: {ordered}")
        for name in ("age_factor", "allergy_factor"):
            if not 0 <= getattr(self, name) <= 1:
                raise ValueError(f"{name} must be within [0, 1]")
        if not self.pediatric_age < self.geriatric_age:
            raise ValueError(
                f"pediatric_age ({self.pediatric_age}) must be below geriatric_age ({self.geriatric_age})"
            )

    @classmethod
    def from_settings(cls, settings) -> "ShaperPolicy":
        """Read SEARCH_* values from a Django-style settings object."""
        return cls(
            confidence=getattr(settings, "SEARCH_CONFIDENCE", None) or {},
            pediatric_age=getattr(settings, "SEARCH_PEDIATRIC_AGE", 12),
            geriatric_age=getattr(settings, "SEARCH_GERIATRIC_AGE", 65),
            age_factor=getattr(settings, "SEARCH_AGE_CONFIDENCE_FACTOR", 0.9),
            allergy_factor=getattr(settings, "SEARCH_ALLERGY_CONFIDENCE_FACTOR", 0.5),
        )


class SuggestionShaper:

    def __init__(self, store, policy: Optional[ShaperPolicy] = None):
        self.store = store
        self.policy = policy or ShaperPolicy()

    # ── medications ────────────────────────────────────────────────────────

    def shape_medication(self, record: MedicationRecord, strength: MatchStrength,
                         context: Optional[ClinicalContext] = None) -> MedicationSuggestion:
        policy = self.policy
        confidence = policy.confidence[strength]
        reasons = [MEDICATION_REASONS[strength]]
        dosage = record.strengths[0] if record.strengths else "Unknown"

        age_group = None
        allergy = None
        if context is not None:
            age_group = context.age_group(policy.pediatric_age, policy.geriatric_age)
            if age_group:
                confidence *= policy.age_factor
                reasons.append(f"dosage adjusted for {age_group} patient")
                dosage = f"{dosage} ({age_group} dose suggestion, confirm with prescriber)"

            allergy = context.matching_allergy(
                (record.name, *record.match_aliases, *record.categories)
            )
            if allergy:
                confidence *= policy.allergy_factor
                reasons.append(f"patient reports allergy to '{allergy}'")

        return MedicationSuggestion(
            record=record,
            strength=strength,
            confidence=round(confidence, 3),
            reasoning="; ".join(reasons),
            dosage_suggestion=dosage,
            frequency_suggestion=DEFAULT_FREQUENCY,
            precautions=record.contraindications[:policy.max_precautions],
            alternatives=self.alternatives(record),
            age_group=age_group,
            allergy_alert=allergy is not None,
        )

    def alternatives(self, record: MedicationRecord) -> tuple[Alternative, ...]:
        """Up to max_alternatives other records sharing a category, most popular first."""
        own = {c.lower(): c for c in record.categories}
        found = []
        for other in by_popularity(self.store.get_all()):
            if other.id == record.id:
                continue
            shared = next((own[c.lower()] for c in other.categories if c.lower() in own), None)
            if shared is None:
                continue
            found.append(Alternative(record=other, shared_category=shared))
            if len(found) >= self.policy.max_alternatives:
                break
        return tuple(found)

    # ── tests ──────────────────────────────────────────────────────────────

    def shape_test(self, record: TestRecord, strength: MatchStrength) -> TestSuggestion:
        reasoning = TEST_REASONS[strength]
        if record.fasting_required:
            reasoning += "; fasting required"
        return TestSuggestion(
            record=record,
            strength=strength,
            confidence=round(self.policy.confidence[strength], 3),
            reasoning=reasoning,
            preparation_summary="; ".join(record.preparation) if record.preparation else "None required",
            fasting_required=record.fasting_required,
        )
