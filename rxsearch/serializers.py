"""
Response serializers: 搜索结果 → JSON-able dict。

只负责「输出格式化」，不做任何解析或校验（输入校验在 intake.py）。
AutocompleteEntry 按 kind 做穷尽 match；新增 EntryKind 却忘了在这里处理会直接抛错。
"""

from .catalog.types import MedicationRecord, TestRecord
from .search.types import (
    AutocompleteEntry,
    EntryKind,
    MedicationSuggestion,
    SearchOutcome,
    TestSuggestion,
)


def serialize_medication_record(record: MedicationRecord) -> dict:
    return {
        'id': record.id,
        'name': record.name,
        'generic_name': record.generic_name,
        'category': ', '.join(record.categories),
        'dosage_form': record.dosage_forms[0] if record.dosage_forms else 'Tablet',
        'strength': record.strengths[0] if record.strengths else 'Unknown',
        'route': record.route,
    }


def serialize_medication_detail(record: MedicationRecord) -> dict:
    """Full record for the catalog lookup endpoint."""
    return {
        **serialize_medication_record(record),
        'aliases': list(record.aliases),
        'categories': list(record.categories),
        'dosage_forms': list(record.dosage_forms),
        'strengths': list(record.strengths),
        'contraindications': list(record.contraindications),
        'indications': list(record.indications),
        'popularity_score': record.popularity_score,
    }


def serialize_test_record(record: TestRecord) -> dict:
    return {
        'id': record.id,
        'name': record.name,
        'category': list(record.categories),
        'type': record.type.value,
        'preparation': list(record.preparation),
        'fasting_required': record.fasting_required,
    }


def serialize_test_detail(record: TestRecord) -> dict:
    return {
        **serialize_test_record(record),
        'aliases': list(record.aliases),
        'description': record.description,
        'normal_range': record.normal_range,
        'sample_type': record.sample_type,
        'turnaround_time': record.turnaround_time,
        'popularity_score': record.popularity_score,
    }


def serialize_medication_suggestion(suggestion: MedicationSuggestion) -> dict:
    return {
        **serialize_medication_record(suggestion.record),
        'confidence': suggestion.confidence,
        'reasoning': suggestion.reasoning,
        'dosage_suggestion': suggestion.dosage_suggestion,
        'frequency_suggestion': suggestion.frequency_suggestion,
        'precautions': list(suggestion.precautions),
        'alternatives': [
            {
                'id': alt.record.id,
                'name': alt.record.name,
                'generic_name': alt.record.generic_name,
                'reason': f"Same category: {alt.shared_category}",
            }
            for alt in suggestion.alternatives
        ],
        'age_group': suggestion.age_group,
        'allergy_alert': suggestion.allergy_alert,
    }


def serialize_test_suggestion(suggestion: TestSuggestion) -> dict:
    return {
        **serialize_test_record(suggestion.record),
        'confidence': suggestion.confidence,
        'reasoning': suggestion.reasoning,
        'preparation_summary': suggestion.preparation_summary,
    }


def serialize_entry(entry: AutocompleteEntry) -> dict:
    payload = entry.payload
    match entry.kind:
        case EntryKind.HEURISTIC if isinstance(payload, MedicationSuggestion):
            body = serialize_medication_suggestion(payload)
        case EntryKind.HEURISTIC if isinstance(payload, TestSuggestion):
            body = serialize_test_suggestion(payload)
        case EntryKind.FALLBACK if isinstance(payload, MedicationRecord):
            body = serialize_medication_record(payload)
        case EntryKind.FALLBACK if isinstance(payload, TestRecord):
            body = serialize_test_record(payload)
        case EntryKind.COMPLETION:
            body = {'name': payload, 'description': 'Auto-complete'}
        case _:
            raise TypeError(f"Cannot serialize {entry.kind!r} entry with {type(payload).__name__} payload")
    return {'kind': entry.kind.value, **body}


def serialize_outcome(outcome: SearchOutcome, query, timestamp, fallback=False, **extra) -> dict:
    """
    Standard autocomplete response body.

    `fallback` 只在降级路径出现；timestamp 由 view 传入，核心层不读时钟。
    """
    response = {
        'suggestions': [serialize_entry(e) for e in outcome.entries],
        'query': query,
        'total': outcome.total,
        **extra,
        'timestamp': timestamp,
    }
    if fallback:
        response['fallback'] = True
    return response
