"""Completion fallback: plain name completions when the ranked pipeline found nothing."""

from .matcher import normalize_query


def suggest_completions(records, raw_query, limit: int = 10) -> list[str]:
    """
    Up to ``limit`` distinct record names whose name or any alias contains the query.

    Names come back in catalog order. Empty query or no match gives [].
    """
    query = normalize_query(raw_query)
    if not query or limit is None or limit <= 0:
        return []

    completions = []
    seen = set()
    for record in records:
        if record.name in seen:
            continue
        if query in record.name.lower() or any(query in a.lower() for a in record.match_aliases):
            seen.add(record.name)
            completions.append(record.name)
            if len(completions) >= limit:
                break
    return completions
