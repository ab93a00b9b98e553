"""
Matcher：决定哪些记录是候选，以及每条记录的匹配强度。

不排序、不截断，只按 catalog 顺序返回 (record, strength)。
排序交给 ranker。
"""

from enum import IntEnum
from typing import Iterable, Optional


class MatchStrength(IntEnum):
    """Higher value = stronger match. NEUTRAL is used for the empty query."""

    NEUTRAL = 0
    CATEGORY_PARTIAL = 1
    ALIAS_PARTIAL = 2
    NAME_PARTIAL = 3
    EXACT = 4


def normalize_query(raw) -> str:
    if not isinstance(raw, str):
        return ""
    return raw.strip().lower()


def match_strength(record, query: str) -> Optional[MatchStrength]:
    """
    Strongest way ``record`` matches an already-normalized, non-empty ``query``.

    Rules are checked in priority order and the first hit wins:
    exact name, name substring, alias substring, category substring.
    Returns None when nothing matches.
    """
    name = record.name.lower()
    if name == query:
        return MatchStrength.EXACT
    if query in name:
        return MatchStrength.NAME_PARTIAL
    if any(query in alias.lower() for alias in record.match_aliases):
        return MatchStrength.ALIAS_PARTIAL
    if any(query in category.lower() for category in record.match_categories):
        return MatchStrength.CATEGORY_PARTIAL
    return None


def match(records: Iterable, raw_query) -> list[tuple]:
    """
    Candidate set for ``raw_query`` as ``[(record, MatchStrength), ...]`` in catalog order.

    An empty query (after trimming) matches everything with NEUTRAL strength.
    """
    query = normalize_query(raw_query)

    if not query:
        return [(record, MatchStrength.NEUTRAL) for record in records]

    candidates = []
    for record in records:
        strength = match_strength(record, query)
        if strength is not None:
            candidates.append((record, strength))
    return candidates
