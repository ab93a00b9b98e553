"""Ranker: order matcher candidates and bound the result size."""


def rank_key(candidate):
    record, strength = candidate
    return (-int(strength), -record.popularity_score)


def rank(candidates, limit: int) -> list[tuple]:
    """
    Sort by match strength, then popularity, both descending.

    ``sorted`` is stable, so records with identical keys keep catalog order.
    Returns at most ``limit`` items; ``limit <= 0`` gives an empty list.
    """
    if limit is None or limit <= 0:
        return []
    return sorted(candidates, key=rank_key)[:limit]


def by_popularity(records) -> list:
    """Records sorted by popularity descending, ties in catalog order."""
    return sorted(records, key=lambda r: -r.popularity_score)
