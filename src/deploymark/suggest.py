"""Near-miss detection for marker names.

Used only for operator-facing hints when a requested tag does not exist.
"""

from __future__ import annotations

from collections.abc import Iterable

from deploymark.constants import SUGGESTION_LIMIT, SUGGESTION_MAX_DISTANCE


def edit_distance(a: str, b: str, max_distance: int | None = None) -> int:
    """Return the Levenshtein distance between *a* and *b*.

    With *max_distance* set the search stops as soon as the distance is known
    to exceed it, and ``max_distance + 1`` is returned in that case.
    """
    if max_distance is not None and abs(len(a) - len(b)) > max_distance:
        return max_distance + 1
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + (ca != cb),  # substitution
                )
            )
        if max_distance is not None and min(current) > max_distance:
            return max_distance + 1
        previous = current

    distance = previous[-1]
    if max_distance is not None and distance > max_distance:
        return max_distance + 1
    return distance


def similar_names(
    target: str,
    candidates: Iterable[str],
    max_distance: int = SUGGESTION_MAX_DISTANCE,
    limit: int = SUGGESTION_LIMIT,
) -> list[str]:
    """Return candidates within *max_distance* edits of *target*.

    Closest names come first; names at the same distance are in lexical
    order. An exact match is never suggested.
    """
    scored: list[tuple[int, str]] = []
    for name in set(candidates):
        if name == target:
            continue
        distance = edit_distance(target, name, max_distance)
        if distance <= max_distance:
            scored.append((distance, name))
    scored.sort()
    return [name for _, name in scored[:limit]]
