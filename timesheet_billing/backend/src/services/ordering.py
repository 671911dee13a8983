"""Dense ``display_order`` maintenance for topics and line items.

Every container keeps its children numbered 0..n-1 with no gaps. Batch
reorders and deletions rebuild the sequence instead of patching it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol


class Ordered(Protocol):
    id: int
    display_order: int


def reindex(ordered_ids: Sequence[int]) -> list[tuple[int, int]]:
    """Pair each id with its 0-based position."""

    return [(item_id, index) for index, item_id in enumerate(ordered_ids)]


def renumber(rows: Sequence[Ordered]) -> None:
    """Rewrite ``display_order`` of ``rows`` to 0..n-1 in their given order."""

    for index, row in enumerate(rows):
        if row.display_order != index:
            row.display_order = index


def apply_order(rows: Sequence[Ordered], requested: Mapping[int, int]) -> list[Ordered]:
    """Place requested rows at their indices and renumber densely.

    Rows missing from ``requested`` keep their relative order and fill the
    remaining slots. Requested rows are inserted in ascending target index,
    so a row moved to index ``n`` lands at ``n``; targets past the end are
    clamped to the end.
    """

    positioned = list(enumerate(rows))
    ordered = [
        row
        for _, row in sorted(
            ((position, row) for position, row in positioned if row.id not in requested),
            key=lambda pair: (pair[1].display_order, pair[0]),
        )
    ]
    moves = sorted(
        ((requested[row.id], position, row) for position, row in positioned if row.id in requested),
        key=lambda move: (move[0], move[1]),
    )
    for index, _, row in moves:
        ordered.insert(min(index, len(ordered)), row)

    by_id = {row.id: row for row in ordered}
    for row_id, index in reindex([row.id for row in ordered]):
        by_id[row_id].display_order = index
    return ordered


__all__ = ["apply_order", "reindex", "renumber"]
