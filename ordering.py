"""
Display ordering for join rows (blueprint blocks, blueprint sections,
routine items).

Indexes only encode sequence: removing a row leaves a gap, appending uses
max + 1, and a reorder rewrites every index of the list in one commit.
"""

from typing import Iterable, List, Sequence

from exceptions import ValidationError


def next_order_index(rows: Iterable) -> int:
    indexes = [row.order_index for row in rows]
    return max(indexes) + 1 if indexes else 0


def apply_order(rows: Sequence, ordered_ids: List[str], key: str = "id") -> List:
    """
    Rewrite ``order_index`` so ``rows`` follow ``ordered_ids``.

    ``key`` names the attribute compared against the ids (the join rows are
    addressed by the id of the block or section they point to).
    ``ordered_ids`` must be a permutation of the current ids.
    """
    by_id = {getattr(row, key): row for row in rows}

    if len(ordered_ids) != len(set(ordered_ids)):
        raise ValidationError("The new order contains duplicate ids.", field="ordered_ids")
    if set(ordered_ids) != set(by_id):
        raise ValidationError("The new order must contain exactly the current items.", field="ordered_ids")

    for index, item_id in enumerate(ordered_ids):
        by_id[item_id].order_index = index
    return [by_id[item_id] for item_id in ordered_ids]


def chunk(items: Sequence, size: int = 7) -> List[List]:
    """Split a day list into calendar rows."""
    return [list(items[i:i + size]) for i in range(0, len(items), size)]
