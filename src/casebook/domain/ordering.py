"""Sibling order keys.

Order keys are floats. New siblings append at ``max + 1`` (``1.0`` when there
are none). Moving an item between two neighbours assigns the midpoint of their
keys; once the gap between neighbours is exhausted, or two siblings share a
key, the whole sibling set is renumbered ``1.0 .. n``.
"""

from collections.abc import Iterable, Sequence

#: Smallest gap between neighbours that may still be split.
MIN_ORDER_GAP = 1e-9


def next_order(orders: Iterable[float]) -> float:
    """Return the order key for a new sibling appended after `orders`."""
    return max(orders, default=0.0) + 1.0


def order_between(low: float | None, high: float | None) -> float | None:
    """Return a key strictly between two neighbours, or None if none fits.

    Args:
        low: Key of the preceding sibling, or None at the start of the list.
        high: Key of the following sibling, or None at the end of the list.
    """
    if high is None:
        return 1.0 if low is None else low + 1.0
    if low is None:
        if high <= 0.0:
            return None
        low = 0.0
    if high - low < MIN_ORDER_GAP:
        return None
    mid = (low + high) / 2.0
    if not low < mid < high:
        return None
    return mid


def renormalize(item_ids: Sequence[str]) -> dict[str, float]:
    """Assign keys ``1.0 .. n`` to `item_ids` in the given sequence order."""
    return {item_id: float(i) for i, item_id in enumerate(item_ids, start=1)}


def place(
    siblings: Sequence[tuple[str, float]], item_id: str, position: int | None
) -> dict[str, float]:
    """Compute the order keys needed to put `item_id` at `position`.

    Args:
        siblings: ``(id, order)`` pairs of the target siblings, excluding the
            item being placed, sorted by order.
        item_id: Id of the item being placed.
        position: 0-based target index among `siblings`; None (or an index past
            the end) appends.

    Returns:
        Mapping of id to new order key. Usually holds only `item_id`; holds every
        sibling when the set had to be renumbered.
    """
    if position is None or position >= len(siblings):
        return {item_id: next_order(order for _, order in siblings)}
    position = max(position, 0)

    orders = [order for _, order in siblings]
    low = orders[position - 1] if position > 0 else None
    high = orders[position]
    key = order_between(low, high)
    if key is not None and len(set(orders)) == len(orders):
        return {item_id: key}

    ids = [sibling_id for sibling_id, _ in siblings]
    ids.insert(position, item_id)
    return renormalize(ids)
