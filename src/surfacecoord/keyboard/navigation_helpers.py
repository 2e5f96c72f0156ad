"""
Navigation helpers over item sequences
"""

from typing import Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")


def _navigable(items: Sequence[T], is_navigable: Optional[Callable[[T], bool]]) -> List[T]:
    if is_navigable is None:
        return list(items)
    return [item for item in items if is_navigable(item)]


def get_next_navigable_item(
    items: Sequence[T],
    current: Optional[T],
    is_navigable: Optional[Callable[[T], bool]] = None
) -> Optional[T]:
    """
    Item after current, wrapping to the first

    Returns the first navigable item when current is not among them, and
    None when there is nothing to navigate to.
    """
    candidates = _navigable(items, is_navigable)
    if not candidates:
        return None
    if current not in candidates:
        return candidates[0]
    index = candidates.index(current)
    return candidates[(index + 1) % len(candidates)]


def get_previous_navigable_item(
    items: Sequence[T],
    current: Optional[T],
    is_navigable: Optional[Callable[[T], bool]] = None
) -> Optional[T]:
    """Item before current, wrapping to the last"""
    candidates = _navigable(items, is_navigable)
    if not candidates:
        return None
    if current not in candidates:
        return candidates[-1]
    index = candidates.index(current)
    return candidates[index - 1]


def find_items_by_text(
    items: Sequence[T],
    search_text: str,
    text_of: Callable[[T], str] = str
) -> List[T]:
    """Items whose text contains search_text, case-insensitively"""
    needle = search_text.lower()
    return [item for item in items if needle in (text_of(item) or "").lower()]
