"""
Name lookups shared by playlists and radio favourites
"""

from typing import Callable, Iterable, TypeVar

from exceptions import NotFoundError

T = TypeVar('T')

def find_by_name(items: Iterable[T], name: str, get_name: Callable[[T], str], kind: str = "item") -> T:
    """
    Exact match first, then the first case-insensitive match.

    The exact pass runs over every item before the fallback is considered,
    so an exact match later in the sequence beats an earlier rough match.
    """
    items = list(items)
    for item in items:
        if get_name(item) == name:
            return item

    wanted = name.lower()
    for item in items:
        if get_name(item).lower() == wanted:
            return item

    raise NotFoundError(f"No {kind} found with the name '{name}'")
