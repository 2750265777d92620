"""
Chronological ordering and previous/next navigation.

Only well-formed posts (non-empty title and created_at strings) take part
in ordering. "previous" is the newer neighbor and "next" the older one,
matching how a blog reads from newest to oldest.
"""

import logging
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from .memo import collection_key, freeze, memoize
from .types import (
    EMPTY_NEIGHBORS,
    NeighborRef,
    Neighbors,
    PostCollection,
    PostWithNeighbors,
    is_record,
    post_field,
)

logger = logging.getLogger(__name__)

# YYYY/M/D or YYYY-M-D, optionally followed by [T ]H:MM[:SS]
_LOOSE_DATE_RE = re.compile(
    r'^(\d{4})[/-](\d{1,2})[/-](\d{1,2})'
    r'(?:[T ](\d{1,2}):(\d{2})(?::(\d{2}))?)?$'
)


def parse_created_at(value: Any) -> Optional[datetime]:
    """Parse a post date literal to an aware UTC datetime.

    Accepts ``YYYY/M/D`` (the blog's format), ``YYYY-M-D``, either with an
    optional ``H:MM[:SS]`` time, and anything ``datetime.fromisoformat``
    accepts. Naive values are taken as UTC. Returns None when the value
    cannot be interpreted.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None

    match = _LOOSE_DATE_RE.match(text)
    try:
        if match:
            year, month, day, hour, minute, second = match.groups()
            dt = datetime(
                int(year), int(month), int(day),
                int(hour or 0), int(minute or 0), int(second or 0),
            )
        else:
            dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def _non_blank(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def is_well_formed(post: Any) -> bool:
    """True if the post has non-empty title and created_at strings."""
    if not is_record(post):
        return False
    return _non_blank(post_field(post, "title")) and _non_blank(post_field(post, "created_at"))


def _date_sort_key(entry: tuple) -> tuple:
    # Parseable dates first, newest first; unparseable ones after, in input order
    dt = parse_created_at(post_field(entry[1], "created_at"))
    if dt is None:
        return (1, 0.0)
    return (0, -dt.timestamp())


@memoize(lambda collection: collection_key(collection))
def sort_by_date(collection: PostCollection) -> list[tuple[str, Any]]:
    """
    Well-formed posts as ``(id, post)`` pairs, newest first.

    Posts whose date cannot be parsed sort after every parseable one.
    Ties keep collection order. Memoized by the collection's id set; the
    returned list is shared, do not mutate it.
    """
    if not isinstance(collection, Mapping):
        logger.warning("sort_by_date: collection is not a mapping (%s)",
                       type(collection).__name__)
        return []

    entries = []
    for post_id, post in collection.items():
        if is_well_formed(post):
            entries.append((post_id, post))
        else:
            logger.debug("Excluding ill-formed post %r from ordering", post_id)
    return sorted(entries, key=_date_sort_key)


def _neighbor_ref(entry: tuple) -> Optional[NeighborRef]:
    post_id, post = entry
    title = post_field(post, "title")
    if not _non_blank(title):
        return None
    return NeighborRef(id=post_id, title=title)


def neighbors_at(sorted_posts: list, index: int) -> Neighbors:
    """Neighbors of the entry at ``index`` in a newest-first list."""
    previous = _neighbor_ref(sorted_posts[index - 1]) if index > 0 else None
    following = (
        _neighbor_ref(sorted_posts[index + 1])
        if index < len(sorted_posts) - 1 else None
    )
    return Neighbors(previous=previous, next=following)


@memoize(lambda post_id, collection: (
    freeze(post_id),
    collection_key(collection),
))
def adjacent_of(post_id: str, collection: PostCollection) -> Neighbors:
    """
    Chronological neighbors of a post.

    Returns ``EMPTY_NEIGHBORS`` for an unknown or ill-formed id and for
    invalid input. The newest post has no ``previous`` and the oldest no
    ``next``. Memoized by ``(id, id set)``.
    """
    if not isinstance(post_id, str) or not post_id:
        logger.warning("adjacent_of: invalid post id %r", post_id)
        return EMPTY_NEIGHBORS

    sorted_posts = sort_by_date(collection)
    for index, (candidate, _) in enumerate(sorted_posts):
        if candidate == post_id:
            return neighbors_at(sorted_posts, index)

    logger.debug("adjacent_of: post %r not found among sorted posts", post_id)
    return EMPTY_NEIGHBORS


def all_with_neighbors(collection: PostCollection) -> list[PostWithNeighbors]:
    """Every sorted post paired with its neighbors, newest first."""
    sorted_posts = sort_by_date(collection)
    result = []
    for index, (post_id, post) in enumerate(sorted_posts):
        neighbors = neighbors_at(sorted_posts, index)
        result.append(PostWithNeighbors(
            id=post_id,
            post=post,
            previous=neighbors.previous,
            next=neighbors.next,
        ))
    return result


def is_valid_id(post_id: Any, collection: PostCollection) -> bool:
    """True if the collection holds ``post_id`` and that post has a title."""
    if not isinstance(post_id, str) or not post_id:
        return False
    if not isinstance(collection, Mapping):
        return False
    post = collection.get(post_id)
    title = post_field(post, "title")
    return isinstance(title, str) and len(title) > 0
