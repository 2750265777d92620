"""
Tag filtering and tag-universe extraction over a post collection.

Both operations are total: invalid collections or tags produce an empty
result, and a malformed post is logged and skipped without affecting
the rest of the collection.
"""

import logging
from collections.abc import Mapping
from typing import Any

from .memo import collection_key, memoize
from .tags import DEFAULT_ALIASES, TagAliases, cached_parse_tags
from .types import PostCollection, is_record, post_field

logger = logging.getLogger(__name__)


def post_tags(post: Any) -> list[str]:
    """Canonical tags of a single post (memoized parse); [] if malformed."""
    if not is_record(post):
        return []
    return cached_parse_tags(post_field(post, "tags"))


def filter_by_tag(
    collection: PostCollection,
    tag: str,
    *,
    aliases: TagAliases = DEFAULT_ALIASES,
) -> dict[str, Any]:
    """
    Select the posts carrying a tag.

    Matching is on canonical tags, so it is case- and punctuation-
    insensitive. A post also matches when one of its tags is an alias of
    the query tag (by default ``react`` <-> ``reactjs``).

    Args:
        collection: Mapping of id -> post
        tag: Raw query tag
        aliases: Equivalence classes of tags; pass ``NO_ALIASES`` to
            match on canonical equality only

    Returns:
        New dict of id -> post, a subset of ``collection`` in its
        iteration order. Empty for invalid input or an unusable tag.
    """
    if not isinstance(collection, Mapping):
        logger.warning("filter_by_tag: collection is not a mapping (%s)",
                       type(collection).__name__)
        return {}

    wanted = aliases.equivalents(tag) if isinstance(tag, str) else frozenset()
    if not wanted:
        logger.debug("filter_by_tag: tag %r normalizes to nothing", tag)
        return {}

    filtered = {}
    for post_id, post in collection.items():
        if not is_record(post):
            logger.debug("Skipping malformed post %r", post_id)
            continue
        if any(t in wanted for t in post_tags(post)):
            filtered[post_id] = post
    return filtered


@memoize(lambda collection: collection_key(collection))
def all_tags(collection: PostCollection) -> list[str]:
    """
    Every distinct canonical tag in the collection, sorted.

    Malformed posts are skipped. Memoized by the collection's id set;
    the returned list is shared, do not mutate it.
    """
    if not isinstance(collection, Mapping):
        logger.warning("all_tags: collection is not a mapping (%s)",
                       type(collection).__name__)
        return []

    seen: set[str] = set()
    for post_id, post in collection.items():
        if not is_record(post):
            logger.debug("Skipping malformed post %r", post_id)
            continue
        seen.update(post_tags(post))
    return sorted(seen)
