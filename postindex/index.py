"""
Precomputed index store.

An ``IndexStore`` owns at most one ``PrecomputedIndex`` and answers the
render-time queries (sorted posts, all tags, neighbors, posts by tag)
from it. The index is built from a complete snapshot of the posts and is
only valid for a snapshot with exactly the same ids.

Lifecycle is explicit: nothing refreshes in the background. Callers
invoke ``refresh_if_needed(snapshot)`` with the complete current
snapshot before querying, or ``build`` to force a rebuild.
"""

import logging
import threading
from collections.abc import Mapping
from typing import Any, Optional

from .navigation import neighbors_at, sort_by_date
from .tags import DEFAULT_ALIASES, TagAliases, parse_tags
from .types import (
    EMPTY_NEIGHBORS,
    Neighbors,
    PostSnapshot,
    PrecomputedIndex,
    is_record,
    post_field,
)

logger = logging.getLogger(__name__)


def _snapshot_ids(snapshot: Any) -> Optional[frozenset]:
    if not isinstance(snapshot, Mapping):
        return None
    return frozenset(snapshot.keys())


def build_index(snapshot: PostSnapshot) -> PrecomputedIndex:
    """
    Compute every derived structure for a snapshot in one pass.

    ``posts_by_tag`` covers the whole snapshot, ill-formed posts included,
    while ``sorted_posts`` and ``neighbors_of`` only cover well-formed ones.

    Everything is computed from the posts as given, bypassing the memo
    cache: memoized results are keyed by ids only and can describe older
    contents of the same posts.

    Raises whatever the underlying computation raises; ``IndexStore.build``
    turns failures into an empty index.
    """
    ids = _snapshot_ids(snapshot)
    if ids is None:
        logger.warning("build_index: snapshot is not a mapping (%s)",
                       type(snapshot).__name__)
        return PrecomputedIndex.empty()

    sorted_posts = sort_by_date.__wrapped__(snapshot)

    neighbors_of = {
        post_id: neighbors_at(sorted_posts, index)
        for index, (post_id, _) in enumerate(sorted_posts)
    }

    posts_by_tag: dict[str, list[str]] = {}
    for post_id, post in snapshot.items():
        if not is_record(post):
            logger.debug("Skipping malformed post %r while indexing tags", post_id)
            continue
        for tag in dict.fromkeys(parse_tags(post_field(post, "tags"))):
            posts_by_tag.setdefault(tag, []).append(post_id)

    return PrecomputedIndex(
        sorted_posts=sorted_posts,
        all_tags=sorted(posts_by_tag),
        neighbors_of=neighbors_of,
        posts_by_tag=posts_by_tag,
        source_ids=ids,
    )


class IndexStore:
    """
    Holder of one precomputed index with explicit build/refresh.

    Each instance is independent, so separate collections (or tests)
    never share state. Builds are serialized by a lock and the new index
    is installed with a single reference swap: readers see either the old
    or the new index in full, never a partial one.

    Args:
        aliases: Tag equivalence classes used by ``get_by_tag_fast``
    """

    def __init__(self, aliases: TagAliases = DEFAULT_ALIASES):
        self._aliases = aliases
        self._index: Optional[PrecomputedIndex] = None
        self._build_lock = threading.Lock()

    @property
    def index(self) -> Optional[PrecomputedIndex]:
        """The current index, or None before the first build."""
        return self._index

    @property
    def aliases(self) -> TagAliases:
        return self._aliases

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def build(self, snapshot: PostSnapshot) -> None:
        """Build and install a new index from a complete snapshot.

        On any internal failure the store holds an empty index instead of
        a partial or missing one.
        """
        with self._build_lock:
            try:
                index = build_index(snapshot)
            except Exception as e:
                logger.error("Index build failed, installing empty index: %s", e,
                             exc_info=True)
                index = PrecomputedIndex.empty()
            self._index = index
        logger.info(
            "Built post index: %d sorted posts, %d tags",
            len(index.sorted_posts), len(index.all_tags),
        )

    def is_valid(self, snapshot: PostSnapshot) -> bool:
        """True if an index exists and was built from exactly these ids."""
        index = self._index
        if index is None:
            return False
        ids = _snapshot_ids(snapshot)
        if ids is None:
            return False
        return ids == index.source_ids

    def refresh_if_needed(self, snapshot: PostSnapshot) -> bool:
        """Rebuild when the index is missing or stale.

        Returns True if a rebuild happened. When the index is valid the
        stored index object is left untouched.
        """
        if self.is_valid(snapshot):
            return False
        logger.info("Post index is stale, rebuilding")
        self.build(snapshot)
        return True

    def clear(self) -> None:
        """Forget the current index."""
        self._index = None

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_sorted_fast(self, snapshot: PostSnapshot) -> list[tuple[str, Any]]:
        """Newest-first ``(id, post)`` pairs.

        Served from the index when it matches the snapshot, otherwise
        computed directly (the store is not rebuilt).
        """
        index = self._index
        if index is not None and index.source_ids == _snapshot_ids(snapshot):
            return index.sorted_posts
        return sort_by_date(snapshot)

    def get_all_tags_fast(self) -> list[str]:
        """All tags of the indexed snapshot, or [] without an index.

        Not checked against any snapshot; call ``refresh_if_needed`` first.
        """
        index = self._index
        if index is None:
            return []
        return index.all_tags

    def get_neighbors_fast(self, post_id: str) -> Neighbors:
        """Stored neighbors of a post, or empty neighbors."""
        index = self._index
        if index is None or not isinstance(post_id, str):
            return EMPTY_NEIGHBORS
        return index.neighbors_of.get(post_id, EMPTY_NEIGHBORS)

    def get_by_tag_fast(self, tag: str, snapshot: PostSnapshot) -> dict[str, Any]:
        """Posts carrying a tag, resolved against the snapshot given now.

        Ids indexed for the tag (and its aliases) are looked up in
        ``snapshot``; posts no longer present there are dropped. Empty
        without an index or when the tag is not indexed.
        """
        index = self._index
        if index is None or not isinstance(snapshot, Mapping):
            return {}

        wanted = self._aliases.equivalents(tag)
        matched: dict[str, None] = {}
        for canonical in sorted(wanted):
            for post_id in index.posts_by_tag.get(canonical, ()):
                matched[post_id] = None

        return {
            post_id: snapshot[post_id]
            for post_id in matched
            if post_id in snapshot
        }
