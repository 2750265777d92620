"""
postindex - tag and date indexing for blog posts.

Answers the three render-time queries of a small blog cheaply and
repeatedly: all posts newest first, posts carrying a tag, and the
chronological neighbors of a post.

Quick Start:
    from postindex import IndexStore, Post

    posts = {
        "hello": Post(id="hello", title="Hello", created_at="2024/1/5", tags="python, React.js"),
    }
    store = IndexStore()
    store.refresh_if_needed(posts)
    store.get_by_tag_fast("react", posts)
"""

from .filtering import all_tags, filter_by_tag
from .index import IndexStore, build_index
from .memo import MemoCache, clear_memo_cache, default_cache, memoize
from .navigation import adjacent_of, all_with_neighbors, is_valid_id, sort_by_date
from .tags import (
    DEFAULT_ALIASES,
    NO_ALIASES,
    TagAliases,
    is_valid_tag,
    normalize_tag,
    parse_tags,
    tag_url,
    tag_url_segment,
)
from .types import (
    NeighborRef,
    Neighbors,
    Post,
    PostWithNeighbors,
    PrecomputedIndex,
)

__version__ = "0.1.0"
__all__ = [
    "IndexStore",
    "build_index",
    "PrecomputedIndex",
    "Post",
    "NeighborRef",
    "Neighbors",
    "PostWithNeighbors",
    "normalize_tag",
    "is_valid_tag",
    "tag_url_segment",
    "tag_url",
    "parse_tags",
    "TagAliases",
    "DEFAULT_ALIASES",
    "NO_ALIASES",
    "filter_by_tag",
    "all_tags",
    "sort_by_date",
    "adjacent_of",
    "all_with_neighbors",
    "is_valid_id",
    "MemoCache",
    "memoize",
    "default_cache",
    "clear_memo_cache",
]
