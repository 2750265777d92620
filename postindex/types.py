"""
Data types for the post index.

Posts are read-only snapshots supplied by a content loader. The engine
never mutates them; every derived structure is owned by the engine.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union


# Raw tag field as written by an author: absent, "a, b, c", or ["a", "b"]
RawTags = Union[None, str, list[str], tuple[str, ...]]


@dataclass(frozen=True)
class Post:
    """
    One content item.

    Attributes:
        id: Unique key within a collection, assigned by the caller
        title: Display title
        author: Display author
        created_at: Date-like literal, usually ``YYYY/M/D``; not guaranteed
            to parse
        emoji: Short display string
        tags: Raw, unnormalized tag field (see ``RawTags``)
    """
    id: str
    title: str = ""
    author: str = ""
    created_at: str = ""
    emoji: str = ""
    tags: Any = None

    @classmethod
    def from_frontmatter(cls, id: str, frontmatter: Mapping[str, Any]) -> "Post":
        """Build a Post from a frontmatter mapping.

        Accepts both ``hashtags`` (the blog's key) and ``tags``.
        Non-string scalar fields are kept as-is so that well-formedness
        checks see what the author actually wrote.
        """
        tags = frontmatter.get("hashtags")
        if tags is None:
            tags = frontmatter.get("tags")
        return cls(
            id=id,
            title=frontmatter.get("title", ""),
            author=frontmatter.get("author", ""),
            created_at=frontmatter.get("created_at", frontmatter.get("createdAt", "")),
            emoji=frontmatter.get("emoji", ""),
            tags=tags,
        )


# A full mapping of id -> post. Values may also be frontmatter-shaped
# mappings; anything else (None included) is a malformed record.
PostCollection = Mapping[str, Any]

# A PostCollection the caller guarantees is complete: every post that
# currently exists, not a delta. IndexStore staleness checks rely on it.
PostSnapshot = PostCollection


def post_field(post: Any, name: str) -> Any:
    """Read a field from a Post or a frontmatter mapping.

    Returns None for malformed records.
    """
    if isinstance(post, Post):
        return getattr(post, name, None)
    if isinstance(post, Mapping):
        if name == "tags":
            value = post.get("hashtags")
            return value if value is not None else post.get("tags")
        if name == "created_at" and "created_at" not in post:
            return post.get("createdAt")
        return post.get(name)
    return None


def is_record(post: Any) -> bool:
    """True if ``post`` is a Post or frontmatter mapping (not malformed)."""
    return isinstance(post, (Post, Mapping))


@dataclass(frozen=True)
class NeighborRef:
    """A chronological neighbor, as rendered in navigation links."""
    id: str
    title: str


@dataclass(frozen=True)
class Neighbors:
    """
    Chronological neighbors of a post.

    ``previous`` is the newer neighbor, ``next`` the older one. Either
    side is None at the corresponding boundary; an instance with both
    sides None stands for "no neighbors" (unknown id, empty input).
    """
    previous: Optional[NeighborRef] = None
    next: Optional[NeighborRef] = None

    @property
    def is_empty(self) -> bool:
        return self.previous is None and self.next is None

    def to_dict(self) -> dict:
        """Serialize to a JSON-ready dict, omitting absent sides."""
        d: dict = {}
        if self.previous is not None:
            d["previous"] = {"id": self.previous.id, "title": self.previous.title}
        if self.next is not None:
            d["next"] = {"id": self.next.id, "title": self.next.title}
        return d


EMPTY_NEIGHBORS = Neighbors()


@dataclass(frozen=True)
class PostWithNeighbors:
    """A sorted post entry augmented with its neighbors."""
    id: str
    post: Any
    previous: Optional[NeighborRef] = None
    next: Optional[NeighborRef] = None

    @property
    def neighbors(self) -> Neighbors:
        return Neighbors(previous=self.previous, next=self.next)


@dataclass(frozen=True)
class PrecomputedIndex:
    """
    Derived structures for one collection snapshot.

    Built in one pass by ``IndexStore.build`` and never mutated afterwards.
    The containers are shared with every reader; treat them as read-only.

    Attributes:
        sorted_posts: ``(id, post)`` pairs, well-formed posts only, newest first
        all_tags: Every canonical tag in the snapshot, sorted
        neighbors_of: id -> Neighbors for every sorted post
        posts_by_tag: canonical tag -> ids carrying it (whole snapshot)
        source_ids: Ids of the snapshot the index was built from
    """
    sorted_posts: list = field(default_factory=list)
    all_tags: list = field(default_factory=list)
    neighbors_of: dict = field(default_factory=dict)
    posts_by_tag: dict = field(default_factory=dict)
    source_ids: frozenset = frozenset()

    @classmethod
    def empty(cls) -> "PrecomputedIndex":
        return cls()
