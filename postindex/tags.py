"""
Tag normalization and parsing.

A canonical tag is lowercase and contains only ASCII letters and digits
plus Hiragana, Katakana and CJK Unified Ideographs. Everything else is
deleted, not replaced with a separator. The deletion is lossy:
``node-js`` and ``nodejs`` become the same tag, and ``c++`` becomes
``c``. Those collisions are accepted; ``TagAliases`` covers the cases
where two differently spelled tags should also match.

The empty string is never a usable tag. Callers treat it as absence.
"""

import logging
import re
from typing import Any, Iterable, Optional
from urllib.parse import quote

from .memo import freeze, memoize

logger = logging.getLogger(__name__)

MAX_TAG_LENGTH = 50

# Hiragana 3040-309F, Katakana 30A0-30FF, CJK Unified Ideographs 4E00-9FFF
_NON_TAG_CHARS = re.compile(r"[^a-z0-9\u3040-\u309f\u30a0-\u30ff\u4e00-\u9fff]")

DEFAULT_TAG_URL_PREFIX = "/tag/"


def normalize_tag(raw: Any) -> str:
    """Return the canonical form of a tag, or "" if it is not usable.

    Total: never raises. Non-string input yields "". Idempotent:
    ``normalize_tag(normalize_tag(x)) == normalize_tag(x)``.
    """
    if not isinstance(raw, str) or not raw:
        return ""
    return _NON_TAG_CHARS.sub("", raw.lower().strip())


def is_valid_tag(raw: Any) -> bool:
    """True if the tag normalizes to 1-50 code points."""
    normalized = normalize_tag(raw)
    return 0 < len(normalized) <= MAX_TAG_LENGTH


def tag_url_segment(raw: Any) -> str:
    """Percent-encoded canonical tag for use in a URL path, or ""."""
    normalized = normalize_tag(raw)
    if not normalized:
        return ""
    return quote(normalized, safe="")


def tag_url(raw: Any, prefix: str = DEFAULT_TAG_URL_PREFIX) -> str:
    """Link target for a tag page, e.g. ``/tag/python``; "" if invalid."""
    segment = tag_url_segment(raw)
    if not segment:
        return ""
    return f"{prefix}{segment}"


def parse_tags(raw: Any) -> list[str]:
    """Parse a raw tag field into canonical tags.

    Accepts None, a comma-separated string, or a list/tuple of strings.
    Order is preserved and duplicates are kept. Pieces that are blank or
    normalize to "" are dropped; non-string list elements are skipped.
    Any other input type yields [].
    """
    if raw is None:
        return []

    if isinstance(raw, str):
        pieces = [piece.strip() for piece in raw.split(",")]
    elif isinstance(raw, (list, tuple)):
        pieces = [p for p in raw if isinstance(p, str) and p.strip()]
    else:
        logger.debug("Ignoring tag field of type %s", type(raw).__name__)
        return []

    result = []
    for piece in pieces:
        if not piece:
            continue
        normalized = normalize_tag(piece)
        if normalized:
            result.append(normalized)
    return result


@memoize(lambda raw: freeze(raw))
def cached_parse_tags(raw: Any) -> list[str]:
    """Memoized ``parse_tags``. The returned list is shared; do not mutate it."""
    return parse_tags(raw)


class TagAliases:
    """
    Equivalence classes of tags that match one another.

    Each group is an iterable of raw tags; members are normalized and a
    tag may belong to at most one group (later groups absorb earlier ones
    that share a member). Tags outside every group match only themselves.

    Example:
        >>> aliases = TagAliases([("React", "React.js")])
        >>> aliases.matches("reactjs", "react")
        True
    """

    def __init__(self, groups: Optional[Iterable[Iterable[str]]] = None):
        self._class_of: dict[str, frozenset[str]] = {}
        for group in groups or ():
            members = {normalize_tag(tag) for tag in group}
            members.discard("")
            if len(members) < 2:
                continue
            # Merge with any class that already holds one of the members
            for member in list(members):
                members |= self._class_of.get(member, frozenset())
            frozen = frozenset(members)
            for member in frozen:
                self._class_of[member] = frozen

    def equivalents(self, tag: str) -> frozenset[str]:
        """Canonical tags matching ``tag`` (itself included); empty for ""."""
        normalized = normalize_tag(tag)
        if not normalized:
            return frozenset()
        return self._class_of.get(normalized, frozenset((normalized,)))

    def matches(self, a: str, b: str) -> bool:
        """True if the two tags are equal or aliases after normalization."""
        na = normalize_tag(a)
        nb = normalize_tag(b)
        if not na or not nb:
            return False
        return nb in self.equivalents(na)

    def groups(self) -> list[list[str]]:
        """Distinct alias groups, each sorted, for display or saving."""
        seen = {cls for cls in self._class_of.values()}
        return sorted(sorted(cls) for cls in seen)

    def __bool__(self) -> bool:
        return bool(self._class_of)

    def __repr__(self) -> str:
        return f"TagAliases({self.groups()!r})"


# "React.js" normalizes to "reactjs"; posts tagged "react" must still match
DEFAULT_ALIASES = TagAliases([("react", "reactjs")])

NO_ALIASES = TagAliases()
