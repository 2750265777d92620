"""
Frontmatter parsing and post loading.

Reads Markdown/MDX files with YAML frontmatter into ``Post`` snapshots
for the index. A file that cannot be read or parsed is logged and
skipped; it never aborts loading the rest of the directory.
"""

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

import yaml

from .types import Post

logger = logging.getLogger(__name__)

DEFAULT_EMOJI = "📝"
MAX_EMOJI_LENGTH = 10

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_HTML_TAG_RE = re.compile(r"<[^>]*>")


def _today() -> str:
    return date.today().strftime("%Y/%m/%d")


def default_meta() -> dict[str, Any]:
    """Fallback frontmatter values, with today's date as created_at."""
    return {
        "emoji": DEFAULT_EMOJI,
        "title": "Untitled",
        "author": "Unknown",
        "created_at": _today(),
        "hashtags": [],
    }


def _as_date_string(value: Any) -> Any:
    # YAML turns unquoted 2024-01-05 into a date; keep the blog's slash form
    if isinstance(value, datetime):
        return value.strftime("%Y/%m/%d %H:%M:%S")
    if isinstance(value, date):
        return value.strftime("%Y/%m/%d")
    return value


def safe_parse_frontmatter(raw: Any) -> dict[str, Any]:
    """Frontmatter with defaults for anything missing or of the wrong type."""
    defaults = default_meta()
    if not isinstance(raw, dict):
        logger.warning("Invalid frontmatter (%s), using defaults", type(raw).__name__)
        return defaults

    meta = {}
    for key in ("emoji", "title", "author", "created_at"):
        value = _as_date_string(raw.get(key)) if key == "created_at" else raw.get(key)
        meta[key] = value if isinstance(value, str) else defaults[key]

    tags = raw.get("hashtags")
    if tags is None:
        tags = raw.get("tags")
    meta["hashtags"] = tags or defaults["hashtags"]
    return meta


def is_valid_frontmatter(raw: Any) -> bool:
    """True if title, author and created_at are all non-empty strings."""
    if not isinstance(raw, dict):
        return False
    for key in ("title", "author", "created_at"):
        value = _as_date_string(raw.get(key)) if key == "created_at" else raw.get(key)
        if not isinstance(value, str) or not value.strip():
            return False
    return True


def _strip_markup(text: str) -> str:
    return _HTML_TAG_RE.sub("", _SCRIPT_RE.sub("", text)).strip()


def sanitize_frontmatter(raw: Any) -> dict[str, Any]:
    """``safe_parse_frontmatter`` with HTML removed from title and author."""
    meta = safe_parse_frontmatter(raw)
    meta["title"] = _strip_markup(meta["title"])
    meta["author"] = _strip_markup(meta["author"])
    if len(meta["emoji"]) > MAX_EMOJI_LENGTH:
        meta["emoji"] = DEFAULT_EMOJI
    return meta


def split_frontmatter(text: str) -> tuple[Optional[dict], str]:
    """Split ``---`` fenced YAML frontmatter from the body.

    Returns (frontmatter, body); frontmatter is None when the text has no
    fence. Raises ``yaml.YAMLError`` for a fence holding invalid YAML.
    """
    if not text.startswith("---"):
        return None, text
    parts = text.split("---", 2)
    if len(parts) < 3:
        return None, text
    frontmatter = yaml.safe_load(parts[1])
    body = parts[2].lstrip("\n")
    if frontmatter is None:
        return {}, body
    if not isinstance(frontmatter, dict):
        raise yaml.YAMLError(f"frontmatter is a {type(frontmatter).__name__}, not a mapping")
    return frontmatter, body


def load_post(path: Path) -> Optional[Post]:
    """Load one post file; None (logged) if it cannot be read or parsed.

    The post id is the file name without its extension.
    """
    try:
        text = path.read_text(encoding="utf-8")
        frontmatter, _ = split_frontmatter(text)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.warning("Skipping %s: %s", path, e)
        return None

    if frontmatter is None:
        logger.warning("Skipping %s: no frontmatter", path)
        return None
    if not is_valid_frontmatter(frontmatter):
        logger.debug("Post %s has incomplete frontmatter", path.stem)

    meta = sanitize_frontmatter(frontmatter)
    # A missing title or date leaves the post ill-formed instead of defaulted
    for key in ("title", "created_at"):
        if not isinstance(_as_date_string(frontmatter.get(key)), str):
            meta[key] = ""
    return Post.from_frontmatter(path.stem, meta)


def load_posts(directory: Path, pattern: str = "*.md*") -> dict[str, Post]:
    """Load every post in a directory (non-recursive), keyed by id.

    Hidden files and non-files are skipped. Returns {} for a missing
    directory.
    """
    directory = Path(directory).expanduser()
    if not directory.is_dir():
        logger.warning("Posts directory not found: %s", directory)
        return {}

    posts: dict[str, Post] = {}
    for path in sorted(directory.glob(pattern)):
        if path.name.startswith(".") or not path.is_file():
            continue
        post = load_post(path)
        if post is None:
            continue
        if post.id in posts:
            logger.warning("Duplicate post id %r from %s, keeping the first", post.id, path)
            continue
        posts[post.id] = post
    logger.debug("Loaded %d posts from %s", len(posts), directory)
    return posts
