"""
Configuration for the post index command line.

The configuration is stored as a TOML file, ``postindex.toml``, in a
config directory. It says where posts live and tunes the engine
(memo cache size, tag aliases, tag page URL prefix).
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

# tomli_w for writing TOML (tomllib is read-only)
try:
    import tomli_w
except ImportError:
    tomli_w = None  # type: ignore

from .memo import DEFAULT_CACHE_SIZE
from .tags import DEFAULT_TAG_URL_PREFIX, TagAliases


CONFIG_FILENAME = "postindex.toml"
CONFIG_VERSION = 1

CONFIG_DIR_ENV = "POSTINDEX_CONFIG_DIR"
POSTS_DIR_ENV = "POSTINDEX_POSTS_DIR"


def _default_aliases() -> list[list[str]]:
    return [["react", "reactjs"]]


@dataclass
class IndexConfig:
    """Complete command line configuration."""
    path: Path
    version: int = CONFIG_VERSION
    posts_dir: Path = field(default_factory=lambda: Path("posts"))
    pattern: str = "*.md*"
    cache_size: int = DEFAULT_CACHE_SIZE
    tag_url_prefix: str = DEFAULT_TAG_URL_PREFIX
    aliases: list[list[str]] = field(default_factory=_default_aliases)

    @property
    def config_path(self) -> Path:
        """Path to the TOML config file."""
        return self.path / CONFIG_FILENAME

    def exists(self) -> bool:
        """Check if config file exists."""
        return self.config_path.exists()

    def tag_aliases(self) -> TagAliases:
        return TagAliases(self.aliases)

    def resolved_posts_dir(self) -> Path:
        """Posts directory; relative paths are taken from the config directory."""
        posts_dir = self.posts_dir.expanduser()
        if posts_dir.is_absolute():
            return posts_dir
        return self.path / posts_dir


def get_config_dir() -> Path:
    """Config directory: $POSTINDEX_CONFIG_DIR, else the current directory."""
    env = os.environ.get(CONFIG_DIR_ENV)
    if env:
        return Path(env).expanduser()
    return Path.cwd()


def _validate(config: IndexConfig) -> IndexConfig:
    if not isinstance(config.version, int):
        raise ValueError(f"Config version must be an integer: {config.version!r}")
    if config.version > CONFIG_VERSION:
        raise ValueError(
            f"Config version {config.version} is newer than supported ({CONFIG_VERSION})"
        )
    if not isinstance(config.cache_size, int) or config.cache_size < 1:
        raise ValueError(f"cache_size must be a positive integer: {config.cache_size!r}")
    if not isinstance(config.pattern, str) or not config.pattern:
        raise ValueError("pattern must be a non-empty string")
    if not isinstance(config.tag_url_prefix, str):
        raise ValueError("tag_url_prefix must be a string")
    for group in config.aliases:
        if not isinstance(group, list) or not all(isinstance(t, str) for t in group):
            raise ValueError(f"Each alias group must be a list of strings: {group!r}")
    return config


def load_config(config_dir: Path) -> IndexConfig:
    """
    Load configuration from a config directory.

    ``$POSTINDEX_POSTS_DIR`` overrides ``posts_dir`` from the file.

    Raises:
        FileNotFoundError: If config doesn't exist
        ValueError: If config is invalid
    """
    config_path = config_dir / CONFIG_FILENAME

    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {config_path}: {e}") from e

    index = data.get("index", {})
    posts = data.get("posts", {})
    tags = data.get("tags", {})

    config = IndexConfig(
        path=config_dir,
        version=index.get("version", CONFIG_VERSION),
        posts_dir=Path(posts.get("dir", "posts")),
        pattern=posts.get("pattern", "*.md*"),
        cache_size=index.get("cache_size", DEFAULT_CACHE_SIZE),
        tag_url_prefix=tags.get("url_prefix", DEFAULT_TAG_URL_PREFIX),
        aliases=tags.get("aliases", _default_aliases()),
    )
    return apply_env_overrides(_validate(config))


def apply_env_overrides(config: IndexConfig) -> IndexConfig:
    posts_env = os.environ.get(POSTS_DIR_ENV)
    if posts_env:
        config.posts_dir = Path(posts_env)
    return config


def save_config(config: IndexConfig) -> None:
    """
    Save configuration to the config directory.

    Creates the directory if it doesn't exist.
    """
    if tomli_w is None:
        raise RuntimeError("tomli_w is required to save config. Install with: pip install tomli-w")

    config.path.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "index": {
            "version": config.version,
            "cache_size": config.cache_size,
        },
        "posts": {
            "dir": str(config.posts_dir),
            "pattern": config.pattern,
        },
        "tags": {
            "url_prefix": config.tag_url_prefix,
            "aliases": config.aliases,
        },
    }

    with open(config.config_path, "wb") as f:
        tomli_w.dump(data, f)


def load_or_default_config(config_dir: Optional[Path] = None) -> IndexConfig:
    """Load existing config, or defaults when there is no file. Never writes."""
    config_dir = config_dir or get_config_dir()
    if (config_dir / CONFIG_FILENAME).exists():
        return load_config(config_dir)
    return apply_env_overrides(IndexConfig(path=config_dir))
