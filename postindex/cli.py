"""
CLI interface for the post index.

Usage:
    postindex posts --neighbors
    postindex tags
    postindex tag React.js
    postindex neighbors my-post
    postindex pages --manifest dist/tag-pages.json
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Optional

import typer
from typing_extensions import Annotated

from .config import (
    CONFIG_FILENAME,
    IndexConfig,
    get_config_dir,
    load_or_default_config,
    save_config,
)
from .errors import log_exception
from .frontmatter import load_posts
from .index import IndexStore
from .logging_config import configure_quiet_mode, enable_debug_mode
from .memo import default_cache
from .navigation import is_valid_id
from .tags import is_valid_tag, normalize_tag, tag_url
from .types import Neighbors, post_field


# Configure quiet mode by default
# Set POSTINDEX_VERBOSE=1 to enable debug mode via environment
if os.environ.get("POSTINDEX_VERBOSE") == "1":
    enable_debug_mode()
else:
    configure_quiet_mode(quiet=True)


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        print(f"postindex {version('postindex')}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


# Global state for CLI options
_json_output = False
_posts_override: Optional[Path] = None
_config_override: Optional[Path] = None


def _json_callback(value: bool):
    global _json_output
    _json_output = value


def _posts_callback(value: Optional[Path]):
    global _posts_override
    _posts_override = value


def _config_callback(value: Optional[Path]):
    global _config_override
    _config_override = value


app = typer.Typer(
    name="postindex",
    help="Index blog posts by tag and date.",
    no_args_is_help=True,
    rich_markup_mode=None,
)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    output_json: Annotated[bool, typer.Option(
        "--json", "-j",
        help="Output as JSON",
        callback=_json_callback,
        is_eager=True,
    )] = False,
    posts: Annotated[Optional[Path], typer.Option(
        "--posts", "-p",
        envvar="POSTINDEX_POSTS_DIR",
        help="Directory holding the post files",
        callback=_posts_callback,
        is_eager=True,
    )] = None,
    config: Annotated[Optional[Path], typer.Option(
        "--config", "-c",
        envvar="POSTINDEX_CONFIG_DIR",
        help="Directory holding postindex.toml",
        callback=_config_callback,
        is_eager=True,
    )] = None,
    version: Annotated[Optional[bool], typer.Option(
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
):
    """Index blog posts by tag and date."""


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------

def _get_config() -> IndexConfig:
    config_dir = _config_override or get_config_dir()
    try:
        config = load_or_default_config(config_dir)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    if _posts_override is not None:
        config.posts_dir = _posts_override
    return config


def _load() -> tuple[IndexConfig, dict[str, Any], IndexStore]:
    """Load the snapshot from disk and bring a store up to date with it."""
    config = _get_config()
    default_cache.resize(config.cache_size)
    snapshot = load_posts(config.resolved_posts_dir(), config.pattern)
    store = IndexStore(aliases=config.tag_aliases())
    store.refresh_if_needed(snapshot)
    return config, snapshot, store


# -----------------------------------------------------------------------------
# Output Formatting
# -----------------------------------------------------------------------------

def _post_dict(post_id: str, post: Any) -> dict:
    return {
        "id": post_id,
        "title": post_field(post, "title") or "",
        "author": post_field(post, "author") or "",
        "created_at": post_field(post, "created_at") or "",
        "emoji": post_field(post, "emoji") or "",
    }


def _post_line(post_id: str, post: Any) -> str:
    created = post_field(post, "created_at") or "-"
    title = post_field(post, "title") or "Untitled"
    return f"{post_id}  {created}  {title}"


def _emit(data: Any, lines: list[str]) -> None:
    if _json_output:
        typer.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return
    for line in lines:
        typer.echo(line)


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

@app.command("posts")
def list_posts(
    neighbors: Annotated[bool, typer.Option(
        "--neighbors", "-n",
        help="Show previous (newer) and next (older) post ids"
    )] = False,
):
    """List posts, newest first."""
    _, snapshot, store = _load()
    entries = store.get_sorted_fast(snapshot)

    data = []
    lines = []
    for post_id, post in entries:
        item = _post_dict(post_id, post)
        line = _post_line(post_id, post)
        if neighbors:
            nav = store.get_neighbors_fast(post_id)
            item.update(nav.to_dict())
            prev_id = nav.previous.id if nav.previous else "-"
            next_id = nav.next.id if nav.next else "-"
            line = f"{line}  [prev: {prev_id}, next: {next_id}]"
        data.append(item)
        lines.append(line)
    _emit(data, lines)


@app.command("tags")
def list_tags():
    """List every tag in use, sorted."""
    config, _, store = _load()
    tags = store.get_all_tags_fast()
    _emit(
        [{"tag": t, "url": tag_url(t, config.tag_url_prefix)} for t in tags],
        list(tags),
    )


@app.command("tag")
def posts_for_tag(
    tag: Annotated[str, typer.Argument(help="Tag to filter by (any spelling)")],
):
    """List posts carrying a tag, newest first."""
    if not is_valid_tag(tag):
        typer.echo(f"Error: not a usable tag: {tag!r}", err=True)
        raise typer.Exit(1)

    _, snapshot, store = _load()
    matched = store.get_by_tag_fast(tag, snapshot)
    entries = store.get_sorted_fast(matched)
    _emit(
        {
            "tag": normalize_tag(tag),
            "count": len(entries),
            "posts": [_post_dict(post_id, post) for post_id, post in entries],
        },
        [_post_line(post_id, post) for post_id, post in entries],
    )


def _neighbor_line(label: str, ref) -> str:
    if ref is None:
        return f"{label}: -"
    return f"{label}: {ref.id}  {ref.title}"


@app.command("neighbors")
def show_neighbors(
    post_id: Annotated[str, typer.Argument(help="Post id (file name without extension)")],
):
    """Show the newer (previous) and older (next) post."""
    _, snapshot, store = _load()
    if not is_valid_id(post_id, snapshot):
        typer.echo(f"Error: unknown post: {post_id}", err=True)
        raise typer.Exit(1)

    nav: Neighbors = store.get_neighbors_fast(post_id)
    _emit(
        {"id": post_id, **nav.to_dict()},
        [_neighbor_line("previous", nav.previous), _neighbor_line("next", nav.next)],
    )


@app.command("pages")
def list_pages(
    manifest: Annotated[Optional[Path], typer.Option(
        "--manifest", "-m",
        help="Also write the page list as JSON to this file"
    )] = None,
):
    """List the tag page URLs a static build must generate."""
    config, _, store = _load()
    pages = [
        {"tag": t, "url": tag_url(t, config.tag_url_prefix)}
        for t in store.get_all_tags_fast()
    ]
    if manifest is not None:
        manifest.parent.mkdir(parents=True, exist_ok=True)
        manifest.write_text(json.dumps(pages, indent=2, ensure_ascii=False) + "\n",
                            encoding="utf-8")
    _emit(pages, [p["url"] for p in pages])


@app.command("init")
def init_config(
    force: Annotated[bool, typer.Option(
        "--force", "-f",
        help="Overwrite an existing postindex.toml"
    )] = False,
):
    """Write a default postindex.toml to the config directory."""
    config_dir = _config_override or get_config_dir()
    config = IndexConfig(path=config_dir)
    if _posts_override is not None:
        config.posts_dir = _posts_override
    if config.exists() and not force:
        typer.echo(f"Error: {config.config_path} already exists (use --force)", err=True)
        raise typer.Exit(1)
    save_config(config)
    typer.echo(f"Wrote {config_dir / CONFIG_FILENAME}")


# -----------------------------------------------------------------------------

def main():
    try:
        app()
    except SystemExit:
        raise  # Let typer handle exit codes
    except KeyboardInterrupt:
        raise SystemExit(130)  # Standard exit code for Ctrl+C
    except Exception as e:
        command = " ".join(["postindex", *sys.argv[1:]])
        log_path = log_exception(e, context=command, config_dir=_config_override)
        typer.echo(f"Error: {e} (details in {log_path})", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
