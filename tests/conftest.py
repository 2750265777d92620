"""
Shared pytest fixtures for postindex tests.

Provides small post collections and keeps the shared memo cache from
leaking results between tests.
"""

import pytest

from postindex.index import IndexStore
from postindex.memo import clear_memo_cache
from postindex.types import Post


@pytest.fixture(autouse=True)
def fresh_memo_cache():
    """Every test starts and ends with an empty shared memo cache."""
    clear_memo_cache()
    yield
    clear_memo_cache()


@pytest.fixture
def three_posts():
    """p1 < p2 < p3 by date, so newest first is p3, p2, p1."""
    return {
        "p1": Post(id="p1", title="First", author="a", created_at="2024/1/1",
                   emoji="🌱", tags=["python", "test"]),
        "p2": Post(id="p2", title="Second", author="a", created_at="2024/1/15",
                   emoji="🌿", tags="react, TEST"),
        "p3": Post(id="p3", title="Third", author="b", created_at="2024/2/1",
                   emoji="🌳", tags=["React.js"]),
    }


@pytest.fixture
def mixed_posts(three_posts):
    """three_posts plus an ill-formed post, a malformed record and a bad date."""
    posts = dict(three_posts)
    posts["draft"] = Post(id="draft", title="", created_at="2024/3/1", tags=["python", "draft"])
    posts["broken"] = None
    posts["undated"] = Post(id="undated", title="Undated", created_at="someday", tags="misc")
    return posts


@pytest.fixture
def store():
    return IndexStore()
