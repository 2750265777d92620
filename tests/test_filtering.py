"""Tests for filter_by_tag and all_tags."""

import pytest

from postindex.filtering import all_tags, filter_by_tag, post_tags
from postindex.tags import NO_ALIASES, TagAliases
from postindex.types import Post


class TestFilterByTag:
    def test_matches_canonical_tag(self, three_posts):
        assert set(filter_by_tag(three_posts, "python")) == {"p1"}

    def test_case_insensitive(self, three_posts):
        upper = filter_by_tag(three_posts, "TEST")
        lower = filter_by_tag(three_posts, "test")
        assert upper == lower
        assert set(lower) == {"p1", "p2"}

    def test_result_is_subset_with_same_objects(self, three_posts):
        result = filter_by_tag(three_posts, "test")
        for post_id, post in result.items():
            assert three_posts[post_id] is post

    def test_result_is_new_dict(self, three_posts):
        result = filter_by_tag(three_posts, "test")
        result["extra"] = None
        assert "extra" not in three_posts

    def test_react_js_matches_react(self, three_posts):
        assert set(filter_by_tag(three_posts, "React.js")) == {"p2", "p3"}

    def test_react_matches_react_js(self, three_posts):
        assert set(filter_by_tag(three_posts, "react")) == {"p2", "p3"}

    def test_no_aliases_is_exact(self, three_posts):
        assert set(filter_by_tag(three_posts, "react", aliases=NO_ALIASES)) == {"p2"}
        assert set(filter_by_tag(three_posts, "React.js", aliases=NO_ALIASES)) == {"p3"}

    def test_custom_aliases(self):
        posts = {
            "a": Post(id="a", title="A", created_at="2024/1/1", tags="js"),
            "b": Post(id="b", title="B", created_at="2024/1/2", tags="JavaScript"),
            "c": Post(id="c", title="C", created_at="2024/1/3", tags="python"),
        }
        aliases = TagAliases([("js", "javascript")])
        assert set(filter_by_tag(posts, "javascript", aliases=aliases)) == {"a", "b"}

    def test_no_match(self, three_posts):
        assert filter_by_tag(three_posts, "haskell") == {}

    def test_empty_collection(self):
        assert filter_by_tag({}, "anything") == {}

    @pytest.mark.parametrize("tag", ["", "   ", "!!!", None, 42])
    def test_unusable_tag(self, three_posts, tag):
        assert filter_by_tag(three_posts, tag) == {}

    @pytest.mark.parametrize("collection", [None, [], "posts", 42])
    def test_invalid_collection(self, collection):
        assert filter_by_tag(collection, "python") == {}

    def test_skips_malformed_records(self, mixed_posts):
        assert set(filter_by_tag(mixed_posts, "python")) == {"p1", "draft"}

    def test_includes_ill_formed_posts(self, mixed_posts):
        assert set(filter_by_tag(mixed_posts, "draft")) == {"draft"}

    def test_frontmatter_mappings(self):
        posts = {
            "x": {"title": "X", "created_at": "2024/1/1", "hashtags": ["Go"]},
            "y": {"title": "Y", "created_at": "2024/1/2", "tags": "go, rust"},
            "z": {"title": "Z", "created_at": "2024/1/3"},
        }
        assert set(filter_by_tag(posts, "go")) == {"x", "y"}

    def test_preserves_collection_order(self):
        posts = {
            k: Post(id=k, title=k, created_at="2024/1/1", tags="t")
            for k in ["c", "a", "b"]
        }
        assert list(filter_by_tag(posts, "t")) == ["c", "a", "b"]

    def test_lossy_collisions_match(self):
        posts = {"n": Post(id="n", title="N", created_at="2024/1/1", tags=["node-js"])}
        assert set(filter_by_tag(posts, "NodeJS")) == {"n"}


class TestAllTags:
    def test_sorted_unique(self, three_posts):
        assert all_tags(three_posts) == ["python", "react", "reactjs", "test"]

    def test_equals_sorted_copy_without_duplicates(self, mixed_posts):
        tags = all_tags(mixed_posts)
        assert tags == sorted(tags)
        assert len(tags) == len(set(tags))

    def test_includes_ill_formed_posts(self, mixed_posts):
        tags = all_tags(mixed_posts)
        assert "draft" in tags
        assert "misc" in tags

    def test_empty(self):
        assert all_tags({}) == []

    @pytest.mark.parametrize("collection", [None, [], "posts"])
    def test_invalid(self, collection):
        assert all_tags(collection) == []

    def test_memoized_by_id_set(self, three_posts):
        reordered = {k: three_posts[k] for k in ["p3", "p1", "p2"]}
        assert all_tags(three_posts) is all_tags(reordered)

    def test_japanese_tags(self):
        posts = {"j": Post(id="j", title="J", created_at="2024/1/1", tags=["日記", "ブログ"])}
        assert all_tags(posts) == sorted(["日記", "ブログ"])


class TestPostTags:
    def test_post(self):
        assert post_tags(Post(id="a", tags="A, b")) == ["a", "b"]

    def test_mapping_prefers_hashtags(self):
        assert post_tags({"hashtags": ["x"], "tags": ["y"]}) == ["x"]

    def test_malformed(self):
        assert post_tags(None) == []
        assert post_tags("not a post") == []
