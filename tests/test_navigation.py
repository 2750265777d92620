"""Tests for date ordering and previous/next navigation."""

from datetime import datetime, timezone

import pytest

from postindex.memo import default_cache
from postindex.navigation import (
    adjacent_of,
    all_with_neighbors,
    is_valid_id,
    is_well_formed,
    parse_created_at,
    sort_by_date,
)
from postindex.types import EMPTY_NEIGHBORS, NeighborRef, Neighbors, Post


def _ids(entries):
    return [post_id for post_id, _ in entries]


# ---------------------------------------------------------------------------
# parse_created_at
# ---------------------------------------------------------------------------


class TestParseCreatedAt:
    def test_slash_format(self):
        assert parse_created_at("2024/1/5") == datetime(2024, 1, 5, tzinfo=timezone.utc)

    def test_slash_format_padded(self):
        assert parse_created_at("2024/01/05") == datetime(2024, 1, 5, tzinfo=timezone.utc)

    def test_slash_with_time(self):
        assert parse_created_at("2024/1/5 13:30") == datetime(2024, 1, 5, 13, 30, tzinfo=timezone.utc)

    def test_iso_date(self):
        assert parse_created_at("2024-01-05") == datetime(2024, 1, 5, tzinfo=timezone.utc)

    def test_iso_with_offset(self):
        assert parse_created_at("2024-01-05T09:00:00+09:00") == datetime(2024, 1, 5, 0, 0, tzinfo=timezone.utc)

    def test_iso_with_z(self):
        assert parse_created_at("2024-01-05T00:00:00Z") == datetime(2024, 1, 5, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["someday", "2024/13/1", "2024/2/30", "", "   ", None, 20240105])
    def test_unparseable(self, value):
        assert parse_created_at(value) is None


class TestIsWellFormed:
    def test_well_formed(self):
        assert is_well_formed(Post(id="a", title="T", created_at="2024/1/1"))

    def test_blank_title(self):
        assert not is_well_formed(Post(id="a", title="  ", created_at="2024/1/1"))

    def test_missing_date(self):
        assert not is_well_formed(Post(id="a", title="T"))

    def test_unparseable_date_is_still_well_formed(self):
        assert is_well_formed(Post(id="a", title="T", created_at="someday"))

    def test_non_string_date(self):
        assert not is_well_formed({"title": "T", "created_at": 20240101})

    def test_malformed(self):
        assert not is_well_formed(None)


# ---------------------------------------------------------------------------
# sort_by_date
# ---------------------------------------------------------------------------


class TestSortByDate:
    def test_newest_first(self, three_posts):
        assert _ids(sort_by_date(three_posts)) == ["p3", "p2", "p1"]

    def test_pairs_hold_original_posts(self, three_posts):
        for post_id, post in sort_by_date(three_posts):
            assert three_posts[post_id] is post

    def test_excludes_ill_formed_and_malformed(self, mixed_posts):
        ids = _ids(sort_by_date(mixed_posts))
        assert "draft" not in ids
        assert "broken" not in ids

    def test_unparseable_dates_sort_last(self, mixed_posts):
        assert _ids(sort_by_date(mixed_posts)) == ["p3", "p2", "p1", "undated"]

    def test_unparseable_last_regardless_of_position(self):
        posts = {
            "bad": Post(id="bad", title="Bad", created_at="not a date"),
            "old": Post(id="old", title="Old", created_at="2000/1/1"),
            "new": Post(id="new", title="New", created_at="2030/1/1"),
        }
        assert _ids(sort_by_date(posts)) == ["new", "old", "bad"]

    def test_multiple_unparseable_keep_input_order(self):
        posts = {
            "x": Post(id="x", title="X", created_at="soon"),
            "a": Post(id="a", title="A", created_at="2024/1/1"),
            "y": Post(id="y", title="Y", created_at="later"),
        }
        assert _ids(sort_by_date(posts)) == ["a", "x", "y"]

    def test_mixed_date_formats(self):
        posts = {
            "iso": Post(id="iso", title="I", created_at="2024-03-01"),
            "slash": Post(id="slash", title="S", created_at="2024/2/1"),
            "time": Post(id="time", title="T", created_at="2024/3/1 12:00"),
        }
        assert _ids(sort_by_date(posts)) == ["time", "iso", "slash"]

    def test_empty(self):
        assert sort_by_date({}) == []

    @pytest.mark.parametrize("collection", [None, [], "posts"])
    def test_invalid(self, collection):
        assert sort_by_date(collection) == []

    def test_memoized_by_id_set(self, three_posts):
        reordered = {k: three_posts[k] for k in ["p2", "p3", "p1"]}
        first = sort_by_date(three_posts)
        assert sort_by_date(reordered) is first

    def test_clear_recomputes(self, three_posts):
        first = sort_by_date(three_posts)
        default_cache.clear()
        second = sort_by_date(three_posts)
        assert second == first
        assert second is not first


# ---------------------------------------------------------------------------
# adjacent_of
# ---------------------------------------------------------------------------


class TestAdjacentOf:
    def test_middle_post(self, three_posts):
        nav = adjacent_of("p2", three_posts)
        assert nav.previous == NeighborRef(id="p3", title="Third")
        assert nav.next == NeighborRef(id="p1", title="First")

    def test_newest_has_no_previous(self, three_posts):
        nav = adjacent_of("p3", three_posts)
        assert nav.previous is None
        assert nav.next == NeighborRef(id="p2", title="Second")

    def test_oldest_has_no_next(self, three_posts):
        nav = adjacent_of("p1", three_posts)
        assert nav.previous == NeighborRef(id="p2", title="Second")
        assert nav.next is None

    def test_single_post_has_no_neighbors(self):
        posts = {"only": Post(id="only", title="Only", created_at="2024/1/1")}
        assert adjacent_of("only", posts).is_empty

    def test_unknown_id(self, three_posts):
        assert adjacent_of("missing", three_posts) == EMPTY_NEIGHBORS

    def test_ill_formed_id(self, mixed_posts):
        assert adjacent_of("draft", mixed_posts) == EMPTY_NEIGHBORS

    @pytest.mark.parametrize("post_id", ["", None, 3])
    def test_invalid_id(self, three_posts, post_id):
        assert adjacent_of(post_id, three_posts) == EMPTY_NEIGHBORS

    def test_invalid_collection(self):
        assert adjacent_of("p1", None) == EMPTY_NEIGHBORS
        assert adjacent_of("p1", {}) == EMPTY_NEIGHBORS

    def test_skips_ill_formed_neighbors(self, mixed_posts):
        # draft (2024/3/1) is ill-formed, so p3 stays the newest
        assert adjacent_of("p3", mixed_posts).previous is None
        assert adjacent_of("p1", mixed_posts).next == NeighborRef(id="undated", title="Undated")

    def test_memoized(self, three_posts):
        assert adjacent_of("p2", three_posts) is adjacent_of("p2", dict(three_posts))

    def test_to_dict_omits_missing_sides(self, three_posts):
        assert adjacent_of("p3", three_posts).to_dict() == {"next": {"id": "p2", "title": "Second"}}
        assert Neighbors().to_dict() == {}


# ---------------------------------------------------------------------------
# all_with_neighbors / is_valid_id
# ---------------------------------------------------------------------------


class TestAllWithNeighbors:
    def test_sorted_with_neighbors(self, three_posts):
        entries = all_with_neighbors(three_posts)
        assert [e.id for e in entries] == ["p3", "p2", "p1"]
        assert entries[0].previous is None
        assert entries[0].next.id == "p2"
        assert entries[1].previous.id == "p3"
        assert entries[1].next.id == "p1"
        assert entries[2].next is None

    def test_agrees_with_adjacent_of(self, mixed_posts):
        for entry in all_with_neighbors(mixed_posts):
            assert entry.neighbors == adjacent_of(entry.id, mixed_posts)

    def test_excludes_malformed(self, mixed_posts):
        ids = [e.id for e in all_with_neighbors(mixed_posts)]
        assert "draft" not in ids
        assert "broken" not in ids

    def test_carries_post(self, three_posts):
        entry = all_with_neighbors(three_posts)[0]
        assert entry.post is three_posts["p3"]

    def test_invalid(self):
        assert all_with_neighbors(None) == []
        assert all_with_neighbors({}) == []


class TestIsValidId:
    def test_existing(self, three_posts):
        assert is_valid_id("p1", three_posts)

    def test_missing(self, three_posts):
        assert not is_valid_id("nope", three_posts)

    def test_empty_title(self, mixed_posts):
        assert not is_valid_id("draft", mixed_posts)

    def test_malformed_record(self, mixed_posts):
        assert not is_valid_id("broken", mixed_posts)

    def test_invalid_inputs(self, three_posts):
        assert not is_valid_id("", three_posts)
        assert not is_valid_id(None, three_posts)
        assert not is_valid_id("p1", None)
