"""Unit tests for strongroom.services.query: coercion, predicates, metadata, and applying to a select."""

import unittest
from datetime import datetime, timedelta, timezone

from strongroom.core.errors import InvalidQueryError
from strongroom.models import User, UserStatus
from strongroom.services.query import (
    MAX_LIMIT,
    MAX_PAGE,
    build_meta,
    compose_query,
    fetch_page,
    normalize_limit,
    normalize_page,
    where_clause,
)
from strongroom.services.users import USER_FILTER_FIELDS, USER_SEARCH_FIELDS, user_lifecycle
from tests.support import sqlite_session_factory


class TestPageAndLimitCoercion(unittest.TestCase):
    """Page and limit are always corrected into range, never rejected."""

    def test_defaults(self) -> None:
        d = compose_query({})
        self.assertEqual(d.page, 1)
        self.assertEqual(d.take, 10)
        self.assertEqual(d.skip, 0)

    def test_negative_page_and_huge_limit(self) -> None:
        d = compose_query({"page": -5, "limit": 9999})
        self.assertEqual(d.page, 1)
        self.assertEqual(d.take, 100)
        self.assertEqual(d.skip, 0)

    def test_zero_and_negative_limit_clamp_to_one(self) -> None:
        self.assertEqual(normalize_limit(0), 1)
        self.assertEqual(normalize_limit(-20), 1)

    def test_string_inputs_are_parsed(self) -> None:
        d = compose_query({"page": "3", "limit": " 25 "})
        self.assertEqual(d.page, 3)
        self.assertEqual(d.take, 25)
        self.assertEqual(d.skip, 50)

    def test_malformed_inputs_fall_back_to_defaults(self) -> None:
        self.assertEqual(normalize_page("abc"), 1)
        self.assertEqual(normalize_page("2.5"), 1)
        self.assertEqual(normalize_limit("lots"), 10)
        self.assertEqual(normalize_limit(True), 10)

    def test_bounds_hold_for_a_range_of_inputs(self) -> None:
        for page in (-1000, -1, 0, 1, 7, 10**9):
            for limit in (-1000, -1, 0, 1, 50, 100, 101, 10**9, None, "x"):
                d = compose_query({"page": page, "limit": limit})
                self.assertGreaterEqual(d.take, 1)
                self.assertLessEqual(d.take, MAX_LIMIT)
                self.assertGreaterEqual(d.skip, 0)
                self.assertEqual(d.skip, (d.page - 1) * d.take)

    def test_huge_page_keeps_offset_in_64_bit_range(self) -> None:
        for page in (10**20, "99999999999999999999", MAX_PAGE + 1):
            d = compose_query({"page": page, "limit": MAX_LIMIT})
            self.assertEqual(d.page, MAX_PAGE)
            self.assertLessEqual(d.skip, 2**63 - 1)


class TestSortAndSearch(unittest.TestCase):
    """Sort defaults to created_at desc; search expands only over given fields."""

    def test_default_sort(self) -> None:
        d = compose_query({})
        self.assertEqual(d.sort_field, "created_at")
        self.assertEqual(d.sort_direction, "desc")

    def test_explicit_sort_is_kept_verbatim(self) -> None:
        d = compose_query({"sort": "no_such_column", "order": "ASC"})
        self.assertEqual(d.sort_field, "no_such_column")
        self.assertEqual(d.sort_direction, "asc")

    def test_unknown_order_means_desc(self) -> None:
        self.assertEqual(compose_query({"order": "sideways"}).sort_direction, "desc")

    def test_search_without_fields_is_unfiltered(self) -> None:
        d = compose_query({"search": "alice"}, searchable_fields=())
        self.assertIsNone(d.search)
        self.assertTrue(d.is_unfiltered)

    def test_blank_search_is_unfiltered(self) -> None:
        d = compose_query({"search": "   "}, searchable_fields=("email",))
        self.assertTrue(d.is_unfiltered)

    def test_search_clause(self) -> None:
        d = compose_query({"search": " alice "}, searchable_fields=("email", "name"))
        self.assertEqual(d.search.term, "alice")
        self.assertEqual(d.search.fields, ("email", "name"))

    def test_unfiltered_where_is_true(self) -> None:
        clause = where_clause(User, compose_query({}))
        self.assertEqual(str(clause), "true")


class TestFilterAllowList(unittest.TestCase):
    """Only declared filter keys become predicates, converted to their declared type."""

    def test_unknown_keys_are_ignored(self) -> None:
        d = compose_query(
            {"password_hash": "x", "status": "active"},
            filterable_fields=USER_FILTER_FIELDS,
        )
        self.assertEqual(dict(d.filters), {"status": UserStatus.ACTIVE})

    def test_unconvertible_value_is_dropped(self) -> None:
        d = compose_query({"status": "DORMANT"}, filterable_fields=USER_FILTER_FIELDS)
        self.assertEqual(dict(d.filters), {})

    def test_reserved_keys_never_become_filters(self) -> None:
        d = compose_query({"page": "2"}, filterable_fields={"page": int})
        self.assertEqual(dict(d.filters), {})

    def test_date_range_parsing(self) -> None:
        d = compose_query({"start_date": "2024-01-01T00:00:00Z", "end_date": "not a date"})
        self.assertEqual(d.created_from, datetime(2024, 1, 1, tzinfo=timezone.utc))
        self.assertIsNone(d.created_to)


class TestBuildMeta(unittest.TestCase):
    """totalPages = ceil(total/limit); next/previous flags follow page position."""

    def test_last_page(self) -> None:
        meta = build_meta(page=3, limit=10, total=25)
        self.assertEqual(meta.total_pages, 3)
        self.assertFalse(meta.has_next_page)
        self.assertTrue(meta.has_previous_page)

    def test_first_page(self) -> None:
        meta = build_meta(page=1, limit=10, total=25)
        self.assertTrue(meta.has_next_page)
        self.assertFalse(meta.has_previous_page)

    def test_empty_result(self) -> None:
        meta = build_meta(page=1, limit=10, total=0)
        self.assertEqual(meta.total_pages, 0)
        self.assertFalse(meta.has_next_page)

    def test_page_past_the_end(self) -> None:
        meta = build_meta(page=9, limit=10, total=25)
        self.assertFalse(meta.has_next_page)
        self.assertTrue(meta.has_previous_page)

    def test_serializes_camel_case(self) -> None:
        dumped = build_meta(page=1, limit=10, total=5).model_dump(by_alias=True)
        self.assertEqual(
            set(dumped),
            {"total", "page", "limit", "totalPages", "hasNextPage", "hasPreviousPage"},
        )


class TestFetchPage(unittest.TestCase):
    """Descriptors applied to a real select over users."""

    def setUp(self) -> None:
        self.db = sqlite_session_factory()()
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        rows = [
            ("alice@example.com", "Alice", UserStatus.ACTIVE),
            ("bob@example.com", "Bob", UserStatus.SUSPENDED),
            ("carol@example.com", "Carol 100%", UserStatus.ACTIVE),
            ("dave@example.com", None, UserStatus.PENDING),
        ]
        for i, (email, name, status) in enumerate(rows):
            self.db.add(
                User(
                    email=email,
                    name=name,
                    password_hash="x",
                    status=status,
                    created_at=base + timedelta(days=i),
                )
            )
        self.db.commit()

    def tearDown(self) -> None:
        self.db.close()

    def _fetch(self, params: dict) -> tuple[list[User], int]:
        d = compose_query(
            params,
            searchable_fields=USER_SEARCH_FIELDS,
            filterable_fields=USER_FILTER_FIELDS,
        )
        return fetch_page(self.db, user_lifecycle.live_select(), User, d)

    def test_default_order_is_newest_first(self) -> None:
        users, total = self._fetch({})
        self.assertEqual(total, 4)
        self.assertEqual(users[0].email, "dave@example.com")

    def test_offset_and_limit(self) -> None:
        users, total = self._fetch({"page": 2, "limit": 3, "sort": "email", "order": "asc"})
        self.assertEqual(total, 4)
        self.assertEqual([u.email for u in users], ["dave@example.com"])

    def test_search_is_case_insensitive_over_fields(self) -> None:
        users, total = self._fetch({"search": "ALICE"})
        self.assertEqual(total, 1)
        self.assertEqual(users[0].email, "alice@example.com")

    def test_search_term_wildcards_are_literal(self) -> None:
        users, total = self._fetch({"search": "100%"})
        self.assertEqual(total, 1)
        self.assertEqual(users[0].name, "Carol 100%")
        _, total = self._fetch({"search": "%"})
        self.assertEqual(total, 1)

    def test_filter_is_conjunctive_with_search(self) -> None:
        _, total = self._fetch({"search": "example.com", "status": "ACTIVE"})
        self.assertEqual(total, 2)

    def test_camel_case_sort_field(self) -> None:
        users, _ = self._fetch({"sort": "createdAt", "order": "asc"})
        self.assertEqual(users[0].email, "alice@example.com")

    def test_unknown_sort_field_is_rejected_by_persistence(self) -> None:
        with self.assertRaises(InvalidQueryError):
            self._fetch({"sort": "nope"})

    def test_password_hash_is_not_sortable(self) -> None:
        for sort in ("password_hash", "passwordHash"):
            with self.assertRaises(InvalidQueryError):
                self._fetch({"sort": sort})

    def test_huge_page_is_empty(self) -> None:
        users, total = self._fetch({"page": "99999999999999999999", "limit": 100})
        self.assertEqual(users, [])
        self.assertEqual(total, 4)

    def test_date_range(self) -> None:
        _, total = self._fetch(
            {"start_date": "2024-01-02T00:00:00", "end_date": "2024-01-03T00:00:00"}
        )
        self.assertEqual(total, 2)


if __name__ == "__main__":
    unittest.main()
