"""
Tests for listing filters and sort modes.
"""

import pytest

from core.models import ProjectedItem
from core.services.projection_service import ALL_CATEGORIES, ProjectionService
from core.services.query_service import (
    DEFAULT_SORT_MODE,
    PUBLIC_EXCLUDED_STATUSES,
    SORT_HEAT,
    SORT_NAME_ASC,
    SORT_NAME_DESC,
    SORT_TIME_ASC,
    SORT_TIME_DESC,
    QueryOptions,
    QueryService,
    parse_sort_mode,
)


def make_item(item_id, name, uploaded_at="2024/01/01", heat=0, category="A", status="on"):
    return ProjectedItem(
        id=item_id,
        name=name,
        category=category,
        uploaded_at=uploaded_at,
        heat=heat,
        cover_url="",
        shots=(),
        group_description="",
        group_updated_at="",
        status=status,
    )


@pytest.fixture
def items(document):
    return ProjectionService().flatten(document)


class TestFilters:
    """Test category, text and status filters."""

    def test_category_exact_match(self, items):
        """Test the category filter keeps only that category."""
        result = QueryService().filter(items, QueryOptions(category="Rings"))
        assert [i.id for i in result] == ["r1", "r2"]

    def test_all_categories_sentinel(self, items):
        """Test the sentinel and None disable the category filter."""
        service = QueryService()
        assert len(service.filter(items, QueryOptions(category=ALL_CATEGORIES))) == 5
        assert len(service.filter(items, QueryOptions(category=None))) == 5

    def test_text_is_case_insensitive_on_name(self, items):
        """Test the text filter matches name substrings ignoring case."""
        result = QueryService().filter(items, QueryOptions(search_text="  EARRINGS "))
        assert [i.id for i in result] == ["e1", "e2"]

    def test_text_ignores_ids_by_default(self, items):
        """Test ids only match when asked to."""
        service = QueryService()
        assert service.filter(items, QueryOptions(search_text="r1")) == []
        matched = service.filter(items, QueryOptions(search_text="r1", search_ids=True))
        assert [i.id for i in matched] == ["r1"]

    def test_public_listing_hides_off(self, items):
        """Test public listings exclude off but keep sold-out."""
        options = QueryOptions(exclude_statuses=PUBLIC_EXCLUDED_STATUSES)
        result = QueryService().filter(items, options)
        ids = [i.id for i in result]
        assert "n1" not in ids
        assert "r2" in ids


class TestSort:
    """Test sort modes and their tie-breaks."""

    def test_time_desc_ties_break_by_name(self):
        """Test equal dates fall back to name ascending."""
        items = [make_item("1", "b"), make_item("2", "a")]
        result = QueryService().sort(items, SORT_TIME_DESC)
        assert [i.name for i in result] == ["a", "b"]

    def test_time_modes(self):
        """Test time modes order by parsed date."""
        items = [
            make_item("1", "old", "2023/01/01"),
            make_item("2", "new", "2024/06/01"),
            make_item("3", "junk", "someday"),
        ]
        service = QueryService()
        assert [i.name for i in service.sort(items, SORT_TIME_DESC)] == ["new", "old", "junk"]
        assert [i.name for i in service.sort(items, SORT_TIME_ASC)] == ["junk", "old", "new"]

    def test_name_modes(self):
        """Test name modes compare case-insensitively."""
        items = [make_item("1", "banana"), make_item("2", "Apple"), make_item("3", "cherry")]
        service = QueryService()
        assert [i.name for i in service.sort(items, SORT_NAME_ASC)] == [
            "Apple",
            "banana",
            "cherry",
        ]
        assert [i.name for i in service.sort(items, SORT_NAME_DESC)] == [
            "cherry",
            "banana",
            "Apple",
        ]

    def test_heat_desc_ties_by_name(self):
        """Test heat sorts descending with name ascending ties."""
        items = [
            make_item("1", "z", heat=3),
            make_item("2", "b", heat=9),
            make_item("3", "a", heat=3),
        ]
        result = QueryService().sort(items, SORT_HEAT)
        assert [i.name for i in result] == ["b", "a", "z"]

    def test_query_does_not_mutate_input(self):
        """Test the input list keeps its order."""
        items = [make_item("1", "b"), make_item("2", "a")]
        QueryService().query(items, QueryOptions(sort_mode=SORT_NAME_ASC))
        assert [i.name for i in items] == ["b", "a"]

    def test_unknown_mode_falls_back(self):
        """Test unknown sort modes use the default."""
        assert parse_sort_mode("sideways") == DEFAULT_SORT_MODE
        assert parse_sort_mode(None) == DEFAULT_SORT_MODE
        assert parse_sort_mode(SORT_HEAT) == SORT_HEAT

    def test_full_query(self, items):
        """Test filter and sort compose for a public listing."""
        options = QueryOptions(
            category=ALL_CATEGORIES,
            exclude_statuses=PUBLIC_EXCLUDED_STATUSES,
            sort_mode=SORT_HEAT,
        )
        result = QueryService().query(items, options)
        assert [i.id for i in result] == ["r2", "r1", "e1", "e2"]


class TestChineseCollation:
    """Test names order by pinyin, as a zh-CN collator does."""

    def test_han_names_by_pinyin(self):
        """Test Han names sort by reading, not code point."""
        items = [make_item("1", "茶"), make_item("2", "吧"), make_item("3", "啊")]
        service = QueryService()
        assert [i.name for i in service.sort(items, SORT_NAME_ASC)] == ["啊", "吧", "茶"]
        assert [i.name for i in service.sort(items, SORT_NAME_DESC)] == ["茶", "吧", "啊"]

    def test_date_ties_break_by_pinyin(self):
        """Test equal dates fall back to pinyin name order."""
        items = [make_item("1", "吧"), make_item("2", "啊")]
        result = QueryService().sort(items, SORT_TIME_DESC)
        assert [i.name for i in result] == ["啊", "吧"]

    def test_latin_before_han_and_lowercase_first(self):
        """Test Latin precedes Han and lowercase precedes uppercase."""
        items = [make_item("1", "戒指"), make_item("2", "A"), make_item("3", "a")]
        result = QueryService().sort(items, SORT_NAME_ASC)
        assert [i.name for i in result] == ["a", "A", "戒指"]
