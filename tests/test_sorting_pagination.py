import unittest
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from app.core.config import settings
from app.schemas.pagination import PageRequest, SortSpec
from app.services.data_source import InMemoryDataSource, apply_filters, apply_sorting, search, search_paged
from app.services.filter_compiler import compile_filter_string
from app.services.filter_errors import SchemaError
from app.services.pagination import has_next_page, page_offset, to_page
from app.services.record_schema import FieldKind, RecordSchema
from app.services.sorting import build_ordering


@dataclass
class _Row:
    id: int
    name: str
    group: str = "x"
    note: Optional[str] = None


ROW_SCHEMA = RecordSchema.from_mapping(
    "Row",
    {"id": (FieldKind.NUMERIC, int), "name": FieldKind.STRING, "group": FieldKind.STRING, "note": FieldKind.STRING},
    nullable=["note"],
)


def _rows(*names: str) -> list:
    return [_Row(id=index, name=name) for index, name in enumerate(names)]


class SortApplierTests(unittest.TestCase):
    def test_ascending_and_descending(self):
        rows = _rows("z", "a", "m")
        ascending = apply_sorting(InMemoryDataSource(rows, ROW_SCHEMA), SortSpec(field="name", direction="ASC")).all()
        descending = apply_sorting(InMemoryDataSource(rows, ROW_SCHEMA), SortSpec(field="name", direction="desc")).all()
        self.assertEqual([r.name for r in ascending], ["a", "m", "z"])
        self.assertEqual([r.name for r in descending], ["z", "m", "a"])

    def test_unknown_field_keeps_original_order(self):
        rows = _rows("z", "a", "m")
        self.assertIsNone(build_ordering(SortSpec(field="nope"), ROW_SCHEMA))
        result = apply_sorting(InMemoryDataSource(rows, ROW_SCHEMA), SortSpec(field="nope", direction="DESC")).all()
        self.assertEqual([r.name for r in result], ["z", "a", "m"])

    def test_blank_field_keeps_original_order(self):
        rows = _rows("b", "a")
        self.assertEqual([r.name for r in search(InMemoryDataSource(rows, ROW_SCHEMA), None, SortSpec())], ["b", "a"])

    def test_anything_but_desc_sorts_ascending(self):
        self.assertFalse(SortSpec(field="name", direction="down").descending)
        self.assertTrue(SortSpec(field="name", direction="Desc").descending)

    def test_field_name_is_case_insensitive(self):
        ordering = build_ordering(SortSpec(field="NAME"), ROW_SCHEMA)
        self.assertEqual(ordering.field.name, "name")

    def test_ties_keep_source_order(self):
        rows = [_Row(id=1, name="b", group="g"), _Row(id=2, name="a", group="g"), _Row(id=3, name="c", group="f")]
        ascending = search(InMemoryDataSource(rows, ROW_SCHEMA), None, SortSpec(field="group"))
        descending = search(InMemoryDataSource(rows, ROW_SCHEMA), None, SortSpec(field="group", direction="DESC"))
        self.assertEqual([r.id for r in ascending], [3, 1, 2])
        self.assertEqual([r.id for r in descending], [1, 2, 3])

    def test_missing_values_sort_first_ascending(self):
        rows = [_Row(id=1, name="a", note="n"), _Row(id=2, name="b", note=None)]
        result = search(InMemoryDataSource(rows, ROW_SCHEMA), None, SortSpec(field="note"))
        self.assertEqual([r.id for r in result], [2, 1])


class PaginatorTests(unittest.TestCase):
    def setUp(self):
        self.source = InMemoryDataSource([_Row(id=i, name=f"row-{i:02d}") for i in range(1, 26)], ROW_SCHEMA)

    def test_first_page(self):
        page = to_page(self.source, 1, 10)
        self.assertEqual(len(page.items), 10)
        self.assertEqual(page.total, 25)
        self.assertTrue(page.has_next_page)
        self.assertEqual(page.items[0].id, 1)

    def test_last_partial_page(self):
        page = to_page(self.source, 3, 10)
        self.assertEqual(len(page.items), 5)
        self.assertEqual(page.total, 25)
        self.assertFalse(page.has_next_page)
        self.assertEqual([r.id for r in page.items], [21, 22, 23, 24, 25])

    def test_page_past_the_end_is_empty(self):
        page = to_page(self.source, 4, 10)
        self.assertEqual(page.items, [])
        self.assertEqual(page.total, 25)
        self.assertFalse(page.has_next_page)

    def test_exact_multiple(self):
        self.assertFalse(has_next_page(2, 10, 20))
        self.assertTrue(has_next_page(1, 10, 20))
        self.assertFalse(has_next_page(1, 10, 0))
        self.assertEqual(page_offset(3, 10), 20)

    def test_non_positive_page_size_is_an_empty_page(self):
        for size in (0, -5):
            page = to_page(self.source, 1, size)
            self.assertEqual(page.items, [])
            self.assertEqual(page.total, 25)
            self.assertFalse(page.has_next_page)
        self.assertFalse(has_next_page(1, 0, 20))

    def test_total_counts_filtered_rows_before_slicing(self):
        page = search_paged(self.source, "id gt 20", SortSpec(field="id", direction="DESC"), 1, 2)
        self.assertEqual(page.total, 5)
        self.assertEqual([r.id for r in page.items], [25, 24])
        self.assertTrue(page.has_next_page)


class InMemoryDataSourceTests(unittest.TestCase):
    def test_where_and_order_by_are_deferred_and_immutable(self):
        rows = _rows("b", "a", "c")
        base = InMemoryDataSource(rows, ROW_SCHEMA)
        filtered = apply_filters(base, "name ne 'c'")
        self.assertIsNot(filtered, base)
        self.assertEqual(base.count(), 3)
        self.assertEqual(filtered.count(), 2)

        rows.append(_Row(id=9, name="aa"))
        self.assertEqual(filtered.count(), 3)

    def test_blank_or_fully_dropped_filter_returns_same_source(self):
        base = InMemoryDataSource(_rows("a"), ROW_SCHEMA)
        self.assertIs(apply_filters(base, None), base)
        self.assertIs(apply_filters(base, "  "), base)
        self.assertIs(apply_filters(base, "total nonsense"), base)

    def test_compile_errors_propagate(self):
        base = InMemoryDataSource(_rows("a"), ROW_SCHEMA)
        with self.assertRaises(SchemaError):
            apply_filters(base, "missing eq 1")

    def test_stacked_filters_all_apply(self):
        base = InMemoryDataSource(_rows("a", "ab", "b"), ROW_SCHEMA)
        narrowed = base.where(compile_filter_string("name startswith 'a'", ROW_SCHEMA)).where(
            compile_filter_string("name endswith 'b'", ROW_SCHEMA)
        )
        self.assertEqual([r.name for r in narrowed.all()], ["ab"])


class PageRequestTests(unittest.TestCase):
    def test_defaults(self):
        request = PageRequest()
        self.assertEqual(request.page, 1)
        self.assertEqual(request.page_size, settings.SEARCH_DEFAULT_PAGE_SIZE)
        self.assertEqual(request.sort, SortSpec(field="", direction="ASC"))

    def test_rejects_non_positive_values(self):
        for kwargs in ({"page": 0}, {"page_size": 0}, {"page_size": -5}, {"page_size": settings.SEARCH_MAX_PAGE_SIZE + 1}):
            with self.assertRaises(ValidationError):
                PageRequest(**kwargs)


if __name__ == "__main__":
    unittest.main()
