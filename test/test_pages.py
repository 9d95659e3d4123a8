import unittest

from bindings_partition.pages import (
    BindingsPage,
    bin_weight,
    lightest_bin,
    page_weight,
    sort_pages,
)


def _page(weight: int, page_id: str) -> BindingsPage:
    return BindingsPage(bindings=tuple({"?x": idx} for idx in range(weight)), page_id=page_id)


class PageWeightTests(unittest.TestCase):
    def test_weight_is_tuple_count(self) -> None:
        self.assertEqual(page_weight(_page(4, "a")), 4)
        self.assertEqual(page_weight([("s", "p", "o"), ("s2", "p", "o")]), 2)
        self.assertEqual(page_weight([]), 0)

    def test_bindings_page_is_immutable_sequence(self) -> None:
        page = BindingsPage(bindings=[1, 2, 3], page_id="p0")
        self.assertIsInstance(page.bindings, tuple)
        self.assertEqual(page.size, 3)
        self.assertEqual(list(page), [1, 2, 3])
        self.assertEqual(page[1], 2)
        with self.assertRaises(AttributeError):
            page.page_id = "other"  # type: ignore[misc]

    def test_bin_weight_sums_pages(self) -> None:
        self.assertEqual(bin_weight([_page(3, "a"), _page(2, "b"), _page(0, "c")]), 5)
        self.assertEqual(bin_weight([]), 0)


class OrderingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.pages = [_page(2, "a"), _page(5, "b"), _page(2, "c"), _page(7, "d")]

    def test_sort_descending_is_stable(self) -> None:
        ordered = sort_pages(self.pages, descending=True)
        self.assertEqual([p.page_id for p in ordered], ["d", "b", "a", "c"])

    def test_sort_ascending_is_stable(self) -> None:
        ordered = sort_pages(self.pages)
        self.assertEqual([p.page_id for p in ordered], ["a", "c", "b", "d"])

    def test_sort_returns_new_list(self) -> None:
        sort_pages(self.pages, descending=True)
        self.assertEqual([p.page_id for p in self.pages], ["a", "b", "c", "d"])

    def test_lightest_bin_prefers_earliest_on_tie(self) -> None:
        self.assertEqual(lightest_bin([3, 1, 1]), 1)
        self.assertEqual(lightest_bin([0, 0, 0]), 0)

    def test_bin_selection_requires_loads(self) -> None:
        with self.assertRaises(ValueError):
            lightest_bin([])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
