"""Tests for page slicing of ranked results."""
import pytest

from src.data.models import RankedResult, VendorRecord
from src.utils.pagination import paginate


def make_results(n):
    return [RankedResult(vendor=VendorRecord(id=f"v{i:03d}", display_name=f"Vendor {i}")) for i in range(n)]


def test_empty_input_is_one_empty_page():
    envelope = paginate([], page=1, page_size=20)

    assert envelope.items == []
    assert envelope.total_count == 0
    assert envelope.total_pages == 1


def test_page_past_the_end_is_empty_with_real_totals():
    """page=3, limit=10 against 5 results."""
    envelope = paginate(make_results(5), page=3, page_size=10)

    assert envelope.items == []
    assert envelope.total_count == 5
    assert envelope.total_pages == 1
    assert envelope.page == 3
    assert envelope.page_size == 10


def test_last_page_is_partial():
    results = make_results(25)

    envelope = paginate(results, page=3, page_size=10)

    assert envelope.items == results[20:]
    assert envelope.total_pages == 3


@pytest.mark.parametrize("total, page_size, expected_pages", [(1, 1, 1), (10, 10, 1), (11, 10, 2), (100, 7, 15)])
def test_total_pages_rounds_up(total, page_size, expected_pages):
    assert paginate(make_results(total), page=1, page_size=page_size).total_pages == expected_pages


@pytest.mark.parametrize("total, page_size", [(0, 5), (1, 5), (23, 5), (25, 5), (7, 100), (50, 1)])
def test_pages_reassemble_full_list(total, page_size):
    results = make_results(total)
    total_pages = paginate(results, page=1, page_size=page_size).total_pages

    pages = [paginate(results, page=p, page_size=page_size).items for p in range(1, total_pages + 1)]
    reassembled = [item for page in pages for item in page]

    assert reassembled == results
    assert len({r.vendor.id for r in reassembled}) == total


def test_items_are_a_copy():
    results = make_results(3)

    envelope = paginate(results, page=1, page_size=10)
    envelope.items.clear()

    assert len(results) == 3
