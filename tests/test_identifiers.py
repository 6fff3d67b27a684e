import pytest

from catalog.exceptions import DataIntegrityError
from catalog.utils.identifiers import format_product_id, next_product_id, parse_product_sequence


def ids(*sequences):
    return [format_product_id(n) for n in sequences]


class TestNextProductId:
    def test_empty_store_starts_at_one(self):
        assert next_product_id([]) == "productid0001"

    def test_fills_first_gap(self):
        assert next_product_id(ids(1, 2, 4, 5)) == "productid0003"

    def test_appends_after_contiguous_run(self):
        assert next_product_id(ids(1, 2, 3)) == "productid0004"

    def test_reuses_freed_low_number(self):
        assert next_product_id(ids(2, 3, 7)) == "productid0001"

    def test_input_order_does_not_matter(self):
        assert next_product_id(["productid0005", "productid0001", "productid0002"]) == "productid0003"

    def test_duplicates_are_ignored(self):
        assert next_product_id(ids(1, 1, 2)) == "productid0003"

    def test_never_returns_existing_value(self):
        existing = ids(1, 2, 3, 5, 6, 9, 10, 11)
        for cut in range(len(existing) + 1):
            subset = existing[:cut]
            assert next_product_id(subset) not in subset

    def test_widens_past_four_digits(self):
        assert next_product_id(ids(*range(1, 10000))) == "productid10000"

    def test_malformed_identifier_fails_allocation(self):
        with pytest.raises(DataIntegrityError):
            next_product_id(["productid0001", "productidABCD"])

    def test_wrong_prefix_fails_allocation(self):
        with pytest.raises(DataIntegrityError):
            next_product_id(["sku0001"])


def test_parse_product_sequence():
    assert parse_product_sequence("productid0042") == 42


def test_format_product_id_zero_pads():
    assert format_product_id(3) == "productid0003"
