"""Behavioural tests for ProductService on an in-memory repository.

Covers the catalog rules end to end without a database:
- creation, uniqueness and partial updates;
- delete then lookup;
- filters, and ordering with sort_products;
- price-drop cap and discounts;
- statistics and name look-ups.
"""

from __future__ import annotations

import pytest

from modules.products.dtos import CreateProductDTO, ProductFilterDTO, UpdateProductDTO
from modules.products.exceptions import (
    InvalidProductData,
    PriceDropTooLarge,
    ProductAlreadyExists,
    ProductNotFound,
)
from modules.products.models import Product
from modules.products.services import sort_products

pytestmark = pytest.mark.unit


@pytest.fixture()
def catalog(make_product):
    """A: 100 x 5 active, B: 50 x 2 inactive."""
    a = make_product(name="A", price=100.0, quantity=5, status=True)
    b = make_product(name="B", price=50.0, quantity=2, status=False)
    return a, b


# ===========================================================================
# Creation and uniqueness
# ===========================================================================


class TestCreation:
    def test_assigns_new_positive_ids(self, make_product):
        first = make_product(name="First")
        second = make_product(name="Second")
        assert first.id > 0
        assert second.id > first.id

    def test_duplicate_name_case_insensitive(self, make_product, memory_service):
        make_product(name="Smartphone")
        with pytest.raises(ProductAlreadyExists):
            memory_service.create_product(CreateProductDTO(name="SMARTPHONE", price=1.0))

    def test_substring_of_existing_name_is_a_collision(self, make_product, memory_service):
        make_product(name="iPhone")
        with pytest.raises(ProductAlreadyExists):
            memory_service.create_product(CreateProductDTO(name="Phone", price=1.0))

    def test_rejected_create_is_not_persisted(self, memory_service, memory_repo):
        with pytest.raises(InvalidProductData):
            memory_service.create_product(CreateProductDTO(name="Bad", price=-1.0))
        assert memory_repo.count() == 0


# ===========================================================================
# Partial updates
# ===========================================================================


class TestPartialUpdate:
    def test_absent_fields_are_untouched(self, catalog, memory_service):
        a, _ = catalog
        memory_service.update_product(a.id, UpdateProductDTO(price=10.0))
        stored = memory_service.find_product_by_id(a.id)
        assert stored.price == 10.0
        assert stored.name == "A"
        assert stored.quantity == 5
        assert stored.status is True

    def test_updates_each_present_field(self, catalog, memory_service):
        a, _ = catalog
        memory_service.update_product(
            a.id, UpdateProductDTO(name="  Alpha ", quantity=0, status=False)
        )
        stored = memory_service.find_product_by_id(a.id)
        assert stored.name == "Alpha"
        assert stored.quantity == 0
        assert stored.status is False
        assert stored.price == 100.0

    def test_empty_request_fails_regardless_of_id(self, memory_service):
        for id in (None, -1, 1, 999):
            with pytest.raises(InvalidProductData):
                memory_service.update_product(id, UpdateProductDTO())

    def test_missing_product(self, memory_service):
        with pytest.raises(ProductNotFound):
            memory_service.update_product(999, UpdateProductDTO(price=1.0))

    def test_failed_validation_leaves_record_unchanged(self, catalog, memory_service):
        a, _ = catalog
        with pytest.raises(InvalidProductData):
            memory_service.update_product(
                a.id, UpdateProductDTO(name="Renamed", price=-5.0)
            )
        assert memory_service.find_product_by_id(a.id).name == "A"

    def test_id_never_changes(self, catalog, memory_service):
        a, _ = catalog
        updated = memory_service.update_product(a.id, UpdateProductDTO(name="Alpha"))
        assert updated.id == a.id


# ===========================================================================
# Delete
# ===========================================================================


class TestDelete:
    def test_delete_then_lookup_is_not_found(self, catalog, memory_service):
        a, _ = catalog
        memory_service.delete_product(a.id)
        assert memory_service.find_product_by_id(a.id) is None

    def test_delete_missing_leaves_store_unchanged(self, catalog, memory_service):
        with pytest.raises(ProductNotFound):
            memory_service.delete_product(999)
        assert memory_service.count_products() == 2


# ===========================================================================
# Filters
# ===========================================================================


class TestFilters:
    def test_empty_filter_equals_find_all(self, catalog, memory_service):
        expected = [p.id for p in memory_service.find_all_products()]
        assert [p.id for p in memory_service.find_products_with_filters(ProductFilterDTO())] == expected
        assert [p.id for p in memory_service.find_products_with_filters(None)] == expected

    def test_name_substring_case_insensitive(self, make_product, memory_service):
        make_product(name="Smartphone")
        make_product(name="Tablet")
        result = memory_service.find_products_with_filters(ProductFilterDTO(name="PHONE"))
        assert [p.name for p in result] == ["Smartphone"]

    def test_price_bounds_inclusive(self, catalog, memory_service):
        result = memory_service.find_products_with_filters(
            ProductFilterDTO(min_price=50.0, max_price=100.0)
        )
        assert {p.name for p in result} == {"A", "B"}

    def test_quantity_bounds(self, catalog, memory_service):
        result = memory_service.find_products_with_filters(
            ProductFilterDTO(min_quantity=3)
        )
        assert [p.name for p in result] == ["A"]

    def test_status(self, catalog, memory_service):
        result = memory_service.find_products_with_filters(ProductFilterDTO(status=False))
        assert [p.name for p in result] == ["B"]

    def test_criteria_combine_with_and(self, catalog, memory_service):
        result = memory_service.find_products_with_filters(
            ProductFilterDTO(max_price=80.0, status=True)
        )
        assert result == []

    def test_products_without_price_never_match_a_filter(
        self, catalog, memory_repo, memory_service
    ):
        memory_repo.save(Product(name="Unpriced", price=None, quantity=1, status=True))
        result = memory_service.find_products_with_filters(ProductFilterDTO(status=True))
        assert [p.name for p in result] == ["A"]

    def test_unknown_json_keys_leave_filter_empty(self, catalog, memory_service):
        dto = ProductFilterDTO.model_validate_json(
            '{"sortBy": "price", "sortDirection": "DESC"}'
        )
        result = memory_service.find_products_with_filters(dto)
        assert [p.id for p in result] == [
            p.id for p in memory_service.find_all_products()
        ]

    def test_discount_accepts_filter_with_unknown_keys(self, catalog, memory_service):
        dto = ProductFilterDTO.model_validate_json('{"sortBy": "color", "status": true}')
        assert memory_service.apply_discount(dto, 10) == 1


class TestSortProducts:
    def test_descending_by_price(self, catalog, memory_service):
        result = sort_products(memory_service.find_all_products(), "price", "desc")
        assert [p.name for p in result] == ["A", "B"]

    def test_ascending_is_the_default(self, catalog, memory_service):
        result = sort_products(memory_service.find_all_products(), "price")
        assert [p.name for p in result] == ["B", "A"]

    def test_name_is_case_insensitive(self, make_product, memory_service):
        make_product(name="beta")
        make_product(name="Alpha")
        result = sort_products(memory_service.find_all_products(), "name")
        assert [p.name for p in result] == ["Alpha", "beta"]

    def test_null_prices_sort_last(self, catalog, memory_repo, memory_service):
        memory_repo.save(Product(name="Unpriced", price=None))
        result = sort_products(memory_service.find_all_products(), "price", "DESC")
        assert [p.name for p in result] == ["A", "B", "Unpriced"]

    def test_unknown_field(self, catalog, memory_service):
        with pytest.raises(InvalidProductData, match="Cannot sort"):
            sort_products(memory_service.find_all_products(), "color")

    def test_unknown_direction(self, catalog, memory_service):
        with pytest.raises(InvalidProductData, match="ASC or DESC"):
            sort_products(memory_service.find_all_products(), "id", "sideways")


# ===========================================================================
# Status and price operations
# ===========================================================================


class TestStatusChanges:
    def test_deactivate_and_activate(self, catalog, memory_service):
        a, _ = catalog
        assert memory_service.deactivate_product(a.id).status is False
        assert memory_service.find_product_by_id(a.id).status is False
        assert memory_service.activate_product(a.id).status is True

    def test_missing_product(self, memory_service):
        with pytest.raises(ProductNotFound):
            memory_service.activate_product(999)
        with pytest.raises(ProductNotFound):
            memory_service.deactivate_product(0)


class TestUpdateProductPrice:
    def test_drop_over_half_rejected(self, catalog, memory_service):
        a, _ = catalog
        with pytest.raises(PriceDropTooLarge):
            memory_service.update_product_price(a.id, 49.0)
        assert memory_service.find_product_by_id(a.id).price == 100.0

    def test_exactly_half_allowed(self, catalog, memory_service):
        a, _ = catalog
        assert memory_service.update_product_price(a.id, 50.0).price == 50.0

    def test_increase_allowed(self, catalog, memory_service):
        a, _ = catalog
        assert memory_service.update_product_price(a.id, 500.0).price == 500.0

    def test_no_cap_when_current_price_unknown(self, memory_repo, memory_service):
        product = memory_repo.save(Product(name="Unpriced", price=None))
        assert memory_service.update_product_price(product.id, 0.01).price == 0.01

    def test_bounds_checked_before_lookup(self, memory_service):
        with pytest.raises(InvalidProductData, match="must not exceed"):
            memory_service.update_product_price(999, 2_000_000.0)

    def test_missing_product(self, memory_service):
        with pytest.raises(ProductNotFound):
            memory_service.update_product_price(999, 10.0)


class TestApplyDiscount:
    def test_discount_matching_products(self, catalog, memory_service):
        updated = memory_service.apply_discount(ProductFilterDTO(status=True), 10)
        assert updated == 1
        prices = {p.name: p.price for p in memory_service.find_all_products()}
        assert prices["A"] == pytest.approx(90.0)
        assert prices["B"] == 50.0

    def test_zero_percent_counts_but_keeps_prices(self, catalog, memory_service, memory_repo):
        updated = memory_service.apply_discount(ProductFilterDTO(), 0)
        assert updated == 2
        assert memory_repo.update_calls == 2
        assert [p.price for p in memory_service.find_all_products()] == [100.0, 50.0]

    def test_skips_zero_and_missing_prices(self, catalog, make_product, memory_repo, memory_service):
        make_product(name="Free", price=0.0)
        memory_repo.save(Product(name="Unpriced", price=None))
        updated = memory_service.apply_discount(None, 50)
        assert updated == 2
        prices = {p.name: p.price for p in memory_service.find_all_products()}
        assert prices["Free"] == 0.0
        assert prices["Unpriced"] is None

    def test_full_discount(self, catalog, memory_service):
        memory_service.apply_discount(ProductFilterDTO(name="A"), 100)
        assert memory_service.find_products_by_name("A")[0].price == 0.0

    @pytest.mark.parametrize("percentage", [None, -0.1, 100.5, float("nan")])
    def test_invalid_percentage(self, catalog, memory_service, memory_repo, percentage):
        with pytest.raises(InvalidProductData, match="between 0 and 100"):
            memory_service.apply_discount(ProductFilterDTO(), percentage)
        assert memory_repo.update_calls == 0


# ===========================================================================
# Statistics
# ===========================================================================


class TestStatistics:
    def test_scenario(self, catalog, memory_service):
        a, b = catalog
        assert (a.id, b.id) == (1, 2)
        assert [p.id for p in memory_service.find_products_by_price_range(60, 150)] == [1]
        assert memory_service.count_active_products() == 1
        assert memory_service.count_inactive_products() == 1
        assert memory_service.count_products() == 2
        assert memory_service.calculate_total_stock_value() == 600.0

    def test_stock_value_skips_unpriced_and_empty(self, catalog, make_product, memory_repo, memory_service):
        make_product(name="Empty", price=999.0, quantity=0)
        memory_repo.save(Product(name="Unpriced", price=None, quantity=10))
        assert memory_service.calculate_total_stock_value() == 600.0

    def test_stock_value_empty_catalog(self, memory_service):
        assert memory_service.calculate_total_stock_value() == 0.0

    def test_most_expensive_and_cheapest(self, catalog, memory_repo, memory_service):
        memory_repo.save(Product(name="Unpriced", price=None))
        assert memory_service.find_most_expensive_product().name == "A"
        assert memory_service.find_cheapest_product().name == "B"

    def test_extremes_none_when_nothing_priced(self, memory_repo, memory_service):
        memory_repo.save(Product(name="Unpriced", price=None))
        assert memory_service.find_most_expensive_product() is None
        assert memory_service.find_cheapest_product() is None


class TestProductNameExists:
    def test_substring_match(self, make_product, memory_service):
        make_product(name="iPhone")
        assert memory_service.product_name_exists("phone") is True
        assert memory_service.product_name_exists("android") is False

    def test_exclude_id(self, make_product, memory_service):
        product = make_product(name="iPhone")
        assert memory_service.product_name_exists("iPhone", exclude_id=product.id) is False
        assert memory_service.product_name_exists("iPhone", exclude_id=999) is True

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_blank(self, make_product, memory_service, name):
        make_product(name="iPhone")
        assert memory_service.product_name_exists(name) is False
