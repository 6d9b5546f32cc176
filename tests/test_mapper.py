from dataclasses import replace

import pytest

from ai_feed.core.feed.mapper import RowMapper, coalesce, map_availability, normalize_row
from ai_feed.core.feed.models import FeedSettings, ROW_FIELDS


@pytest.fixture
def mapper(catalog):
    return RowMapper(catalog)


class TestSimpleProduct:
    def test_scenario_simple_product(self, mapper, simple_product, settings):
        row = mapper.map(simple_product, None, settings)

        assert row["id"] == "ABC-1"
        assert row["price"] == "19.99 USD"
        assert row["availability"] == "in_stock"
        assert row["sale_price"] is None
        assert row["sale_price_effective_date"] is None

    def test_basic_fields(self, mapper, simple_product, settings):
        row = mapper.map(simple_product, None, settings)

        assert row["title"] == "Coffee Mug"
        assert row["description"] == "A sturdy ceramic mug."
        assert row["link"] == "https://shop.example.com/product/coffee-mug/"
        assert row["image_link"].endswith("/mug.jpg")
        assert row["additional_image_link"] == []
        assert row["inventory_quantity"] == 12
        assert row["product_category"] == "Kitchen > Mugs"
        assert row["item_group_id"] is None

    def test_row_keys_follow_schema_order(self, mapper, simple_product, settings):
        row = mapper.map(simple_product, None, settings)
        assert tuple(row.keys()) == ROW_FIELDS

    def test_merchant_fields_from_settings(self, mapper, simple_product, settings):
        row = mapper.map(simple_product, None, settings)

        assert row["seller_name"] == "Example Shop"
        assert row["seller_url"] == "https://shop.example.com"
        assert row["seller_privacy_policy"] == "https://shop.example.com/privacy"
        assert row["seller_tos"] == "https://shop.example.com/terms"
        assert row["return_policy"] == "https://shop.example.com/returns"
        assert row["return_window"] == 30

    def test_zero_return_window_is_omitted(self, mapper, simple_product):
        row = mapper.map(simple_product, None, FeedSettings())
        assert row["return_window"] is None
        assert row["seller_name"] is None

    def test_missing_sku_uses_product_id(self, mapper, simple_product, settings):
        row = mapper.map(replace(simple_product, sku=""), None, settings)
        assert row["id"] == "wc-100"

    def test_missing_price_is_omitted(self, mapper, simple_product, settings):
        row = mapper.map(replace(simple_product, regular_price=""), None, settings)
        assert row["price"] is None

    def test_float_price(self, mapper, simple_product, settings):
        row = mapper.map(replace(simple_product, regular_price=19.99), None, settings)
        assert row["price"] == "19.99 USD"

    def test_unmanaged_stock_is_zero(self, mapper, simple_product, settings):
        row = mapper.map(replace(simple_product, stock_quantity=None), None, settings)
        assert row["inventory_quantity"] == 0

    def test_short_description_fallback(self, mapper, simple_product, settings):
        product = replace(simple_product, description="", short_description="<em>Short</em> text")
        row = mapper.map(product, None, settings)
        assert row["description"] == "Short text"

    def test_dimensions_carry_store_units(self, mapper, simple_product, settings):
        product = replace(simple_product, weight="0.5", length="10", width="8", height="")
        row = mapper.map(product, None, settings)

        assert row["weight"] == "0.5 kg"
        assert row["length"] == "10 cm"
        assert row["width"] == "8 cm"
        assert row["height"] is None


class TestVariations:
    def test_scenario_variation_inherits_parent_image(self, mapper, red_variation, variable_product, settings):
        row = mapper.map(red_variation, variable_product, settings)

        assert row["id"] == "SHIRT-RED-M"
        assert row["image_link"] == "https://shop.example.com/wp-content/uploads/shirt.jpg"
        assert row["item_group_id"] == "SHIRT"
        assert row["item_group_title"] == "Basic Shirt"

    def test_gallery_falls_back_to_parent_when_empty(self, mapper, red_variation, variable_product, settings):
        row = mapper.map(red_variation, variable_product, settings)
        assert row["additional_image_link"] == [
            "https://shop.example.com/wp-content/uploads/shirt-back.jpg",
            "https://shop.example.com/wp-content/uploads/shirt-side.jpg",
        ]

    def test_own_gallery_wins(self, mapper, red_variation, variable_product, settings):
        row = mapper.map(replace(red_variation, gallery_image_ids=[13, 999]), variable_product, settings)
        # 999 has no URL and is dropped; the parent gallery is not merged in
        assert row["additional_image_link"] == ["https://shop.example.com/wp-content/uploads/shirt-blue.jpg"]

    def test_own_image_wins(self, mapper, blue_variation, variable_product, settings):
        row = mapper.map(blue_variation, variable_product, settings)
        assert row["image_link"].endswith("/shirt-blue.jpg")

    def test_variation_attributes(self, mapper, red_variation, variable_product, settings):
        row = mapper.map(red_variation, variable_product, settings)

        assert row["color"] == "Red"
        assert row["size"] == "M"
        assert row["brand"] == "Acme"
        # Only brand falls back to the parent
        assert row["material"] is None

    def test_sale_price_and_window(self, mapper, blue_variation, variable_product, settings):
        row = mapper.map(blue_variation, variable_product, settings)

        assert row["id"] == "wc-202"
        assert row["price"] == "25 USD"
        assert row["sale_price"] == "20 USD"
        assert row["sale_price_effective_date"] == "2024-06-01 / 2024-06-30"
        assert row["availability"] == "preorder"

    def test_sale_window_needs_both_dates(self, mapper, blue_variation, variable_product, settings):
        row = mapper.map(replace(blue_variation, date_on_sale_to=None), variable_product, settings)
        assert row["sale_price"] == "20 USD"
        assert row["sale_price_effective_date"] is None

    def test_parent_without_sku(self, mapper, red_variation, variable_product, settings):
        row = mapper.map(red_variation, replace(variable_product, sku=""), settings)
        assert row["item_group_id"] == "wc-200"


class TestBrand:
    def test_own_attribute_first(self, mapper, red_variation, variable_product, settings):
        product = replace(red_variation, attributes={"brand": "Own"}, meta={"_brand": "Meta"})
        assert mapper.map(product, variable_product, settings)["brand"] == "Own"

    def test_parent_attribute_before_meta(self, mapper, red_variation, variable_product, settings):
        product = replace(red_variation, meta={"_brand": "Meta"})
        assert mapper.map(product, variable_product, settings)["brand"] == "Acme"

    def test_meta_last(self, mapper, simple_product, settings):
        product = replace(simple_product, meta={"_brand": "Meta"})
        assert mapper.map(product, None, settings)["brand"] == "Meta"

    def test_no_brand(self, mapper, simple_product, settings):
        assert mapper.map(simple_product, None, settings)["brand"] is None

    def test_coalesce_skips_empty_values(self):
        assert coalesce(lambda: "", lambda: None, lambda: "x", lambda: "y") == "x"
        assert coalesce(lambda: "") is None


class TestIdentifiers:
    def test_gtin_clears_mpn(self, mapper, simple_product, settings):
        product = replace(simple_product, meta={"_gtin": "012345678905", "_mpn": "MUG-1"})
        row = mapper.map(product, None, settings)
        assert row["gtin"] == "012345678905"
        assert row["mpn"] is None

    def test_mpn_without_gtin(self, mapper, simple_product, settings):
        row = mapper.map(replace(simple_product, meta={"_mpn": "MUG-1"}), None, settings)
        assert row["gtin"] is None
        assert row["mpn"] == "MUG-1"

    def test_mpn_sentinel_when_both_missing(self, mapper, simple_product, settings):
        row = mapper.map(simple_product, None, settings)
        assert row["mpn"] == "N/A"


class TestFlags:
    def test_defaults_are_strings(self, mapper, simple_product, settings):
        row = mapper.map(simple_product, None, settings)
        assert row["enable_search"] == "true"
        assert row["enable_checkout"] == "false"

    def test_checkout_default_with_search(self, mapper, simple_product):
        row = mapper.map(simple_product, None, FeedSettings(enable_checkout_default=True))
        assert row["enable_checkout"] == "true"

    def test_checkout_without_search_is_forced_off(self, mapper, simple_product):
        settings = FeedSettings(enable_search_default=False, enable_checkout_default=True)
        row = mapper.map(simple_product, None, settings)
        assert row["enable_search"] == "false"
        assert row["enable_checkout"] == "false"

    @pytest.mark.parametrize("value", ["true", "1", "yes", "YES", "True"])
    def test_truthy_overrides(self, mapper, simple_product, settings, value):
        product = replace(simple_product, meta={"_oapfw_enable_checkout": value})
        assert mapper.map(product, None, settings)["enable_checkout"] == "true"

    def test_override_search_off_disables_checkout(self, mapper, simple_product, settings):
        product = replace(simple_product, meta={
            "_oapfw_enable_search": "no",
            "_oapfw_enable_checkout": "yes",
        })
        row = mapper.map(product, None, settings)
        assert row["enable_search"] == "false"
        assert row["enable_checkout"] == "false"

    def test_empty_override_keeps_default(self, mapper, simple_product, settings):
        product = replace(simple_product, meta={"_oapfw_enable_search": ""})
        assert mapper.map(product, None, settings)["enable_search"] == "true"


class TestTruncation:
    def test_title_truncated_to_150_characters(self, mapper, simple_product, settings):
        row = mapper.map(replace(simple_product, name="é" * 200), None, settings)
        assert row["title"] == "é" * 150
        assert len(row["title"]) == 150

    def test_description_truncated_to_5000_characters(self, mapper, simple_product, settings):
        row = mapper.map(replace(simple_product, description="ü" * 6000), None, settings)
        assert len(row["description"]) == 5000

    def test_short_title_untouched(self, mapper, simple_product, settings):
        assert mapper.map(simple_product, None, settings)["title"] == "Coffee Mug"


class TestCategoryPath:
    def test_deepest_term_wins(self, mapper, variable_product):
        assert mapper.category_path(variable_product) == "Clothing > Shirts > T-Shirts"

    def test_equal_depth_prefers_later_term(self, mapper, simple_product):
        assert mapper.category_path(replace(simple_product, category_ids=[1, 4])) == "Sale"
        assert mapper.category_path(replace(simple_product, category_ids=[4, 1])) == "Clothing"

    def test_no_terms(self, mapper, simple_product):
        assert mapper.category_path(replace(simple_product, category_ids=[])) is None
        assert mapper.category_path(replace(simple_product, category_ids=[404])) is None

    def test_missing_parent_stops_walk(self, catalog, simple_product):
        catalog.categories.pop(6)
        mapper = RowMapper(catalog)
        assert mapper.category_path(simple_product) == "Mugs"


class TestCompliance:
    def test_meta_fields(self, mapper, simple_product, settings):
        product = replace(simple_product, meta={
            "_oapfw_warning": "<b>Hot</b> liquids",
            "_oapfw_warning_url": "https://shop.example.com/safety",
            "_oapfw_video_link": " https://video.example.com/mug.mp4 ",
            "_oapfw_model_3d_link": "javascript:alert(1)",
            "_oapfw_age_restriction": "18",
            "_oapfw_q_and_a": "<p>Dishwasher safe? Yes.</p>",
        })
        row = mapper.map(product, None, settings)

        assert row["warning"] == "Hot liquids"
        assert row["warning_url"] == "https://shop.example.com/safety"
        assert row["video_link"] == "https://video.example.com/mug.mp4"
        assert row["model_3d_link"] is None
        assert row["age_restriction"] == 18
        assert row["q_and_a"] == "Dishwasher safe? Yes."

    def test_invalid_age_restriction_is_omitted(self, mapper, simple_product, settings):
        product = replace(simple_product, meta={"_oapfw_age_restriction": "abc"})
        assert mapper.map(product, None, settings)["age_restriction"] is None


class TestHooks:
    def test_hooks_run_in_order_after_normalization(self, catalog, simple_product, settings):
        calls = []

        def first(row, product, parent, s):
            calls.append(("first", row["mpn"]))
            row["brand"] = "Hooked"
            return row

        def second(row, product, parent, s):
            calls.append(("second", row["brand"]))
            return row

        mapper = RowMapper(catalog, hooks=[first])
        mapper.add_hook(second)
        row = mapper.map(simple_product, None, settings)

        assert calls == [("first", "N/A"), ("second", "Hooked")]
        assert row["brand"] == "Hooked"


def test_map_availability():
    assert map_availability("instock") == "in_stock"
    assert map_availability("outofstock") == "out_of_stock"
    assert map_availability("onbackorder") == "preorder"
    assert map_availability("") == "preorder"


def test_normalize_row_on_raw_values():
    row = normalize_row({"enable_search": "TRUE", "enable_checkout": "true", "gtin": "", "mpn": ""})
    assert row["enable_search"] == "true"
    assert row["enable_checkout"] == "true"
    assert row["mpn"] == "N/A"

    row = normalize_row({})
    assert row["enable_search"] == "true"
    assert row["enable_checkout"] == "false"
