import pytest

from ai_feed.core.feed.validator import validate_row, validate_rows


@pytest.fixture
def valid_row():
    return {
        "enable_search": "true",
        "enable_checkout": "false",
        "id": "ABC-1",
        "mpn": "N/A",
        "title": "Coffee Mug",
        "description": "A sturdy ceramic mug.",
        "link": "https://shop.example.com/product/coffee-mug/",
        "image_link": "https://shop.example.com/wp-content/uploads/mug.jpg",
        "price": "19.99 USD",
        "availability": "in_stock",
        "inventory_quantity": 12,
    }


def test_valid_row_has_no_issues(valid_row):
    assert validate_row(valid_row) == []


@pytest.mark.parametrize("key", ["id", "title", "description", "link", "image_link", "price", "availability"])
def test_missing_required_field(valid_row, key):
    del valid_row[key]
    assert f"Missing {key}" in validate_row(valid_row)


def test_empty_string_counts_as_missing(valid_row):
    valid_row["title"] = ""
    assert validate_row(valid_row) == ["Missing title"]


def test_numeric_zero_is_not_missing(valid_row):
    valid_row["inventory_quantity"] = 0
    valid_row["price"] = 0
    assert validate_row(valid_row) == []


class TestIdentifiers:
    def test_short_gtin_is_invalid(self, valid_row):
        valid_row["gtin"] = "123"
        assert validate_row(valid_row) == ["gtin invalid (must be 8-14 digits)"]

    @pytest.mark.parametrize("gtin", ["12345678", "012345678905", "12345678901234"])
    def test_valid_gtin_lengths(self, valid_row, gtin):
        valid_row["gtin"] = gtin
        assert validate_row(valid_row) == []

    @pytest.mark.parametrize("gtin", ["123456789012345", "1234-5678", "ABCDEFGH"])
    def test_invalid_gtin_values(self, valid_row, gtin):
        valid_row["gtin"] = gtin
        assert "gtin invalid (must be 8-14 digits)" in validate_row(valid_row)

    def test_non_ascii_digits_rejected(self, valid_row):
        valid_row["gtin"] = "١٢٣٤٥٦٧٨"
        assert "gtin invalid (must be 8-14 digits)" in validate_row(valid_row)

    def test_mpn_required_without_gtin(self, valid_row):
        del valid_row["mpn"]
        assert validate_row(valid_row) == ["mpn required if gtin missing"]


class TestPrices:
    def test_sale_above_price(self, valid_row):
        valid_row["sale_price"] = "25.00 USD"
        assert validate_row(valid_row) == ["sale_price must be <= price"]

    def test_sale_equal_to_price(self, valid_row):
        valid_row["sale_price"] = "19.99 USD"
        assert validate_row(valid_row) == []

    def test_sale_window_order(self, valid_row):
        valid_row["sale_price"] = "15 USD"
        valid_row["sale_price_effective_date"] = "2024-07-01 / 2024-06-01"
        assert validate_row(valid_row) == ["sale window start must precede end"]

    def test_sale_window_in_order(self, valid_row):
        valid_row["sale_price"] = "15 USD"
        valid_row["sale_price_effective_date"] = "2024-06-01 / 2024-06-30"
        assert validate_row(valid_row) == []


class TestFlagsAndAvailability:
    def test_checkout_requires_search(self, valid_row):
        valid_row["enable_search"] = "false"
        valid_row["enable_checkout"] = "true"
        assert validate_row(valid_row) == ["enable_checkout requires enable_search=true"]

    def test_unknown_availability(self, valid_row):
        valid_row["availability"] = "instock"
        assert validate_row(valid_row) == ["availability must be in_stock|out_of_stock|preorder"]

    def test_preorder_needs_date(self, valid_row):
        valid_row["availability"] = "preorder"
        assert validate_row(valid_row) == ["availability_date required for preorder"]

    def test_preorder_with_date(self, valid_row):
        valid_row["availability"] = "preorder"
        valid_row["availability_date"] = "2024-09-01"
        assert validate_row(valid_row) == []


def test_all_rules_reported_together():
    issues = validate_row({"gtin": "123", "enable_search": "false", "enable_checkout": "true"})

    assert "Missing id" in issues
    assert "Missing price" in issues
    assert "gtin invalid (must be 8-14 digits)" in issues
    assert "enable_checkout requires enable_search=true" in issues


def test_validate_rows_does_not_modify_rows(valid_row):
    valid_row["gtin"] = "123"
    snapshot = dict(valid_row)
    validate_rows([valid_row])
    assert valid_row == snapshot


def test_validate_rows_reports(valid_row):
    broken = dict(valid_row, id="BROKEN", price="")
    reports = validate_rows([valid_row, broken])

    assert [r.id for r in reports] == ["ABC-1", "BROKEN"]
    assert reports[0].ok
    assert reports[1].issues == ["Missing price"]


def test_validate_rows_only_failing(valid_row):
    nameless = dict(valid_row)
    del nameless["id"]
    reports = validate_rows([valid_row, nameless], only_failing=True)

    assert len(reports) == 1
    assert reports[0].id == "#2"
    assert reports[0].issues == ["Missing id"]
