"""Tests for row validation: raw cells → ImportRow."""

from pricebook.services.layouts import BUYER_PRICE_LIST, PURCHASE_HISTORY, SUPPLIER_PRICE_LIST
from pricebook.services.row_validator import validate_row
from tests.fixtures.excel_factory import price_row, purchase_row, supplier_price_row


class TestPriceListRows:
    def test_valid_row(self):
        row = validate_row(price_row(), 2, BUYER_PRICE_LIST)
        assert row.is_valid
        assert row.errors == []
        assert row.row == 2
        assert row.supplier_name == "Siam Chemicals"
        assert row.product_code == "P-001"
        assert row.price == 100.0
        assert row.effective_date == "2024-01-31"

    def test_blank_identity_skipped(self):
        cells = price_row(supplier_name="", name="", code="", price=50)
        assert validate_row(cells, 5, BUYER_PRICE_LIST) is None

    def test_missing_price_and_unit_two_reasons(self):
        row = validate_row(price_row(price=None, unit=None), 3, BUYER_PRICE_LIST)
        assert not row.is_valid
        assert len(row.errors) == 2
        assert "Missing price" in row.errors
        assert "Missing unit" in row.errors

    def test_non_numeric_price(self):
        row = validate_row(price_row(price="call us"), 3, BUYER_PRICE_LIST)
        assert not row.is_valid
        assert row.price is None
        assert row.errors == ["Price is not a number: 'call us'"]

    def test_zero_price(self):
        row = validate_row(price_row(price=0), 3, BUYER_PRICE_LIST)
        assert not row.is_valid
        assert row.errors == ["Price must be greater than zero"]

    def test_bad_date_does_not_invalidate(self):
        row = validate_row(price_row(effective_date="soon"), 4, BUYER_PRICE_LIST)
        assert row.is_valid
        assert row.effective_date is None
        assert row.errors == ["Unrecognized effective date: 'soon'"]

    def test_missing_supplier(self):
        row = validate_row(price_row(supplier_name=""), 4, BUYER_PRICE_LIST)
        assert not row.is_valid
        assert "Missing supplier code or name" in row.errors

    def test_currency_defaults(self):
        row = validate_row(price_row(currency=""), 2, BUYER_PRICE_LIST)
        assert row.currency == "THB"

    def test_numeric_code_cell(self):
        row = validate_row(price_row(code=1001.0), 2, BUYER_PRICE_LIST)
        assert row.product_code == "1001"

    def test_short_row_padded(self):
        row = validate_row(["Siam Chemicals", "P-001", "Citric Acid"], 2, BUYER_PRICE_LIST)
        assert not row.is_valid
        assert "Missing price" in row.errors

    def test_supplier_layout_needs_no_supplier_column(self):
        row = validate_row(supplier_price_row(), 2, SUPPLIER_PRICE_LIST)
        assert row.is_valid
        assert row.supplier_name == ""
        assert row.product_code == "P-001"


class TestPurchaseRows:
    def test_valid_row_computes_total(self):
        row = validate_row(purchase_row(quantity=3, unit_price=12.5), 2, PURCHASE_HISTORY)
        assert row.is_valid
        assert row.total_price == 37.5
        assert row.purchase_date == "2024-02-01"
        assert row.delivery_date == "2024-02-05"
        assert row.currency == ""

    def test_explicit_total_kept(self):
        row = validate_row(purchase_row(quantity=3, unit_price=10, total_price=29), 2, PURCHASE_HISTORY)
        assert row.total_price == 29.0

    def test_missing_unit_price(self):
        row = validate_row(purchase_row(unit_price=None), 2, PURCHASE_HISTORY)
        assert not row.is_valid
        assert row.errors == ["Missing unit price"]

    def test_unit_not_required(self):
        row = validate_row(purchase_row(unit=""), 2, PURCHASE_HISTORY)
        assert row.is_valid

    def test_bad_quantity_reported_but_valid(self):
        row = validate_row(purchase_row(quantity="ten"), 2, PURCHASE_HISTORY)
        assert row.is_valid
        assert row.quantity is None
        assert row.errors == ["Quantity is not a number: 'ten'"]
