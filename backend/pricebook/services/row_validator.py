"""
Row validation: raw spreadsheet cells → ImportRow.

Every rule is evaluated and every failure is reported, so the preview
shows all of a row's problems at once. Validation never raises.
"""

from typing import Any, Sequence

from pricebook.core.config import settings
from pricebook.schemas.imports import ImportRow
from pricebook.services.layouts import LayoutSpec
from pricebook.services.normalization import cell_text, normalize_date, parse_number

_FIELD_LABELS = {
    "quantity": "Quantity",
    "unit_price": "Unit price",
    "total_price": "Total price",
    "price": "Price",
    "effective_date": "Effective date",
    "purchase_date": "Purchase date",
    "delivery_date": "Delivery date",
}


def validate_row(
    cells: Sequence[Any],
    row_number: int,
    layout: LayoutSpec,
) -> ImportRow | None:
    """
    Normalize one raw row into a candidate record.

    Returns None when every identifying cell of the row is blank: such
    rows are skipped, not reported.
    """
    raw: dict[str, Any] = {
        field: (cells[idx] if idx < len(cells) else None)
        for idx, field in enumerate(layout.fields)
    }

    if all(cell_text(raw[f]) == "" for f in layout.identifying_fields):
        return None

    values: dict[str, Any] = {"row": row_number}
    errors: list[str] = []
    is_valid = True

    for field, cell in raw.items():
        if field in layout.number_fields or field in layout.date_fields:
            continue
        values[field] = cell_text(cell)

    # Numbers
    for field in layout.number_fields:
        try:
            values[field] = parse_number(raw[field])
        except ValueError:
            values[field] = None
            label = _FIELD_LABELS[field]
            errors.append(f"{label} is not a number: {cell_text(raw[field])!r}")
            if field == layout.price_field:
                is_valid = False

    # Dates: a bad date is reported but does not invalidate the row
    for field in layout.date_fields:
        try:
            values[field] = normalize_date(raw[field])
        except ValueError:
            values[field] = None
            errors.append(f"Unrecognized {_FIELD_LABELS[field].lower()}: {cell_text(raw[field])!r}")

    if layout.default_currency and not values.get("currency"):
        values["currency"] = settings.DEFAULT_CURRENCY

    if layout.records_purchases and values.get("total_price") is None:
        quantity = values.get("quantity")
        unit_price = values.get("unit_price")
        if quantity is not None and unit_price is not None:
            values["total_price"] = round(quantity * unit_price, 2)

    # Required fields
    if layout.supplier_from_sheet:
        if not values.get("supplier_code") and not values.get("supplier_name"):
            is_valid = False
            errors.append("Missing supplier code or name")

    if not values.get("product_name"):
        is_valid = False
        errors.append("Missing product name")

    price = values.get(layout.price_field)
    price_unparsed = cell_text(raw[layout.price_field]) != "" and price is None
    if not price_unparsed:
        if price is None:
            is_valid = False
            errors.append(f"Missing {layout.price_label.lower()}")
        elif price <= 0:
            is_valid = False
            errors.append(f"{layout.price_label} must be greater than zero")

    if layout.requires_unit and not values.get("unit"):
        is_valid = False
        errors.append("Missing unit")

    return ImportRow(**values, is_valid=is_valid, errors=errors)
