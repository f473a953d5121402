"""
Spreadsheet layout descriptors.

One descriptor per accepted layout. The validator, resolver and confirm
steps are shared; everything that differs between the buyer price list,
the supplier price list and the purchase history sheet is declared here.
"""

from dataclasses import dataclass

from pricebook.schemas.imports import ImportLayout


@dataclass(frozen=True)
class LayoutSpec:
    layout: ImportLayout
    # Header labels, in column order, as they appear on the sheet
    headers: tuple[str, ...]
    # ImportRow field filled from each column, same order as headers
    fields: tuple[str, ...]
    # Fields of which at least one must be non-blank for the row to count
    identifying_fields: tuple[str, ...]
    # 'price' for price lists, 'unit_price' for purchases
    price_field: str
    price_label: str
    # 'effective_date' for price lists, 'purchase_date' for purchases
    date_field: str
    number_fields: tuple[str, ...]
    date_fields: tuple[str, ...]
    history_source: str
    requires_unit: bool = False
    # Supplier comes from the sheet (code/name columns) rather than the caller
    supplier_from_sheet: bool = True
    # Create products for rows without a code, under a placeholder code
    creates_uncoded_products: bool = True
    # Overwrite name/unit/description of matched products from the sheet
    updates_product_details: bool = True
    # Replace a matched product's placeholder code with the sheet's real code
    upgrades_placeholder_codes: bool = False
    records_purchases: bool = False
    default_currency: bool = True


BUYER_PRICE_LIST = LayoutSpec(
    layout=ImportLayout.BUYER_PRICE_LIST,
    headers=(
        "supplier_name", "supplier_product_code", "product_name", "description",
        "price", "currency", "unit", "effective_date", "notes",
    ),
    fields=(
        "supplier_name", "product_code", "product_name", "description",
        "price", "currency", "unit", "effective_date", "remark",
    ),
    identifying_fields=("supplier_name", "product_name"),
    price_field="price",
    price_label="Price",
    date_field="effective_date",
    number_fields=("price",),
    date_fields=("effective_date",),
    history_source="admin_import",
    requires_unit=True,
)

SUPPLIER_PRICE_LIST = LayoutSpec(
    layout=ImportLayout.SUPPLIER_PRICE_LIST,
    headers=(
        "supplier_product_code", "product_name", "description",
        "price", "currency", "unit", "effective_date", "notes",
    ),
    fields=(
        "product_code", "product_name", "description",
        "price", "currency", "unit", "effective_date", "remark",
    ),
    identifying_fields=("product_code", "product_name"),
    price_field="price",
    price_label="Price",
    date_field="effective_date",
    number_fields=("price",),
    date_fields=("effective_date",),
    history_source="supplier_import",
    requires_unit=True,
    supplier_from_sheet=False,
)

PURCHASE_HISTORY = LayoutSpec(
    layout=ImportLayout.PURCHASE_HISTORY,
    headers=(
        "supplier_code", "supplier_name", "purchase_date", "pf_number", "po_number",
        "product_code", "product_name", "unit", "quantity", "unit_price",
        "total_price", "delivery_date", "remark",
    ),
    fields=(
        "supplier_code", "supplier_name", "purchase_date", "pf_number", "po_number",
        "product_code", "product_name", "unit", "quantity", "unit_price",
        "total_price", "delivery_date", "remark",
    ),
    identifying_fields=("supplier_code", "supplier_name", "product_code", "product_name"),
    price_field="unit_price",
    price_label="Unit price",
    date_field="purchase_date",
    number_fields=("quantity", "unit_price", "total_price"),
    date_fields=("purchase_date", "delivery_date"),
    history_source="purchase_import",
    creates_uncoded_products=False,
    updates_product_details=False,
    upgrades_placeholder_codes=True,
    records_purchases=True,
    default_currency=False,
)

LAYOUTS: dict[ImportLayout, LayoutSpec] = {
    layout_spec.layout: layout_spec
    for layout_spec in (BUYER_PRICE_LIST, SUPPLIER_PRICE_LIST, PURCHASE_HISTORY)
}


def get_layout(layout: ImportLayout | str) -> LayoutSpec:
    return LAYOUTS[ImportLayout(layout)]
