"""
Import pipeline service: two-phase preview/confirm.

One parameterized pipeline serves every layout (see layouts.py).

Preview:
  1. Read the sheet → raw rows
  2. Validate each row → ImportRow (normalized, with errors)
  3. Resolve supplier and product read-only; entities that would be
     created are proposed under negative identifiers
  4. Return rows plus sheet-level counts. Nothing is written.

Confirm (caller sends back the approved, possibly edited rows):
  1. Skip rows that are invalid or have no supplier
  2. Resolve supplier, creating proposed suppliers
  3. Purchase rows: skip duplicates of already-imported purchases
  4. Resolve product, creating it when the layout allows
  5. Record the price observation
  6. Purchase rows: insert the purchase record
  7. Record the import batch

Rows are processed strictly in sheet order: later rows reuse suppliers and
products created by earlier ones. The whole confirm is one transaction;
a failing row rolls back every row of the call.
"""

from datetime import date

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pricebook.errors import ImportConfirmError, ImportPipelineError, SheetParseError
from pricebook.models.catalog import Product
from pricebook.models.purchasing import ImportBatch, PurchaseHistory
from pricebook.schemas.imports import (
    ImportConfirmResult,
    ImportLayout,
    ImportPreview,
    ImportRow,
    ImportSummary,
    ProposedSupplier,
    RowErrors,
)
from pricebook.services.duplicate_guard import find_duplicate_purchase
from pricebook.services.entity_resolver import (
    ResolutionCache,
    SupplierRef,
    get_fixed_supplier,
    match_product,
    resolve_supplier,
    upgrade_placeholder_code,
)
from pricebook.services.layouts import LayoutSpec, get_layout
from pricebook.services.normalization import parse_iso_date
from pricebook.services.price_tracker import track_price
from pricebook.services.row_validator import validate_row
from pricebook.services.sheet_reader import read_sheet

logger = structlog.get_logger(__name__)


def _require_supplier_id(layout_spec: LayoutSpec, supplier_id: int | None) -> None:
    if not layout_spec.supplier_from_sheet and supplier_id is None:
        raise ImportPipelineError(f"supplier_id is required for {layout_spec.layout.value} imports")


# ─── Preview ──────────────────────────────────────────────────

async def _resolve_for_preview(
    db: AsyncSession,
    cache: ResolutionCache,
    layout_spec: LayoutSpec,
    row: ImportRow,
    fixed_supplier: SupplierRef | None,
) -> None:
    if fixed_supplier is not None:
        supplier = fixed_supplier
    else:
        supplier, _ = await resolve_supplier(db, cache, row.supplier_code, row.supplier_name)
    if supplier is None:
        return

    row.supplier_id = supplier.id
    row.supplier_auto_created = supplier.is_new

    if not row.product_code and not row.product_name:
        return

    product, _ = await match_product(db, cache, supplier.id, row.product_code, row.product_name)
    if product is not None:
        row.product_id = product.id
        row.product_matched = isinstance(product, Product)
        # Purchase rows keep the code as written on the sheet
        if not row.product_code and layout_spec.creates_uncoded_products:
            row.product_code = product.product_code
        return

    if row.product_code or layout_spec.creates_uncoded_products:
        if not row.product_code:
            row.product_code = cache.placeholder_code()
        row.product_id = cache.propose_product(supplier.id, row.product_code, row.product_name).id


async def preview_import(
    db: AsyncSession,
    layout: ImportLayout,
    file_bytes: bytes,
    filename: str | None = None,
    supplier_id: int | None = None,
) -> ImportPreview:
    """
    Parse, validate and resolve a sheet without writing anything.

    Succeeds with per-row detail even when no row is valid. Raises
    SheetParseError when the file cannot be read or has no data rows.
    """
    layout_spec = get_layout(layout)
    _require_supplier_id(layout_spec, supplier_id)

    sheet_rows = read_sheet(file_bytes, filename)
    if not sheet_rows:
        raise SheetParseError("File has no data rows")

    cache = await ResolutionCache.load(db, persist=False)
    fixed_supplier = None
    if not layout_spec.supplier_from_sheet:
        fixed_supplier = get_fixed_supplier(cache, supplier_id)

    preview: list[ImportRow] = []
    for row_number, cells in sheet_rows:
        row = validate_row(cells, row_number, layout_spec)
        if row is None:
            continue
        await _resolve_for_preview(db, cache, layout_spec, row, fixed_supplier)
        preview.append(row)

    errors = [RowErrors(row=r.row, errors=r.errors) for r in preview if not r.is_valid]

    logger.info(
        "import_previewed",
        layout=layout_spec.layout.value,
        filename=filename,
        total_rows=len(preview),
        error_rows=len(errors),
        new_suppliers=cache.created_supplier_count,
    )

    return ImportPreview(
        filename=filename,
        layout=layout_spec.layout,
        total_rows=len(preview),
        valid_rows=len(preview) - len(errors),
        error_rows=len(errors),
        new_suppliers=[
            ProposedSupplier(id=s.id, code=s.code, name=s.name)
            for s in cache.new_suppliers
        ],
        preview=preview,
        errors=errors,
    )


# ─── Confirm ──────────────────────────────────────────────────

async def _supplier_for_confirm(
    db: AsyncSession,
    cache: ResolutionCache,
    row: ImportRow,
    fixed_supplier: SupplierRef | None,
) -> SupplierRef | None:
    if fixed_supplier is not None:
        return fixed_supplier
    if row.supplier_id is not None and row.supplier_id > 0:
        return cache.by_id.get(row.supplier_id)
    # Proposed in preview: create it now (or reuse what an earlier row created)
    supplier, _ = await resolve_supplier(db, cache, row.supplier_code, row.supplier_name)
    return supplier


def _apply_details(product: Product, row: ImportRow) -> None:
    if row.product_name:
        product.product_name = row.product_name
    if row.unit:
        product.unit = row.unit
    if row.description:
        product.description = row.description
    if row.remark:
        product.remark = row.remark


async def _confirm_row(
    db: AsyncSession,
    cache: ResolutionCache,
    layout_spec: LayoutSpec,
    row: ImportRow,
    fixed_supplier: SupplierRef | None,
    summary: ImportSummary,
    today: date,
) -> None:
    supplier = await _supplier_for_confirm(db, cache, row, fixed_supplier)
    if supplier is None:
        logger.warning("import_row_without_supplier", row=row.row, supplier_id=row.supplier_id)
        return

    if layout_spec.records_purchases:
        duplicate = await find_duplicate_purchase(db, row.po_number, row.product_code, supplier.id)
        if duplicate is not None:
            summary.skip_count += 1
            logger.info(
                "purchase_row_duplicate",
                row=row.row,
                po_number=row.po_number,
                product_code=row.product_code,
                existing_id=duplicate.id,
            )
            return

    price = getattr(row, layout_spec.price_field)
    effective_date = parse_iso_date(getattr(row, layout_spec.date_field)) or today

    product, how = await match_product(db, cache, supplier.id, row.product_code, row.product_name)
    is_new = False

    if product is None:
        if row.product_code or layout_spec.creates_uncoded_products:
            product = Product(
                supplier_id=supplier.id,
                product_code=row.product_code or cache.placeholder_code(),
                product_name=row.product_name,
                description=row.description or None,
                price=price,
                unit=row.unit or None,
                effective_date=effective_date,
                remark=row.remark or None,
                status="active",
            )
            db.add(product)
            await db.flush()
            is_new = True
            if layout_spec.records_purchases:
                summary.product_create_count += 1
            else:
                summary.new_count += 1
    else:
        if layout_spec.upgrades_placeholder_codes and how == "name":
            upgrade_placeholder_code(product, row.product_code)
        if layout_spec.updates_product_details:
            _apply_details(product, row)
        if not layout_spec.records_purchases:
            summary.update_count += 1

    if product is not None and price is not None and price > 0:
        await track_price(db, product, price, effective_date, layout_spec.history_source, is_new=is_new)

    if layout_spec.records_purchases:
        db.add(PurchaseHistory(
            supplier_id=supplier.id,
            product_id=product.id if product is not None else None,
            supplier_code=row.supplier_code or supplier.code,
            product_code=row.product_code or None,
            product_name=row.product_name or None,
            unit=row.unit or None,
            quantity=row.quantity,
            unit_price=row.unit_price,
            total_price=row.total_price,
            purchase_date=parse_iso_date(row.purchase_date),
            delivery_date=parse_iso_date(row.delivery_date),
            po_number=row.po_number or None,
            pf_number=row.pf_number or None,
            remark=row.remark or None,
        ))
        await db.flush()
        summary.insert_count += 1


def _persistable(layout_spec: LayoutSpec, row: ImportRow) -> bool:
    """Rows come back from the caller; is_valid alone is not trusted."""
    price = getattr(row, layout_spec.price_field)
    if price is None or price <= 0:
        return False
    if not row.product_name.strip():
        return False
    if layout_spec.requires_unit and not row.unit.strip():
        return False
    return True


def _summary_message(layout_spec: LayoutSpec, summary: ImportSummary) -> str:
    if layout_spec.records_purchases:
        message = (
            f"Import complete: {summary.insert_count} inserted, "
            f"{summary.skip_count} skipped (duplicate), "
            f"{summary.product_create_count} new products"
        )
    else:
        message = (
            f"Import complete: {summary.new_count} new, "
            f"{summary.update_count} updated"
        )
    if summary.supplier_create_count:
        message += f", {summary.supplier_create_count} new suppliers"
    return message


async def confirm_import(
    db: AsyncSession,
    layout: ImportLayout,
    items: list[ImportRow],
    supplier_id: int | None = None,
) -> ImportConfirmResult:
    """
    Persist approved preview rows.

    Rows with is_valid=False or no supplier_id are skipped silently, as
    are rows edited into a state that would fail validation (no price,
    product name or required unit).
    Raises ImportConfirmError (after rolling back the whole call) when a
    row cannot be persisted.
    """
    if not items:
        raise ImportPipelineError("No items to import")

    layout_spec = get_layout(layout)
    _require_supplier_id(layout_spec, supplier_id)

    cache = await ResolutionCache.load(db, persist=True)
    fixed_supplier = None
    if not layout_spec.supplier_from_sheet:
        fixed_supplier = get_fixed_supplier(cache, supplier_id)

    summary = ImportSummary()
    today = date.today()

    for row in items:
        if not row.is_valid or row.supplier_id is None:
            continue
        if not _persistable(layout_spec, row):
            logger.warning("import_row_incomplete", row=row.row, layout=layout_spec.layout.value)
            continue
        try:
            await _confirm_row(db, cache, layout_spec, row, fixed_supplier, summary, today)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                "import_confirm_failed",
                layout=layout_spec.layout.value,
                row=row.row,
                error=str(e),
            )
            raise ImportConfirmError(row.row, str(getattr(e, "orig", None) or e)) from e

    summary.supplier_create_count = cache.created_supplier_count

    batch = ImportBatch(
        layout=layout_spec.layout.value,
        supplier_id=fixed_supplier.id if fixed_supplier is not None else None,
        item_count=len(items),
        counts=summary.model_dump(),
    )
    db.add(batch)
    await db.flush()

    message = _summary_message(layout_spec, summary)
    logger.info("import_confirmed", layout=layout_spec.layout.value, batch_id=batch.id, **summary.model_dump())

    return ImportConfirmResult(batch_id=batch.id, message=message, **summary.model_dump())
