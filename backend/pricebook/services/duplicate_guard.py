"""Duplicate guard for purchase-history rows."""

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from pricebook.models.purchasing import PurchaseHistory


async def find_duplicate_purchase(
    db: AsyncSession,
    po_number: str,
    product_code: str,
    supplier_id: int,
) -> PurchaseHistory | None:
    """
    Find an already-imported purchase with the same (PO number, product code, supplier).

    Rows missing a PO number or a product code cannot be deduplicated
    reliably and never match.
    """
    po_number = (po_number or "").strip()
    product_code = (product_code or "").strip()
    if not po_number or not product_code:
        return None

    result = await db.execute(
        select(PurchaseHistory)
        .where(
            and_(
                PurchaseHistory.po_number == po_number,
                PurchaseHistory.product_code == product_code,
                PurchaseHistory.supplier_id == supplier_id,
            )
        )
        .limit(1)
    )
    return result.scalars().first()
