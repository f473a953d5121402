"""
Price history tracking.

The ledger grows with actual price movement, not with import frequency:
an observation is appended only for a new product or a changed price.
The product's current price always follows the most recent observation
by effective date, so importing an older sheet never overwrites a newer
price.
"""

from datetime import date

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pricebook.models.catalog import PriceHistory, Product

logger = structlog.get_logger(__name__)


async def latest_price_date(db: AsyncSession, product: Product) -> date | None:
    """Most recent effective date recorded for a product, from its ledger or its own field."""
    result = await db.execute(
        select(func.max(PriceHistory.effective_date)).where(
            PriceHistory.product_id == product.id
        )
    )
    ledger_date = result.scalar()
    dates = [d for d in (ledger_date, product.effective_date) if d is not None]
    return max(dates) if dates else None


async def track_price(
    db: AsyncSession,
    product: Product,
    price: float,
    effective_date: date,
    source: str,
    is_new: bool = False,
) -> bool:
    """
    Record a price observation for a product.

    Appends a PriceHistory entry when the product is new or the price
    differs from its current price. Then moves the product's current
    price and effective date to this observation if it is at least as
    recent as anything already recorded.

    Returns True if a ledger entry was appended.
    """
    latest = None if is_new else await latest_price_date(db, product)

    appended = False
    if is_new or product.price != price:
        db.add(PriceHistory(
            product_id=product.id,
            price=price,
            effective_date=effective_date,
            source=source,
        ))
        appended = True
        logger.debug(
            "price_recorded",
            product_id=product.id,
            old_price=product.price,
            new_price=price,
            effective_date=effective_date.isoformat(),
            source=source,
        )

    if latest is None or effective_date >= latest:
        product.price = price
        product.effective_date = effective_date

    await db.flush()
    return appended
