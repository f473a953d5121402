"""
Name similarity between supplier products and product groups.

Suggestions are read-only: they propose (product, group, score) triples
for products that have no mapping yet. Applying one is a separate write
(see apply_mapping).
"""

import structlog
from rapidfuzz.distance import Levenshtein
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from pricebook.core.config import settings
from pricebook.models.catalog import Product, ProductGroup, ProductMapping, Supplier
from pricebook.schemas.mapping import MappingSuggestion

logger = structlog.get_logger(__name__)


def similarity(a: str, b: str) -> float:
    """
    Edit-distance ratio: (max_len - distance) / max_len.

    Unit-cost insert/delete/substitute. Returns 0.0 when both strings are
    empty, 1.0 for identical non-empty strings. Symmetric.
    """
    a = a or ""
    b = b or ""
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 0.0
    return (max_len - Levenshtein.distance(a, b)) / max_len


async def suggest_mappings(
    db: AsyncSession,
    threshold: float | None = None,
    limit: int | None = None,
) -> list[MappingSuggestion]:
    """
    Score every (unmapped active product, active group) pair on lower-cased names.

    Pairs at or above the threshold are returned best first, capped at limit.
    """
    threshold = settings.SUGGESTION_THRESHOLD if threshold is None else threshold
    limit = settings.SUGGESTION_LIMIT if limit is None else limit

    mapped = select(ProductMapping.product_id)
    products = (
        await db.execute(
            select(Product.id, Product.product_name, Supplier.name)
            .join(Supplier, Supplier.id == Product.supplier_id)
            .where(
                and_(
                    Product.status == "active",
                    Product.id.not_in(mapped),
                )
            )
            .order_by(Product.id)
        )
    ).all()
    groups = (
        await db.execute(
            select(ProductGroup.id, ProductGroup.master_name)
            .where(ProductGroup.status == "active")
            .order_by(ProductGroup.id)
        )
    ).all()

    suggestions: list[MappingSuggestion] = []
    for product_id, product_name, supplier_name in products:
        left = (product_name or "").lower()
        for group_id, group_name in groups:
            score = similarity(left, (group_name or "").lower())
            if score < threshold:
                continue
            suggestions.append(MappingSuggestion(
                product_id=product_id,
                product_name=product_name,
                supplier_name=supplier_name,
                group_id=group_id,
                group_name=group_name,
                score=round(score, 4),
            ))

    # Stable sort keeps product/group order among equal scores
    suggestions.sort(key=lambda s: s.score, reverse=True)

    logger.info(
        "mapping_suggestions_computed",
        products=len(products),
        groups=len(groups),
        matches=len(suggestions),
        returned=min(len(suggestions), limit),
    )
    return suggestions[:limit]


async def apply_mapping(
    db: AsyncSession,
    product_ids: list[int],
    group: ProductGroup,
) -> int:
    """Point each product at the group, repointing existing mappings. Returns the count written."""
    unique_ids = list(dict.fromkeys(product_ids))
    existing = {
        m.product_id: m
        for m in (
            await db.execute(
                select(ProductMapping).where(ProductMapping.product_id.in_(unique_ids))
            )
        ).scalars().all()
    }

    for product_id in unique_ids:
        mapping = existing.get(product_id)
        if mapping is None:
            db.add(ProductMapping(product_id=product_id, product_group_id=group.id))
        else:
            mapping.product_group_id = group.id

    await db.flush()
    logger.info("products_mapped", product_group_id=group.id, mapped_count=len(unique_ids))
    return len(unique_ids)
