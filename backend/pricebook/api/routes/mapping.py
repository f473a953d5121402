"""
Mapping API routes: link supplier products to product groups.

Endpoints:
  GET    /api/v1/mapping/suggestions  — Name-similarity suggestions for unmapped products
  POST   /api/v1/mapping              — Map products onto a group
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pricebook.core.database import get_db
from pricebook.models.catalog import Product, ProductGroup
from pricebook.schemas.mapping import MappingRequest, MappingResponse, MappingSuggestions
from pricebook.services.similarity import apply_mapping, suggest_mappings

router = APIRouter()


@router.get("/suggestions", response_model=MappingSuggestions)
async def get_suggestions(
    threshold: float | None = Query(None, ge=0.0, le=1.0),
    limit: int | None = Query(None, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """Suggest groups for unmapped products, best score first."""
    suggestions = await suggest_mappings(db, threshold=threshold, limit=limit)
    return MappingSuggestions(suggestions=suggestions)


@router.post("", response_model=MappingResponse)
async def map_products(
    payload: MappingRequest,
    db: AsyncSession = Depends(get_db),
):
    """Map products onto a group. A product already mapped elsewhere is repointed."""
    if not payload.product_ids:
        raise HTTPException(status_code=400, detail="No products to map")

    result = await db.execute(
        select(ProductGroup).where(ProductGroup.id == payload.product_group_id)
    )
    group = result.scalar_one_or_none()
    if not group:
        raise HTTPException(
            status_code=404,
            detail=f"Product group not found: {payload.product_group_id}",
        )

    found = set(
        (
            await db.execute(select(Product.id).where(Product.id.in_(payload.product_ids)))
        ).scalars().all()
    )
    missing = sorted(set(payload.product_ids) - found)
    if missing:
        raise HTTPException(status_code=404, detail=f"Products not found: {missing}")

    mapped_count = await apply_mapping(db, payload.product_ids, group)
    return MappingResponse(product_group_id=group.id, mapped_count=mapped_count)
