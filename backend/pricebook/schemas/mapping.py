"""Pydantic schemas for product-to-group mapping."""

from pydantic import BaseModel, Field


class MappingSuggestion(BaseModel):
    """A proposed link between an unmapped product and a product group."""
    product_id: int
    product_name: str
    supplier_name: str
    group_id: int
    group_name: str
    score: float = Field(..., ge=0.0, le=1.0)


class MappingSuggestions(BaseModel):
    suggestions: list[MappingSuggestion] = Field(default_factory=list)


class MappingRequest(BaseModel):
    """Map one or more products onto a group."""
    product_ids: list[int] = Field(default_factory=list)
    product_group_id: int


class MappingResponse(BaseModel):
    product_group_id: int
    mapped_count: int
