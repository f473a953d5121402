"""Pydantic schemas for the spreadsheet import pipeline."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ImportLayout(str, Enum):
    """The spreadsheet layouts the pipeline accepts."""
    BUYER_PRICE_LIST = "buyer_price_list"
    SUPPLIER_PRICE_LIST = "supplier_price_list"
    PURCHASE_HISTORY = "purchase_history"


# ─── Candidate Rows ───────────────────────────────────────────

class ImportRow(BaseModel):
    """
    One normalized spreadsheet row.

    Produced by preview, optionally edited by the caller, and sent back
    to confirm. supplier_id / product_id hold a real identifier, a negative
    placeholder for an entity that confirm will create, or null.
    """
    row: int = Field(..., description="1-indexed spreadsheet row number")

    supplier_code: str = ""
    supplier_name: str = ""
    supplier_id: int | None = None
    supplier_auto_created: bool = Field(
        False,
        description="Supplier is not in the database yet and will be created on confirm",
    )

    product_code: str = ""
    product_name: str = ""
    product_id: int | None = None
    product_matched: bool = False

    # Price-list fields
    description: str = ""
    price: float | None = None
    currency: str = ""
    unit: str = ""
    effective_date: str | None = Field(None, description="YYYY-MM-DD")
    remark: str = ""

    # Purchase-history fields
    purchase_date: str | None = Field(None, description="YYYY-MM-DD")
    delivery_date: str | None = Field(None, description="YYYY-MM-DD")
    pf_number: str = ""
    po_number: str = ""
    quantity: float | None = None
    unit_price: float | None = None
    total_price: float | None = None

    is_valid: bool = True
    errors: list[str] = Field(default_factory=list)


class RowErrors(BaseModel):
    """Validation errors of one invalid row."""
    row: int
    errors: list[str]


class ProposedSupplier(BaseModel):
    """A supplier the sheet references that does not exist yet."""
    id: int = Field(..., description="Negative placeholder identifier")
    code: str
    name: str


# ─── Preview / Confirm ────────────────────────────────────────

class ImportPreview(BaseModel):
    """Response of the preview endpoint. Nothing has been written."""
    filename: str | None = None
    layout: ImportLayout
    total_rows: int = 0
    valid_rows: int = 0
    error_rows: int = 0
    new_suppliers: list[ProposedSupplier] = Field(default_factory=list)
    preview: list[ImportRow] = Field(default_factory=list)
    errors: list[RowErrors] = Field(default_factory=list)


class ImportConfirmRequest(BaseModel):
    """Request body for the confirm endpoint."""
    items: list[ImportRow] = Field(default_factory=list)
    supplier_id: int | None = Field(
        None,
        description="Required for supplier_price_list: the supplier submitting the list",
    )


class ImportSummary(BaseModel):
    """Outcome counts of a confirm."""
    new_count: int = 0
    update_count: int = 0
    insert_count: int = 0
    skip_count: int = 0
    product_create_count: int = 0
    supplier_create_count: int = 0


class ImportConfirmResult(ImportSummary):
    """Response of the confirm endpoint."""
    batch_id: int
    message: str


class ImportBatchResponse(BaseModel):
    """A recorded confirm."""
    id: int
    layout: str
    supplier_id: int | None
    item_count: int
    counts: dict
    created_at: datetime

    model_config = {"from_attributes": True}
