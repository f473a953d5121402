"""
Import API routes: two-phase spreadsheet import.

Endpoints:
  POST   /api/v1/imports/{layout}/preview    — Parse, validate and resolve a sheet (no writes)
  POST   /api/v1/imports/{layout}/confirm    — Persist approved preview rows
  GET    /api/v1/imports/batches/{batch_id}  — Get a recorded import batch

Layouts: buyer_price_list, supplier_price_list, purchase_history.
"""

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pricebook.core.config import settings
from pricebook.core.database import get_db
from pricebook.errors import (
    ImportConfirmError,
    ImportPipelineError,
    UnknownSupplierError,
)
from pricebook.models.purchasing import ImportBatch
from pricebook.schemas.imports import (
    ImportBatchResponse,
    ImportConfirmRequest,
    ImportConfirmResult,
    ImportLayout,
    ImportPreview,
)
from pricebook.services.import_session import confirm_import, preview_import

router = APIRouter()


def _http_error(e: ImportPipelineError) -> HTTPException:
    if isinstance(e, UnknownSupplierError):
        return HTTPException(status_code=404, detail=e.message)
    if isinstance(e, ImportConfirmError):
        return HTTPException(status_code=500, detail=e.message)
    return HTTPException(status_code=400, detail=e.message)


# ─── Batch Status ─────────────────────────────────────────────

@router.get("/batches/{batch_id}", response_model=ImportBatchResponse)
async def get_import_batch(
    batch_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get the layout and outcome counts of a confirmed import."""
    result = await db.execute(select(ImportBatch).where(ImportBatch.id == batch_id))
    batch = result.scalar_one_or_none()
    if not batch:
        raise HTTPException(status_code=404, detail=f"Import batch not found: {batch_id}")
    return batch


# ─── Preview / Confirm ────────────────────────────────────────

@router.post("/{layout}/preview", response_model=ImportPreview)
async def preview(
    layout: ImportLayout,
    file: UploadFile = File(...),
    supplier_id: int | None = Form(None),
    db: AsyncSession = Depends(get_db),
):
    """
    Preview a spreadsheet import.

    Returns every non-blank row normalized, with its resolved (or proposed)
    supplier and product and its validation errors. Nothing is written;
    suppliers and products that confirm would create carry negative ids.
    """
    file_bytes = await file.read()
    if not file_bytes:
        raise HTTPException(status_code=400, detail="Empty file uploaded")
    if len(file_bytes) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds {settings.MAX_UPLOAD_BYTES} bytes",
        )

    try:
        return await preview_import(
            db=db,
            layout=layout,
            file_bytes=file_bytes,
            filename=file.filename,
            supplier_id=supplier_id,
        )
    except ImportPipelineError as e:
        raise _http_error(e) from e


@router.post("/{layout}/confirm", response_model=ImportConfirmResult)
async def confirm(
    layout: ImportLayout,
    payload: ImportConfirmRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Confirm a previewed import.

    Rows are applied in order inside one transaction. Invalid rows and rows
    without a supplier are skipped; duplicate purchase rows are counted in
    skip_count. Any persistence failure rolls back the whole call.
    """
    try:
        return await confirm_import(
            db=db,
            layout=layout,
            items=payload.items,
            supplier_id=payload.supplier_id,
        )
    except ImportPipelineError as e:
        raise _http_error(e) from e
