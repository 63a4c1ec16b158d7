"""Sync endpoints for bulk transaction ingestion."""

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.core.errors import ValidationError
from ledger.core.init_db import get_db
from ledger.sync import schemas
from ledger.sync.repository import SyncRepository

router = APIRouter(
    prefix="/api/sync",
    tags=["sync"],
    responses={422: {"description": "Malformed request"}},
)


@router.post("", response_model=schemas.SyncResult)
async def sync_transactions(
    payload: schemas.SyncRequest,
    db: AsyncSession = Depends(get_db),
) -> schemas.SyncResult:
    """
    Insert a batch of transactions produced by a sync client.

    Each item goes through the normal transaction write path, so account
    balances stay consistent. A bad item is skipped and logged; the response
    only reports how many were stored.
    """
    repo = SyncRepository(db)
    return await repo.ingest(payload)


@router.post("/csv", response_model=schemas.SyncResult)
async def sync_csv(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
) -> schemas.SyncResult:
    """
    Import transactions from an uploaded CSV file.

    The CSV file must have the following columns:
    - account_id, category_id
    - amount, is_expense
    - currency
    - transacted_at: YYYY-MM-DD or an ISO timestamp

    Optional columns: base_amount, memo, payee.
    """
    if not (file.filename or "").lower().endswith(".csv"):
        raise ValidationError("Invalid file format. Only CSV files (.csv) are supported.")

    repo = SyncRepository(db)
    content = await file.read()
    return await repo.import_csv(content)
