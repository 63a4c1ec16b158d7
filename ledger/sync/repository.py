"""Repository for bulk ingestion of externally produced transactions."""

import csv
import io
from typing import BinaryIO, List, Optional, Union

import pandas as pd
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.core.errors import LedgerError, ValidationError
from ledger.core.logging import get_logger
from ledger.sync import schemas
from ledger.transaction.repository import TransactionRepository

logger = get_logger(__name__)

CSV_COLUMNS = ["account_id", "category_id", "amount", "is_expense", "currency", "transacted_at"]


class SyncRepository:
    """
    Applies sync batches through the regular transaction write path.

    Every item is its own unit of work, so one bad row never aborts the
    batch. There is no de-duplication: replaying a batch inserts it again.
    """

    def __init__(self, session: AsyncSession, base_currency: Optional[str] = None):
        """Initialize repository with database session."""
        self.session = session
        self.transactions = TransactionRepository(session, base_currency)

    async def _apply(self, index: int, item: schemas.SyncTransaction) -> bool:
        try:
            await self.transactions.create_transaction(
                account_id=item.account_id,
                category_id=item.category_id,
                amount=item.amount,
                is_expense=item.is_expense,
                memo=item.memo,
                payee=item.payee,
                currency=item.currency,
                transacted_at=item.transacted_at,
                base_amount=item.base_amount,
            )
        except LedgerError as exc:
            logger.warning(
                "sync_item_failed",
                index=index,
                account_id=item.account_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return False
        return True

    async def ingest(self, request: schemas.SyncRequest) -> schemas.SyncResult:
        """Create every transaction in the batch, counting the ones that stuck."""
        logger.info(
            "sync_started",
            received=len(request.transactions),
            last_synced_at=request.last_synced_at,
        )
        synced = 0
        for index, item in enumerate(request.transactions):
            if await self._apply(index, item):
                synced += 1
        result = schemas.SyncResult(received=len(request.transactions), synced=synced)
        logger.info("sync_completed", received=result.received, synced=result.synced)
        return result

    async def import_csv(self, file_content: Union[bytes, BinaryIO]) -> schemas.SyncResult:
        """
        Import transactions from a CSV file.

        Required columns: account_id, category_id, amount, is_expense,
        currency, transacted_at. Optional: base_amount, memo (or
        description), payee. The delimiter is detected. Rows that do not
        validate count as failures like any other bad item.
        """
        raw = file_content if isinstance(file_content, bytes) else file_content.read()
        try:
            frame = pd.read_csv(
                io.BytesIO(raw),
                sep=None,
                engine="python",
                dtype=str,
                keep_default_na=False,
            )
        except (csv.Error, pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
            raise ValidationError(f"Unreadable CSV file: {exc}") from exc

        frame.columns = [str(column).strip() for column in frame.columns]
        # short rows come back with NaN in their trailing fields
        frame = frame.fillna("")
        missing = [column for column in CSV_COLUMNS if column not in frame.columns]
        if missing:
            raise ValidationError(f"CSV file is missing columns: {', '.join(missing)}")

        items: List[schemas.SyncTransaction] = []
        rejected = 0
        for row_num, record in enumerate(frame.to_dict(orient="records"), start=2):
            values = {key: str(value).strip() for key, value in record.items() if str(value).strip()}
            try:
                items.append(schemas.SyncTransaction.model_validate(values))
            except SchemaValidationError as exc:
                rejected += 1
                logger.warning("csv_row_rejected", row=row_num, errors=exc.error_count())

        result = await self.ingest(schemas.SyncRequest(transactions=items))
        return schemas.SyncResult(received=result.received + rejected, synced=result.synced)
