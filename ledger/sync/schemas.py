"""Pydantic schemas for sync ingestion."""

from decimal import Decimal
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, computed_field


class SyncTransaction(BaseModel):
    """One externally produced transaction."""
    account_id: int
    category_id: int
    amount: Decimal
    base_amount: Optional[Decimal] = None
    is_expense: bool
    memo: Optional[str] = Field(None, validation_alias=AliasChoices("memo", "description"))
    payee: Optional[str] = None
    currency: str
    transacted_at: str


class SyncRequest(BaseModel):
    """
    Batch sent by a sync client.

    ``last_synced_at`` is accepted for forward compatibility but does not
    filter anything yet.
    """
    last_synced_at: Optional[str] = None
    transactions: List[SyncTransaction] = []


class SyncResult(BaseModel):
    """Aggregate outcome; individual failures are only visible in the logs."""
    received: int
    synced: int

    @computed_field
    @property
    def failed(self) -> int:
        return self.received - self.synced

    @computed_field
    @property
    def message(self) -> str:
        return f"Synced {self.synced} transactions successfully"
