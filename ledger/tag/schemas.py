"""Schemas for transaction tags."""

from ledger.core.schemas import LedgerModel


class Tag(LedgerModel):
    id: int
    name: str

    @classmethod
    def from_row(cls, row) -> "Tag":
        return cls(id=row.id, name=row.name)
