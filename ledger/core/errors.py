"""Error taxonomy shared by every ledger component."""

from typing import Any, Optional


class LedgerError(Exception):
    """Base class for all ledger failures."""


class ValidationError(LedgerError):
    """Bad user input, detected before any storage access."""


class ParseError(ValidationError):
    """A money or date literal could not be parsed."""

    def __init__(self, kind: str, value: Any):
        self.kind = kind
        self.value = value
        super().__init__(f"Invalid {kind}: {value!r}")


class NotFoundError(LedgerError):
    """An operation referenced an id that does not exist."""

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class StorageError(LedgerError):
    """The storage engine failed; the surrounding unit of work was rolled back."""


class DecodeError(LedgerError):
    """A persisted value could not be decoded back into Money or a timestamp."""

    def __init__(
        self,
        table: str,
        row_id: Optional[Any],
        column: str,
        value: Any,
    ):
        self.table = table
        self.row_id = row_id
        self.column = column
        self.value = value
        super().__init__(
            f"Cannot decode {table}.{column} for row {row_id}: {value!r}"
        )
