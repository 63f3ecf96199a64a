"""Exception types raised by the repository and attachment encoder."""

from __future__ import annotations


class MemoLedgerError(Exception):
    """Base class for memoledger errors."""


class MemoValidationError(MemoLedgerError):
    """A save was rejected because required fields are missing or invalid."""

    def __init__(self, fields: list[str]) -> None:
        self.fields = list(fields)
        super().__init__(f"missing or invalid fields: {', '.join(self.fields)}")


class AttachmentError(MemoLedgerError):
    """An uploaded file could not be read or encoded."""


class MemoNotFoundError(MemoLedgerError):
    """No memo matches the given id."""

    def __init__(self, memo_id: str) -> None:
        self.memo_id = memo_id
        super().__init__(f"memo not found: {memo_id}")


class RepositoryBusyError(MemoLedgerError):
    """A mutation was attempted while another save is still in flight."""
