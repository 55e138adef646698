from typing import Optional


class PaymentsError(Exception):
    """Base class for errors that abort a run."""


class SourceUnavailableError(PaymentsError):
    """Raised when the transaction source cannot be opened or read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read transactions from {path}: {reason}")


class MalformedRecordError(PaymentsError):
    """Raised for an unparsable row, an unknown type token or a missing amount."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class BalanceOverflowError(PaymentsError):
    """Raised when a balance would need more digits than the ledger keeps exactly."""

    def __init__(self, client_id: int):
        self.client_id = client_id
        super().__init__(f"balance of client {client_id} cannot be represented exactly")
