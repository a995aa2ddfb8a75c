"""Errors surfaced by query cost estimation and execution."""

from typing import Iterable, List, Optional

from .status import Status, status_name


class LedgerError(Exception):
    """Base class for every error raised by ledger_core."""


class ValidationError(LedgerError, ValueError):
    """One or more local preconditions were not met before contacting the network."""

    def __init__(self, messages: Iterable[str], subject: str = "query"):
        self.messages: List[str] = list(messages)
        self.subject = subject
        details = "\n".join(f"  - {message}" for message in self.messages)
        super().__init__(f"{subject} failed validation:\n{details}")


class MaxPaymentExceededError(LedgerError):
    """The quoted query cost is above the configured ceiling."""

    def __init__(self, quoted, ceiling):
        self.quoted = quoted
        self.ceiling = ceiling
        super().__init__(
            f"query cost of {quoted} exceeds the max query payment of {ceiling}"
        )


class NetworkStatusError(LedgerError):
    """A node rejected the query with an exceptional precheck status."""

    def __init__(self, status: Status):
        self.status = status
        super().__init__(f"node precheck failed with status {status_name(status)}")


class QueryTimeoutError(LedgerError, TimeoutError):
    """The overall execution deadline elapsed.

    ``last_status`` holds the precheck status of the last completed attempt,
    or ``None`` when no attempt completed in time.
    """

    def __init__(self, timeout: float, last_status: Optional[Status] = None):
        self.timeout = timeout
        self.last_status = last_status
        if last_status is None:
            message = f"query timed out after {timeout}s before any response"
        else:
            message = (
                f"query timed out after {timeout}s; "
                f"last status was {status_name(last_status)}"
            )
        super().__init__(message)


class TransportError(LedgerError):
    """The RPC channel itself failed (unreachable node, cancelled call, ...)."""

    def __init__(self, address: str, code=None, details: Optional[str] = None):
        self.address = address
        self.code = code
        self.details = details
        code_name = getattr(code, "name", code)
        super().__init__(f"RPC to {address} failed: {code_name} {details or ''}".rstrip())
