"""Node precheck status codes."""

from enum import IntEnum
from typing import Union


class ResponseCode(IntEnum):
    OK = 0
    INVALID_TRANSACTION = 1
    PAYER_ACCOUNT_NOT_FOUND = 2
    INVALID_NODE_ACCOUNT = 3
    TRANSACTION_EXPIRED = 4
    INVALID_TRANSACTION_START = 5
    INVALID_TRANSACTION_DURATION = 6
    INVALID_SIGNATURE = 7
    MEMO_TOO_LONG = 8
    INSUFFICIENT_TX_FEE = 9
    INSUFFICIENT_PAYER_BALANCE = 10
    DUPLICATE_TRANSACTION = 11
    BUSY = 12
    NOT_SUPPORTED = 13
    INVALID_FILE_ID = 14
    INVALID_ACCOUNT_ID = 15
    INVALID_CONTRACT_ID = 16
    INVALID_TRANSACTION_ID = 17
    RECEIPT_NOT_FOUND = 18
    RECORD_NOT_FOUND = 19
    INVALID_SOLIDITY_ID = 20
    UNKNOWN = 21
    SUCCESS = 22
    FAIL_INVALID = 23
    FAIL_FEE = 24
    FAIL_BALANCE = 25

    @classmethod
    def from_value(cls, value) -> Union["ResponseCode", int]:
        """Map a raw wire value to a member; unrecognized codes stay plain ints."""
        code = int(value)
        try:
            return cls(code)
        except ValueError:
            return code


Status = Union[ResponseCode, int]


# Statuses that say "not known yet" rather than "rejected".
UNKNOWN_STATUSES = (
    ResponseCode.UNKNOWN,
    ResponseCode.RECEIPT_NOT_FOUND,
    ResponseCode.RECORD_NOT_FOUND,
)


def is_exceptional(status: Status, unknown_ok: bool = False) -> bool:
    """True when ``status`` should fail the query.

    With ``unknown_ok`` the not-yet-known statuses in ``UNKNOWN_STATUSES``
    are let through so the caller can map the response.
    """
    if status in (ResponseCode.OK, ResponseCode.SUCCESS):
        return False
    if unknown_ok and status in UNKNOWN_STATUSES:
        return False
    return True


def status_name(status: Status) -> str:
    if isinstance(status, ResponseCode):
        return status.name
    return f"UNRECOGNIZED({int(status)})"
