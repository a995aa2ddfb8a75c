"""Query envelope, its mutable header, and the header carried back in responses."""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .payment import PaymentTransaction
from .status import ResponseCode, Status


class ResponseType(Enum):
    ANSWER_ONLY = "ANSWER_ONLY"
    ANSWER_STATE_PROOF = "ANSWER_STATE_PROOF"
    COST_ANSWER = "COST_ANSWER"
    COST_ANSWER_STATE_PROOF = "COST_ANSWER_STATE_PROOF"


@dataclass
class QueryHeader:
    """Response type and optional payment carried inside every query."""

    response_type: ResponseType = ResponseType.ANSWER_ONLY
    payment: Optional[PaymentTransaction] = None

    def has_payment(self) -> bool:
        return self.payment is not None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"responseType": self.response_type.value}
        if self.payment is not None:
            data["payment"] = self.payment.to_dict()
        return data


@dataclass
class Query:
    """One query of a given kind: its header plus kind-specific body fields."""

    kind: str
    header: QueryHeader = field(default_factory=QueryHeader)
    body: Dict[str, Any] = field(default_factory=dict)

    def clone(self) -> "Query":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {self.kind: {"header": self.header.to_dict(), **self.body}}


@dataclass(frozen=True)
class ResponseHeader:
    precheck_status: Status
    cost: int = 0
    response_type: Optional[ResponseType] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResponseHeader":
        response_type = data.get("responseType")
        return cls(
            precheck_status=ResponseCode.from_value(data.get("nodeTransactionPrecheckCode", 0)),
            cost=int(data.get("cost", "0")),
            response_type=ResponseType(response_type) if response_type else None,
        )

    @classmethod
    def of_response(cls, response: Mapping[str, Any], kind: str) -> "ResponseHeader":
        """Extract the header of a ``{kind: {"header": {...}, ...}}`` response."""
        try:
            body = response[kind]
        except KeyError as exc:
            raise ValueError(f"Response does not answer a '{kind}' query.") from exc
        return cls.from_dict(body.get("header", {}))
