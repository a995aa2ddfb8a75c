"""Scripted stand-ins for ledger nodes, shared by the test modules."""

import asyncio
import random
from typing import Any, Callable, Dict, List, Optional, Tuple
from unittest.mock import AsyncMock

from ledger_core import (
    AccountId,
    BusyBackoff,
    Client,
    NodeSpec,
    PaymentTransaction,
    ResponseCode,
    TransactionSigner,
)
from ledger_core.wire import MethodDescriptor, decode_message, encode_message

OPERATOR_ID = AccountId.from_string("0.0.2")
NODE_3 = NodeSpec(AccountId.from_string("0.0.3"), "127.0.0.1", 50211)
NODE_4 = NodeSpec(AccountId.from_string("0.0.4"), "127.0.0.1", 50212)


def fake_signer() -> TransactionSigner:
    return TransactionSigner(public_key=b"operator-key", sign_fn=lambda message: b"sig" + message[:8])


def make_response(kind: str, status=ResponseCode.OK, cost: int = 0, **fields) -> Dict[str, Any]:
    header = {"nodeTransactionPrecheckCode": int(status), "cost": str(cost)}
    return {kind: {"header": header, **fields}}


def header_of(query: Dict[str, Any], kind: str) -> Dict[str, Any]:
    return query[kind]["header"]


def payment_of(query: Dict[str, Any], kind: str) -> Optional[PaymentTransaction]:
    payment = header_of(query, kind).get("payment")
    return PaymentTransaction.from_dict(payment) if payment else None


class ScriptedChannel:
    """RPC channel whose answers come from ``responder(address, query, method)``.

    The responder returns a response mapping, or an exception instance to raise.
    Every submission is recorded (decoded) in ``calls``.
    """

    def __init__(self, responder: Callable[[str, Dict[str, Any], MethodDescriptor], Any]):
        self._responder = responder
        self.calls: List[Tuple[str, Dict[str, Any], MethodDescriptor]] = []

    async def submit(self, address: str, query: bytes, method: MethodDescriptor) -> bytes:
        decoded = decode_message(query)
        self.calls.append((address, decoded, method))
        await asyncio.sleep(0)
        result = self._responder(address, decoded, method)
        if isinstance(result, BaseException):
            raise result
        return encode_message(result)

    def answer_calls(self, kind: str) -> List[Tuple[str, Dict[str, Any]]]:
        return [
            (address, query)
            for address, query, _ in self.calls
            if header_of(query, kind)["responseType"] == "ANSWER_ONLY"
        ]

    def cost_calls(self, kind: str) -> List[Tuple[str, Dict[str, Any]]]:
        return [
            (address, query)
            for address, query, _ in self.calls
            if header_of(query, kind)["responseType"] == "COST_ANSWER"
        ]


class NodeScript:
    """Responder quoting ``cost`` for cost queries and walking ``statuses`` for answers.

    Once the statuses run out the last one repeats.
    """

    def __init__(self, kind: str, cost: int = 0, statuses=None, cost_status=ResponseCode.OK, **answer):
        self.kind = kind
        self.cost = cost
        self.statuses = list(statuses or [ResponseCode.OK])
        self.cost_status = cost_status
        self.answer = answer
        self._answered = 0

    def __call__(self, address: str, query: Dict[str, Any], method: MethodDescriptor):
        if header_of(query, self.kind)["responseType"] == "COST_ANSWER":
            return make_response(self.kind, self.cost_status, cost=self.cost)
        status = self.statuses[min(self._answered, len(self.statuses) - 1)]
        self._answered += 1
        return make_response(self.kind, status, **self.answer)


def make_client(channel, **kwargs) -> Client:
    kwargs.setdefault("operator_account_id", OPERATOR_ID)
    kwargs.setdefault("operator_signer", fake_signer())
    kwargs.setdefault("backoff", BusyBackoff(random_fn=lambda: 0.5, sleep=AsyncMock()))
    kwargs.setdefault("rng", random.Random(7))
    return Client([NODE_3, NODE_4], channel=channel, **kwargs)
