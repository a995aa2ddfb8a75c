"""Query payments: signed transfers from the operator to the answering node."""

import base64
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Protocol, Tuple

from .entity_id import AccountId
from .money import Hbar
from .wire import decode_message, encode_message

TRANSACTION_VALID_DURATION_SECONDS = 120


@dataclass(frozen=True)
class TransactionSigner:
    """Operator key handle: its public key and a function signing raw bytes."""

    public_key: bytes
    sign_fn: Callable[[bytes], bytes]

    def sign(self, message: bytes) -> bytes:
        return self.sign_fn(message)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


@dataclass(frozen=True)
class PaymentTransaction:
    """A serialized transaction body together with its signatures."""

    body_bytes: bytes
    signatures: Tuple[Tuple[bytes, bytes], ...] = field(default_factory=tuple)

    def body(self) -> Dict[str, Any]:
        return decode_message(self.body_bytes)

    def node_account_id(self) -> AccountId:
        node_id = self.body().get("nodeAccountID")
        if not node_id:
            raise ValueError("Payment transaction does not name a node account.")
        return AccountId.from_string(node_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bodyBytes": _b64(self.body_bytes),
            "sigMap": [
                {"pubKeyPrefix": _b64(public_key), "signature": _b64(signature)}
                for public_key, signature in self.signatures
            ],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PaymentTransaction":
        return cls(
            body_bytes=base64.b64decode(data["bodyBytes"]),
            signatures=tuple(
                (base64.b64decode(pair["pubKeyPrefix"]), base64.b64decode(pair["signature"]))
                for pair in data.get("sigMap", [])
            ),
        )


class PaymentTransactionBuilder(Protocol):
    def build(
        self,
        from_account: AccountId,
        to_node: AccountId,
        amount: Hbar,
        max_fee: Hbar,
        signer: TransactionSigner,
    ) -> PaymentTransaction:
        ...

    def target_node(self, payment: PaymentTransaction) -> AccountId:
        ...


class TransferPaymentBuilder:
    """Builds single-transfer payments moving ``amount`` from the operator to a node."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    def build(
        self,
        from_account: AccountId,
        to_node: AccountId,
        amount: Hbar,
        max_fee: Hbar,
        signer: TransactionSigner,
    ) -> PaymentTransaction:
        now = self._clock()
        seconds = int(now)
        tinybar = amount.as_tinybar()
        transfers: List[Dict[str, str]] = [
            {"accountID": str(from_account), "amount": str(-tinybar)},
            {"accountID": str(to_node), "amount": str(tinybar)},
        ]
        body = {
            "transactionID": {
                "accountID": str(from_account),
                "transactionValidStart": {
                    "seconds": str(seconds),
                    "nanos": int((now - seconds) * 1_000_000_000),
                },
            },
            "nodeAccountID": str(to_node),
            "transactionFee": str(max_fee.as_tinybar()),
            "transactionValidDuration": {"seconds": TRANSACTION_VALID_DURATION_SECONDS},
            "cryptoTransfer": {"transfers": {"accountAmounts": transfers}},
        }
        body_bytes = encode_message(body)
        return PaymentTransaction(
            body_bytes=body_bytes,
            signatures=((signer.public_key, signer.sign(body_bytes)),),
        )

    def target_node(self, payment: PaymentTransaction) -> AccountId:
        return payment.node_account_id()


def transfer_amount(payment: PaymentTransaction, account_id: AccountId) -> int:
    """Net tinybar the payment moves into ``account_id`` (negative when it pays out)."""
    transfers = payment.body().get("cryptoTransfer", {}).get("transfers", {})
    return sum(
        int(entry["amount"])
        for entry in transfers.get("accountAmounts", [])
        if entry.get("accountID") == str(account_id)
    )
