"""Query execution core for ledger clients (payment negotiation, retries, cost lookup)."""

from .entity_id import AccountId, EntityId, FileId
from .money import Hbar, TINYBAR_PER_HBAR
from .status import ResponseCode, is_exceptional
from .errors import (
    LedgerError,
    ValidationError,
    MaxPaymentExceededError,
    NetworkStatusError,
    QueryTimeoutError,
    TransportError,
)
from .config import NodeSpec, OperatorSpec, NetworkConfig
from .wire import MethodDescriptor
from .query import Query, QueryHeader, ResponseHeader, ResponseType
from .payment import (
    PaymentTransaction,
    PaymentTransactionBuilder,
    TransactionSigner,
    TransferPaymentBuilder,
)
from .channel import NodeChannelRegistry
from .backoff import BusyBackoff
from .hooks import HookManager, HookEvents
from .metrics import QueryMetrics
from .client import Client
from .query_builder import QueryBuilder
from .queries import AccountBalanceQuery, AccountInfo, AccountInfoQuery, FileContentsQuery

__all__ = [
    "AccountId",
    "EntityId",
    "FileId",
    "Hbar",
    "TINYBAR_PER_HBAR",
    "ResponseCode",
    "is_exceptional",
    "LedgerError",
    "ValidationError",
    "MaxPaymentExceededError",
    "NetworkStatusError",
    "QueryTimeoutError",
    "TransportError",
    "NodeSpec",
    "OperatorSpec",
    "NetworkConfig",
    "MethodDescriptor",
    "Query",
    "QueryHeader",
    "ResponseHeader",
    "ResponseType",
    "PaymentTransaction",
    "PaymentTransactionBuilder",
    "TransactionSigner",
    "TransferPaymentBuilder",
    "NodeChannelRegistry",
    "BusyBackoff",
    "HookManager",
    "HookEvents",
    "QueryMetrics",
    "Client",
    "QueryBuilder",
    "AccountBalanceQuery",
    "AccountInfo",
    "AccountInfoQuery",
    "FileContentsQuery",
]
