import random
from collections import deque
from typing import Iterable, List, Optional, Union

from .backoff import BusyBackoff
from .channel import NodeChannelRegistry
from .config import DEFAULT_MAX_PAYMENT_FEE, NetworkConfig, NodeSpec
from .entity_id import AccountId
from .errors import ValidationError
from .hooks import HookManager
from .metrics import QueryMetrics
from .money import Hbar
from .payment import PaymentTransactionBuilder, TransactionSigner, TransferPaymentBuilder


class Client:
    """
    Shared, read-mostly context for executing queries: the node set, the
    operator paying for queries, the RPC channel, and client-wide payment
    limits. Queries only read from it, so one client serves many concurrent
    executions of different query builders.
    """

    def __init__(
        self,
        nodes: Iterable[NodeSpec],
        operator_account_id: Optional[AccountId] = None,
        operator_signer: Optional[TransactionSigner] = None,
        channel=None,
        payment_builder: Optional[PaymentTransactionBuilder] = None,
        max_query_payment: Optional[Hbar] = None,
        max_payment_fee: Hbar = DEFAULT_MAX_PAYMENT_FEE,
        backoff: Optional[BusyBackoff] = None,
        hooks: Optional[HookManager] = None,
        metrics: Optional[QueryMetrics] = None,
        verbose: bool = False,
        rng: Optional[random.Random] = None,
    ):
        self._nodes: List[NodeSpec] = list(nodes)
        if not self._nodes:
            raise ValueError("Client needs at least one node.")
        self._nodes_by_id = {node.account_id: node for node in self._nodes}
        self._operator_account_id = operator_account_id
        self._operator_signer = operator_signer
        self.channel = channel if channel is not None else NodeChannelRegistry()
        self.payment_builder = payment_builder or TransferPaymentBuilder()
        self._max_query_payment = max_query_payment
        self.max_payment_fee = max_payment_fee
        self.backoff = backoff or BusyBackoff()
        self.hooks = hooks or HookManager()
        self.metrics = metrics or QueryMetrics()
        self.verbose = verbose
        self._rng = rng or random.Random()
        self._log_buffer = deque(maxlen=50)  # Store last 50 log lines

    @classmethod
    def from_config(
        cls,
        config: NetworkConfig,
        operator_signer: Optional[TransactionSigner] = None,
        **kwargs,
    ) -> "Client":
        operator = config.operator
        kwargs.setdefault("max_query_payment", config.max_query_payment)
        kwargs.setdefault("max_payment_fee", config.max_payment_fee)
        kwargs.setdefault("verbose", config.verbose)
        return cls(
            config.all_nodes(),
            operator_account_id=operator.account_id if operator else None,
            operator_signer=operator_signer,
            **kwargs,
        )

    def set_operator(self, account_id: Union[AccountId, str], signer: TransactionSigner) -> "Client":
        self._operator_account_id = AccountId.coerce(account_id)
        self._operator_signer = signer
        return self

    @property
    def operator_account_id(self) -> Optional[AccountId]:
        return self._operator_account_id

    @property
    def operator_signer(self) -> Optional[TransactionSigner]:
        return self._operator_signer

    def require_operator(self):
        if self._operator_account_id is None or self._operator_signer is None:
            raise ValidationError(
                ["client must have an operator set to pay for queries"], subject="client"
            )
        return self._operator_account_id, self._operator_signer

    @property
    def max_query_payment(self) -> Optional[Hbar]:
        return self._max_query_payment

    def set_max_query_payment(self, amount: Union[Hbar, int, None]) -> "Client":
        self._max_query_payment = None if amount is None else Hbar.coerce(amount)
        return self

    def random_node(self) -> NodeSpec:
        return self._rng.choice(self._nodes)

    def node_by_id(self, node_id: Union[AccountId, str]) -> NodeSpec:
        account_id = AccountId.coerce(node_id)
        if account_id not in self._nodes_by_id:
            raise KeyError(f"Node '{account_id}' is not part of this client's network.")
        return self._nodes_by_id[account_id]

    @property
    def nodes(self) -> List[NodeSpec]:
        return list(self._nodes)

    def log(self, message: str) -> None:
        self._log_buffer.append(message)
        if self.verbose:
            print(message, flush=True)

    def recent_logs(self) -> List[str]:
        return list(self._log_buffer)

    async def close(self) -> None:
        close_all = getattr(self.channel, "close_all", None)
        if close_all is not None:
            await close_all()
        self.hooks.shutdown(wait=False)

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
