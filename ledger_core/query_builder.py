import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from .config import NodeSpec
from .cost import estimate_cost
from .errors import (
    MaxPaymentExceededError,
    NetworkStatusError,
    QueryTimeoutError,
    ValidationError,
)
from .hooks import HookEvents
from .money import Hbar
from .payment import PaymentTransaction
from .query import Query, QueryHeader, ResponseHeader
from .status import ResponseCode, Status, is_exceptional, status_name
from .validation import validate_query
from .wire import MethodDescriptor, decode_message, encode_message

T = TypeVar("T")

Response = Dict[str, Any]

DEFAULT_EXECUTE_TIMEOUT = 10.0


@dataclass
class _ExecutionState:
    """What the deadline handler needs to know about an in-flight execution."""

    attempts: int = 0
    last_status: Optional[Status] = None


class QueryBuilder(ABC, Generic[T]):
    """
    Builds one read-only query, negotiates its payment, and executes it.

    Concrete query kinds supply the capability methods: which gRPC method
    answers them, their own local checks, and how to map a response into a
    result. A builder is single-use: configure it, optionally ask for its
    cost, then ``execute`` it once. Do not execute the same builder
    concurrently with itself.

    Payment precedence, evaluated at execution time:
        1. a payment attached with ``set_payment`` (the node comes from it)
        2. an explicit amount from ``set_query_payment``
        3. a ceiling (this query's, else the client's): the cost is quoted
           first and paid exactly, unless it exceeds the ceiling
        4. nothing, and validation rejects the query
    """

    def __init__(self, kind: str):
        self._inner = Query(kind)
        self._max_payment_amount: Optional[Hbar] = None
        self._payment_amount: Optional[Hbar] = None
        self._node: Optional[NodeSpec] = None

    def set_max_query_payment(self, amount: Union[Hbar, int]) -> "QueryBuilder[T]":
        self._max_payment_amount = Hbar.coerce(amount)
        return self

    def set_query_payment(self, amount: Union[Hbar, int]) -> "QueryBuilder[T]":
        self._payment_amount = Hbar.coerce(amount)
        return self

    def set_payment(self, transaction: PaymentTransaction) -> "QueryBuilder[T]":
        """Attach a manually built and signed transfer as the query payment."""
        self._get_header().payment = transaction
        return self

    def to_wire_form(self) -> Query:
        return self._inner

    async def get_cost(self, client) -> Hbar:
        return await estimate_cost(self, client, self._resolve_node(client))

    async def execute(self, client) -> T:
        state = _ExecutionState()
        timeout = self._default_execute_timeout()
        name = type(self).__name__
        start = time.time()

        try:
            result = await asyncio.wait_for(self._execute(client, state), timeout)
        except asyncio.TimeoutError:
            error = QueryTimeoutError(timeout, state.last_status)
            self._record_failure(client, error, state)
            raise error from None
        except Exception as exc:
            # Ledger errors and malformed responses alike
            self._record_failure(client, exc, state)
            raise

        duration_ms = (time.time() - start) * 1000
        client.metrics.record_completion(duration_ms, state.attempts)
        client.log(
            f"[QueryBuilder] {name} completed in {duration_ms:.1f}ms "
            f"after {state.attempts} attempt(s)"
        )
        client.hooks.trigger_hook(
            HookEvents.QUERY_COMPLETED,
            query=name,
            node=str(self._node.account_id),
            attempts=state.attempts,
            duration_ms=duration_ms,
        )
        return result

    async def _execute(self, client, state: _ExecutionState) -> T:
        node = await self._resolve_payment(client)

        # Run validator (after we have set the payment)
        validate_query(self)
        if node is None:
            node = self._resolve_node(client)

        attempt = 0
        while True:  # bounded by the deadline in execute()
            if attempt > 0:
                delay_ms = await client.backoff.wait(attempt)
                client.log(
                    f"[QueryBuilder] {type(self).__name__} attempt {attempt + 1} "
                    f"after {delay_ms}ms backoff"
                )

            client.hooks.trigger_hook(
                HookEvents.QUERY_SUBMITTED,
                query=type(self).__name__,
                node=str(node.account_id),
                attempt=attempt,
            )
            response = await self._submit(client, node, self._inner)
            state.attempts += 1
            status = self._map_response_header(response).precheck_status
            state.last_status = status

            if self._should_retry(status, response):
                client.metrics.record_busy()
                client.hooks.trigger_hook(
                    HookEvents.QUERY_BUSY,
                    query=type(self).__name__,
                    node=str(node.account_id),
                    attempt=attempt,
                )
                attempt += 1
                continue

            if is_exceptional(status, unknown_ok=True):
                raise NetworkStatusError(status)

            return self._map_response(response)

    async def _resolve_payment(self, client) -> Optional[NodeSpec]:
        if not self._is_payment_required():
            return self._resolve_node(client)

        header = self._get_header()
        if header.has_payment():
            # Execution must target the node the payment pays.
            try:
                node_id = client.payment_builder.target_node(header.payment)
            except ValueError as exc:
                raise ValidationError(
                    [f"attached payment does not name a node account: {exc}"],
                    subject=type(self).__name__,
                ) from exc
            try:
                self._node = client.node_by_id(node_id)
            except KeyError as exc:
                raise ValidationError(
                    [f"payment targets node {node_id}, which is not in the client's network"],
                    subject=type(self).__name__,
                ) from exc
            return self._node

        if self._payment_amount is not None:
            node = self._resolve_node(client)
            self._generate_payment_transaction(client, node, self._payment_amount)
            return node

        ceiling = self._max_payment_amount
        if ceiling is None:
            ceiling = client.max_query_payment
        if ceiling is not None:
            node = self._resolve_node(client)
            actual_cost = await estimate_cost(self, client, node)
            if actual_cost > ceiling:
                raise MaxPaymentExceededError(actual_cost, ceiling)
            self._generate_payment_transaction(client, node, actual_cost)
            return node

        return None

    def _resolve_node(self, client) -> NodeSpec:
        if self._node is None:
            self._node = client.random_node()
            client.log(
                f"[QueryBuilder] {type(self).__name__} pinned node "
                f"{self._node.account_id} ({self._node.address})"
            )
        return self._node

    def _generate_payment_transaction(self, client, node: NodeSpec, amount: Hbar) -> None:
        operator_id, signer = client.require_operator()
        payment = client.payment_builder.build(
            operator_id, node.account_id, amount, client.max_payment_fee, signer
        )
        self.set_payment(payment)
        client.log(
            f"[QueryBuilder] {type(self).__name__} paying {amount} to node {node.account_id}"
        )
        client.hooks.trigger_hook(
            HookEvents.PAYMENT_ATTACHED,
            query=type(self).__name__,
            node=str(node.account_id),
            amount=amount,
        )

    async def _submit(self, client, node: NodeSpec, query: Query) -> Response:
        data = await client.channel.submit(
            node.address, encode_message(query.to_dict()), self._get_method()
        )
        return decode_message(data)

    def _record_failure(self, client, error: Exception, state: _ExecutionState) -> None:
        client.metrics.record_failure()
        last = status_name(state.last_status) if state.last_status is not None else "none"
        client.log(
            f"[QueryBuilder] {type(self).__name__} failed after {state.attempts} "
            f"attempt(s), last status {last}: {error}"
        )
        client.hooks.trigger_hook(
            HookEvents.QUERY_FAILED,
            query=type(self).__name__,
            error=error,
            attempts=state.attempts,
            last_status=state.last_status,
        )

    @abstractmethod
    def _get_method(self) -> MethodDescriptor:
        ...

    @abstractmethod
    def _map_response(self, response: Response) -> T:
        ...

    @abstractmethod
    def _do_local_validate(self, errors: List[str]) -> None:
        ...

    def _get_header(self) -> QueryHeader:
        return self._inner.header

    def _map_response_header(self, response: Response) -> ResponseHeader:
        return ResponseHeader.of_response(response, self._inner.kind)

    def _should_retry(self, status: Status, response: Response) -> bool:
        # By default, ONLY the BUSY status should be retried
        return status == ResponseCode.BUSY

    def _default_execute_timeout(self) -> float:
        return DEFAULT_EXECUTE_TIMEOUT

    def _is_payment_required(self) -> bool:
        # Nearly all queries require a payment
        return True

    def _response_body(self, response: Response) -> Dict[str, Any]:
        return response.get(self._inner.kind, {})
