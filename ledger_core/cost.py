"""Cost estimation: ask a node what answering a query would cost."""

from contextlib import contextmanager
from typing import Iterator, Optional

from .config import NodeSpec
from .errors import NetworkStatusError
from .hooks import HookEvents
from .money import Hbar
from .payment import PaymentTransaction
from .query import QueryHeader, ResponseType
from .status import is_exceptional
from .validation import validate_query


@contextmanager
def header_override(
    header: QueryHeader,
    response_type: ResponseType,
    payment: Optional[PaymentTransaction],
) -> Iterator[QueryHeader]:
    """Temporarily swap the header's response type and payment as a pair.

    The previous pair is put back on every exit path, including exceptions
    and task cancellation.
    """
    saved_response_type, saved_payment = header.response_type, header.payment
    header.response_type = response_type
    header.payment = payment
    try:
        yield header
    finally:
        header.response_type = saved_response_type
        header.payment = saved_payment


async def estimate_cost(builder, client, node: NodeSpec) -> Hbar:
    """Return the cost ``node`` quotes for answering ``builder``'s query.

    A cost-only query still needs a payment attached, but the node does not
    process it, so a zero-amount transfer to the node is used.
    """
    validate_query(builder, check_payment=False)
    operator_id, signer = client.require_operator()
    zero_payment = client.payment_builder.build(
        operator_id, node.account_id, Hbar.zero(), client.max_payment_fee, signer
    )

    with header_override(builder._get_header(), ResponseType.COST_ANSWER, zero_payment):
        response = await builder._submit(client, node, builder.to_wire_form().clone())
        header = builder._map_response_header(response)
        if is_exceptional(header.precheck_status):
            raise NetworkStatusError(header.precheck_status)

    cost = Hbar.from_tinybar(header.cost)
    client.log(
        f"[CostEstimator] {type(builder).__name__} quoted {cost} by node {node.account_id}"
    )
    client.hooks.trigger_hook(
        HookEvents.COST_QUOTED,
        query=type(builder).__name__,
        node=str(node.account_id),
        cost=cost,
    )
    return cost
