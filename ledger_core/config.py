import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .entity_id import AccountId
from .money import Hbar

DEFAULT_MAX_PAYMENT_FEE = Hbar.of(1)


@dataclass(frozen=True)
class NodeSpec:
    """Immutable description of a network node: its account identity and address."""

    account_id: AccountId
    host: str
    port: int

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class OperatorSpec:
    """The account that pays for queries."""

    account_id: AccountId


class NetworkConfig:
    """Config facade that hides JSON parsing and node lookup semantics."""

    def __init__(self, config_path: str):
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with path.open("r", encoding="utf-8") as stream:
            payload = json.load(stream)

        self._load(payload)

    @classmethod
    def from_dict(cls, payload: Mapping) -> "NetworkConfig":
        config = cls.__new__(cls)
        config._load(payload)
        return config

    def _load(self, payload: Mapping) -> None:
        nodes = payload.get("nodes", {})
        if not nodes:
            raise ValueError("Configuration must include at least one node definition.")

        self._nodes: Dict[AccountId, NodeSpec] = {}
        for node_id, spec in nodes.items():
            try:
                account_id = AccountId.from_string(node_id)
                self._nodes[account_id] = NodeSpec(
                    account_id=account_id,
                    host=spec["host"],
                    port=int(spec["port"]),
                )
            except KeyError as exc:
                missing = exc.args[0]
                raise ValueError(f"Node '{node_id}' missing required field '{missing}'.") from exc

        operator = payload.get("operator")
        self._operator: Optional[OperatorSpec] = None
        if operator is not None:
            if "account_id" not in operator:
                raise ValueError("Operator missing required field 'account_id'.")
            self._operator = OperatorSpec(AccountId.from_string(operator["account_id"]))

        self._max_query_payment = self._optional_hbar(payload, "max_query_payment_tinybar")
        self._max_payment_fee = (
            self._optional_hbar(payload, "max_payment_fee_tinybar") or DEFAULT_MAX_PAYMENT_FEE
        )
        self._verbose = bool(payload.get("verbose", False))

    @staticmethod
    def _optional_hbar(payload: Mapping, key: str) -> Optional[Hbar]:
        value = payload.get(key)
        if value is None:
            return None
        try:
            return Hbar.from_tinybar(int(value))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Field '{key}' must be a tinybar amount, got {value!r}.") from exc

    def get(self, node_id) -> NodeSpec:
        account_id = AccountId.coerce(node_id)
        if account_id not in self._nodes:
            raise KeyError(f"Node '{account_id}' is not defined in the configuration.")
        return self._nodes[account_id]

    def all_nodes(self) -> List[NodeSpec]:
        return list(self._nodes.values())

    @property
    def operator(self) -> Optional[OperatorSpec]:
        return self._operator

    @property
    def max_query_payment(self) -> Optional[Hbar]:
        return self._max_query_payment

    @property
    def max_payment_fee(self) -> Hbar:
        return self._max_payment_fee

    @property
    def verbose(self) -> bool:
        return self._verbose
