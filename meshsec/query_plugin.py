"""Custom contract query handler for bond status queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol

from .addresses import acc_address_from_bech32
from .coins import Coin
from .context import Context
from .contract import BondStatusResponse, WasmCoin, encode_bond_status_response, parse_custom_query
from .errors import ERR_INVALID_ADDRESS, MeshSecurityError

QueryHandler = Callable[[Context, bytes, "QueryRequest"], Any]


@dataclass(frozen=True)
class QueryRequest:
    """A query issued by a contract; normally one field is set."""

    bank: Any = None
    custom: bytes | str | None = None
    distribution: Any = None
    ibc: Any = None
    staking: Any = None
    stargate: Any = None
    wasm: Any = None


class _ViewKeeper(Protocol):
    def get_max_cap_limit(self, ctx: Context, actor: bytes) -> Coin:
        """Max cap limit of a contract."""

    def get_total_delegated(self, ctx: Context, actor: bytes) -> Coin:
        """Total delegated by a contract."""


def chained_custom_querier(keeper: _ViewKeeper, next_handler: QueryHandler) -> QueryHandler:
    """Answer bond status queries; pass every other query to next_handler."""
    if keeper is None:
        raise ValueError("keeper must not be nil")
    if next_handler is None:
        raise ValueError("next handler must not be nil")

    def handle(ctx: Context, caller: bytes, request: QueryRequest) -> Any:
        if request.custom is None:
            return next_handler(ctx, caller, request)
        contract = parse_custom_query(request.custom)
        if contract is None:
            return next_handler(ctx, caller, request)
        try:
            contract_addr = acc_address_from_bech32(contract)
        except MeshSecurityError as exc:
            raise ERR_INVALID_ADDRESS.wrap(contract) from exc
        response = BondStatusResponse(
            max_cap=WasmCoin.from_coin(keeper.get_max_cap_limit(ctx, contract_addr)),
            delegated=WasmCoin.from_coin(keeper.get_total_delegated(ctx, contract_addr)),
        )
        return encode_bond_status_response(response)

    return handle


def query_decorator(keeper: _ViewKeeper) -> Callable[[QueryHandler], QueryHandler]:
    """Decorator placing the bond status handler in front of an existing one."""

    def decorate(next_handler: QueryHandler) -> QueryHandler:
        return chained_custom_querier(keeper, next_handler)

    return decorate