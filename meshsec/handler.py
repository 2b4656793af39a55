"""Handlers for messages that contracts send to the chain."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol

from .coins import Coin
from .context import Context
from .contract import parse_custom_msg
from .errors import ERR_UNAUTHORIZED, ERR_UNKNOWN_MSG, ERR_UNSUPPORTED
from .events import Event
from .addresses import val_address_from_bech32

AuthSource = Callable[[Context, bytes], bool]
DispatchResult = tuple[list[Event], "list[bytes] | None"]
MessageHandler = Callable[[Context, bytes, str, "CosmosMsg"], DispatchResult]


@dataclass(frozen=True)
class CosmosMsg:
    """A message emitted by a contract; exactly one field is normally set."""

    bank: Any = None
    custom: bytes | str | None = None
    distribution: Any = None
    gov: Any = None
    ibc: Any = None
    staking: Any = None
    stargate: Any = None
    wasm: Any = None


class _StakeKeeper(Protocol):
    def delegate(self, ctx: Context, actor: bytes, validator_addr: bytes, amount: Coin) -> Any:
        """Delegate virtual stake."""

    def undelegate(self, ctx: Context, actor: bytes, validator_addr: bytes, amount: Coin) -> None:
        """Undelegate virtual stake."""


class _MaxCapSource(Protocol):
    def has_max_cap_limit(self, ctx: Context, actor: bytes) -> bool:
        """True when a max cap limit is set for the actor."""


class CustomMsgHandler:
    """Handles custom messages in the virtual stake namespace."""

    def __init__(self, keeper: _StakeKeeper, auth: AuthSource) -> None:
        self.keeper = keeper
        self.auth = auth

    def dispatch_msg(self, ctx: Context, contract_addr: bytes, ibc_port: str, msg: CosmosMsg) -> DispatchResult:
        """Execute a virtual stake message; ERR_UNKNOWN_MSG when it is not one."""
        if msg.custom is None:
            raise ERR_UNKNOWN_MSG.wrap()
        stake_msg = parse_custom_msg(msg.custom)
        if stake_msg is None:
            raise ERR_UNKNOWN_MSG.wrap()
        if not self.auth(ctx, contract_addr):
            raise ERR_UNAUTHORIZED.wrap("contract has no permission for mesh security operations")
        if stake_msg.bond is not None:
            coin = stake_msg.bond.amount.to_coin()
            validator = val_address_from_bech32(stake_msg.bond.validator)
            self.keeper.delegate(ctx, contract_addr, validator, coin)
            return [], None
        if stake_msg.unbond is not None:
            coin = stake_msg.unbond.amount.to_coin()
            validator = val_address_from_bech32(stake_msg.unbond.validator)
            self.keeper.undelegate(ctx, contract_addr, validator, coin)
            return [], None
        raise ERR_UNKNOWN_MSG.wrap()


def default_custom_msg_handler(keeper: Any) -> CustomMsgHandler:
    """Handler authorizing any contract that has a max cap limit set, zero included."""
    return CustomMsgHandler(keeper, keeper.has_max_cap_limit)


def integrity_handler(max_cap_source: _MaxCapSource) -> MessageHandler:
    """Reject staking and stargate messages from contracts with a max cap set.

    Any other message is passed down the chain with ERR_UNKNOWN_MSG.
    """

    def handle(ctx: Context, contract_addr: bytes, ibc_port: str, msg: CosmosMsg) -> DispatchResult:
        if (msg.stargate is None and msg.staking is None) or not max_cap_source.has_max_cap_limit(
            ctx, contract_addr
        ):
            raise ERR_UNKNOWN_MSG.wrap()
        raise ERR_UNSUPPORTED.wrap("message type for contracts with max cap set")

    return handle