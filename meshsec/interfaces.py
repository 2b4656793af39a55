"""Keepers the module depends on, and adapters over plain SDK keepers."""

from __future__ import annotations

from collections import defaultdict
from datetime import timedelta
from decimal import Decimal
from enum import IntEnum
from typing import Any, Callable, Protocol

from .coins import Coin
from .errors import ERR_NO_DELEGATOR_FOR_ADDRESS

BONDED_POOL_NAME = "bonded_tokens_pool"
NOT_BONDED_POOL_NAME = "not_bonded_tokens_pool"

Coins = tuple[Coin, ...]


class BondStatus(IntEnum):
    UNSPECIFIED = 0
    UNBONDED = 1
    UNBONDING = 2
    BONDED = 3


class Validator(Protocol):
    def is_bonded(self) -> bool:
        """True when the validator is in the bonded set."""


class BankKeeper(Protocol):
    def get_balance(self, ctx: Any, addr: bytes, denom: str) -> Coin:
        """Balance of an account in one denomination."""

    def mint_coins(self, ctx: Any, module_name: str, amounts: Coins) -> None:
        """Mint coins into a module account."""

    def burn_coins(self, ctx: Any, module_name: str, amounts: Coins) -> None:
        """Burn coins held by a module account."""

    def send_coins_from_account_to_module(self, ctx: Any, sender: bytes, module_name: str, amounts: Coins) -> None:
        """Move coins from an account to a module account."""

    def send_coins_from_module_to_account(self, ctx: Any, module_name: str, recipient: bytes, amounts: Coins) -> None:
        """Move coins from a module account to an account."""

    def undelegate_coins_from_module_to_account(
        self, ctx: Any, module_name: str, recipient: bytes, amounts: Coins
    ) -> None:
        """Return undelegated coins from a staking pool to an account."""


class ExtendedBankKeeper(BankKeeper, Protocol):
    def add_supply_offset(self, ctx: Any, denom: str, offset_amount: int) -> None:
        """Shift the reported supply of a denomination."""


class StakingKeeper(Protocol):
    def bond_denom(self, ctx: Any) -> str:
        """The staking denomination."""

    def get_all_validators(self, ctx: Any) -> list[Validator]:
        """All validators."""

    def get_validator(self, ctx: Any, addr: bytes) -> Validator | None:
        """The validator at an address, or None."""

    def validate_unbond_amount(self, ctx: Any, delegator: bytes, validator_addr: bytes, amount: int) -> Decimal:
        """Shares matching an amount to unbond; raises when not possible."""

    def delegate(
        self,
        ctx: Any,
        delegator: bytes,
        amount: int,
        token_src: BondStatus,
        validator: Validator,
        subtract_account: bool,
    ) -> Decimal:
        """Delegate tokens and return the new shares."""

    def get_delegation(self, ctx: Any, delegator: bytes, validator_addr: bytes) -> Any | None:
        """The delegation, or None."""

    def unbonding_time(self, ctx: Any) -> timedelta:
        """The unbonding period."""

    def get_params(self, ctx: Any) -> Any:
        """Staking parameters."""

    def unbond(self, ctx: Any, delegator: bytes, validator_addr: bytes, shares: Decimal) -> int:
        """Remove shares and return the released token amount."""

    def iterate_bonded_validators_by_power(self, ctx: Any, fn: Callable[[int, Validator], bool]) -> None:
        """Visit bonded validators; fn returns True to stop."""

    def total_bonded_tokens(self, ctx: Any) -> int:
        """Total bonded tokens."""

    def iterate_delegations(self, ctx: Any, delegator: bytes, fn: Callable[[int, Any], bool]) -> None:
        """Visit delegations of a delegator; fn returns True to stop."""


class ExtendedStakingKeeper(StakingKeeper, Protocol):
    def instant_undelegate(self, ctx: Any, delegator: bytes, validator_addr: bytes, shares: Decimal) -> Coins:
        """Undelegate without an unbonding period."""


class CommunityPoolKeeper(Protocol):
    def withdraw_delegation_rewards(self, ctx: Any, delegator: bytes, validator_addr: bytes) -> Coins:
        """Withdraw rewards of a delegation."""


class AccountKeeper(Protocol):
    def get_module_address(self, name: str) -> bytes:
        """Address of a module account."""

    def get_module_account(self, ctx: Any, name: str) -> Any:
        """A module account."""


class WasmKeeper(Protocol):
    def sudo(self, ctx: Any, contract_address: bytes, msg: bytes) -> bytes:
        """Run a privileged contract entry point."""

    def has_contract_info(self, ctx: Any, contract_address: bytes) -> bool:
        """True when a contract exists at the address."""


class BankKeeperAdapter:
    """Gives a plain bank keeper a supply offset that never reaches the chain supply."""

    def __init__(self, bank: BankKeeper) -> None:
        self._bank = bank
        self.supply_offsets: defaultdict[str, int] = defaultdict(int)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._bank, name)

    def add_supply_offset(self, ctx: Any, denom: str, offset_amount: int) -> None:
        """Tally the offset locally; a plain bank keeper has no supply offset."""
        self.supply_offsets[denom] += offset_amount


class StakingKeeperAdapter:
    """Adds instant undelegation to a plain staking keeper."""

    def __init__(self, staking: StakingKeeper, bank: BankKeeper) -> None:
        self._staking = staking
        self._bank = bank

    def __getattr__(self, name: str) -> Any:
        return getattr(self._staking, name)

    def instant_undelegate(self, ctx: Any, delegator: bytes, validator_addr: bytes, shares: Decimal) -> Coins:
        """Unbond and pay out at once, skipping the unbonding queue."""
        validator = self._staking.get_validator(ctx, validator_addr)
        if validator is None:
            raise ERR_NO_DELEGATOR_FOR_ADDRESS.wrap()
        amount = self._staking.unbond(ctx, delegator, validator_addr, shares)
        coins: Coins = (Coin(self._staking.bond_denom(ctx), amount),) if amount else ()
        pool = BONDED_POOL_NAME if validator.is_bonded() else NOT_BONDED_POOL_NAME
        self._bank.undelegate_coins_from_module_to_account(ctx, pool, delegator, coins)
        return coins