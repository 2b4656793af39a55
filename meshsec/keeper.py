"""Module keeper: max cap limits, virtual staking and the task scheduler."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Iterator

from .addresses import acc_address_to_bech32
from .coins import Coin
from .context import Context, GasMeter
from .contract import encode_rebalance_sudo_msg
from .errors import (
    ERR_INVALID,
    ERR_INVALID_COINS,
    ERR_INVALID_REQUEST,
    ERR_MAX_CAP_EXCEEDED,
    ERR_NO_DELEGATION,
    ERR_NO_VALIDATOR_FOUND,
    ERR_PANIC,
    ERR_UNKNOWN,
    MeshSecurityError,
)
from .events import emit_scheduler_execution_event, emit_scheduler_registered_event
from .interfaces import (
    BankKeeper,
    BankKeeperAdapter,
    BondStatus,
    Coins,
    ExtendedBankKeeper,
    ExtendedStakingKeeper,
    StakingKeeper,
    StakingKeeperAdapter,
    WasmKeeper,
)
from .keys import (
    MAX_CAP_LIMIT_KEY_PREFIX,
    MODULE_NAME,
    STORE_KEY,
    SchedulerTaskType,
    build_max_cap_limit_key,
    build_scheduler_contract_key,
    build_scheduler_type_key_prefix,
    build_total_delegated_amount_key,
)

MAX_HEIGHT = 2**64 - 1
DEFAULT_REBALANCE_GAS_LIMIT = 500_000
DEFAULT_REBALANCE_EPOCH_LENGTH = 100
_REPEAT = b"\x01"
_ONCE = b"\x00"

Executor = Callable[[Context, bytes], None]


def module_logger(ctx: Context) -> logging.LoggerAdapter:
    """Logger tagged with the module attribute."""
    return logging.LoggerAdapter(ctx.logger, {"module": f"x/{MODULE_NAME}"})


def _amount_of(coins: Coins, denom: str) -> int:
    return sum(c.amount or 0 for c in coins if c.denom == denom)


def _invalid_amount(amount: Coin) -> bool:
    return amount.amount is None or amount.amount <= 0


@dataclass
class ExecResult:
    contract: bytes
    exec_err: BaseException | None = None
    reschedule_err: BaseException | None = None
    delete_task_err: BaseException | None = None
    gas_used: int = 0
    gas_limit: int = 0
    next_run_height: int = 0


class Keeper:
    def __init__(
        self,
        bank: ExtendedBankKeeper,
        staking: ExtendedStakingKeeper,
        wasm: WasmKeeper,
        authority: str,
        store_key: str = STORE_KEY,
    ) -> None:
        self.bank = bank
        self.staking = staking
        self.wasm = wasm
        self.authority = authority
        self.store_key = store_key
        self._rebalance_gas_limit = DEFAULT_REBALANCE_GAS_LIMIT
        self._rebalance_epoch_length = DEFAULT_REBALANCE_EPOCH_LENGTH

    @classmethod
    def with_sdk_keepers(
        cls, bank: BankKeeper, staking: StakingKeeper, wasm: WasmKeeper, authority: str, store_key: str = STORE_KEY
    ) -> "Keeper":
        """Build a keeper over plain bank and staking keepers."""
        return cls(BankKeeperAdapter(bank), StakingKeeperAdapter(staking, bank), wasm, authority, store_key)

    def _store(self, ctx: Context):
        return ctx.kv_store(self.store_key)

    def _load_int(self, ctx: Context, key: bytes) -> int:
        raw = self._store(ctx).get(key)
        return 0 if raw is None else int(raw.decode())

    # max cap ---------------------------------------------------------------

    def has_max_cap_limit(self, ctx: Context, actor: bytes) -> bool:
        """True when any limit, zero included, was set."""
        return self._store(ctx).has(build_max_cap_limit_key(actor))

    def get_max_cap_limit(self, ctx: Context, actor: bytes) -> Coin:
        """The limit; a zero amount when none is stored."""
        return Coin(self.staking.bond_denom(ctx), self._load_int(ctx, build_max_cap_limit_key(actor)))

    def set_max_cap_limit(self, ctx: Context, contract: bytes, new_amount: Coin) -> None:
        """Store the limit, overwriting any previous one."""
        if self.staking.bond_denom(ctx) != new_amount.denom:
            raise ERR_INVALID_COINS.wrap()
        self._store(ctx).set(build_max_cap_limit_key(contract), str(new_amount.amount or 0).encode())

    def get_total_delegated(self, ctx: Context, actor: bytes) -> Coin:
        """Total delegated by a contract; never negative."""
        value = max(self._load_int(ctx, build_total_delegated_amount_key(actor)), 0)
        return Coin(self.staking.bond_denom(ctx), value)

    def _set_total_delegated(self, ctx: Context, actor: bytes, new_amount: Coin) -> None:
        if self.staking.bond_denom(ctx) != new_amount.denom:
            raise ERR_INVALID_COINS.wrap(f"not a staking denom: {new_amount.denom}")
        self._store(ctx).set(build_total_delegated_amount_key(actor), str(new_amount.amount or 0).encode())

    def iterate_max_cap_limits(self, ctx: Context) -> Iterator[tuple[bytes, int]]:
        """Yield (contract, limit amount) in key order."""
        for key, value in self._store(ctx).iterate_prefix(MAX_CAP_LIMIT_KEY_PREFIX):
            yield key, int(value.decode())

    # scheduler -------------------------------------------------------------

    def rebalance_gas_limit(self, ctx: Context) -> int:
        """Gas available to one rebalance execution."""
        return self._rebalance_gas_limit

    def rebalance_epoch_length(self, ctx: Context) -> int:
        """Blocks between two rebalance executions."""
        return self._rebalance_epoch_length

    def schedule_rebalance_task(self, ctx: Context, contract: bytes) -> None:
        """Schedule a repeating rebalance one epoch ahead."""
        if not self.wasm.has_contract_info(ctx, contract):
            raise ERR_UNKNOWN.wrap(f"contract: {acc_address_to_bech32(contract)}")
        next_block = ctx.block_height + self.rebalance_epoch_length(ctx)
        self.schedule_task(ctx, SchedulerTaskType.REBALANCE, contract, next_block, True)

    def has_scheduled_task(self, ctx: Context, task_type: int, contract: bytes) -> bool:
        try:
            tasks = self.iterate_scheduled_tasks(ctx, task_type, MAX_HEIGHT)
            return any(addr == bytes(contract) for addr, _, _ in tasks)
        except MeshSecurityError:
            return False

    def schedule_task(
        self, ctx: Context, task_type: int, contract: bytes, exec_block_height: int, repeat: bool
    ) -> None:
        """Register a task; an existing repeating entry keeps its repeat flag."""
        if exec_block_height < ctx.block_height:
            raise ERR_INVALID.wrap(f"can not schedule for past block: {exec_block_height}")
        key = build_scheduler_contract_key(task_type, exec_block_height, contract)
        store = self._store(ctx)
        if not repeat:
            existing = store.get(key)
            if existing is not None:
                repeat = existing == _REPEAT
        store.set(key, _REPEAT if repeat else _ONCE)
        emit_scheduler_registered_event(ctx, contract, exec_block_height, repeat)

    def iterate_scheduled_tasks(
        self, ctx: Context, task_type: int, height: int
    ) -> Iterator[tuple[bytes, int, bool]]:
        """Yield (contract, height, repeat) for tasks up to the height, included."""
        prefix = build_scheduler_type_key_prefix(task_type)
        return self._scheduled(ctx, prefix, height)

    def _scheduled(self, ctx: Context, prefix: bytes, height: int) -> Iterator[tuple[bytes, int, bool]]:
        for key, value in self._store(ctx).iterate_prefix(prefix):
            scheduled = int.from_bytes(key[:8], "big")
            if scheduled > height:
                return
            yield key[8:], scheduled, value == _REPEAT

    def exec_scheduled_tasks(
        self, ctx: Context, task_type: int, epoch_length: int, executor: Executor
    ) -> list[ExecResult]:
        """Run tasks due at the current height, each in its own branch of state."""
        results = []
        for contract, scheduled, repeat in list(self.iterate_scheduled_tasks(ctx, task_type, ctx.block_height)):
            gas_limit = self.rebalance_gas_limit(ctx)
            cached, done = ctx.cache_context()
            meter = GasMeter(gas_limit)
            cached = cached.with_gas_meter(meter)
            result = ExecResult(contract=contract, gas_limit=gas_limit)
            err = _safe_exec(lambda: executor(cached, contract))
            if err is not None:
                result.exec_err = err
            else:
                done()
                module_logger(ctx).info(
                    "Scheduler executed successfully gas_used=%d gas_limit=%d contract=%s task_type=%d",
                    meter.gas_consumed, gas_limit, acc_address_to_bech32(contract), int(task_type),
                )
            result.gas_used = meter.gas_consumed
            emit_scheduler_execution_event(ctx, contract, err)
            if repeat and epoch_length:
                result.next_run_height = ctx.block_height + epoch_length
                try:
                    self.schedule_task(ctx, task_type, contract, result.next_run_height, repeat)
                except MeshSecurityError as exc:
                    result.reschedule_err = exc
            try:
                key = build_scheduler_contract_key(task_type, scheduled, contract)
                self._store(ctx).delete(key)
            except MeshSecurityError as exc:
                result.delete_task_err = exc
            results.append(result)
        return results

    # staking ---------------------------------------------------------------

    def delegate(self, ctx: Context, actor: bytes, validator_addr: bytes, amount: Coin) -> Decimal:
        """Mint virtual bond tokens and delegate them within the max cap."""
        if _invalid_amount(amount):
            raise ERR_INVALID_REQUEST.wrap("amount")
        bond_denom = self.staking.bond_denom(ctx)
        if amount.denom != bond_denom:
            raise ERR_INVALID_REQUEST.wrap(
                f"invalid coin denomination: got {amount.denom}, expected {bond_denom}"
            )
        validator = self.staking.get_validator(ctx, validator_addr)
        if validator is None:
            raise ERR_NO_VALIDATOR_FOUND.wrap()
        new_total = self.get_total_delegated(ctx, actor).add(amount)
        limit = self.get_max_cap_limit(ctx, actor)
        if limit.is_lt(new_total):
            raise ERR_MAX_CAP_EXCEEDED.wrap(f"{new_total} exceeds {limit}")

        cached, done = ctx.cache_context()
        coins = (amount,)
        self.bank.mint_coins(cached, MODULE_NAME, coins)
        self.bank.add_supply_offset(cached, bond_denom, -amount.amount)
        self.bank.send_coins_from_module_to_account(cached, MODULE_NAME, actor, coins)
        try:
            return self.staking.delegate(cached, actor, amount.amount, BondStatus.UNBONDED, validator, True)
        finally:
            self._set_total_delegated(cached, actor, new_total)
            done()

    def undelegate(self, ctx: Context, actor: bytes, validator_addr: bytes, amount: Coin) -> None:
        """Instantly undelegate and burn the released virtual tokens."""
        if _invalid_amount(amount):
            raise ERR_INVALID_REQUEST.wrap("amount")
        bond_denom = self.staking.bond_denom(ctx)
        if amount.denom != bond_denom:
            raise ERR_INVALID_REQUEST.wrap(
                f"invalid coin denomination: got {amount.denom}, expected {bond_denom}"
            )
        cached, done = ctx.cache_context()
        total = self.get_total_delegated(cached, actor)
        if total.is_lt(amount):
            raise ERR_INVALID_REQUEST.wrap("amount exceeds total delegated")
        try:
            shares = self.staking.validate_unbond_amount(cached, actor, validator_addr, amount.amount)
        except MeshSecurityError as exc:
            if exc.is_kind(ERR_NO_DELEGATION):
                return
            raise
        undelegated = self.staking.instant_undelegate(cached, actor, validator_addr, shares)
        self.bank.send_coins_from_account_to_module(cached, actor, MODULE_NAME, undelegated)
        self.bank.burn_coins(cached, MODULE_NAME, undelegated)
        unbonded = Coin(bond_denom, _amount_of(undelegated, bond_denom))
        self.bank.add_supply_offset(cached, bond_denom, unbonded.amount)
        new_total = total.sub(unbonded)
        if new_total.is_negative():
            new_total = Coin(bond_denom, 0)
        self._set_total_delegated(cached, actor, new_total)
        done()

    def rebalance(self, ctx: Context, contract: bytes) -> None:
        """Send the rebalance sudo message to a virtual staking contract."""
        self.wasm.sudo(ctx, contract, encode_rebalance_sudo_msg())


def _safe_exec(fn: Callable[[], Any]) -> BaseException | None:
    try:
        fn()
    except MeshSecurityError as exc:
        return exc
    except Exception as exc:
        err = ERR_PANIC.wrap(f"execution: {exc}")
        err.__cause__ = exc
        return err
    return None