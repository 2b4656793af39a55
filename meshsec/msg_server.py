"""Transaction message service."""

from __future__ import annotations

from .addresses import acc_address_from_bech32
from .context import Context
from .errors import ERR_INVALID_SIGNER, MeshSecurityError, wrap
from .keeper import Keeper
from .keys import SchedulerTaskType
from .messages import MsgSetVirtualStakingMaxCap


class MsgServer:
    def __init__(self, keeper: Keeper) -> None:
        self.keeper = keeper

    def set_virtual_staking_max_cap(self, ctx: Context, msg: MsgSetVirtualStakingMaxCap) -> None:
        """Store a new max cap and make sure a rebalance task is scheduled."""
        msg.validate_basic()
        authority = self.keeper.authority
        if authority != msg.authority:
            raise ERR_INVALID_SIGNER.wrap(f"invalid authority; expected {authority}, got {msg.authority}")
        try:
            contract = acc_address_from_bech32(msg.contract)
        except MeshSecurityError as exc:
            raise wrap(exc, "contract") from exc
        self.keeper.set_max_cap_limit(ctx, contract, msg.max_cap)
        if not self.keeper.has_scheduled_task(ctx, SchedulerTaskType.REBALANCE, contract):
            try:
                self.keeper.schedule_rebalance_task(ctx, contract)
            except MeshSecurityError as exc:
                raise wrap(exc, "failed to schedule rebalance task") from exc