"""Query service for max cap limits."""

from __future__ import annotations

from .addresses import acc_address_from_bech32, acc_address_to_bech32
from .coins import Coin
from .context import Context
from .errors import MeshSecurityError, wrap
from .keeper import Keeper
from .messages import (
    QueryVirtualStakingMaxCapLimitResponse,
    QueryVirtualStakingMaxCapLimitsResponse,
    VirtualStakingMaxCapInfo,
)


class Querier:
    def __init__(self, keeper: Keeper) -> None:
        self.keeper = keeper

    def virtual_staking_max_cap_limit(self, ctx: Context, address: str) -> QueryVirtualStakingMaxCapLimitResponse:
        """Limit and delegated amount of a contract; zero for unknown contracts."""
        try:
            contract = acc_address_from_bech32(address)
        except MeshSecurityError as exc:
            raise wrap(exc, "contract") from exc
        return QueryVirtualStakingMaxCapLimitResponse(
            cap=self.keeper.get_max_cap_limit(ctx, contract),
            delegated=self.keeper.get_total_delegated(ctx, contract),
        )

    def virtual_staking_max_cap_limits(self, ctx: Context) -> QueryVirtualStakingMaxCapLimitsResponse:
        """Limits of all contracts that have one, in store order."""
        denom = self.keeper.staking.bond_denom(ctx)
        infos = [
            VirtualStakingMaxCapInfo(
                contract=acc_address_to_bech32(contract),
                delegated=self.keeper.get_total_delegated(ctx, contract),
                cap=Coin(denom, max_cap),
            )
            for contract, max_cap in self.keeper.iterate_max_cap_limits(ctx)
        ]
        return QueryVirtualStakingMaxCapLimitsResponse(max_cap_infos=infos)