"""Module wiring and the end-of-block hook."""

from __future__ import annotations

from typing import Any

from .addresses import acc_address_to_bech32
from .context import Context
from .keeper import Keeper, module_logger
from .keys import MODULE_NAME, ROUTER_KEY, SchedulerTaskType
from .msg_server import MsgServer
from .querier import Querier

CONSENSUS_VERSION = 1


def end_blocker(ctx: Context, keeper: Any) -> None:
    """Run rebalance tasks due at this block and log their outcome.

    A task that cannot be rescheduled is fatal and raises RuntimeError.
    """
    epoch_length = keeper.rebalance_epoch_length(ctx)
    results = keeper.exec_scheduled_tasks(ctx, SchedulerTaskType.REBALANCE, epoch_length, keeper.rebalance)
    logger = module_logger(ctx)
    for result in results:
        contract = acc_address_to_bech32(result.contract)
        if result.exec_err is not None:
            logger.error("failed to execute scheduled task contract=%s", contract)
        elif result.reschedule_err is not None:
            raise RuntimeError(f"failed to reschedule task for contract {contract}")
        elif result.delete_task_err is not None:
            logger.error("failed to delete scheduled task after completion contract=%s", contract)
        else:
            logger.info(
                "scheduled task executed successfully contract=%s gas_used=%d gas_limit=%d",
                contract, result.gas_used, result.gas_limit,
            )


class AppModule:
    """The module as seen by the application: services and block hooks."""

    name = MODULE_NAME
    querier_route = ROUTER_KEY
    consensus_version = CONSENSUS_VERSION

    def __init__(self, keeper: Keeper) -> None:
        self.keeper = keeper
        self.msg_server = MsgServer(keeper)
        self.querier = Querier(keeper)
        self.current_block_height: int | None = None

    def begin_block(self, ctx: Context) -> None:
        """Note the height of the block being processed; no state changes."""
        self.current_block_height = ctx.block_height

    def end_block(self, ctx: Context) -> list:
        """Run scheduled tasks; no validator updates are returned."""
        end_blocker(ctx, self.keeper)
        return []