import pytest

from meshsec.context import Context
from meshsec.contract import encode_rebalance_sudo_msg
from meshsec.errors import ERR_UNKNOWN, MeshSecurityError
from meshsec.keeper import MAX_HEIGHT, ExecResult, Keeper
from meshsec.keys import SchedulerTaskType
from meshsec.module import AppModule, end_blocker

CONTRACT = bytes([4] * 32)


class FakeStaking:
    def bond_denom(self, ctx):
        return "stake"


class FakeWasm:
    def __init__(self, fail=False):
        self.sudo_calls = []
        self.fail = fail

    def has_contract_info(self, ctx, contract_address):
        return True

    def sudo(self, ctx, contract_address, msg):
        self.sudo_calls.append((contract_address, msg))
        if self.fail:
            raise ERR_UNKNOWN.wrap("testing")
        return b""


def setup(fail=False):
    wasm = FakeWasm(fail)
    keeper = Keeper(bank=None, staking=FakeStaking(), wasm=wasm, authority="")
    ctx = Context(block_height=1000)
    keeper.schedule_task(ctx, SchedulerTaskType.REBALANCE, CONTRACT, ctx.block_height, True)
    return keeper, wasm, ctx


def test_end_blocker_rebalances_and_reschedules():
    keeper, wasm, ctx = setup()
    end_blocker(ctx, keeper)
    assert wasm.sudo_calls == [(CONTRACT, encode_rebalance_sudo_msg())]
    tasks = list(keeper.iterate_scheduled_tasks(ctx, SchedulerTaskType.REBALANCE, MAX_HEIGHT))
    assert tasks == [(CONTRACT, ctx.block_height + keeper.rebalance_epoch_length(ctx), True)]


class RescheduleFailingKeeper:
    def rebalance_epoch_length(self, ctx):
        return 100

    def rebalance(self, ctx, contract):
        return None

    def exec_scheduled_tasks(self, ctx, task_type, epoch_length, executor):
        return [ExecResult(contract=CONTRACT, reschedule_err=MeshSecurityError(None, "boom"))]


def test_end_blocker_fails_on_reschedule_error():
    with pytest.raises(RuntimeError) as exc:
        end_blocker(Context(), RescheduleFailingKeeper())
    assert "failed to reschedule task for contract" in str(exc.value)


def test_app_module_hooks():
    keeper, wasm, ctx = setup()
    module = AppModule(keeper)
    assert module.name == "meshsecurity"
    assert module.consensus_version == 1
    module.begin_block(ctx)
    assert wasm.sudo_calls == []
    assert module.end_block(ctx) == []
    assert len(wasm.sudo_calls) == 1