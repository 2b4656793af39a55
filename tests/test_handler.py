import pytest

from meshsec.addresses import val_address_to_bech32
from meshsec.coins import Coin
from meshsec.context import Context
from meshsec.errors import (
    ERR_JSON_UNMARSHAL,
    ERR_UNAUTHORIZED,
    ERR_UNKNOWN_MSG,
    ERR_UNSUPPORTED,
    MeshSecurityError,
)
from meshsec.handler import (
    CosmosMsg,
    CustomMsgHandler,
    default_custom_msg_handler,
    integrity_handler,
)
from meshsec.keeper import Keeper

CONTRACT = bytes([7] * 32)
VALIDATOR = bytes(range(20))
VALIDATOR_BECH32 = val_address_to_bech32(VALIDATOR)
AMOUNT = Coin("ALX", 1234)

BOND_MSG = (
    '{"virtual_stake":{"bond":{"amount":{"denom":"ALX", "amount":"1234"},"validator":"%s"}}}'
    % VALIDATOR_BECH32
).encode()
UNBOND_MSG = (
    '{"virtual_stake":{"unbond":{"amount":{"denom":"ALX", "amount":"1234"},"validator":"%s"}}}'
    % VALIDATOR_BECH32
).encode()


def allow(ctx, addr):
    return True


def deny(ctx, addr):
    return False


def must_not_call(ctx, addr):
    raise AssertionError("not supposed to be called")


class FakeKeeper:
    def __init__(self, delegate_error=None, undelegate_error=None):
        self.calls = []
        self.delegate_error = delegate_error
        self.undelegate_error = undelegate_error

    def delegate(self, ctx, actor, validator_addr, amount):
        self.calls.append(("delegate", actor, validator_addr, amount))
        if self.delegate_error:
            raise self.delegate_error
        return 1

    def undelegate(self, ctx, actor, validator_addr, amount):
        self.calls.append(("undelegate", actor, validator_addr, amount))
        if self.undelegate_error:
            raise self.undelegate_error


def test_bond_success():
    keeper = FakeKeeper()
    events, data = CustomMsgHandler(keeper, allow).dispatch_msg(Context(), CONTRACT, "", CosmosMsg(custom=BOND_MSG))
    assert events == []
    assert data is None
    assert keeper.calls == [("delegate", CONTRACT, VALIDATOR, AMOUNT)]


def test_unbond_success():
    keeper = FakeKeeper()
    events, data = CustomMsgHandler(keeper, allow).dispatch_msg(Context(), CONTRACT, "", CosmosMsg(custom=UNBOND_MSG))
    assert data is None
    assert keeper.calls == [("undelegate", CONTRACT, VALIDATOR, AMOUNT)]


def test_bond_failure_propagates():
    my_err = RuntimeError("testing")
    handler = CustomMsgHandler(FakeKeeper(delegate_error=my_err), allow)
    with pytest.raises(RuntimeError) as exc:
        handler.dispatch_msg(Context(), CONTRACT, "", CosmosMsg(custom=BOND_MSG))
    assert exc.value is my_err


def test_unbond_failure_propagates():
    my_err = RuntimeError("testing")
    handler = CustomMsgHandler(FakeKeeper(undelegate_error=my_err), allow)
    with pytest.raises(RuntimeError) as exc:
        handler.dispatch_msg(Context(), CONTRACT, "", CosmosMsg(custom=UNBOND_MSG))
    assert exc.value is my_err


@pytest.mark.parametrize(
    "msg, auth, kind",
    [
        (CosmosMsg(), must_not_call, ERR_UNKNOWN_MSG),
        (CosmosMsg(custom=b"not-json"), must_not_call, ERR_JSON_UNMARSHAL),
        (CosmosMsg(custom=b"{}"), must_not_call, ERR_UNKNOWN_MSG),
        (CosmosMsg(custom=BOND_MSG), deny, ERR_UNAUTHORIZED),
        (CosmosMsg(custom=b'{"virtual_stake":{"unknown_msg":{}}}'), allow, ERR_UNKNOWN_MSG),
    ],
)
def test_dispatch_errors(msg, auth, kind):
    keeper = FakeKeeper()
    with pytest.raises(MeshSecurityError) as exc:
        CustomMsgHandler(keeper, auth).dispatch_msg(Context(), CONTRACT, "", msg)
    assert exc.value.is_kind(kind)
    assert keeper.calls == []


class FakeStaking:
    def bond_denom(self, ctx):
        return "stake"


def test_default_handler_requires_max_cap():
    keeper = Keeper(bank=None, staking=FakeStaking(), wasm=None, authority="")
    handler = default_custom_msg_handler(keeper)
    ctx = Context()
    msg = CosmosMsg(custom=b'{"virtual_stake":{}}')
    with pytest.raises(MeshSecurityError) as exc:
        handler.dispatch_msg(ctx, CONTRACT, "", msg)
    assert exc.value.is_kind(ERR_UNAUTHORIZED)

    keeper.set_max_cap_limit(ctx, CONTRACT, Coin("stake", 0))
    with pytest.raises(MeshSecurityError) as exc:
        handler.dispatch_msg(ctx, CONTRACT, "", msg)
    assert exc.value.is_kind(ERR_UNKNOWN_MSG)


class MaxCapSource:
    def __init__(self, has_max_cap):
        self.has_max_cap = has_max_cap

    def has_max_cap_limit(self, ctx, actor):
        return self.has_max_cap


@pytest.mark.parametrize(
    "msg, has_max_cap, kind",
    [
        (CosmosMsg(staking={}), True, ERR_UNSUPPORTED),
        (CosmosMsg(staking={}), False, ERR_UNKNOWN_MSG),
        (CosmosMsg(stargate={}), True, ERR_UNSUPPORTED),
        (CosmosMsg(stargate={}), False, ERR_UNKNOWN_MSG),
        (CosmosMsg(custom=b"{}"), True, ERR_UNKNOWN_MSG),
        (CosmosMsg(bank={}), True, ERR_UNKNOWN_MSG),
    ],
)
def test_integrity_handler(msg, has_max_cap, kind):
    handler = integrity_handler(MaxCapSource(has_max_cap))
    with pytest.raises(MeshSecurityError) as exc:
        handler(Context(), CONTRACT, "", msg)
    assert exc.value.is_kind(kind)