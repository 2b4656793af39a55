import pytest

from meshsec.coins import Coin
from meshsec.contract import (
    BondMsg,
    BondStatusResponse,
    UnbondMsg,
    VirtualStakeMsg,
    WasmCoin,
    encode_bond_status_response,
    encode_rebalance_sudo_msg,
    parse_custom_msg,
    parse_custom_query,
)
from meshsec.errors import ERR_JSON_UNMARSHAL, MeshSecurityError


def test_parse_bond():
    raw = b'{"virtual_stake":{"bond":{"amount":{"denom":"ALX", "amount":"1234"},"validator":"val"}}}'
    assert parse_custom_msg(raw) == VirtualStakeMsg(bond=BondMsg(WasmCoin("ALX", "1234"), "val"))


def test_parse_unbond():
    raw = b'{"virtual_stake":{"unbond":{"amount":{"denom":"ALX", "amount":"1234"},"validator":"val"}}}'
    assert parse_custom_msg(raw) == VirtualStakeMsg(unbond=UnbondMsg(WasmCoin("ALX", "1234"), "val"))


def test_parse_other_messages():
    assert parse_custom_msg(b"{}") is None
    assert parse_custom_msg(b'{"virtual_stake":{"unknown_msg":{}}}') == VirtualStakeMsg()


@pytest.mark.parametrize("raw", [b"not-json", b"[]", b'{"virtual_stake":1}'])
def test_parse_invalid(raw):
    with pytest.raises(MeshSecurityError) as info:
        parse_custom_msg(raw)
    assert info.value.is_kind(ERR_JSON_UNMARSHAL)


def test_parse_query():
    assert parse_custom_query(b'{"virtual_stake":{"bond_status":{"contract":"c"}}}') == "c"
    assert parse_custom_query(b'{"foo":{}}') is None
    with pytest.raises(MeshSecurityError):
        parse_custom_query(b"nope")


def test_encode_bond_status_response():
    rsp = BondStatusResponse(WasmCoin("ALX", "123"), WasmCoin("ALX", "456"))
    assert encode_bond_status_response(rsp) == (
        b'{"cap":{"denom":"ALX","amount":"123"},"delegated":{"denom":"ALX","amount":"456"}}'
    )


def test_encode_rebalance():
    assert encode_rebalance_sudo_msg() == b'{"rebalance":{}}'


def test_wasm_coin_round_trip():
    coin = Coin("ALX", 1234)
    assert WasmCoin.from_coin(coin).to_coin() == coin
    with pytest.raises(MeshSecurityError):
        WasmCoin("ALX", "-1").to_coin()