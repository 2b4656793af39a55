import pytest

from meshsec.coins import Coin, parse_coin_normalized, parse_coins_normalized
from meshsec.errors import ERR_INVALID_COINS, MeshSecurityError


def test_parse_coin():
    assert parse_coin_normalized("100stake") == Coin("stake", 100)


def test_parse_coin_truncates_decimal():
    assert parse_coin_normalized("1.9stake") == Coin("stake", 1)


@pytest.mark.parametrize("text", ["", "stake", "100", "-1stake", "10 1x"])
def test_parse_coin_invalid(text):
    with pytest.raises(MeshSecurityError) as info:
        parse_coin_normalized(text)
    assert info.value.is_kind(ERR_INVALID_COINS)


def test_parse_coins_sorted_and_zero_dropped():
    coins = parse_coins_normalized("5stake,0zzz,3atom")
    assert [c.denom for c in coins] == ["atom", "stake"]
    assert parse_coins_normalized("") == ()


def test_parse_coins_duplicate_rejected():
    with pytest.raises(MeshSecurityError):
        parse_coins_normalized("1stake,2stake")


def test_validate():
    Coin("ALX", 0).validate()
    for bad in (Coin("", 1), Coin("ALX", None), Coin("ALX", -1)):
        with pytest.raises(MeshSecurityError):
            bad.validate()


def test_arithmetic_round_trip():
    a = Coin("stake", 7)
    b = Coin("stake", 3)
    assert a.add(b).sub(b) == a
    assert b.is_lt(a) and not a.is_lt(b)
    assert b.sub(a).is_negative()
    assert a.add_amount(1) == a.add(Coin("stake", 1))


def test_mismatched_denoms_rejected():
    with pytest.raises(MeshSecurityError):
        Coin("a1a", 1).add(Coin("b1b", 1))