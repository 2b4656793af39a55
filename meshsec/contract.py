"""JSON messages exchanged with virtual staking contracts."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from .coins import Coin
from .errors import ERR_INVALID_COINS, ERR_JSON_UNMARSHAL


@dataclass(frozen=True)
class WasmCoin:
    denom: str
    amount: str

    @classmethod
    def from_coin(cls, coin: Coin) -> "WasmCoin":
        return cls(coin.denom, str(coin.amount if coin.amount is not None else 0))

    def to_coin(self) -> Coin:
        """Convert to a validated Coin."""
        if not self.amount.isdigit():
            raise ERR_INVALID_COINS.wrap(f"{self.amount}{self.denom}")
        coin = Coin(self.denom, int(self.amount))
        coin.validate()
        return coin

    def to_json(self) -> dict[str, str]:
        return {"denom": self.denom, "amount": self.amount}


@dataclass(frozen=True)
class BondMsg:
    amount: WasmCoin
    validator: str


@dataclass(frozen=True)
class UnbondMsg:
    amount: WasmCoin
    validator: str


@dataclass(frozen=True)
class VirtualStakeMsg:
    bond: BondMsg | None = None
    unbond: UnbondMsg | None = None


@dataclass(frozen=True)
class BondStatusResponse:
    max_cap: WasmCoin
    delegated: WasmCoin


def _fail(what: str) -> Exception:
    return ERR_JSON_UNMARSHAL.wrap(what)


def _load(raw: bytes | str, what: str) -> Any:
    try:
        doc = json.loads(raw)
    except (ValueError, TypeError) as exc:
        raise _fail(what) from exc
    if not isinstance(doc, dict):
        raise _fail(what)
    return doc


def _object(doc: dict, key: str, what: str) -> dict | None:
    value = doc.get(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise _fail(what)
    return value


def _string(doc: dict, key: str, what: str) -> str:
    value = doc.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _fail(what)
    return value


def _wasm_coin(doc: dict, what: str) -> WasmCoin:
    coin = _object(doc, "amount", what) or {}
    return WasmCoin(_string(coin, "denom", what), _string(coin, "amount", what))


def parse_custom_msg(raw: bytes | str) -> VirtualStakeMsg | None:
    """Decode a custom message; None when it is not a virtual stake message."""
    what = "custom message"
    doc = _load(raw, what)
    stake = _object(doc, "virtual_stake", what)
    if stake is None:
        return None
    bond = _object(stake, "bond", what)
    unbond = _object(stake, "unbond", what)
    return VirtualStakeMsg(
        bond=BondMsg(_wasm_coin(bond, what), _string(bond, "validator", what)) if bond is not None else None,
        unbond=UnbondMsg(_wasm_coin(unbond, what), _string(unbond, "validator", what))
        if unbond is not None
        else None,
    )


def parse_custom_query(raw: bytes | str) -> str | None:
    """Return the contract of a bond status query, or None for other queries."""
    what = "mesh-security query"
    doc = _load(raw, what)
    stake = _object(doc, "virtual_stake", what)
    if stake is None:
        return None
    status = _object(stake, "bond_status", what)
    if status is None:
        return None
    return _string(status, "contract", what)


def encode_bond_status_response(response: BondStatusResponse) -> bytes:
    return json.dumps(
        {"cap": response.max_cap.to_json(), "delegated": response.delegated.to_json()},
        separators=(",", ":"),
    ).encode()


def encode_rebalance_sudo_msg() -> bytes:
    return json.dumps({"rebalance": {}}, separators=(",", ":")).encode()