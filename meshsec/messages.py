"""Transaction and query message types."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from .addresses import acc_address_from_bech32
from .coins import Coin, parse_coin_normalized
from .errors import ERR_INVALID_ADDRESS, MeshSecurityError, wrap

AMINO_NAME = "meshsecurity/MsgSetVirtualStakingMaxCap"


def _empty_coin() -> Coin:
    return Coin("", None)


@dataclass(frozen=True)
class MsgSetVirtualStakingMaxCap:
    authority: str = ""
    contract: str = ""
    max_cap: Coin = field(default_factory=_empty_coin)

    def validate_basic(self) -> None:
        """Raise MeshSecurityError when a field is invalid."""
        try:
            acc_address_from_bech32(self.authority)
        except MeshSecurityError as exc:
            raise ERR_INVALID_ADDRESS.wrap(f"invalid authority address: {exc}") from exc
        try:
            acc_address_from_bech32(self.contract)
        except MeshSecurityError as exc:
            raise wrap(exc, "contract") from exc
        try:
            self.max_cap.validate()
        except MeshSecurityError as exc:
            raise wrap(exc, "max cap") from exc

    def sign_bytes(self) -> bytes:
        """Sorted, compact amino JSON of the message."""
        amount = self.max_cap.amount
        doc = {
            "type": AMINO_NAME,
            "value": {
                "authority": self.authority,
                "contract": self.contract,
                "max_cap": {
                    "amount": str(amount) if amount is not None else "0",
                    "denom": self.max_cap.denom,
                },
            },
        }
        return json.dumps(doc, sort_keys=True, separators=(",", ":")).encode()

    def signers(self) -> tuple[bytes, ...]:
        """The authority address; empty bytes when it cannot be parsed."""
        try:
            return (acc_address_from_bech32(self.authority),)
        except MeshSecurityError:
            return (b"",)


@dataclass(frozen=True)
class VirtualStakingMaxCapInfo:
    contract: str
    delegated: Coin
    cap: Coin


@dataclass(frozen=True)
class QueryVirtualStakingMaxCapLimitResponse:
    cap: Coin
    delegated: Coin


@dataclass(frozen=True)
class QueryVirtualStakingMaxCapLimitsResponse:
    max_cap_infos: list[VirtualStakingMaxCapInfo] = field(default_factory=list)


def parse_set_virtual_staking_max_cap_args(args: list[str], authority: str) -> MsgSetVirtualStakingMaxCap:
    """Build the message from [contract_addr, max_cap] command arguments."""
    if len(args) != 2:
        raise ValueError(f"accepts 2 arg(s), received {len(args)}")
    try:
        max_cap = parse_coin_normalized(args[1])
    except MeshSecurityError as exc:
        raise wrap(exc, "max cap") from exc
    return MsgSetVirtualStakingMaxCap(authority=authority, contract=args[0], max_cap=max_cap)