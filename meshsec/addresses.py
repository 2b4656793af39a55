"""Bech32 encoding and account / validator address conversion."""

from __future__ import annotations

from .errors import ERR_INVALID_ADDRESS, MeshSecurityError

ACCOUNT_PREFIX = "cosmos"
VALIDATOR_PREFIX = "cosmosvaloper"
MAX_ADDRESS_LENGTH = 255
_MAX_BECH32_LENGTH = 1023

_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)


def _polymod(values: list[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for i, gen in enumerate(_GENERATOR):
            if (top >> i) & 1:
                chk ^= gen
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _convert_bits(data, from_bits: int, to_bits: int, pad: bool) -> list[int]:
    acc = 0
    bits = 0
    out: list[int] = []
    maxv = (1 << to_bits) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise ValueError("invalid data range")
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & maxv)
    if pad:
        if bits:
            out.append((acc << (to_bits - bits)) & maxv)
    elif bits >= from_bits or (acc << (to_bits - bits)) & maxv:
        raise ValueError("invalid padding")
    return out


def bech32_encode(hrp: str, data: bytes) -> str:
    """Encode bytes as a bech32 string with the given human readable part."""
    if not hrp:
        raise ValueError("empty human readable part")
    hrp = hrp.lower()
    words = _convert_bits(data, 8, 5, True)
    values = _hrp_expand(hrp) + words
    poly = _polymod(values + [0] * 6) ^ 1
    checksum = [(poly >> 5 * (5 - i)) & 31 for i in range(6)]
    return hrp + "1" + "".join(_CHARSET[w] for w in words + checksum)


def bech32_decode(text: str) -> tuple[str, bytes]:
    """Decode a bech32 string into its human readable part and bytes."""
    if len(text) > _MAX_BECH32_LENGTH:
        raise ValueError("bech32 string too long")
    if text.lower() != text and text.upper() != text:
        raise ValueError("mixed case bech32 string")
    text = text.lower()
    pos = text.rfind("1")
    if pos < 1 or pos + 7 > len(text):
        raise ValueError("invalid separator position")
    hrp, payload = text[:pos], text[pos + 1:]
    if any(ord(c) < 33 or ord(c) > 126 for c in hrp):
        raise ValueError("invalid character in human readable part")
    try:
        words = [_CHARSET.index(c) for c in payload]
    except ValueError:
        raise ValueError("invalid character in data part") from None
    if _polymod(_hrp_expand(hrp) + words) != 1:
        raise ValueError("invalid checksum")
    return hrp, bytes(_convert_bits(words[:-6], 5, 8, False))


def _from_bech32(text: str, prefix: str) -> bytes:
    if not text.strip():
        raise ERR_INVALID_ADDRESS.wrap("empty address string is not allowed")
    try:
        hrp, data = bech32_decode(text)
    except ValueError as exc:
        raise ERR_INVALID_ADDRESS.wrap(f"decoding bech32 failed: {exc}") from exc
    if hrp != prefix:
        raise ERR_INVALID_ADDRESS.wrap(f"invalid Bech32 prefix; expected {prefix}, got {hrp}")
    if not 0 < len(data) <= MAX_ADDRESS_LENGTH:
        raise ERR_INVALID_ADDRESS.wrap(f"address length {len(data)} not supported")
    return data


def acc_address_from_bech32(text: str) -> bytes:
    """Parse an account address; raises MeshSecurityError when invalid."""
    return _from_bech32(text, ACCOUNT_PREFIX)


def acc_address_to_bech32(address: bytes) -> str:
    """Render an account address; empty bytes give an empty string."""
    return bech32_encode(ACCOUNT_PREFIX, bytes(address)) if address else ""


def val_address_from_bech32(text: str) -> bytes:
    """Parse a validator operator address; raises MeshSecurityError when invalid."""
    return _from_bech32(text, VALIDATOR_PREFIX)


def val_address_to_bech32(address: bytes) -> str:
    """Render a validator operator address."""
    return bech32_encode(VALIDATOR_PREFIX, bytes(address)) if address else ""


__all__ = [
    "ACCOUNT_PREFIX",
    "VALIDATOR_PREFIX",
    "MeshSecurityError",
    "acc_address_from_bech32",
    "acc_address_to_bech32",
    "bech32_decode",
    "bech32_encode",
    "val_address_from_bech32",
    "val_address_to_bech32",
]