"""Registered error kinds and the exception type that carries them."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorKind:
    """A registered error: a codespace, a code and a description."""

    codespace: str
    code: int
    description: str

    def wrap(self, message: str = "") -> "MeshSecurityError":
        """Return an exception of this kind carrying an extra message."""
        return MeshSecurityError(self, message)


class MeshSecurityError(Exception):
    """Error raised by the module, optionally tagged with an ErrorKind."""

    def __init__(self, kind: ErrorKind | None, message: str = "") -> None:
        self.kind = kind
        self.message = message
        if kind is None:
            text = message
        elif message:
            text = f"{message}: {kind.description}"
        else:
            text = kind.description
        super().__init__(text)

    def is_kind(self, kind: ErrorKind) -> bool:
        """True when this error, or an error it wraps, is of the given kind."""
        err: BaseException | None = self
        while err is not None:
            if isinstance(err, MeshSecurityError) and err.kind == kind:
                return True
            err = err.__cause__
        return False


def wrap(err: BaseException, message: str) -> MeshSecurityError:
    """Wrap any error with context, keeping its kind when it has one."""
    kind = err.kind if isinstance(err, MeshSecurityError) else None
    detail = err.message if isinstance(err, MeshSecurityError) and kind else str(err)
    wrapped = MeshSecurityError(kind, f"{message}: {detail}" if detail else message)
    wrapped.__cause__ = err
    return wrapped


MODULE_CODESPACE = "meshsecurity"

ERR_INVALID = ErrorKind(MODULE_CODESPACE, 1, "invalid")
ERR_MAX_CAP_EXCEEDED = ErrorKind(MODULE_CODESPACE, 2, "max cap exceeded")
ERR_UNSUPPORTED = ErrorKind(MODULE_CODESPACE, 3, "unsupported")
ERR_UNKNOWN = ErrorKind(MODULE_CODESPACE, 4, "unknown")

ERR_UNAUTHORIZED = ErrorKind("sdk", 4, "unauthorized")
ERR_INVALID_ADDRESS = ErrorKind("sdk", 7, "invalid address")
ERR_INVALID_COINS = ErrorKind("sdk", 10, "invalid coins")
ERR_OUT_OF_GAS = ErrorKind("sdk", 11, "out of gas")
ERR_INVALID_REQUEST = ErrorKind("sdk", 18, "invalid request")
ERR_JSON_UNMARSHAL = ErrorKind("sdk", 36, "failed to unmarshal JSON bytes")
ERR_PANIC = ErrorKind("sdk", 111222, "panic")

ERR_UNKNOWN_MSG = ErrorKind("wasm", 11, "unknown message from the contract")
ERR_INVALID_SIGNER = ErrorKind(
    "gov", 3, "expected gov account as only signer for proposal message"
)
ERR_NO_VALIDATOR_FOUND = ErrorKind("staking", 3, "validator does not exist")
ERR_NO_DELEGATION = ErrorKind("staking", 19, "no delegation for (address, validator) tuple")
ERR_NO_DELEGATOR_FOR_ADDRESS = ErrorKind(
    "staking", 20, "delegator does not contain delegation"
)