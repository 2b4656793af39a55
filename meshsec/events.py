"""Events emitted by the module."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .addresses import acc_address_to_bech32
from .keys import MODULE_NAME

EVENT_TYPE_SCHEDULER_EXEC = "scheduler_execution"
EVENT_TYPE_SCHEDULER_REGISTERED = "scheduler_registered"

ATTRIBUTE_KEY_MODULE = "module"
ATTRIBUTE_KEY_CONTRACT_ADDR = "virtual_staking_contract"
ATTRIBUTE_KEY_SCHEDULER_NEXT_EXEC = "next_exececution_block"
ATTRIBUTE_KEY_SCHEDULER_EXEC_SUCCESS = "execution_success"
ATTRIBUTE_KEY_SCHEDULER_REPEAT = "repeat"
ATTRIBUTE_KEY_SCHEDULER_EXEC_ERROR = "error"


@dataclass(frozen=True)
class Event:
    type: str
    attributes: tuple[tuple[str, str], ...] = ()

    def attribute(self, key: str) -> str | None:
        """Value of the first attribute with the given key, if any."""
        return next((v for k, v in self.attributes if k == key), None)


@dataclass
class EventManager:
    events: list[Event] = field(default_factory=list)

    def emit(self, event: Event) -> None:
        self.events.append(event)


def emit_scheduler_execution_event(ctx: Any, contract_addr: bytes, error: BaseException | None) -> None:
    """Record a scheduler execution and its error, if any."""
    attributes = [
        (ATTRIBUTE_KEY_MODULE, MODULE_NAME),
        (ATTRIBUTE_KEY_CONTRACT_ADDR, acc_address_to_bech32(contract_addr)),
        (ATTRIBUTE_KEY_SCHEDULER_EXEC_SUCCESS, str(error is None).lower()),
    ]
    if error is not None:
        attributes.append((ATTRIBUTE_KEY_SCHEDULER_EXEC_ERROR, str(error)))
    ctx.event_manager.emit(Event(EVENT_TYPE_SCHEDULER_EXEC, tuple(attributes)))


def emit_scheduler_registered_event(ctx: Any, contract_addr: bytes, next_exec_block: int, repeat: bool) -> None:
    """Record that a task was registered for a block."""
    ctx.event_manager.emit(
        Event(
            EVENT_TYPE_SCHEDULER_REGISTERED,
            (
                (ATTRIBUTE_KEY_MODULE, MODULE_NAME),
                (ATTRIBUTE_KEY_CONTRACT_ADDR, acc_address_to_bech32(contract_addr)),
                (ATTRIBUTE_KEY_SCHEDULER_NEXT_EXEC, str(next_exec_block)),
                (ATTRIBUTE_KEY_SCHEDULER_REPEAT, str(bool(repeat)).lower()),
            ),
        )
    )