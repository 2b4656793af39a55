"""Store key layout and scheduler task types."""

from __future__ import annotations

from enum import IntEnum

from .errors import ERR_INVALID

MODULE_NAME = "meshsecurity"
STORE_KEY = MODULE_NAME
ROUTER_KEY = MODULE_NAME
QUERIER_ROUTE = MODULE_NAME

PARAMS_KEY = b"\x01"
MAX_CAP_LIMIT_KEY_PREFIX = b"\x02"
TOTAL_DELEGATED_AMOUNT_KEY_PREFIX = b"\x03"
SCHEDULER_KEY_PREFIX = b"\x04"


class SchedulerTaskType(IntEnum):
    UNDEFINED = 0
    REBALANCE = 1


def build_max_cap_limit_key(contract_addr: bytes) -> bytes:
    return MAX_CAP_LIMIT_KEY_PREFIX + bytes(contract_addr)


def build_total_delegated_amount_key(contract_addr: bytes) -> bytes:
    return TOTAL_DELEGATED_AMOUNT_KEY_PREFIX + bytes(contract_addr)


def build_scheduler_type_key_prefix(task_type: int) -> bytes:
    """Prefix for all tasks of a type; the undefined type is rejected."""
    if task_type == SchedulerTaskType.UNDEFINED:
        raise ERR_INVALID.wrap(f"scheduler type: {int(task_type):x}")
    return SCHEDULER_KEY_PREFIX + bytes([int(task_type)])


def build_scheduler_height_key_prefix(task_type: int, block_height: int) -> bytes:
    return build_scheduler_type_key_prefix(task_type) + block_height.to_bytes(8, "big")


def build_scheduler_contract_key(task_type: int, block_height: int, contract_addr: bytes) -> bytes:
    return build_scheduler_height_key_prefix(task_type, block_height) + bytes(contract_addr)