"""Execution context: layered key-value stores, gas metering and events."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Iterator

from .errors import ERR_OUT_OF_GAS
from .events import EventManager

_DELETED = None


class KVStore:
    """Byte key-value store; a store with a parent buffers writes until write()."""

    def __init__(self, parent: "KVStore | None" = None) -> None:
        self._parent = parent
        self._data: dict[bytes, bytes | None] = {}

    def get(self, key: bytes) -> bytes | None:
        if key in self._data:
            return self._data[key]
        return self._parent.get(key) if self._parent else None

    def has(self, key: bytes) -> bool:
        return self.get(key) is not None

    def set(self, key: bytes, value: bytes) -> None:
        if value is None:
            raise ValueError("value must not be None")
        self._data[bytes(key)] = bytes(value)

    def delete(self, key: bytes) -> None:
        if self._parent is None:
            self._data.pop(bytes(key), None)
        else:
            self._data[bytes(key)] = _DELETED

    def _items(self) -> dict[bytes, bytes]:
        merged = self._parent._items() if self._parent else {}
        for key, value in self._data.items():
            if value is None:
                merged.pop(key, None)
            else:
                merged[key] = value
        return merged

    def iterate_prefix(self, prefix: bytes) -> Iterator[tuple[bytes, bytes]]:
        """Yield (key without prefix, value) in ascending key order."""
        items = self._items()
        for key in sorted(k for k in items if k.startswith(prefix)):
            yield key[len(prefix):], items[key]

    def write(self) -> None:
        """Flush buffered writes into the parent store."""
        if self._parent is None:
            return
        for key, value in self._data.items():
            if value is None:
                self._parent.delete(key)
            else:
                self._parent.set(key, value)
        self._data.clear()


class GasMeter:
    """Counts gas used; raises once the limit (if any) is exceeded."""

    def __init__(self, limit: int | None = None) -> None:
        self.limit = limit
        self.gas_consumed = 0

    def consume(self, amount: int, descriptor: str) -> None:
        self.gas_consumed += amount
        if self.limit is not None and self.gas_consumed > self.limit:
            raise ERR_OUT_OF_GAS.wrap(descriptor)


@dataclass
class Context:
    block_height: int = 0
    gas_meter: GasMeter = field(default_factory=GasMeter)
    event_manager: EventManager = field(default_factory=EventManager)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("meshsec"))
    stores: dict[str, KVStore] = field(default_factory=dict)
    parent: "Context | None" = None

    def kv_store(self, store_key: str) -> KVStore:
        store = self.stores.get(store_key)
        if store is None:
            base = self.parent.kv_store(store_key) if self.parent else None
            store = self.stores[store_key] = KVStore(base)
        return store

    def cache_context(self) -> tuple["Context", Callable[[], None]]:
        """Return a branched context and a function committing it to this one."""
        child = Context(
            block_height=self.block_height,
            gas_meter=self.gas_meter,
            event_manager=EventManager(),
            logger=self.logger,
            parent=self,
        )

        def commit() -> None:
            for store in child.stores.values():
                store.write()
            self.event_manager.events.extend(child.event_manager.events)
            child.event_manager.events.clear()

        return child, commit

    def with_gas_meter(self, gas_meter: GasMeter) -> "Context":
        return replace(self, gas_meter=gas_meter)