"""In-process notifications between dashboard views.

Mutating operations publish a typed payload on one of the channels of
:data:`app_events`; views subscribe to reload their data, open the contract
editor or show a toast.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import RLock
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Signal(Generic[T]):
    """
    Minimal signal/slot primitive.
    Implements the Observer pattern for dashboard events without UI coupling.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._subscribers: list[Callable[[T], None]] = []
        self._lock: RLock = RLock()

    def connect(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)

    def disconnect(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def emit(self, payload: T) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        logger.debug("emit %s -> %d subscriber(s)", self.name, len(subscribers))
        for callback in subscribers:
            callback(payload)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)


@dataclass(frozen=True)
class ContractsChanged:
    reason: str = ""


@dataclass(frozen=True)
class ContractDeleted:
    contract_id: str


@dataclass(frozen=True)
class OpenContractEditor:
    contract_id: str


@dataclass(frozen=True)
class Toast:
    message: str
    kind: str = "info"  # success | info | error


class AppEvents:
    def __init__(self) -> None:
        self.contracts_changed: Signal[ContractsChanged] = Signal("contracts_changed")
        self.contract_deleted: Signal[ContractDeleted] = Signal("contract_deleted")
        self.open_contract_editor: Signal[OpenContractEditor] = Signal("open_contract_editor")
        self.toast: Signal[Toast] = Signal("toast")

    def signals(self) -> List[Signal]:
        return [self.contracts_changed, self.contract_deleted, self.open_contract_editor, self.toast]

    def notify(self, message: str, kind: str = "info") -> None:
        self.toast.emit(Toast(message=message, kind=kind))


# SINGLE global instance
app_events = AppEvents()
