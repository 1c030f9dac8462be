"""Collaborator interfaces the sale core is wired with.

The core never reaches for globals: persistence, manager approval, customer
lookup and transaction hand-off are all passed in.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .models import Customer, PendingOverride


class KeyValueStore(ABC):
    """String key-value persistence."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class ApprovalGate(ABC):
    """Decides whether a pending override may be applied.

    How credentials are checked is up to the implementation.
    """

    @abstractmethod
    def authorize(self, request: PendingOverride, credentials) -> bool:
        ...


class CustomerDirectory(ABC):
    @abstractmethod
    def lookup(self, customer_id: str) -> Optional[Customer]:
        ...


class InMemoryCustomerDirectory(CustomerDirectory):
    def __init__(self, customers=()):
        self._customers = {c.customer_id: c for c in customers}

    def lookup(self, customer_id: str) -> Optional[Customer]:
        return self._customers.get(customer_id)


class TransactionSink(ABC):
    """Receives settled transaction records for printing or delivery.

    The core does not wait on the outcome of ``publish``.
    """

    @abstractmethod
    def publish(self, record) -> None:
        ...
