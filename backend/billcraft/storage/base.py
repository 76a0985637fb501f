"""
Storage collaborator contract.

Every entity table (products, customers, invoices, company settings) is
reached through a TableStore. All calls take the caller's owner_id and only
ever see that owner's rows; a foreign row behaves exactly like a missing one.

Records cross this boundary as plain dicts shaped like the models' to_dict().
Any transport or database failure surfaces as StorageError.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class StorageError(RuntimeError):
    """Storage unreachable or write rejected."""


class TableStore(ABC):
    """Owner-scoped select/insert/update/delete over one entity type."""

    @abstractmethod
    def list(self, owner_id: int, *, order_by: str | None = None, descending: bool = False) -> list[dict]:
        ...

    @abstractmethod
    def find(self, owner_id: int, **filters) -> list[dict]:
        ...

    @abstractmethod
    def get(self, owner_id: int, record_id: int) -> dict | None:
        ...

    @abstractmethod
    def insert(self, owner_id: int, record: dict) -> dict:
        ...

    @abstractmethod
    def update(self, owner_id: int, record_id: int, patch: dict) -> dict | None:
        ...

    @abstractmethod
    def delete(self, owner_id: int, record_id: int) -> bool:
        ...


@dataclass
class Storage:
    """The set of tables the services work against."""
    products: TableStore
    customers: TableStore
    invoices: TableStore
    settings: TableStore
    backend: str
