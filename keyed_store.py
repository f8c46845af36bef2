"""
keyed_store.py

Immutable keyed-collection helpers shared by the library, inventory and
employee programs.

A collection is an ordered sequence of records, each identified by a key
extracted with a caller-supplied function. Every operation returns a new list
and leaves its inputs untouched, so callers can keep the previous value around
when an operation fails.
"""

from __future__ import annotations
import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

logger = logging.getLogger("KeyedCollectionStore")

R = TypeVar("R")
K = TypeVar("K")
T = TypeVar("T")


# ---------------- Results ----------------
class ErrorKind(str, enum.Enum):
    HOLDER_NOT_FOUND = "holder_not_found"
    ITEM_UNAVAILABLE = "item_unavailable"
    ITEM_NOT_HELD = "item_not_held"
    DUPLICATE_KEY = "duplicate_key"
    NOT_FOUND = "not_found"
    INVALID_QUANTITY = "invalid_quantity"


@dataclass(frozen=True)
class StoreError:
    """A rejected operation: what went wrong and a human-readable message."""
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a store operation.

    Exactly one of `value` / `error` is meaningful: `ok` tells which.
    """
    value: Optional[T] = None
    error: Optional[StoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return self.error.message if self.error is not None else ""

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Result[T]":
        return cls(error=StoreError(kind, message))


# ---------------- Store ----------------
class KeyedCollectionStore(Generic[R, K]):
    """
    Pure operations over an ordered collection of records indexed by a key.

    The store keeps no state of its own; it only knows how to extract the key
    of a record. Collections passed in are never mutated.
    """

    def __init__(self, key: Callable[[R], K], name: str = "record"):
        """
        Args:
            key: function returning the key field of a record.
            name: noun used in log lines and error messages ("book", "user", ...).
        """
        self.key = key
        self.name = name

    def add(self, collection: Sequence[R], record: R) -> List[R]:
        """Append `record` at the end. Duplicate keys are not checked."""
        return list(collection) + [record]

    def insert(self, collection: Sequence[R], record: R) -> Result[List[R]]:
        """
        Append `record` unless a record with the same key already exists.

        Returns a failed Result of kind DUPLICATE_KEY in that case.
        """
        key = self.key(record)
        if self.contains(collection, key):
            logger.debug("Duplicate %s key rejected: %s", self.name, key)
            return Result.failure(ErrorKind.DUPLICATE_KEY, f"A {self.name} with key {key} already exists")
        return Result.success(self.add(collection, record))

    def find(self, collection: Iterable[R], key: K) -> Optional[R]:
        for record in collection:
            if self.key(record) == key:
                return record
        return None

    def contains(self, collection: Iterable[R], key: K) -> bool:
        return self.find(collection, key) is not None

    def keys(self, collection: Iterable[R]) -> List[K]:
        return [self.key(record) for record in collection]

    def remove(self, collection: Iterable[R], key: K) -> List[R]:
        """Drop every record whose key equals `key`; a missing key is a no-op."""
        return [record for record in collection if self.key(record) != key]

    def replace(self, collection: Iterable[R], key: K, new_record: R) -> List[R]:
        """
        Replace the first record whose key equals `key` with `new_record`.

        All other records are returned unchanged and in their original order.
        """
        out: List[R] = []
        replaced = False
        for record in collection:
            if not replaced and self.key(record) == key:
                out.append(new_record)
                replaced = True
            else:
                out.append(record)
        return out


# ---------------- Holdings ----------------
class HoldingPolicy(ABC):
    """
    Describes how items move between a source collection and a holder.

    Subclasses decide what "available" means (a flag, a stock count), what the
    holder keeps in its sub-collection and how an entry is given back.
    """

    @abstractmethod
    def holdings(self, holder: Any) -> Sequence[Any]:
        """Return the holder's sub-collection."""

    @abstractmethod
    def with_holdings(self, holder: Any, holdings: Sequence[Any]) -> Any:
        """Return a copy of `holder` carrying `holdings`."""

    @abstractmethod
    def entry_key(self, entry: Any) -> Any:
        """Key of a held entry, comparable with item keys."""

    @abstractmethod
    def can_take(self, item: Any, quantity: int) -> bool:
        ...

    @abstractmethod
    def take(self, item: Any, quantity: int) -> Tuple[Any, Any]:
        """Return (new item state, entry to hand to the holder)."""

    @abstractmethod
    def release(self, item: Any, entry: Any) -> Any:
        """Return the item state after `entry` comes back."""

    def merge(self, holdings: Sequence[Any], entry: Any) -> Tuple[Any, ...]:
        return tuple(holdings) + (entry,)


class Ledger:
    """
    Cross-collection moves (borrow/return, sell/restock) between items and holders.

    Both operations read only the two collections they are given and return
    fresh ones, so a failure leaves the caller's snapshot as it was.
    """

    def __init__(self, items: KeyedCollectionStore, holders: KeyedCollectionStore, policy: HoldingPolicy):
        self.items = items
        self.holders = holders
        self.policy = policy

    def transfer(self, items: Sequence[Any], holders: Sequence[Any], holder_key: Any, item_key: Any,
                 quantity: int = 1) -> Result[Tuple[List[Any], List[Any]]]:
        """
        Move `quantity` of an item from the source collection to a holder.

        Returns:
            Result holding (items', holders') on success, or an error of kind
            HOLDER_NOT_FOUND, INVALID_QUANTITY (quantity below 1) or ITEM_UNAVAILABLE.
        """
        holder = self.holders.find(holders, holder_key)
        if holder is None:
            return Result.failure(ErrorKind.HOLDER_NOT_FOUND, f"{self.holders.name.capitalize()} not found: {holder_key}")
        if quantity < 1:
            return Result.failure(ErrorKind.INVALID_QUANTITY, f"Quantity must be positive: {quantity}")
        item = self.items.find(items, item_key)
        if item is None or not self.policy.can_take(item, quantity):
            return Result.failure(ErrorKind.ITEM_UNAVAILABLE,
                                  f"{self.items.name.capitalize()} not available: {item_key}")

        new_item, entry = self.policy.take(item, quantity)
        held = self.policy.merge(self.policy.holdings(holder), entry)
        new_holder = self.policy.with_holdings(holder, held)

        new_items = self.items.replace(items, item_key, new_item)
        new_holders = self.holders.replace(holders, holder_key, new_holder)
        logger.debug("Transferred %s %s to %s %s", self.items.name, item_key, self.holders.name, holder_key)
        return Result.success((new_items, new_holders))

    def revert(self, items: Sequence[Any], holders: Sequence[Any], holder_key: Any,
               item_key: Any) -> Result[Tuple[List[Any], List[Any]]]:
        """
        Give an item held by a holder back to the source collection.

        The entry is looked up in the holder's sub-collection, not in the source.
        If the source record no longer exists only the holder is updated.
        """
        holder = self.holders.find(holders, holder_key)
        if holder is None:
            return Result.failure(ErrorKind.HOLDER_NOT_FOUND, f"{self.holders.name.capitalize()} not found: {holder_key}")
        held = self.policy.holdings(holder)
        entry = next((e for e in held if self.policy.entry_key(e) == item_key), None)
        if entry is None:
            return Result.failure(ErrorKind.ITEM_NOT_HELD,
                                  f"{self.items.name.capitalize()} {item_key} is not held by {holder_key}")

        remaining = tuple(e for e in held if self.policy.entry_key(e) != item_key)
        new_holders = self.holders.replace(holders, holder_key, self.policy.with_holdings(holder, remaining))

        item = self.items.find(items, item_key)
        if item is None:
            logger.warning("%s %s no longer in collection; releasing from %s only",
                           self.items.name.capitalize(), item_key, holder_key)
            new_items = list(items)
        else:
            new_items = self.items.replace(items, item_key, self.policy.release(item, entry))
        return Result.success((new_items, new_holders))
