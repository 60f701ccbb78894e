"""
State Store

This module defines the key-value store the authenticator and aggregation
session persist their state in: base proofs and aggregations keyed by
commitment, and nonces keyed by identity. The store is injected, never a
process-wide singleton, so a deployment can back it with any storage that
offers atomic read-modify-write.

Every state-mutating operation runs inside ``transaction()``, which
serializes writers. Duplicate-commitment races resolve first committer wins
through ``put_if_absent``.
"""

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Hashable, Iterator, Optional, Tuple

from .errors import SnarktorError, StoreUnavailableError

logger = logging.getLogger(__name__)

# Namespaces of the persisted maps
PROOFS_NAMESPACE = "base_proofs"
AGGREGATES_NAMESPACE = "aggregates"
NONCES_NAMESPACE = "nonces"


class KeyValueStore(ABC):
    """Abstract namespaced key-value store with atomic per-key updates."""

    @abstractmethod
    def get(self, namespace: str, key: Hashable) -> Optional[Any]:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def put(self, namespace: str, key: Hashable, value: Any) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def put_if_absent(self, namespace: str, key: Hashable, value: Any) -> bool:
        """Store a value only if the key is absent; return whether it was stored."""

    @abstractmethod
    def increment(self, namespace: str, key: Hashable) -> int:
        """Atomically add one to an integer value (absent counts as 0); return the new value."""

    @abstractmethod
    def transaction(self):
        """Context manager serializing a read-check-write sequence."""

    def contains(self, namespace: str, key: Hashable) -> bool:
        return self.get(namespace, key) is not None


class InMemoryStore(KeyValueStore):
    """
    Thread-safe in-process store.

    A single re-entrant lock guards all namespaces, so a transaction can call
    the other methods freely while excluding concurrent writers.
    """

    def __init__(self):
        self._data: Dict[Tuple[str, Hashable], Any] = {}
        self._lock = threading.RLock()

    def get(self, namespace: str, key: Hashable) -> Optional[Any]:
        with self._lock:
            return self._data.get((namespace, key))

    def put(self, namespace: str, key: Hashable, value: Any) -> None:
        with self._lock:
            self._data[(namespace, key)] = value

    def put_if_absent(self, namespace: str, key: Hashable, value: Any) -> bool:
        with self._lock:
            if (namespace, key) in self._data:
                return False
            self._data[(namespace, key)] = value
            return True

    def increment(self, namespace: str, key: Hashable) -> int:
        with self._lock:
            value = self._data.get((namespace, key), 0) + 1
            self._data[(namespace, key)] = value
            return value

    @contextmanager
    def transaction(self) -> Iterator["InMemoryStore"]:
        with self._lock:
            yield self

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """
    Surface backing-store failures as StoreUnavailableError.

    Domain errors (DuplicateProof, RootMismatch, ...) pass through untouched;
    any other exception raised while talking to the store is re-raised as
    StoreUnavailableError so callers never mistake it for a negative answer.

    Args:
        operation: Name of the operation, used in the error message
    """
    try:
        yield
    except SnarktorError:
        raise
    except Exception as e:
        logger.error(f"Store failure during {operation}: {e}")
        raise StoreUnavailableError(f"Backing store unavailable during {operation}: {e}") from e
