"""Protocol definitions for dependency injection."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from rate_sync.domain.entities import FieldWrite, StoredState


class SnapshotFetcher(Protocol):
    """Protocol for fetching current prices."""

    def __call__(self, symbols: Sequence[str], convert: str) -> dict[str, float]:
        """Return symbol -> price in the ``convert`` currency."""
        ...


class StoredStateReader(Protocol):
    """Protocol for reading previously stored values and dates."""

    def __call__(self, namespace: str, keys: Sequence[str]) -> "StoredState":
        """Read every key in one batched request."""
        ...


class StoredStateWriter(Protocol):
    """Protocol for applying a batch of field writes."""

    def __call__(self, owner_id: str, writes: Sequence["FieldWrite"]) -> None:
        """Apply all writes atomically or raise PersistenceError."""
        ...
