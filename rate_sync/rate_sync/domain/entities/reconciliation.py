"""Reconciliation domain entities - value objects living for a single run."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class TrackedField:
    """Stored-state keys of one tracked symbol."""

    symbol: str
    value_key: str
    date_key: str


@dataclass(frozen=True)
class TrackedQuantity:
    """One monitored price: fetched value against its stored counterpart."""

    symbol: str
    current: float
    stored: float | None = None
    stored_date: str | None = None  # ISO YYYY-MM-DD, region-local

    def changed(self, epsilon: float) -> bool:
        """True if nothing is stored or the value moved by at least ``epsilon``."""
        if self.stored is None:
            return True
        return abs(self.current - self.stored) >= epsilon


@dataclass(frozen=True)
class FieldWrite:
    """A single staged write for the record store."""

    namespace: str
    key: str
    type: str
    value: str

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "namespace": self.namespace,
            "key": self.key,
            "type": self.type,
            "value": self.value,
        }


@dataclass(frozen=True)
class StoredState:
    """Previously persisted values, keyed by field key, plus their owner."""

    owner_id: str
    values: Mapping[str, str | None] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def get(self, key: str) -> str | None:
        return self.values.get(key)


@dataclass(frozen=True)
class RunResult:
    """Outcome of one reconciliation attempt. Never mutated after construction."""

    skipped: bool
    date: str  # region-local ISO date the run evaluated
    reason: str | None = None
    wrote: bool = False
    rates: Mapping[str, float] = field(default_factory=dict)
    last_updated: Mapping[str, str | None] = field(default_factory=dict)
    updated: tuple[str, ...] = ()
    owner_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))
        object.__setattr__(
            self, "last_updated", MappingProxyType(dict(self.last_updated))
        )
        object.__setattr__(self, "updated", tuple(self.updated))

    @property
    def shop_id(self) -> int | str | None:
        """Numeric shop id extracted from the owner GID."""
        if not self.owner_id:
            return None
        tail = self.owner_id.rsplit("/", 1)[-1]
        return int(tail) if tail.isdigit() else tail

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        if self.skipped:
            return {
                "ok": True,
                "skipped": True,
                "reason": self.reason,
                "date": self.date,
            }
        return {
            "ok": True,
            "skipped": False,
            "reason": None,
            "date": self.date,
            "wrote": self.wrote,
            "rates": dict(self.rates),
            "last_updated": dict(self.last_updated),
            "updated": list(self.updated),
            "shop_id": self.shop_id,
        }
