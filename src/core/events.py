"""Observation records emitted by the pair engine and registry.

All records are frozen dataclasses. The engine never reads them back; they
exist for external consumers (indexers, tests, audit).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum, unique
from typing import Callable, Iterator, List, Type, TypeVar

from ..state.balances import Address, AssetId


@unique
class EventKind(Enum):
    MINT = "Mint"
    BURN = "Burn"
    SWAP = "Swap"
    SYNC = "Sync"
    POOL_CREATED = "PoolCreated"


@dataclass(frozen=True)
class Mint:
    pool_id: str
    sender: Address
    amount_a: int
    amount_b: int

    kind = EventKind.MINT


@dataclass(frozen=True)
class Burn:
    pool_id: str
    sender: Address
    amount_a: int
    amount_b: int
    to: Address

    kind = EventKind.BURN


@dataclass(frozen=True)
class Swap:
    pool_id: str
    sender: Address
    amount_a_in: int
    amount_b_in: int
    amount_a_out: int
    amount_b_out: int
    to: Address

    kind = EventKind.SWAP


@dataclass(frozen=True)
class Sync:
    pool_id: str
    reserve_a: int
    reserve_b: int

    kind = EventKind.SYNC


@dataclass(frozen=True)
class PoolCreated:
    asset_a: AssetId
    asset_b: AssetId
    pool_id: str
    pool_count: int

    kind = EventKind.POOL_CREATED


E = TypeVar("E")
Listener = Callable[[object], None]


class EventLog:
    """
    Append-only event sink.

    Pairs and the registry share one log so consumers see a single ordered
    stream. Pairs hand over an operation's events only once it commits.
    """

    def __init__(self) -> None:
        self._events: List[object] = []
        self._listeners: List[Listener] = []

    def emit(self, event: object) -> None:
        self._events.append(event)
        for listener in self._listeners:
            listener(event)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def of_type(self, event_type: Type[E]) -> List[E]:
        return [e for e in self._events if isinstance(e, event_type)]

    def last(self) -> object:
        if not self._events:
            raise IndexError("event log is empty")
        return self._events[-1]

    def to_dicts(self) -> List[dict]:
        return [{"event": e.kind.value, **asdict(e)} for e in self._events]

    def __iter__(self) -> Iterator[object]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)

    def __repr__(self) -> str:
        return f"EventLog({len(self._events)} events)"
