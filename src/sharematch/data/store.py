"""Lot storage and the outstanding-transactions state threaded through the rules."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from decimal import Decimal
import itertools

from sharematch.exceptions import MissingLotError

from .models import ZERO, MatchEvent, Section104Holding, Section104Notice, Transaction


class LotStore:
    """Arena of lots addressed by stable integer handles.

    Handles are never reused within a store, so a stale handle always fails
    loudly instead of silently pointing at another lot.
    """

    def __init__(self):
        self._lots: dict[int, Transaction] = {}
        self._handles = itertools.count()

    def add(self, lot: Transaction) -> int:
        handle = next(self._handles)
        self._lots[handle] = lot
        return handle

    def get(self, handle: int) -> Transaction:
        try:
            return self._lots[handle]
        except KeyError:
            raise MissingLotError(handle) from None

    def discard(self, handle: int) -> Transaction:
        try:
            return self._lots.pop(handle)
        except KeyError:
            raise MissingLotError(handle) from None

    def split(self, handle: int, quantity: int) -> int:
        """Split ``quantity`` shares off a stored lot into a new lot and return its handle."""
        return self.add(self.get(handle).split(quantity))

    def __contains__(self, handle: object) -> bool:
        return handle in self._lots

    def __len__(self) -> int:
        return len(self._lots)


@dataclass
class OutstandingState:
    """Residual buy and sell lots plus the running profit and loss.

    ``buys`` and ``sells`` hold handles into ``store`` in ascending date
    order. Losses accumulate as negative numbers.
    """

    store: LotStore = field(default_factory=LotStore)
    buys: list[int] = field(default_factory=list)
    sells: list[int] = field(default_factory=list)
    total_profit: Decimal = ZERO
    total_loss: Decimal = ZERO
    events: list[MatchEvent] = field(default_factory=list)
    notices: list[Section104Notice] = field(default_factory=list)
    section104: Section104Holding | None = None

    @classmethod
    def from_lots(
        cls, buys: Iterable[Transaction], sells: Iterable[Transaction]
    ) -> "OutstandingState":
        state = cls()
        state.buys = [state.store.add(lot) for lot in sorted(buys, key=lambda t: t.date)]
        state.sells = [
            state.store.add(lot) for lot in sorted(sells, key=lambda t: t.date)
        ]
        return state

    def lot(self, handle: int) -> Transaction:
        return self.store.get(handle)

    def buy_lots(self) -> Iterator[Transaction]:
        return (self.store.get(handle) for handle in self.buys)

    def sell_lots(self) -> Iterator[Transaction]:
        return (self.store.get(handle) for handle in self.sells)

    def retire(self, handle: int) -> Transaction:
        """Drop a fully matched lot from its outstanding list and the store."""
        lot = self.store.get(handle)
        handles = self.buys if lot.is_buy else self.sells
        try:
            handles.remove(handle)
        except ValueError:
            raise MissingLotError(handle, "outstanding list") from None
        return self.store.discard(handle)

    def record(self, event: MatchEvent) -> None:
        """Add a match to the ledger totals."""
        if event.is_gain:
            self.total_profit += event.profit_or_loss
        else:
            self.total_loss += event.profit_or_loss
        self.events.append(event)

    @property
    def has_outstanding(self) -> bool:
        return bool(self.buys or self.sells)
