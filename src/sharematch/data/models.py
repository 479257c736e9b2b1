"""Core data structures: raw statement records, lots, the Section 104 pool and match facts."""

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_EVEN, Decimal
import enum

from sharematch.exceptions import MalformedRecordError

PENNY = Decimal("0.01")
ZERO = Decimal("0.00")


def round_money(value: Decimal) -> Decimal:
    """Round a monetary amount to 2 decimal places, half to even."""
    return Decimal(value).quantize(PENNY, rounding=ROUND_HALF_EVEN)


class Direction(enum.Enum):
    """Enum of trade directions."""

    BUY = "Buy"
    SELL = "Sell"

    @classmethod
    def from_description(cls, description: str) -> "Direction | None":
        """Classify a statement description by its leading word.

        Returns None when the description is neither a buy nor a sell.
        """
        prefix = description[:4]
        if prefix == "Sell":
            return cls.SELL
        if prefix == "Buy ":
            return cls.BUY
        return None


@dataclass(frozen=True)
class RawRecord:
    """One row of a broker account statement, as handed over by ingestion.

    ``amount`` is the signed cash delta of the row: negative for buys,
    positive for sells.
    """

    date: date
    description: str
    amount: Decimal
    transaction_id: str
    row: int | None = None

    def _malformed(self, reason: str) -> MalformedRecordError:
        return MalformedRecordError(
            reason,
            record_id=self.transaction_id,
            row=self.row,
            description=self.description,
        )

    @property
    def direction(self) -> Direction:
        """Direction encoded in the description."""
        direction = Direction.from_description(self.description)
        if direction is None:
            raise self._malformed("unknown transaction type, expected Buy or Sell")
        return direction

    @property
    def quantity(self) -> int:
        """Share count following the direction word, e.g. ``Buy 1,250 ACME@...``."""
        remainder = self.description[len(self.direction.value) :].strip()
        token = remainder.split(" ", 1)[0].replace(",", "")
        try:
            quantity = int(token)
        except ValueError:
            raise self._malformed("share quantity is missing or not an integer") from None
        if quantity <= 0:
            raise self._malformed(f"share quantity must be positive, got {quantity}")
        return quantity

    @property
    def total_price(self) -> Decimal:
        """Unsigned cost (buys) or proceeds (sells) of the record."""
        amount = Decimal(self.amount)
        if self.direction is Direction.BUY:
            amount = -amount
        if amount < 0:
            raise self._malformed(
                f"cash amount {self.amount} has the wrong sign for a {self.direction.value}"
            )
        return amount


@dataclass
class Transaction:
    """A (possibly partial) lot of shares bought or sold on one day.

    ``total_price`` is the unsigned cost or proceeds of the whole remaining
    quantity, never a per-share price.
    """

    ids: list[str]
    date: date
    direction: Direction
    quantity: int
    total_price: Decimal

    @property
    def average_price(self) -> Decimal:
        if self.quantity == 0:
            return ZERO
        return self.total_price / self.quantity

    @property
    def is_buy(self) -> bool:
        return self.direction is Direction.BUY

    def split(self, quantity: int) -> "Transaction":
        """Detach ``quantity`` shares into a new lot, keeping prices proportional.

        The detached slice is rounded to the penny and this lot keeps the
        exact remainder, so the two totals always add back up.
        """
        if not 0 < quantity <= self.quantity:
            raise ValueError(
                f"Cannot split {quantity} shares from a lot of {self.quantity}"
            )

        if quantity == self.quantity:
            price = self.total_price
        else:
            price = round_money(self.total_price * quantity / self.quantity)

        self.quantity -= quantity
        self.total_price -= price
        return Transaction(list(self.ids), self.date, self.direction, quantity, price)

    def __str__(self) -> str:
        return (
            f"{self.direction.value} {self.quantity} on {self.date.isoformat()} "
            f"for {self.total_price} (IDs {', '.join(self.ids)})"
        )


@dataclass
class Section104Holding:
    """Weighted-average cost pool of shares not matched by the earlier rules."""

    ids: list[str] = field(default_factory=list)
    quantity: int = 0
    total_cost: Decimal = ZERO

    @property
    def is_empty(self) -> bool:
        return self.quantity == 0

    @property
    def average_cost(self) -> Decimal:
        if self.quantity == 0:
            return ZERO
        return self.total_cost / self.quantity

    def add(self, lot: Transaction) -> None:
        """Fold a buy lot into the pool."""
        self.ids.extend(lot.ids)
        self.quantity += lot.quantity
        self.total_cost += lot.total_price

    def remove(self, quantity: int) -> Decimal:
        """Take ``quantity`` shares out of the pool and return their cost.

        Emptying the pool resets it, so a later buy starts a fresh holding.
        """
        if not 0 < quantity <= self.quantity:
            raise ValueError(
                f"Cannot remove {quantity} shares from a pool of {self.quantity}"
            )

        if quantity == self.quantity:
            cost = self.total_cost
        else:
            cost = round_money(self.total_cost * quantity / self.quantity)

        self.quantity -= quantity
        self.total_cost -= cost
        if self.quantity == 0:
            self.reset()
        return cost

    def reset(self) -> None:
        self.ids = []
        self.quantity = 0
        self.total_cost = ZERO


class MatchRule(enum.Enum):
    """HMRC share identification rules, in priority order."""

    SAME_DAY = "SAME DAY"
    BED_AND_BREAKFAST = "BED AND BREAKFAST"
    SECTION_104 = "SECTION 104"
    ACQUISITION_FOLLOWING_DISPOSAL = "ACQUISITION FOLLOWING DISPOSAL"


@dataclass(frozen=True)
class MatchEvent:
    """A disposal (or part of one) identified with an acquisition or the pool."""

    rule: MatchRule
    date: date
    buy_ids: tuple[str, ...]
    sell_ids: tuple[str, ...]
    quantity: int
    average_buy_price: Decimal
    average_sell_price: Decimal
    proceeds: Decimal
    cost: Decimal
    profit_or_loss: Decimal

    @property
    def is_gain(self) -> bool:
        return self.profit_or_loss >= 0

    def describe(self, currency: str = "GBP") -> str:
        """Human-readable one-line summary of the match."""
        if self.rule is MatchRule.SECTION_104:
            buys = "the Section 104 holding"
        else:
            buys = f"buy transaction(s) (IDs {', '.join(self.buy_ids)})"
        outcome = "Profit" if self.is_gain else "Loss"
        return (
            f"{self.rule.value} {self.quantity} shares from sell transaction(s) "
            f"(IDs {', '.join(self.sell_ids)}) dated {self.date.isoformat()} identified with "
            f"{buys}. Average sell price {self.average_sell_price:.4f} {currency}, "
            f"average buy price {self.average_buy_price:.4f} {currency}. "
            f"{outcome} = {self.profit_or_loss} {currency}."
        )


class NoticeKind(enum.Enum):
    POOLED = "POOLED"
    SET_ASIDE = "SET ASIDE"
    CARRY_FORWARD = "CARRY FORWARD"


@dataclass(frozen=True)
class Section104Notice:
    """Informational fact about the Section 104 pool."""

    kind: NoticeKind
    date: date | None
    ids: tuple[str, ...]
    quantity: int
    cost: Decimal

    def describe(self, currency: str = "GBP") -> str:
        ids = ", ".join(self.ids)
        if self.kind is NoticeKind.POOLED:
            return (
                f"SECTION 104 {self.quantity} shares costing {self.cost} {currency} added to "
                f"the Section 104 holding on {self.date.isoformat()} (IDs {ids})"
            )
        if self.kind is NoticeKind.SET_ASIDE:
            return (
                f"SECTION 104 {self.quantity} shares costing {self.cost} {currency} bought on "
                f"{self.date.isoformat()} set aside to close a short position (IDs {ids})"
            )
        return (
            f"CARRY FORWARD {self.quantity} shares with a cost of {self.cost} {currency} "
            f"remain in the Section 104 holding and may need to be matched with future "
            f"disposals (IDs {ids})"
        )


@dataclass(frozen=True)
class AssetInfo:
    name: str
    isin: str


@dataclass
class Statement:
    """One asset's account statement: the asset and its raw records."""

    asset: AssetInfo | None
    records: list[RawRecord]
