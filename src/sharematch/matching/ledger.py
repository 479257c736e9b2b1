"""Realised gains and losses of a run, and the final report."""

from dataclasses import dataclass, field
from decimal import Decimal

import pandas as pd

from sharematch.config.decorators import log_dataframe_operations
from sharematch.config.logger import get_logger
from sharematch.data.models import NoticeKind, Transaction, round_money
from sharematch.data.store import OutstandingState

logger = get_logger(__name__)

EVENT_COLUMNS = [
    "rule",
    "date",
    "sell_ids",
    "buy_ids",
    "quantity",
    "average_sell_price",
    "average_buy_price",
    "proceeds",
    "cost",
    "profit_or_loss",
]

OUTSTANDING_WARNING = (
    "WARNING: The following transactions could not be matched. This may be because "
    "transactions are missing from the input or the transactions may be matched with "
    "disposals/acquisitions in other tax years."
)


@dataclass(frozen=True)
class LedgerSummary:
    """Totals of a completed run. Losses are zero or negative."""

    gains: Decimal
    losses: Decimal
    net: Decimal
    outstanding_buys: list[Transaction] = field(default_factory=list)
    outstanding_sells: list[Transaction] = field(default_factory=list)

    @property
    def has_outstanding(self) -> bool:
        return bool(self.outstanding_buys or self.outstanding_sells)


class Ledger:
    """Reads the final outstanding state and renders the run's results."""

    def __init__(self, state: OutstandingState, currency: str = "GBP"):
        self.state = state
        self.currency = currency

    def summary(self) -> LedgerSummary:
        gains = round_money(self.state.total_profit)
        losses = round_money(self.state.total_loss)
        return LedgerSummary(
            gains=gains,
            losses=losses,
            net=round_money(gains + losses),
            outstanding_buys=list(self.state.buy_lots()),
            outstanding_sells=list(self.state.sell_lots()),
        )

    def warn_outstanding(self, summary: LedgerSummary | None = None) -> None:
        summary = summary or self.summary()
        if not summary.has_outstanding:
            return
        logger.warning(OUTSTANDING_WARNING)
        for lot in summary.outstanding_sells + summary.outstanding_buys:
            logger.warning("Outstanding: %s", lot)

    def render(self) -> list[str]:
        """Text report: matches, pool carry-forward, outstanding lots and totals."""
        summary = self.summary()
        lines = [event.describe(self.currency) for event in self.state.events]

        if self.state.section104 is not None:
            lines.extend(
                notice.describe(self.currency)
                for notice in self.state.notices
                if notice.kind is NoticeKind.CARRY_FORWARD
            )

        if summary.has_outstanding:
            lines.append("")
            lines.append(OUTSTANDING_WARNING)
            lines.extend(str(lot) for lot in summary.outstanding_sells)
            lines.extend(str(lot) for lot in summary.outstanding_buys)

        lines.append("")
        lines.append(f"Total gains (excluding fees): {summary.gains} {self.currency}")
        lines.append(f"Total losses (excluding fees): {summary.losses} {self.currency}")
        lines.append(f"Profit (gains minus losses): {summary.net} {self.currency}")
        return lines

    @log_dataframe_operations()
    def events_frame(self) -> pd.DataFrame:
        """One row per match event, for CSV export."""
        rows = [
            {
                "rule": event.rule.value,
                "date": event.date.isoformat(),
                "sell_ids": ";".join(event.sell_ids),
                "buy_ids": ";".join(event.buy_ids),
                "quantity": event.quantity,
                "average_sell_price": round(event.average_sell_price, 4),
                "average_buy_price": round(event.average_buy_price, 4),
                "proceeds": event.proceeds,
                "cost": event.cost,
                "profit_or_loss": event.profit_or_loss,
            }
            for event in self.state.events
        ]
        return pd.DataFrame(rows, columns=EVENT_COLUMNS)
