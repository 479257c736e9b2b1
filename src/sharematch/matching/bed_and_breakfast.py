"""Bed and breakfast rule: disposals matched with acquisitions in the following 30 days."""

from datetime import date, timedelta

from sharematch.config.decorators import LoggerMixin
from sharematch.data.models import MatchRule
from sharematch.data.store import OutstandingState

from .base import MatchingRule, match_lots


class BedAndBreakfastRule(LoggerMixin, MatchingRule):
    """Matches each sell lot with buys made strictly after it within the window.

    A disposal can straddle several acquisitions, so each sell is matched
    repeatedly, earliest buy first, until it is used up or no buy qualifies.
    """

    rule = MatchRule.BED_AND_BREAKFAST

    def _next_buy(self, state: OutstandingState, sell_date: date) -> int | None:
        # Window excludes the disposal day and ends after the last qualifying day
        window_end = sell_date + timedelta(days=self.config.bed_and_breakfast_days + 1)
        for handle in state.buys:
            buy_date = state.lot(handle).date
            if sell_date < buy_date < window_end:
                return handle
        return None

    def process(self, state: OutstandingState) -> OutstandingState:
        self.log_operation_start(
            "bed and breakfast matching",
            f"{len(state.sells)} disposals, {self.config.bed_and_breakfast_days} day window",
        )

        for sell_handle in list(state.sells):
            sell_date = state.lot(sell_handle).date
            while sell_handle in state.sells:
                buy_handle = self._next_buy(state, sell_date)
                if buy_handle is None:
                    break
                match_lots(state, buy_handle, sell_handle, self.rule, self.config.currency)

        self.log_operation_success(
            "bed and breakfast matching",
            details=f"{len(state.sells)} disposals outstanding",
        )
        return state
