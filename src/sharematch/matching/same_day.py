"""Same day rule: disposals are first matched with acquisitions on the same day."""

from sharematch.config.decorators import LoggerMixin
from sharematch.data.models import MatchRule
from sharematch.data.store import OutstandingState

from .base import MatchingRule, match_lots


class SameDayRule(LoggerMixin, MatchingRule):
    """Matches each sell lot with the buy lot dated the same day, if any.

    After aggregation there is at most one buy lot per day, so every sell is
    matched at most once.
    """

    rule = MatchRule.SAME_DAY

    def process(self, state: OutstandingState) -> OutstandingState:
        self.log_operation_start("same day matching", f"{len(state.sells)} disposals")

        for sell_handle in list(state.sells):
            sell_date = state.lot(sell_handle).date
            buy_handle = next(
                (h for h in state.buys if state.lot(h).date == sell_date), None
            )
            if buy_handle is not None:
                match_lots(state, buy_handle, sell_handle, self.rule, self.config.currency)

        self.log_operation_success(
            "same day matching", details=f"{len(state.sells)} disposals outstanding"
        )
        return state
