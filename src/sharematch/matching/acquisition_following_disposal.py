"""Acquisition following disposal rule: close short positions with later purchases."""

from sharematch.config.decorators import LoggerMixin
from sharematch.data.models import MatchRule
from sharematch.data.store import OutstandingState
from sharematch.exceptions import AcquisitionNotFollowingDisposalError

from .base import MatchingRule, match_lots


class AcquisitionFollowingDisposalRule(LoggerMixin, MatchingRule):
    """Matches every still outstanding sell with the outstanding buys, first in first out.

    Only acquisitions made after the disposal can close it. The dates are
    checked before a pair is touched, so a failure leaves both lots intact.
    """

    rule = MatchRule.ACQUISITION_FOLLOWING_DISPOSAL

    def process(self, state: OutstandingState) -> OutstandingState:
        self.log_operation_start(
            "acquisition following disposal matching",
            f"{len(state.sells)} disposals, {len(state.buys)} acquisitions",
        )

        for sell_handle in list(state.sells):
            sell = state.lot(sell_handle)
            to_match = sell.quantity
            while to_match > 0 and state.buys:
                buy_handle = state.buys[0]
                buy = state.lot(buy_handle)
                if buy.date <= sell.date:
                    error = AcquisitionNotFollowingDisposalError(
                        buy.ids, buy.date, sell.ids, sell.date
                    )
                    self.log_operation_error("acquisition following disposal matching", error)
                    raise error
                to_match -= buy.quantity
                match_lots(state, buy_handle, sell_handle, self.rule, self.config.currency)

        self.log_operation_success(
            "acquisition following disposal matching",
            details=f"{len(state.buys)} acquisitions and {len(state.sells)} disposals outstanding",
        )
        return state
