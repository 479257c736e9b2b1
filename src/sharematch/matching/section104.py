"""Section 104 rule: remaining disposals are matched against the pooled holding.

More information: https://www.gov.uk/hmrc-internal-manuals/capital-gains-manual/cg51555
"""

from sharematch.config.decorators import LoggerMixin
from sharematch.data.models import (
    MatchEvent,
    MatchRule,
    NoticeKind,
    Section104Holding,
    Section104Notice,
    round_money,
)
from sharematch.data.store import OutstandingState

from .base import MatchingRule


class Section104Rule(LoggerMixin, MatchingRule):
    """Pools every remaining acquisition at average cost and matches disposals against it.

    All residual lots are replayed in date order. A disposal the pool cannot
    cover stays outstanding as an open short position; later acquisitions are
    set aside to close it before anything else is pooled.
    """

    rule = MatchRule.SECTION_104

    def process(self, state: OutstandingState) -> OutstandingState:
        holding = Section104Holding()

        # Sells first on a date tie; sorted() is stable
        handles = sorted(state.sells + state.buys, key=lambda h: state.lot(h).date)
        state.buys = []
        state.sells = []

        self.log_operation_start("Section 104 matching", f"{len(handles)} transactions")

        for handle in handles:
            if state.lot(handle).is_buy:
                self._add_acquisition(state, holding, handle)
            else:
                self._match_disposal(state, holding, handle)

        if not holding.is_empty:
            notice = Section104Notice(
                kind=NoticeKind.CARRY_FORWARD,
                date=None,
                ids=tuple(holding.ids),
                quantity=holding.quantity,
                cost=holding.total_cost,
            )
            state.notices.append(notice)
            state.section104 = holding
            self.logger.warning(notice.describe(self.config.currency))

        self.log_operation_success(
            "Section 104 matching",
            details=f"{len(state.buys)} acquisitions and {len(state.sells)} disposals outstanding",
        )
        return state

    def _add_acquisition(
        self, state: OutstandingState, holding: Section104Holding, handle: int
    ) -> None:
        """Pool a buy lot, first setting aside whatever is needed to close open shorts."""
        lot = state.lot(handle)

        short_quantity = sum(s.quantity for s in state.sell_lots()) - sum(
            b.quantity for b in state.buy_lots()
        )

        if short_quantity >= lot.quantity:
            state.buys.append(handle)
            self._notify(state, NoticeKind.SET_ASIDE, lot)
            return

        if short_quantity > 0:
            aside = state.store.split(handle, short_quantity)
            state.buys.append(aside)
            self._notify(state, NoticeKind.SET_ASIDE, state.lot(aside))

        holding.add(lot)
        state.store.discard(handle)
        self._notify(state, NoticeKind.POOLED, lot)

    def _match_disposal(
        self, state: OutstandingState, holding: Section104Holding, handle: int
    ) -> None:
        """Match a sell lot against the pool; any excess stays outstanding."""
        sell = state.lot(handle)

        if holding.is_empty:
            state.sells.append(handle)
            self.logger.debug(
                "Section 104 holding is empty, disposal %s left outstanding", sell
            )
            return

        quantity = min(sell.quantity, holding.quantity)
        average_sell_price = sell.average_price
        average_pool_price = holding.average_cost
        pool_ids = tuple(holding.ids)

        profit_or_loss = round_money(
            average_sell_price * quantity - average_pool_price * quantity
        )

        if quantity < sell.quantity:
            proceeds = sell.split(quantity).total_price
            state.sells.append(handle)
        else:
            proceeds = sell.total_price
            state.store.discard(handle)

        cost = holding.remove(quantity)

        event = MatchEvent(
            rule=self.rule,
            date=sell.date,
            buy_ids=pool_ids,
            sell_ids=tuple(sell.ids),
            quantity=quantity,
            average_buy_price=average_pool_price,
            average_sell_price=average_sell_price,
            proceeds=proceeds,
            cost=cost,
            profit_or_loss=profit_or_loss,
        )
        state.record(event)
        self.logger.info(event.describe(self.config.currency))

        if holding.is_empty:
            self.logger.debug("Section 104 holding exhausted on %s", sell.date)

    def _notify(self, state: OutstandingState, kind: NoticeKind, lot) -> None:
        notice = Section104Notice(
            kind=kind,
            date=lot.date,
            ids=tuple(lot.ids),
            quantity=lot.quantity,
            cost=lot.total_price,
        )
        state.notices.append(notice)
        self.logger.debug(notice.describe(self.config.currency))
