"""Abstract base class for matching rules and the shared lot-matching routine."""

from abc import ABC, abstractmethod

from sharematch.config.logger import get_logger
from sharematch.config.settings import MatchingConfig
from sharematch.data.models import MatchEvent, MatchRule, round_money
from sharematch.data.store import OutstandingState

logger = get_logger(__name__)


class MatchingRule(ABC):
    """One HMRC share identification rule.

    Rules run in priority order; each consumes what it can from the
    outstanding lots and hands the residual state to the next rule.
    """

    rule: MatchRule

    def __init__(self, config: MatchingConfig | None = None):
        self.config = config or MatchingConfig()

    @abstractmethod
    def process(self, state: OutstandingState) -> OutstandingState:
        """Match outstanding lots under this rule and return the updated state."""


def match_lots(
    state: OutstandingState,
    buy_handle: int,
    sell_handle: int,
    rule: MatchRule,
    currency: str = "GBP",
) -> MatchEvent:
    """Match one buy lot against one sell lot.

    The smaller lot is consumed whole; the larger one gives up a proportional
    slice and stays outstanding with the remainder. Fully consumed lots are
    retired from the state and the profit or loss is recorded in its totals.
    """
    buy = state.lot(buy_handle)
    sell = state.lot(sell_handle)
    average_buy_price = buy.average_price
    average_sell_price = sell.average_price

    if buy.quantity == sell.quantity:
        quantity = sell.quantity
        proceeds, cost = sell.total_price, buy.total_price
        state.retire(buy_handle)
        state.retire(sell_handle)
    elif sell.quantity > buy.quantity:
        quantity = buy.quantity
        proceeds, cost = sell.split(quantity).total_price, buy.total_price
        state.retire(buy_handle)
    else:
        quantity = sell.quantity
        proceeds, cost = sell.total_price, buy.split(quantity).total_price
        state.retire(sell_handle)

    event = MatchEvent(
        rule=rule,
        date=sell.date,
        buy_ids=tuple(buy.ids),
        sell_ids=tuple(sell.ids),
        quantity=quantity,
        average_buy_price=average_buy_price,
        average_sell_price=average_sell_price,
        proceeds=proceeds,
        cost=cost,
        profit_or_loss=round_money(proceeds - cost),
    )
    state.record(event)
    logger.info(event.describe(currency))
    return event
