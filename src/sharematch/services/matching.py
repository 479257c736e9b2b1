"""Service running the full share-matching pipeline for one asset."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from sharematch.config.decorators import log_performance
from sharematch.config.logger import get_logger
from sharematch.config.settings import MatchingConfig
from sharematch.data.models import (
    AssetInfo,
    MatchEvent,
    RawRecord,
    Section104Holding,
    Section104Notice,
    Statement,
)
from sharematch.data.store import OutstandingState
from sharematch.matching.acquisition_following_disposal import (
    AcquisitionFollowingDisposalRule,
)
from sharematch.matching.aggregator import TransactionAggregator
from sharematch.matching.base import MatchingRule
from sharematch.matching.bed_and_breakfast import BedAndBreakfastRule
from sharematch.matching.ledger import Ledger, LedgerSummary
from sharematch.matching.same_day import SameDayRule
from sharematch.matching.section104 import Section104Rule

logger = get_logger(__name__)


@dataclass
class MatchReport:
    """Everything a run produced, ready for rendering or export."""

    asset: AssetInfo | None
    ledger: Ledger
    summary: LedgerSummary
    events: list[MatchEvent] = field(default_factory=list)
    notices: list[Section104Notice] = field(default_factory=list)
    section104: Section104Holding | None = None

    def render(self) -> list[str]:
        lines = []
        if self.asset is not None:
            lines.append(f"--- {self.asset.name} --- ISIN: {self.asset.isin} ---")
            lines.append("")
        lines.extend(self.ledger.render())
        return lines


class MatchingService:
    """Applies the HMRC share identification rules in priority order.

    Each call to ``run`` owns its lots and state exclusively; nothing is
    carried over from one asset to the next.
    """

    def __init__(self, config: MatchingConfig | None = None):
        self.config = config or MatchingConfig()
        self.aggregator = TransactionAggregator()

    def rules(self) -> list[MatchingRule]:
        """Fresh rule instances, highest priority first."""
        return [
            SameDayRule(self.config),
            BedAndBreakfastRule(self.config),
            Section104Rule(self.config),
            AcquisitionFollowingDisposalRule(self.config),
        ]

    @log_performance(memory_tracking=True)
    def run(
        self, records: Iterable[RawRecord], asset: AssetInfo | None = None
    ) -> MatchReport:
        """Match one asset's transactions and return the report.

        Raises:
            MalformedRecordError: a record is not a buy or a sell.
            AcquisitionNotFollowingDisposalError: a short position cannot be
                closed by a later acquisition.
        """
        buys, sells = self.aggregator.aggregate(records)
        logger.info("Number of disposals: %d", len(sells))

        state = OutstandingState.from_lots(buys, sells)
        for rule in self.rules():
            state = rule.process(state)

        ledger = Ledger(state, currency=self.config.currency)
        summary = ledger.summary()
        ledger.warn_outstanding(summary)

        return MatchReport(
            asset=asset,
            ledger=ledger,
            summary=summary,
            events=list(state.events),
            notices=list(state.notices),
            section104=state.section104,
        )

    def run_statement(self, statement: Statement) -> MatchReport:
        return self.run(statement.records, asset=statement.asset)
