"""sharematch - HMRC share matching for UK capital gains reports."""

__version__ = "0.1.0"
__description__ = "Capital gains share matching using the HMRC identification rules"

# Configuration - logging and settings
from .config.decorators import (
    LoggerMixin,
    log_calls,
    log_dataframe_operations,
    log_performance,
)
from .config.logger import (
    LogFileConfig,
    get_logger,
    setup_logging,
)
from .config.settings import MatchingConfig, StatementColumns

# Data management - statement ingestion and CSV export
from .data.managers.csv_manager import CSVManager

# Data models - lots, pool and match facts
from .data.models import (
    AssetInfo,
    Direction,
    MatchEvent,
    MatchRule,
    NoticeKind,
    RawRecord,
    Section104Holding,
    Section104Notice,
    Statement,
    Transaction,
    round_money,
)
from .data.statement import StatementReader
from .data.store import LotStore, OutstandingState

# Errors
from .exceptions import (
    AcquisitionNotFollowingDisposalError,
    MalformedRecordError,
    MissingLotError,
    ShareMatchError,
)

# Matching rules - in priority order
from .matching.acquisition_following_disposal import AcquisitionFollowingDisposalRule
from .matching.aggregator import TransactionAggregator
from .matching.base import MatchingRule, match_lots
from .matching.bed_and_breakfast import BedAndBreakfastRule
from .matching.ledger import Ledger, LedgerSummary
from .matching.same_day import SameDayRule
from .matching.section104 import Section104Rule

# Services - full pipeline
from .services.matching import MatchingService, MatchReport

__all__ = [
    "AcquisitionFollowingDisposalRule",
    "AcquisitionNotFollowingDisposalError",
    "AssetInfo",
    "BedAndBreakfastRule",
    "CSVManager",
    "Direction",
    "Ledger",
    "LedgerSummary",
    "LogFileConfig",
    "LoggerMixin",
    "LotStore",
    "MalformedRecordError",
    "MatchEvent",
    "MatchReport",
    "MatchRule",
    "MatchingConfig",
    "MatchingRule",
    "MatchingService",
    "MissingLotError",
    "NoticeKind",
    "OutstandingState",
    "RawRecord",
    "SameDayRule",
    "Section104Holding",
    "Section104Notice",
    "Section104Rule",
    "ShareMatchError",
    "Statement",
    "StatementColumns",
    "StatementReader",
    "Transaction",
    "TransactionAggregator",
    "get_logger",
    "log_calls",
    "log_dataframe_operations",
    "log_performance",
    "match_lots",
    "round_money",
    "setup_logging",
]
