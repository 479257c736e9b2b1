"""Read a broker account statement into raw transaction records.

Statements are header-less: every row is a transaction and the asset's name
and ISIN are taken from the first row. Column positions follow the DEGIRO
account statement export unless configured otherwise.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
import math
from pathlib import Path
from typing import Any

from sharematch.config.decorators import log_calls
from sharematch.config.logger import get_logger
from sharematch.config.settings import MatchingConfig
from sharematch.exceptions import MalformedRecordError

from .managers.csv_manager import CSVManager
from .models import AssetInfo, RawRecord, Statement

logger = get_logger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xls"}


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float):
        return math.isnan(value)
    return isinstance(value, str) and not value.strip()


class StatementReader:
    """Turns statement rows into ``RawRecord`` objects for one asset."""

    def __init__(self, config: MatchingConfig | None = None):
        self.config = config or MatchingConfig()

    @log_calls(log_result=False)
    def read(self, file_path: str | Path) -> Statement:
        """Read a .csv, .xlsx or .xls statement.

        Raises:
            FileNotFoundError: the file does not exist.
            ValueError: the file type is not supported.
            MalformedRecordError: a row has an unreadable date or amount.
        """
        path = Path(file_path)
        if not path.is_file():
            raise FileNotFoundError(f"Statement not found: {path}")

        suffix = path.suffix.lower()
        if suffix in EXCEL_SUFFIXES:
            rows = CSVManager.read_excel(path, header=None)
        elif suffix == ".csv":
            rows = CSVManager.read_csv(path, header=None, dtype=object)
        else:
            raise ValueError(
                f"Unsupported statement type {path.suffix!r}, expected .csv, .xlsx or .xls"
            )
        return self.parse_rows(rows)

    def parse_rows(self, rows: Iterable[Mapping[int, Any]]) -> Statement:
        """Build a statement from rows keyed by zero-based column position."""
        columns = self.config.columns
        asset = None
        records = []

        for number, row in enumerate(rows, start=1):
            if all(_blank(value) for value in row.values()):
                continue

            if asset is None:
                asset = self._parse_asset(row)

            transaction_id = row.get(columns.transaction_id)
            description = row.get(columns.description)
            records.append(
                RawRecord(
                    date=self._parse_date(row.get(columns.date), number),
                    description="" if _blank(description) else str(description).strip(),
                    amount=self._parse_amount(row.get(columns.amount), number),
                    transaction_id=(
                        f"row-{number}" if _blank(transaction_id) else str(transaction_id).strip()
                    ),
                    row=number,
                )
            )

        if asset is not None:
            logger.info("--- %s --- ISIN: %s ---", asset.name, asset.isin)
        logger.info("Parsed %d statement records", len(records))
        return Statement(asset=asset, records=records)

    def _parse_asset(self, row: Mapping[int, Any]) -> AssetInfo | None:
        name = row.get(self.config.columns.product)
        isin = row.get(self.config.columns.isin)
        if _blank(name) and _blank(isin):
            return None
        return AssetInfo(
            name="" if _blank(name) else str(name).strip(),
            isin="" if _blank(isin) else str(isin).strip(),
        )

    def _parse_date(self, value: Any, row: int) -> date:
        # Spreadsheet cells may already hold dates; pandas Timestamps are datetimes
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if _blank(value):
            raise MalformedRecordError("missing transaction date", row=row)
        try:
            return datetime.strptime(str(value).strip(), self.config.date_format).date()
        except ValueError:
            raise MalformedRecordError(
                f"date {value!r} does not match format {self.config.date_format!r}",
                row=row,
            ) from None

    def _parse_amount(self, value: Any, row: int) -> Decimal:
        if _blank(value):
            raise MalformedRecordError("missing cash amount", row=row)
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise MalformedRecordError(f"amount {value!r} is not a number", row=row) from None
        if not amount.is_finite():
            raise MalformedRecordError(f"amount {value!r} is not a number", row=row)
        return amount
