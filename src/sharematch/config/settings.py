"""Runtime settings for statement ingestion and share matching."""

from dataclasses import dataclass, fields
import os

from dotenv import load_dotenv


@dataclass(frozen=True)
class StatementColumns:
    """Zero-based column positions of a header-less broker account statement."""

    date: int = 0
    product: int = 3
    isin: int = 4
    description: int = 5
    amount: int = 8
    transaction_id: int = 11

    @classmethod
    def parse(cls, value: str) -> "StatementColumns":
        """Parse a comma-separated list of positions in field order."""
        positions = [int(part) for part in value.split(",") if part.strip()]
        names = [f.name for f in fields(cls)]
        if len(positions) != len(names):
            raise ValueError(
                f"Expected {len(names)} column positions ({', '.join(names)}), "
                f"got {len(positions)}: {value!r}"
            )
        return cls(**dict(zip(names, positions, strict=True)))

    @property
    def width(self) -> int:
        """Minimum number of columns a statement row must have."""
        return max(getattr(self, f.name) for f in fields(self)) + 1


class MatchingConfig:
    """Configuration for a matching run, read from the environment.

    Keyword arguments override the environment, which overrides the defaults.
    """

    def __init__(
        self,
        bed_and_breakfast_days: int | None = None,
        date_format: str | None = None,
        currency: str | None = None,
        columns: StatementColumns | None = None,
    ):
        """Initialize configuration from arguments and environment variables."""
        load_dotenv()

        self.bed_and_breakfast_days = (
            bed_and_breakfast_days
            if bed_and_breakfast_days is not None
            else int(os.getenv("CGT_BNB_WINDOW_DAYS", "30"))
        )
        if self.bed_and_breakfast_days < 0:
            raise ValueError(
                f"Bed and breakfast window must not be negative, got {self.bed_and_breakfast_days}"
            )

        self.date_format = date_format or os.getenv("CGT_DATE_FORMAT", "%d-%m-%Y")
        self.currency = currency or os.getenv("CGT_CURRENCY", "GBP")

        if columns is None:
            env_columns = os.getenv("CGT_STATEMENT_COLUMNS")
            columns = (
                StatementColumns.parse(env_columns) if env_columns else StatementColumns()
            )
        self.columns = columns

    def __repr__(self) -> str:
        return (
            f"MatchingConfig(bed_and_breakfast_days={self.bed_and_breakfast_days}, "
            f"date_format={self.date_format!r}, currency={self.currency!r}, "
            f"columns={self.columns})"
        )
