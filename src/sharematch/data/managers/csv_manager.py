"""CSV and spreadsheet manager for reading statements and writing reports."""

import csv
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from sharematch.config.decorators import log_calls, log_performance
from sharematch.config.logger import get_logger

logger = get_logger(__name__)


class CSVManager:
    """Manager for reading/writing tabular data."""

    @log_calls(log_result=False)
    @log_performance()
    @staticmethod
    def read_csv(file_path: str | Path, **kwargs: Any) -> list[dict[Any, Any]]:
        """Read a CSV file and return a list of dictionaries.

        Empty cells are returned as None.

        Args:
            file_path: Path to the CSV file.
            **kwargs: Additional arguments to pass to pandas.read_csv, e.g.
                ``header=None`` to key each row by column position.
        """
        path = Path(file_path)
        if not path.exists():
            logger.error("CSV file not found: %s", file_path)
            return []

        df = pd.read_csv(path, **kwargs).replace({np.nan: None})
        logger.info("Read %d rows from %s", len(df), file_path)
        return df.to_dict(orient="records")

    @log_calls(log_result=False)
    @log_performance()
    @staticmethod
    def read_excel(
        file_path: str | Path, sheet_name: int | str = 0, **kwargs: Any
    ) -> list[dict[Any, Any]]:
        """Read one sheet of an Excel workbook and return a list of dictionaries.

        Args:
            file_path: Path to the .xlsx/.xls workbook.
            sheet_name: Sheet index or name, the first sheet by default.
            **kwargs: Additional arguments to pass to pandas.read_excel.
        """
        path = Path(file_path)
        if not path.exists():
            logger.error("Spreadsheet not found: %s", file_path)
            return []

        df = pd.read_excel(path, sheet_name=sheet_name, **kwargs)
        df = df.astype(object).where(pd.notna(df), None)
        logger.info("Read %d rows from %s", len(df), file_path)
        return df.to_dict(orient="records")

    @log_calls(log_args=False, log_result=False)
    @staticmethod
    def write_csv(items: list[dict[str, Any]], file_path: str | Path) -> None:
        """Write a list of dictionaries to a CSV file."""
        if not items:
            logger.warning("No items to write to CSV.")
            return

        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fieldnames = items[0].keys()

        with path.open(mode="w", newline="", encoding="utf-8") as csvfile:
            writer = csv.DictWriter(csvfile, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(items)

        logger.info("Wrote %d items to %s", len(items), file_path)
