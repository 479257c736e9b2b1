#!/usr/bin/env python3
"""Produce an HMRC capital gains matching report for one asset's statement.

Export the account statement from the broker, keep only one asset's Buy and
Sell rows in a separate spreadsheet and pass it to this script.
"""

import argparse
import sys

from sharematch import (
    CSVManager,
    MatchingConfig,
    MatchingService,
    ShareMatchError,
    StatementReader,
    get_logger,
    setup_logging,
)

logger = get_logger(__name__)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description=(
            "Match one asset's buy and sell transactions "
            "using the HMRC share identification rules."
        )
    )
    parser.add_argument("statement", help="Path to the .xlsx, .xls or .csv statement")
    parser.add_argument(
        "--export-csv", metavar="PATH", help="Also write the matches to a CSV file"
    )
    parser.add_argument(
        "--bnb-days",
        type=int,
        default=None,
        help="Bed and breakfast window in days (default: CGT_BNB_WINDOW_DAYS or 30)",
    )
    parser.add_argument(
        "--log-level", default=None, help="Console log level, e.g. DEBUG or WARNING"
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Read the statement, run the matching rules and print the report."""
    args = parse_args(argv)
    setup_logging(level=args.log_level)

    try:
        config = MatchingConfig(bed_and_breakfast_days=args.bnb_days)
        statement = StatementReader(config).read(args.statement)
        report = MatchingService(config).run_statement(statement)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Cannot process statement: %s", e)
        return 1
    except ShareMatchError as e:
        logger.error("ERROR: %s", e)
        return 1

    print("\n".join(report.render()))
    print("Processing complete")

    if args.export_csv:
        CSVManager.write_csv(
            report.ledger.events_frame().to_dict(orient="records"), args.export_csv
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
