#!/usr/bin/env python3
"""Generate a sample single-asset account statement for trying out the report."""

import argparse
from datetime import date, timedelta
from pathlib import Path
import random
import uuid

import numpy as np
import pandas as pd

# Set seed for reproducible sample data
random.seed(42)
np.random.seed(42)

PRODUCT = "Company A"
ISIN = "AB123456789"

# DEGIRO account statement layout, header-less
COLUMNS = [
    "date",
    "time",
    "value_date",
    "product",
    "isin",
    "description",
    "fx",
    "change_currency",
    "change",
    "balance_currency",
    "balance",
    "order_id",
]


def generate_trades(start: date, days: int, count: int) -> list[dict]:
    """Random walk of buys and sells that never sells more than is held."""
    price = 20.0
    held = 0
    rows = []
    trade_days = sorted(random.sample(range(days), count))

    for offset in trade_days:
        price = max(1.0, price * float(np.exp(np.random.normal(0, 0.03))))
        if held > 0 and random.random() < 0.4:
            quantity = random.randint(1, held)
            direction, amount = "Sell", round(quantity * price, 2)
            held -= quantity
        else:
            quantity = random.randint(5, 250)
            direction, amount = "Buy", -round(quantity * price, 2)
            held += quantity

        day = start + timedelta(days=offset)
        rows.append(
            {
                "date": day.strftime("%d-%m-%Y"),
                "time": f"{random.randint(8, 16):02d}:{random.randint(0, 59):02d}",
                "value_date": day.strftime("%d-%m-%Y"),
                "product": PRODUCT,
                "isin": ISIN,
                "description": f"{direction} {quantity:,} {PRODUCT}@{price:.2f} GBP",
                "fx": None,
                "change_currency": "GBP",
                "change": amount,
                "balance_currency": "GBP",
                "balance": amount,
                "order_id": str(uuid.UUID(int=random.getrandbits(128))),
            }
        )
    return rows


def main():
    """Write the sample statement as CSV."""
    parser = argparse.ArgumentParser(description="Generate a sample statement CSV.")
    parser.add_argument("--output", default="data/sample_statement.csv")
    parser.add_argument("--trades", type=int, default=40)
    parser.add_argument("--days", type=int, default=365)
    args = parser.parse_args()

    rows = generate_trades(date(2023, 4, 6), args.days, args.trades)
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(rows, columns=COLUMNS).to_csv(output, header=False, index=False)
    print(f"Wrote {len(rows)} transactions to {output}")


if __name__ == "__main__":
    main()
