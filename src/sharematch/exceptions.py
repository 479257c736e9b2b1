"""Exceptions raised while ingesting and matching transactions."""

from datetime import date


class ShareMatchError(Exception):
    """Base class for all errors raised by the matching engine."""


class MalformedRecordError(ShareMatchError):
    """A raw statement record cannot be turned into a buy or sell lot."""

    GUIDANCE = (
        "Please check you have only included Buy and Sell transactions. "
        "Remove all other data including dividends, transaction fees, FX Credit/Debit etc."
    )

    def __init__(
        self,
        reason: str,
        record_id: str | None = None,
        row: int | None = None,
        description: str | None = None,
    ):
        self.reason = reason
        self.record_id = record_id
        self.row = row
        self.description = description

        location = []
        if row is not None:
            location.append(f"row {row}")
        if record_id:
            location.append(f"ID {record_id}")
        where = f" ({', '.join(location)})" if location else ""
        what = f" {description!r}" if description is not None else ""
        super().__init__(f"Malformed record{where}{what}: {reason}. {self.GUIDANCE}")


class AcquisitionNotFollowingDisposalError(ShareMatchError):
    """A buy used to close a short position does not postdate the sell."""

    def __init__(
        self,
        buy_ids: list[str],
        buy_date: date,
        sell_ids: list[str],
        sell_date: date,
    ):
        self.buy_ids = list(buy_ids)
        self.buy_date = buy_date
        self.sell_ids = list(sell_ids)
        self.sell_date = sell_date
        super().__init__(
            f"Acquisition {self.buy_ids} dated {buy_date} does not follow disposal "
            f"{self.sell_ids} dated {sell_date}. The date of the acquisition must be "
            "later than the date of the disposal. Buy or sell transactions may be "
            "missing from the input, or the disposal belongs to another tax year."
        )


class MissingLotError(ShareMatchError):
    """A lot handle no longer refers to an outstanding lot.

    Indicates a bug in a matching rule, never bad input.
    """

    def __init__(self, handle: int, where: str = "lot store"):
        self.handle = handle
        super().__init__(f"Lot #{handle} is not present in the {where}")
