"""Merge raw statement records into one buy lot and one sell lot per day."""

from collections.abc import Iterable

from sharematch.config.decorators import log_calls
from sharematch.config.logger import get_logger
from sharematch.data.models import Direction, RawRecord, Transaction

logger = get_logger(__name__)


class TransactionAggregator:
    """Groups records by (date, direction).

    All transactions in the same direction on the same day are treated as a
    single transaction: identifiers are concatenated in input order and
    quantities and amounts are summed.
    """

    @log_calls(log_args=False, log_result=False)
    def aggregate(
        self, records: Iterable[RawRecord]
    ) -> tuple[list[Transaction], list[Transaction]]:
        """Return ``(buys, sells)``, each sorted ascending by date.

        Raises:
            MalformedRecordError: a record is not a buy or a sell, or its
                quantity or amount cannot be interpreted.
        """
        groups: dict[tuple, Transaction] = {}
        count = 0

        for record in records:
            count += 1
            # Classify first so a fee row fails on its type, not its quantity
            direction = record.direction
            key = (record.date, direction)
            lot = groups.get(key)
            if lot is None:
                groups[key] = Transaction(
                    ids=[record.transaction_id],
                    date=record.date,
                    direction=direction,
                    quantity=record.quantity,
                    total_price=record.total_price,
                )
            else:
                lot.ids.append(record.transaction_id)
                lot.quantity += record.quantity
                lot.total_price += record.total_price

        buys = sorted(
            (lot for lot in groups.values() if lot.direction is Direction.BUY),
            key=lambda lot: lot.date,
        )
        sells = sorted(
            (lot for lot in groups.values() if lot.direction is Direction.SELL),
            key=lambda lot: lot.date,
        )
        logger.info(
            "Aggregated %d records into %d buy and %d sell transactions",
            count,
            len(buys),
            len(sells),
        )
        return buys, sells
