"""End-to-end tests for the matching service."""

from datetime import date, timedelta
from decimal import Decimal
import logging

import pytest

from sharematch import (
    AssetInfo,
    MalformedRecordError,
    MatchingConfig,
    MatchingService,
    MatchRule,
    RawRecord,
    Statement,
)
from sharematch.matching.ledger import EVENT_COLUMNS, OUTSTANDING_WARNING

BASE_DATE = date(2022, 5, 16)


def record(day, description, amount, transaction_id):
    """Statement record dated ``day`` days after 16 May 2022."""
    return RawRecord(
        date=BASE_DATE + timedelta(days=day),
        description=description,
        amount=Decimal(amount),
        transaction_id=transaction_id,
    )


@pytest.fixture(name="service")
def fixture_service():
    return MatchingService(MatchingConfig(bed_and_breakfast_days=30, currency="GBP"))


@pytest.fixture(name="same_day_records")
def fixture_same_day_records():
    return [
        record(0, "Buy 10 Company A@19.999 GBP", "-199.99", "abcdefg-123456-hijk7890"),
        record(0, "Sell 10 Company A@20.654 GBP", "206.54", "bvcxza-654321-lkjhgf"),
    ]


def test_same_day_buy_and_sell(service, same_day_records):
    """A buy and a sell on the same day are matched and realise a gain."""
    report = service.run(same_day_records)

    assert len(report.events) == 1
    event = report.events[0]
    assert event.rule is MatchRule.SAME_DAY
    assert event.buy_ids == ("abcdefg-123456-hijk7890",)
    assert event.sell_ids == ("bvcxza-654321-lkjhgf",)
    assert event.profit_or_loss == Decimal("6.55")
    assert report.summary.gains == Decimal("6.55")
    assert report.summary.losses == Decimal("0.00")
    assert report.summary.net == Decimal("6.55")
    assert not report.summary.has_outstanding


def test_bed_and_breakfast_through_pipeline(service):
    """A repurchase two days after the sale is matched under the 30 day rule."""
    report = service.run(
        [
            record(0, "Sell 25 Company A", "485.23", "s1"),
            record(2, "Buy 25 Company A", "-467.20", "b1"),
        ]
    )

    assert [e.rule for e in report.events] == [MatchRule.BED_AND_BREAKFAST]
    assert report.summary.net == Decimal("18.03")


def test_section104_loss_with_outstanding_sell(service):
    """Selling more than the pool holds realises a loss and leaves a short."""
    report = service.run(
        [
            record(0, "Buy 15 Company A", "-120.10", "b1"),
            record(40, "Sell 20 Company A", "160.00", "s1"),
        ]
    )

    assert [e.rule for e in report.events] == [MatchRule.SECTION_104]
    assert report.summary.gains == Decimal("0.00")
    assert report.summary.losses == Decimal("-0.10")
    assert report.summary.net == Decimal("-0.10")
    assert report.summary.has_outstanding
    [short] = report.summary.outstanding_sells
    assert short.ids == ["s1"]
    assert short.quantity == 5
    assert short.total_price == Decimal("40.00")
    assert report.summary.outstanding_buys == []


def test_short_closed_by_later_acquisition(service):
    """A sell with no earlier holding is closed by a buy beyond the 30 day window."""
    report = service.run(
        [
            record(0, "Sell 10 Company A", "500.00", "s1"),
            record(45, "Buy 10 Company A", "-450.00", "b1"),
        ]
    )

    assert [e.rule for e in report.events] == [MatchRule.ACQUISITION_FOLLOWING_DISPOSAL]
    assert report.events[0].profit_or_loss == Decimal("50.00")
    assert report.summary.net == Decimal("50.00")
    assert not report.summary.has_outstanding
    assert report.section104 is None


def test_non_trade_record_fails_the_run(service, same_day_records):
    """A fee row in the input aborts processing before any matching."""
    records = same_day_records + [record(1, "Custody fee", "-2.50", "fee-1")]

    with pytest.raises(MalformedRecordError) as excinfo:
        service.run(records)
    assert excinfo.value.record_id == "fee-1"


def test_rules_apply_in_priority_order(service):
    """Same day matching takes precedence over the Section 104 holding."""
    report = service.run(
        [
            record(0, "Buy 10 Company A", "-100.00", "b1"),
            record(20, "Sell 15 Company A", "180.00", "s1"),
            record(20, "Buy 5 Company A", "-45.00", "b2"),
        ]
    )

    assert [e.rule for e in report.events] == [MatchRule.SAME_DAY, MatchRule.SECTION_104]
    same_day, pooled = report.events
    assert same_day.quantity == 5
    assert same_day.profit_or_loss == Decimal("15.00")
    assert pooled.quantity == 10
    assert pooled.buy_ids == ("b1",)
    assert pooled.profit_or_loss == Decimal("20.00")
    assert report.summary.net == Decimal("35.00")
    assert not report.summary.has_outstanding


def test_same_day_buys_are_merged_before_matching(service):
    """Several buys on one day are matched as a single acquisition."""
    report = service.run(
        [
            record(0, "Buy 3 Company A", "-30.00", "a"),
            record(0, "Buy 7 Company A", "-70.00", "b"),
            record(0, "Sell 10 Company A", "120.00", "s"),
        ]
    )

    [event] = report.events
    assert event.buy_ids == ("a", "b")
    assert event.quantity == 10
    assert event.profit_or_loss == Decimal("20.00")


def test_unmatched_pool_is_carried_forward(service):
    """Shares left in the pool are reported and kept on the report."""
    report = service.run(
        [
            record(0, "Buy 10 Company A", "-100.00", "b1"),
            record(40, "Sell 4 Company A", "60.00", "s1"),
        ]
    )

    assert report.events[0].profit_or_loss == Decimal("20.00")
    assert report.section104.quantity == 6
    assert report.section104.total_cost == Decimal("60.00")
    assert any(line.startswith("CARRY FORWARD 6 shares") for line in report.render())


def test_empty_input(service):
    """No records gives an empty report with zero totals."""
    report = service.run([])

    assert report.events == []
    assert report.summary.net == Decimal("0.00")
    assert report.render()[-1] == "Profit (gains minus losses): 0.00 GBP"


def test_run_statement_carries_asset(service, same_day_records):
    """Statement runs put the asset header at the top of the report."""
    statement = Statement(
        asset=AssetInfo(name="COMPANY A PLC", isin="GB0000000001"), records=same_day_records
    )
    report = service.run_statement(statement)

    lines = report.render()
    assert lines[0] == "--- COMPANY A PLC --- ISIN: GB0000000001 ---"
    assert lines[-3:] == [
        "Total gains (excluding fees): 6.55 GBP",
        "Total losses (excluding fees): 0.00 GBP",
        "Profit (gains minus losses): 6.55 GBP",
    ]


def test_render_lists_outstanding_transactions(service):
    """Unmatched lots follow the warning in the rendered report."""
    report = service.run(
        [
            record(0, "Buy 15 Company A", "-120.10", "b1"),
            record(40, "Sell 20 Company A", "160.00", "s1"),
        ]
    )

    lines = report.render()
    warning_at = lines.index(OUTSTANDING_WARNING)
    assert lines[warning_at + 1].startswith("Sell 5 on 2022-06-25 for 40.00")
    assert "Total losses (excluding fees): -0.10 GBP" in lines


def test_outstanding_lots_are_logged(service, caplog):
    """Runs that leave lots unmatched log a warning."""
    with caplog.at_level(logging.WARNING, logger="sharematch"):
        service.run([record(0, "Sell 5 Company A", "50.00", "s1")])

    assert OUTSTANDING_WARNING in caplog.text


def test_events_frame(service, same_day_records):
    """The export frame has one row per event in a fixed column order."""
    report = service.run(same_day_records)
    frame = report.ledger.events_frame()

    assert list(frame.columns) == EVENT_COLUMNS
    assert len(frame) == 1
    row = frame.iloc[0]
    assert row["rule"] == "SAME DAY"
    assert row["date"] == "2022-05-16"
    assert row["sell_ids"] == "bvcxza-654321-lkjhgf"
    assert row["profit_or_loss"] == Decimal("6.55")


def test_runs_share_no_state(service, same_day_records):
    """Each run starts from a clean state."""
    first = service.run(same_day_records)
    second = service.run(same_day_records)

    assert first.summary.net == second.summary.net == Decimal("6.55")
    assert len(second.events) == 1


def test_fatal_error_is_logged_once(service, same_day_records, caplog):
    """A failing run produces a single ERROR entry."""
    records = same_day_records + [record(1, "Custody fee", "-2.50", "fee-1")]

    with caplog.at_level(logging.DEBUG, logger="sharematch"), pytest.raises(
        MalformedRecordError
    ):
        service.run(records)

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "fee-1" in errors[0].message
    assert "Performance: run failed after" in caplog.text


def test_run_tracks_memory(service, same_day_records, caplog):
    """Run timing is logged together with the change in process memory."""
    with caplog.at_level(logging.DEBUG, logger="sharematch"):
        service.run(same_day_records)

    [message] = [r.message for r in caplog.records if r.message.startswith("Performance: run")]
    assert "memory:" in message
