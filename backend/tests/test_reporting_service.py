from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from shopledger.errors import InvalidAmount
from shopledger.services import ledger_service, staff_service
from shopledger.services.reporting_service import (
    build_daily_report,
    daily_report,
    get_report_monitor,
    owner_overview,
)


def _sale(monkeypatch, shop, staff, amount, mode, discount="0.00"):
    monkeypatch.setattr(ledger_service, "utcnow", lambda: datetime(2026, 10, 17, 8, 0))
    return ledger_service.record_sale(shop.id, amount, staff.id, mode, discount_amount=discount)


def test_daily_totals_by_payment_mode(shop, cashier, helper, monkeypatch):
    _sale(monkeypatch, shop, cashier, "100.00", "CASH")
    _sale(monkeypatch, shop, cashier, "200.00", "UPI")
    _sale(monkeypatch, shop, cashier, "150.00", "CREDIT")

    report = daily_report(shop.id, date(2026, 10, 17))

    assert report.total_sales == Decimal("450.00")
    assert report.cash_sales == Decimal("100.00")
    assert report.upi_sales == Decimal("200.00")
    assert report.credit_sales == Decimal("150.00")
    assert report.total_transactions == 3
    assert report.cash_sales + report.upi_sales + report.credit_sales == report.total_sales

    rows = {p.staff_id: (p.transaction_count, p.total_amount) for p in report.staff_performance}
    assert rows[cashier.id] == (3, Decimal("450.00"))
    # Active staff with no sales still get a row
    assert rows[helper.id] == (0, Decimal("0.00"))


def test_discounts_are_reported_but_not_subtracted(shop, cashier, monkeypatch):
    _sale(monkeypatch, shop, cashier, "90.00", "CASH", discount="10.00")

    report = daily_report(shop.id, date(2026, 10, 17))

    assert report.total_sales == Decimal("90.00")
    assert report.total_discounts == Decimal("10.00")


def test_other_days_are_excluded(shop, cashier, monkeypatch):
    _sale(monkeypatch, shop, cashier, "90.00", "CASH")

    report = daily_report(shop.id, date(2026, 10, 18))

    assert report.total_transactions == 0
    assert report.total_sales == Decimal("0.00")


def test_inactive_staff_sales_count_without_a_row(shop, cashier, helper, monkeypatch):
    _sale(monkeypatch, shop, helper, "60.00", "CASH")
    staff_service.deactivate_staff(shop.id, helper.id)

    report = daily_report(shop.id, date(2026, 10, 17))

    assert report.total_sales == Decimal("60.00")
    assert [p.staff_id for p in report.staff_performance] == [cashier.id]


def test_build_daily_report_is_pure():
    staff = [SimpleNamespace(id=1, name="Asha"), SimpleNamespace(id=2, name="Ravi")]
    txns = [
        SimpleNamespace(staff_id=1, payment_mode="CASH", entered_amount=Decimal("10.00"),
                        discount_amount=Decimal("1.00")),
        SimpleNamespace(staff_id=2, payment_mode="UPI", entered_amount=Decimal("5.50"),
                        discount_amount=Decimal("0.00")),
    ]

    report = build_daily_report(date(2026, 10, 17), txns, staff)

    assert report.total_sales == Decimal("15.50")
    assert report.total_discounts == Decimal("1.00")
    assert report.credit_sales == Decimal("0.00")
    assert [(p.staff_name, p.transaction_count) for p in report.staff_performance] == [
        ("Asha", 1),
        ("Ravi", 1),
    ]


def test_report_serialization_carries_shop_settings(shop, cashier, monkeypatch):
    from shopledger.services.shop_service import settings_for

    _sale(monkeypatch, shop, cashier, "12.50", "UPI")

    data = daily_report(shop.id, date(2026, 10, 17)).to_dict(settings_for(shop.id))

    assert data["date"] == "2026-10-17"
    assert data["upi_sales"] == "12.50"
    assert data["currency"] == "INR"
    assert data["timezone"] == "UTC"
    assert data["staff_performance"][0]["staff_name"] == "Asha"


def test_monitor_recomputes_on_every_ledger_change(shop, cashier):
    monitor = get_report_monitor()
    before = monitor.recompute_count

    txn = ledger_service.record_sale(shop.id, "150.00", cashier.id, "CREDIT")
    assert monitor.recompute_count == before + 1
    assert monitor.latest(shop.id).credit_sales == Decimal("150.00")

    ledger_service.settle_credit(shop.id, txn.id)
    assert monitor.recompute_count == before + 2

    ledger_service.record_sale(shop.id, "50.00", cashier.id, "CASH")
    report = monitor.latest(shop.id)
    assert report.total_sales == Decimal("200.00")
    assert report.total_transactions == 2


def test_monitor_ignores_failed_sales(shop, cashier):
    monitor = get_report_monitor()
    before = monitor.recompute_count

    with pytest.raises(InvalidAmount):
        ledger_service.record_sale(shop.id, "0", cashier.id, "CASH")

    assert monitor.recompute_count == before


def test_monitor_picks_up_new_staff(shop, cashier):
    monitor = get_report_monitor()
    ledger_service.record_sale(shop.id, "10.00", cashier.id, "CASH")

    newcomer = staff_service.upsert_staff(shop.id, {"name": "Zoya", "passcode": "9090"})

    ids = [p.staff_id for p in monitor.latest(shop.id).staff_performance]
    assert newcomer.id in ids


def test_owner_overview(shop, cashier, soap):
    ledger_service.record_sale(shop.id, "40.00", cashier.id, "CREDIT")

    overview = owner_overview(shop.id)

    assert overview["shop"]["name"] == "Corner Store"
    assert overview["daily_report"]["credit_sales"] == "40.00"
    assert overview["outstanding_credit"] == {"amount": "40.00", "count": 1}
    assert overview["active_items"] == 1
    assert overview["active_staff"] == 1
    assert [i["name"] for i in overview["low_stock"]] == ["Soap"]


def test_monitor_rebuckets_after_timezone_change(shop, cashier, monkeypatch):
    from shopledger import time_utils
    from shopledger.services import shop_service

    monkeypatch.setattr(time_utils, "utcnow", lambda: datetime(2026, 10, 17, 12, 0))
    _sale(monkeypatch, shop, cashier, "100.00", "CASH")
    monkeypatch.setattr(ledger_service, "utcnow", lambda: datetime(2026, 10, 17, 2, 0))
    ledger_service.record_sale(shop.id, "50.00", cashier.id, "UPI")

    monitor = get_report_monitor()
    assert monitor.latest(shop.id).total_sales == Decimal("150.00")

    # Local day in Los Angeles starts at 07:00 UTC, so the 02:00 sale moves to the 16th
    shop_service.update_shop_settings(shop.id, {"timezone": "America/Los_Angeles"})

    cached = monitor.latest(shop.id)
    fresh = daily_report(shop.id)
    assert cached.date == fresh.date == date(2026, 10, 17)
    assert cached.total_sales == fresh.total_sales == Decimal("100.00")
    assert cached == fresh
