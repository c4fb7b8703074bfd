# Overview: Aggregation engine; derives the daily sales report and owner overview from the ledger.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable

from flask import current_app

from .. import persistence
from ..events import TRANSACTIONS_CHANGED, ChangeBus, ChangeEvent, Subscription
from ..models import PAYMENT_CASH, PAYMENT_CREDIT, PAYMENT_UPI, Staff, Transaction
from ..time_utils import local_today
from .inventory_service import low_stock_for_shop
from .ledger_service import filter_transactions, outstanding_credit
from .shop_service import ShopSettings, get_shop, settings_for
from .staff_service import list_active_staff

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

MONITOR_KEY = "shopledger.report_monitor"


@dataclass(frozen=True)
class StaffPerformance:
    staff_id: int
    staff_name: str
    transaction_count: int
    total_amount: Decimal

    def to_dict(self) -> dict:
        return {
            "staff_id": self.staff_id,
            "staff_name": self.staff_name,
            "transaction_count": self.transaction_count,
            "total_amount": str(self.total_amount),
        }


@dataclass(frozen=True)
class DailySalesReport:
    """Derived summary of one local calendar day. Never persisted."""
    date: date
    total_sales: Decimal = ZERO
    cash_sales: Decimal = ZERO
    upi_sales: Decimal = ZERO
    credit_sales: Decimal = ZERO
    total_transactions: int = 0
    total_discounts: Decimal = ZERO
    staff_performance: list[StaffPerformance] = field(default_factory=list)

    def to_dict(self, settings: ShopSettings | None = None) -> dict:
        data = {
            "date": self.date.isoformat(),
            "total_sales": str(self.total_sales),
            "cash_sales": str(self.cash_sales),
            "upi_sales": str(self.upi_sales),
            "credit_sales": str(self.credit_sales),
            "total_transactions": self.total_transactions,
            "total_discounts": str(self.total_discounts),
            "staff_performance": [p.to_dict() for p in self.staff_performance],
        }
        if settings is not None:
            data["shop_id"] = settings.shop_id
            data["currency"] = settings.currency
            data["timezone"] = settings.timezone
        return data


def _sum_amounts(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.entered_amount for t in transactions), ZERO)


def build_daily_report(
    report_date: date,
    transactions: list[Transaction],
    staff: list[Staff],
) -> DailySalesReport:
    """
    Pure aggregation over one day's transactions.

    entered_amount already reflects the discounted price, so discounts are
    summed for reporting only and never subtracted from sales. Every active
    staff member gets a row, including those with no sales.
    """
    by_mode = {
        mode: _sum_amounts(t for t in transactions if t.payment_mode == mode)
        for mode in (PAYMENT_CASH, PAYMENT_UPI, PAYMENT_CREDIT)
    }

    performance = []
    for member in staff:
        own = [t for t in transactions if t.staff_id == member.id]
        performance.append(
            StaffPerformance(
                staff_id=member.id,
                staff_name=member.name,
                transaction_count=len(own),
                total_amount=_sum_amounts(own),
            )
        )

    return DailySalesReport(
        date=report_date,
        total_sales=_sum_amounts(transactions),
        cash_sales=by_mode[PAYMENT_CASH],
        upi_sales=by_mode[PAYMENT_UPI],
        credit_sales=by_mode[PAYMENT_CREDIT],
        total_transactions=len(transactions),
        total_discounts=sum((t.discount_amount for t in transactions), ZERO),
        staff_performance=performance,
    )


def daily_report(shop_id: int, on_date: date | None = None) -> DailySalesReport:
    """Report for on_date, defaulting to today in the shop's timezone."""
    shop = get_shop(shop_id)
    report_date = on_date or local_today(shop.timezone)
    transactions = filter_transactions(shop_id, on_date=report_date)
    return build_daily_report(report_date, transactions, list_active_staff(shop_id))


def owner_overview(shop_id: int) -> dict:
    settings = settings_for(shop_id)
    credit = outstanding_credit(shop_id)
    return {
        "shop": {"id": settings.shop_id, "name": settings.name, "currency": settings.currency},
        "daily_report": daily_report(shop_id).to_dict(settings),
        "active_items": persistence.count("items", {"shop_id": shop_id, "is_active": True}),
        "active_staff": persistence.count("staff", {"shop_id": shop_id, "is_active": True}),
        "outstanding_credit": credit.to_dict(),
        "low_stock": [item.to_dict() for item in low_stock_for_shop(shop_id)],
    }


class DailyReportMonitor:
    """
    Keeps the latest daily report per shop.

    Every TRANSACTIONS_CHANGED event triggers a full recompute of today's
    report from the ledger; there are no running totals to drift.
    """

    def __init__(self):
        self._reports: dict[int, DailySalesReport] = {}
        # Timezone each cached report was bucketed with
        self._zones: dict[int, str] = {}
        self._subscription: Subscription | None = None
        self.recompute_count = 0

    def attach(self, bus: ChangeBus) -> None:
        self._subscription = bus.subscribe(TRANSACTIONS_CHANGED, None, self._on_ledger_changed)

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _recompute(self, shop_id: int) -> DailySalesReport:
        tz_name = get_shop(shop_id).timezone
        report = daily_report(shop_id)
        self._reports[shop_id] = report
        self._zones[shop_id] = tz_name
        self.recompute_count += 1
        return report

    def _on_ledger_changed(self, event: ChangeEvent) -> None:
        report = self._recompute(event.shop_id)
        logger.debug(
            "Recomputed daily report for shop %s: %s sales, %s transactions",
            event.shop_id, report.total_sales, report.total_transactions,
        )

    def latest(self, shop_id: int) -> DailySalesReport:
        """
        Cached report for today.

        Recomputed when missing, when the shop timezone or the local day has
        changed, or when the active staff roster no longer matches the cached
        performance rows.
        """
        tz_name = get_shop(shop_id).timezone
        cached = self._reports.get(shop_id)
        if (
            cached is not None
            and self._zones.get(shop_id) == tz_name
            and cached.date == local_today(tz_name)
        ):
            roster = [(s.id, s.name) for s in list_active_staff(shop_id)]
            if roster == [(p.staff_id, p.staff_name) for p in cached.staff_performance]:
                return cached
        return self._recompute(shop_id)


def get_report_monitor() -> DailyReportMonitor:
    return current_app.extensions[MONITOR_KEY]
