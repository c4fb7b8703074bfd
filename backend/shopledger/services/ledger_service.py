# Overview: Service-layer operations for the transaction ledger; validates and appends sales.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_DOWN, Decimal

from flask import current_app

from .. import persistence
from ..errors import (
    AlreadySettled,
    DiscountExceedsAmount,
    InvalidAmount,
    InvalidPaymentMode,
    NotCreditSale,
    NotFound,
    PolicyViolation,
    UnknownStaff,
    ValidationError,
)
from ..events import TRANSACTIONS_CHANGED, get_bus
from ..models import PAYMENT_CREDIT, PAYMENT_MODES, Item, Transaction
from ..time_utils import local_day_bounds, utcnow
from ..validation import CENT, to_money
from .shop_service import get_shop
"""
Ledger Invariants (authoritative)

- Append-only: record_sale is the only writer of Transaction rows.
- Validation is fail-fast in a fixed order; the first violation is raised
  and nothing is written or published.
- The only later mutation is settle_credit (is_credit_settled False -> True).
- is_discount_override is set when an authorized discount exceeds the
  item's limit and is never cleared.
- Stock is NOT decremented on sale; restocking is a catalog concern.
"""

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class OutstandingCredit:
    amount: Decimal
    count: int

    def to_dict(self) -> dict:
        return {"amount": str(self.amount), "count": self.count}


def discount_limit(item: Item) -> Decimal:
    """Largest discount allowed without override: max(percentage of base price, fixed)."""
    pct_limit = item.base_price * item.max_discount_percentage / Decimal(100)
    # Round down so the reported limit never exceeds the real one
    return max(pct_limit, item.max_discount_fixed).quantize(CENT, rounding=ROUND_DOWN)


def _resolve_active_staff(shop_id: int, staff_id):
    if isinstance(staff_id, bool) or not isinstance(staff_id, int):
        raise UnknownStaff("Unknown staff member", details={"staff_id": staff_id})
    staff = persistence.get("staff", staff_id)
    if staff is None or staff.shop_id != shop_id or not staff.is_active:
        raise UnknownStaff("Unknown staff member", details={"staff_id": staff_id})
    return staff


def _resolve_item(shop_id: int, item_id) -> Item:
    item = None
    if isinstance(item_id, int) and not isinstance(item_id, bool):
        item = persistence.get("items", item_id)
    if item is None or item.shop_id != shop_id:
        raise NotFound("Item not found", details={"item_id": item_id})
    return item


def record_sale(
    shop_id: int,
    entered_amount,
    staff_id: int,
    payment_mode: str,
    discount_amount=ZERO,
    is_override: bool = False,
    item_id: int | None = None,
) -> Transaction:
    """
    Validate and append one sale.

    Order of checks (first failure wins):
    1. entered_amount > 0                         -> InvalidAmount
    2. staff_id is an active staff of the shop    -> UnknownStaff
    3. discount within the item's limit, unless
       is_override                                -> PolicyViolation
    4. 0 <= discount_amount <= entered_amount     -> DiscountExceedsAmount
    5. payment_mode in CASH / UPI / CREDIT        -> InvalidPaymentMode

    An unknown shop raises NotFound after step 1.
    """
    amount = to_money(entered_amount, "entered_amount", error_cls=InvalidAmount)
    if amount <= 0:
        raise InvalidAmount("entered_amount must be greater than 0", details={"entered_amount": str(amount)})

    get_shop(shop_id)

    staff = _resolve_active_staff(shop_id, staff_id)

    discount = to_money(ZERO if discount_amount is None else discount_amount, "discount_amount")
    override_applied = False
    if item_id is not None:
        item = _resolve_item(shop_id, item_id)
        limit = discount_limit(item)
        if discount > limit:
            if not is_override:
                raise PolicyViolation(
                    "Discount exceeds the item's limit",
                    details={
                        "item_id": item.id,
                        "discount_amount": str(discount),
                        "max_allowed": str(limit),
                    },
                )
            override_applied = True

    if discount < 0:
        raise ValidationError("discount_amount must be >= 0")
    if discount > amount:
        raise DiscountExceedsAmount(
            "discount_amount cannot exceed entered_amount",
            details={"discount_amount": str(discount), "entered_amount": str(amount)},
        )

    if payment_mode not in PAYMENT_MODES:
        raise InvalidPaymentMode(
            f"payment_mode must be one of {', '.join(PAYMENT_MODES)}",
            details={"payment_mode": payment_mode},
        )

    txn = persistence.insert(
        "transactions",
        {
            "shop_id": shop_id,
            "entered_amount": amount,
            "inferred_item_id": item_id,
            "staff_id": staff.id,
            "payment_mode": payment_mode,
            "discount_amount": discount,
            "is_discount_override": override_applied,
            "is_credit_settled": False,
            "created_at": utcnow(),
        },
    )
    get_bus().publish(TRANSACTIONS_CHANGED, shop_id, "created", entity_id=txn.id)
    return txn


def get_transaction(shop_id: int, transaction_id: int) -> Transaction:
    txn = persistence.get("transactions", transaction_id)
    if txn is None or txn.shop_id != shop_id:
        raise NotFound("Transaction not found", details={"transaction_id": transaction_id})
    return txn


def settle_credit(shop_id: int, transaction_id: int) -> Transaction:
    txn = get_transaction(shop_id, transaction_id)
    if txn.payment_mode != PAYMENT_CREDIT:
        raise NotCreditSale(
            "Only CREDIT sales can be settled",
            details={"transaction_id": txn.id, "payment_mode": txn.payment_mode},
        )
    if txn.is_credit_settled:
        raise AlreadySettled("Credit sale already settled", details={"transaction_id": txn.id})

    txn = persistence.update("transactions", transaction_id, {"is_credit_settled": True})
    get_bus().publish(TRANSACTIONS_CHANGED, shop_id, "credit_settled", entity_id=txn.id)
    return txn


def list_recent(shop_id: int, limit: int | None = None, offset: int = 0) -> list[Transaction]:
    """Newest first; id breaks ties between equal timestamps."""
    if limit is None:
        limit = current_app.config["RECENT_TRANSACTIONS_LIMIT"]
    if limit <= 0:
        raise ValidationError("limit must be > 0")
    if offset < 0:
        raise ValidationError("offset must be >= 0")
    return persistence.query(
        "transactions",
        {"shop_id": shop_id},
        order=["-created_at", "-id"],
        limit=limit,
        offset=offset,
    )


def filter_transactions(
    shop_id: int,
    on_date: date | None = None,
    payment_mode: str | None = None,
    staff_id: int | None = None,
    limit: int | None = None,
) -> list[Transaction]:
    """
    Conjunctive filter; a None argument matches everything.

    on_date is a calendar date in the shop's timezone.
    """
    shop = get_shop(shop_id)
    filters: dict = {"shop_id": shop_id}

    if on_date is not None:
        start, end = local_day_bounds(on_date, shop.timezone)
        filters["created_at__gte"] = start
        filters["created_at__lt"] = end

    if payment_mode is not None:
        if payment_mode not in PAYMENT_MODES:
            raise InvalidPaymentMode(
                f"payment_mode must be one of {', '.join(PAYMENT_MODES)}",
                details={"payment_mode": payment_mode},
            )
        filters["payment_mode"] = payment_mode

    if staff_id is not None:
        filters["staff_id"] = staff_id

    return persistence.query("transactions", filters, order=["-created_at", "-id"], limit=limit)


def outstanding_credit(shop_id: int) -> OutstandingCredit:
    """Unsettled CREDIT sales across all days."""
    open_credit = persistence.query(
        "transactions",
        {"shop_id": shop_id, "payment_mode": PAYMENT_CREDIT, "is_credit_settled": False},
    )
    total = sum((t.entered_amount for t in open_credit), ZERO)
    return OutstandingCredit(amount=total, count=len(open_credit))
