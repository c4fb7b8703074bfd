from __future__ import annotations

from sqlalchemy import event, inspect

from ..errors import IllegalTransition
from ..extensions import db
from ..time_utils import to_utc_z

PAYMENT_CASH = "CASH"
PAYMENT_UPI = "UPI"
PAYMENT_CREDIT = "CREDIT"
PAYMENT_MODES = (PAYMENT_CASH, PAYMENT_UPI, PAYMENT_CREDIT)

# The only column a committed transaction may change, and only False -> True
SETTLEMENT_FIELD = "is_credit_settled"


class Transaction(db.Model):
    """
    Sale record (append-only).

    INVARIANTS:
    - Created exactly once by ledger_service.record_sale.
    - is_credit_settled may flip False -> True for CREDIT sales; every other
      column is frozen after insert (enforced by the before_update hook below).
    - is_discount_override is never unset.
    - entered_amount is the amount actually charged; discount_amount is
      informational and already netted into it.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.Index("ix_transactions_shop_created", "shop_id", "created_at"),
        db.Index("ix_transactions_shop_mode", "shop_id", "payment_mode"),
        db.Index("ix_transactions_shop_staff", "shop_id", "staff_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)

    entered_amount = db.Column(db.Numeric(12, 2), nullable=False)

    # Nullable: the counter may not resolve a specific item
    inferred_item_id = db.Column(
        db.Integer,
        db.ForeignKey("items.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False)

    payment_mode = db.Column(db.String(16), nullable=False)

    discount_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    is_discount_override = db.Column(db.Boolean, nullable=False, default=False)

    # Meaningful only for CREDIT sales
    is_credit_settled = db.Column(db.Boolean, nullable=False, default=False)

    # Business time, UTC-naive; assigned by the ledger, not the database
    created_at = db.Column(db.DateTime, nullable=False, index=True)

    staff = db.relationship("Staff")
    inferred_item = db.relationship("Item")

    def __repr__(self) -> str:
        return (
            f"<Transaction id={self.id} shop_id={self.shop_id} "
            f"amount={self.entered_amount} mode={self.payment_mode}>"
        )

    @property
    def is_credit(self) -> bool:
        return self.payment_mode == PAYMENT_CREDIT

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "entered_amount": str(self.entered_amount),
            "inferred_item_id": self.inferred_item_id,
            "inferred_item_name": self.inferred_item.name if self.inferred_item else None,
            "staff_id": self.staff_id,
            "staff_name": self.staff.name if self.staff else None,
            "payment_mode": self.payment_mode,
            "discount_amount": str(self.discount_amount),
            "is_discount_override": self.is_discount_override,
            # Not applicable outside CREDIT
            "is_credit_settled": self.is_credit_settled if self.is_credit else None,
            "created_at": to_utc_z(self.created_at),
        }


@event.listens_for(Transaction, "before_update")
def _reject_ledger_rewrites(mapper, connection, target: Transaction) -> None:
    state = inspect(target)
    for attr in state.mapper.column_attrs:
        history = state.attrs[attr.key].history
        if not history.has_changes():
            continue
        if attr.key != SETTLEMENT_FIELD:
            raise IllegalTransition(
                "Committed transactions are immutable",
                details={"transaction_id": target.id, "field": attr.key},
            )
        if target.is_credit_settled is not True:
            raise IllegalTransition(
                "Credit settlement cannot be reversed",
                details={"transaction_id": target.id},
            )
