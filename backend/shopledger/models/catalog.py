from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Item(db.Model):
    """
    Catalog entry.

    Money columns are Numeric(12, 2) and come back as Decimal; never floats.
    Items referenced by a transaction are deactivated, not deleted.
    """
    __tablename__ = "items"
    __table_args__ = (
        db.Index("ix_items_shop_name", "shop_id", "name"),
        db.Index("ix_items_shop_active", "shop_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    base_price = db.Column(db.Numeric(12, 2), nullable=False)

    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    min_stock_alert = db.Column(db.Integer, nullable=False, default=5)

    # Discount policy: the effective limit is the larger of the two
    max_discount_percentage = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    max_discount_fixed = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    shop = db.relationship("Shop", backref=db.backref("items", lazy=True))

    def __repr__(self) -> str:
        return f"<Item id={self.id} name={self.name!r} shop_id={self.shop_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "name": self.name,
            "base_price": str(self.base_price),
            "stock_quantity": self.stock_quantity,
            "min_stock_alert": self.min_stock_alert,
            "max_discount_percentage": str(self.max_discount_percentage),
            "max_discount_fixed": str(self.max_discount_fixed),
            "is_active": self.is_active,
            "is_low_stock": self.stock_quantity <= self.min_stock_alert,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
