from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Shop(db.Model):
    """
    Tenant root: every item, staff member and transaction belongs to one shop.

    Settings columns (currency, UPI details, timezone) are read into an
    immutable ShopSettings value by shop_service; the ledger never stores them.
    """
    __tablename__ = "shops"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    currency = db.Column(db.String(8), nullable=False, default="INR")
    upi_id = db.Column(db.String(255), nullable=True)
    upi_qr_url = db.Column(db.String(1024), nullable=True)

    # IANA zone name; defines the shop's local calendar day for reporting
    timezone = db.Column(db.String(64), nullable=False, default="Asia/Kolkata")

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Shop id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "currency": self.currency,
            "upi_id": self.upi_id,
            "upi_qr_url": self.upi_qr_url,
            "timezone": self.timezone,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
