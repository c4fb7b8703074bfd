from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Staff(db.Model):
    """
    Authorized counter operator.

    SECURITY: passcode_hash holds a bcrypt hash; the raw passcode is never
    stored or serialized. Uniqueness among active staff of a shop is enforced
    by staff_service because salted hashes cannot be compared in SQL.
    """
    __tablename__ = "staff"
    __table_args__ = (
        db.Index("ix_staff_shop_active", "shop_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_id = db.Column(db.Integer, db.ForeignKey("shops.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    passcode_hash = db.Column(db.String(255), nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    shop = db.relationship("Shop", backref=db.backref("staff", lazy=True))

    def __repr__(self) -> str:
        return f"<Staff id={self.id} name={self.name!r} shop_id={self.shop_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shop_id": self.shop_id,
            "name": self.name,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
