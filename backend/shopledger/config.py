# backend/shopledger/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/shopledger.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///shopledger.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Defaults applied when a shop is created without explicit settings
    SHOP_DEFAULT_TIMEZONE = os.environ.get("SHOP_DEFAULT_TIMEZONE", "Asia/Kolkata")
    SHOP_DEFAULT_CURRENCY = os.environ.get("SHOP_DEFAULT_CURRENCY", "INR")

    # Catalog defaults
    DEFAULT_MIN_STOCK_ALERT = int(os.environ.get("DEFAULT_MIN_STOCK_ALERT", "5"))

    # Page size for the owner's recent transactions view
    RECENT_TRANSACTIONS_LIMIT = int(os.environ.get("RECENT_TRANSACTIONS_LIMIT", "100"))

    # bcrypt cost for staff passcodes (tests lower this to 4)
    PASSCODE_BCRYPT_ROUNDS = int(os.environ.get("PASSCODE_BCRYPT_ROUNDS", "12"))
