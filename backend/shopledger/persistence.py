# Overview: Persistence & notification collaborator backed by Flask-SQLAlchemy.

"""
Entity-kind oriented storage API used by every service:

    insert(kind, fields)            -> record
    update(kind, id, fields)        -> record
    delete(kind, id)                -> None
    get(kind, id)                   -> record | None
    query(kind, filters, order, limit, offset) -> list of records
    subscribe(kind, shop_id, on_change)        -> Subscription

Each write commits on its own, so a call either fully succeeds or leaves the
database unchanged. Driver errors are rolled back and re-raised as
PersistenceFailure; no retry happens here.

Filter keys are column names with an optional operator suffix:
"name", "created_at__gte", "created_at__lt", "id__in", "is_active__ne".
Order terms are column names, "-" prefixed for descending.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from sqlalchemy.exc import SQLAlchemyError

from .errors import LedgerError, NotFound, PersistenceFailure
from .events import ITEMS_CHANGED, TRANSACTIONS_CHANGED, Subscription, get_bus
from .extensions import db
from .models import Item, Shop, Staff, Transaction

ENTITY_KINDS = {
    "shops": Shop,
    "items": Item,
    "staff": Staff,
    "transactions": Transaction,
}

CHANNEL_FOR_KIND = {
    "items": ITEMS_CHANGED,
    "transactions": TRANSACTIONS_CHANGED,
}

_OPERATORS = {
    "eq": lambda col, v: col == v,
    "ne": lambda col, v: col != v,
    "gt": lambda col, v: col > v,
    "gte": lambda col, v: col >= v,
    "lt": lambda col, v: col < v,
    "lte": lambda col, v: col <= v,
    "in": lambda col, v: col.in_(list(v)),
}


def model_for(kind: str):
    try:
        return ENTITY_KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown entity kind: {kind}")


def _column(model, name: str):
    col = model.__table__.columns.get(name)
    if col is None:
        raise ValueError(f"{model.__name__} has no column {name!r}")
    return getattr(model, name)


def _write(op: Callable[[], Any]) -> Any:
    try:
        result = op()
        db.session.commit()
        return result
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceFailure("Storage operation failed", details={"cause": type(exc).__name__}) from exc
    except LedgerError:
        db.session.rollback()
        raise


def insert(kind: str, fields: dict) -> Any:
    model = model_for(kind)

    def _op():
        record = model(**fields)
        db.session.add(record)
        db.session.flush()  # assigns record.id
        return record

    return _write(_op)


def update(kind: str, record_id: int, fields: dict) -> Any:
    model = model_for(kind)

    def _op():
        record = db.session.get(model, record_id)
        if record is None:
            raise NotFound(f"{model.__name__} not found", details={"id": record_id})
        for key, value in fields.items():
            _column(model, key)
            setattr(record, key, value)
        db.session.flush()
        return record

    return _write(_op)


def delete(kind: str, record_id: int) -> None:
    model = model_for(kind)

    def _op():
        record = db.session.get(model, record_id)
        if record is None:
            raise NotFound(f"{model.__name__} not found", details={"id": record_id})
        db.session.delete(record)
        db.session.flush()

    _write(_op)


def get(kind: str, record_id: int) -> Any:
    model = model_for(kind)
    try:
        return db.session.get(model, record_id)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceFailure("Storage read failed", details={"cause": type(exc).__name__}) from exc


def _filtered(model, filters: dict | None):
    q = db.session.query(model)
    for key, value in (filters or {}).items():
        name, _, op = key.partition("__")
        op = op or "eq"
        if op not in _OPERATORS:
            raise ValueError(f"Unsupported filter operator: {op}")
        q = q.filter(_OPERATORS[op](_column(model, name), value))
    return q


def query(
    kind: str,
    filters: dict | None = None,
    order: Iterable[str] | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list:
    model = model_for(kind)
    q = _filtered(model, filters)

    for term in order or ():
        desc = term.startswith("-")
        col = _column(model, term.lstrip("-"))
        q = q.order_by(col.desc() if desc else col.asc())

    if offset:
        q = q.offset(offset)
    if limit is not None:
        q = q.limit(limit)

    try:
        return q.all()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceFailure("Storage read failed", details={"cause": type(exc).__name__}) from exc


def count(kind: str, filters: dict | None = None) -> int:
    try:
        return _filtered(model_for(kind), filters).count()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceFailure("Storage read failed", details={"cause": type(exc).__name__}) from exc


def subscribe(kind: str, shop_id: int | None, on_change: Callable) -> Subscription:
    """Change notifications for items or transactions of one shop."""
    try:
        channel = CHANNEL_FOR_KIND[kind]
    except KeyError:
        raise ValueError(f"No change channel for entity kind: {kind}")
    return get_bus().subscribe(channel, shop_id, on_change)
