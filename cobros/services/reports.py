# cobros/services/reports.py
from datetime import date
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from cobros.constants import CENT
from cobros.models.models import Payment


def _month_expr(db: Session, col):
    # 'YYYY-MM' según el motor (PostgreSQL en prod, SQLite en tests/dev)
    if db.get_bind().dialect.name == "sqlite":
        return func.strftime("%Y-%m", col)
    return func.to_char(col, "YYYY-MM")


def _filtered(q, debtor_id: int | None, date_from: date | None, date_to: date | None):
    if debtor_id is not None:
        q = q.filter(Payment.debtor_id == debtor_id)
    if date_from is not None:
        q = q.filter(Payment.payment_date >= date_from)
    if date_to is not None:
        q = q.filter(Payment.payment_date <= date_to)
    return q


def payments_by_method(
    db: Session,
    debtor_id: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[dict]:
    """[{method, count, total}] ordenado por total descendente."""
    total = func.coalesce(func.sum(Payment.amount), 0)
    q = db.query(
        Payment.method.label("method"),
        func.count(Payment.id).label("count"),
        total.label("total"),
    )
    rows = (
        _filtered(q, debtor_id, date_from, date_to)
        .group_by(Payment.method)
        .order_by(total.desc(), Payment.method.asc())
        .all()
    )
    return [
        {"method": r.method, "count": int(r.count), "total": Decimal(str(r.total)).quantize(CENT)}
        for r in rows
    ]


def payments_by_month(
    db: Session,
    limit: int = 12,
    debtor_id: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[dict]:
    """Últimos `limit` meses calendario con pagos: [{month, total, count}], más reciente primero."""
    month = _month_expr(db, Payment.payment_date)
    q = db.query(
        month.label("month"),
        func.coalesce(func.sum(Payment.amount), 0).label("total"),
        func.count(Payment.id).label("count"),
    )
    rows = (
        _filtered(q, debtor_id, date_from, date_to)
        .group_by(month)
        .order_by(month.desc())
        .limit(limit)
        .all()
    )
    return [
        {"month": r.month, "total": Decimal(str(r.total)).quantize(CENT), "count": int(r.count)}
        for r in rows
    ]
