from datetime import date
from decimal import Decimal

from cobros.schemas.payments import PaymentCreate
from cobros.services import ledger
from cobros.services.reports import payments_by_method, payments_by_month


def _pay(db, debtor, amount, method, day):
    ledger.register_payment(db, PaymentCreate(
        debtor_id=debtor.id, payment_date=day, amount=Decimal(amount), method=method,
    ))


def test_payments_by_method(db, make_debtor):
    d = make_debtor()
    _pay(db, d, "100", "cash", date(2026, 1, 3))
    _pay(db, d, "25", "cash", date(2026, 1, 4))
    _pay(db, d, "50", "yape", date(2026, 1, 5))

    assert payments_by_method(db) == [
        {"method": "cash", "count": 2, "total": Decimal("125.00")},
        {"method": "yape", "count": 1, "total": Decimal("50.00")},
    ]


def test_payments_by_method_filters(db, make_debtor):
    a = make_debtor()
    b = make_debtor(first_name="Annie", last_name="Muñoz")
    _pay(db, a, "100", "cash", date(2026, 1, 3))
    _pay(db, b, "70", "plin", date(2026, 1, 3))
    _pay(db, b, "30", "plin", date(2026, 3, 3))

    assert payments_by_method(db, debtor_id=b.id, date_to=date(2026, 1, 31)) == [
        {"method": "plin", "count": 1, "total": Decimal("70.00")},
    ]
    assert payments_by_method(db, date_from=date(2027, 1, 1)) == []


def test_payments_by_month_order_and_limit(db, make_debtor):
    d = make_debtor()
    _pay(db, d, "100", "cash", date(2025, 11, 20))
    _pay(db, d, "10", "cash", date(2026, 1, 2))
    _pay(db, d, "15.50", "yape", date(2026, 1, 28))
    _pay(db, d, "40", "cash", date(2025, 12, 1))

    rows = payments_by_month(db)
    assert [r["month"] for r in rows] == ["2026-01", "2025-12", "2025-11"]
    assert rows[0] == {"month": "2026-01", "total": Decimal("25.50"), "count": 2}

    assert [r["month"] for r in payments_by_month(db, limit=2)] == ["2026-01", "2025-12"]
