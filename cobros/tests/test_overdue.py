from datetime import date
from decimal import Decimal

from cobros.jobs.overdue import mark_overdue_installments
from cobros.models.models import Installment
from cobros.schemas.payments import PaymentCreate
from cobros.services import ledger


def _statuses(db, loan):
    return [
        i.status
        for i in db.query(Installment).filter_by(loan_id=loan.id).order_by(Installment.number)
    ]


def test_marks_only_unpaid_past_due(db, make_debtor, make_loan):
    d = make_debtor()
    loan = make_loan(d, principal="1500.00", count=3, amount="500.00", start=date(2026, 1, 10))
    first, second = (
        db.query(Installment).filter_by(loan_id=loan.id).order_by(Installment.number).limit(2)
    )
    ledger.register_payment(db, PaymentCreate(
        debtor_id=d.id, installment_id=first.id, payment_date=date(2026, 1, 10),
        amount=Decimal("500"), method="cash",
    ))
    ledger.register_payment(db, PaymentCreate(
        debtor_id=d.id, installment_id=second.id, payment_date=date(2026, 2, 10),
        amount=Decimal("100"), method="cash",
    ))

    # vencen 2026-01-10, 2026-02-10, 2026-03-10
    updated = mark_overdue_installments(db, today=date(2026, 3, 10))

    assert updated == 1
    db.expire_all()
    assert _statuses(db, loan) == ["paid", "overdue", "pending"]

    # idempotente
    assert mark_overdue_installments(db, today=date(2026, 3, 10)) == 0


def test_overdue_installment_can_still_be_paid(db, make_debtor, make_loan):
    d = make_debtor()
    loan = make_loan(d, principal="500.00", count=1, amount="500.00", start=date(2026, 1, 10))
    mark_overdue_installments(db, today=date(2026, 2, 1))
    ins = db.query(Installment).filter_by(loan_id=loan.id).one()
    db.refresh(ins)
    assert ins.status == "overdue"

    ledger.register_payment(db, PaymentCreate(
        debtor_id=d.id, installment_id=ins.id, payment_date=date(2026, 2, 2),
        amount=Decimal("500"), method="yape",
    ))

    db.refresh(ins)
    db.refresh(loan)
    assert ins.status == "paid"
    assert loan.status == "paid"


def test_task_endpoint(client, auth_headers, db, make_debtor, make_loan):
    d = make_debtor()
    loan = make_loan(d, principal="1000.00", count=2, amount="500.00", start=date(2023, 4, 1))

    r = client.post("/api/tasks/mark-overdue", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["updated"] == 2

    db.expire_all()
    assert _statuses(db, loan) == ["overdue", "overdue"]

    assert client.post("/api/tasks/mark-overdue").status_code == 401


def test_task_endpoint_with_cutoff(client, auth_headers, db, make_debtor, make_loan):
    d = make_debtor()
    loan = make_loan(d, principal="1500.00", count=3, amount="500.00", start=date(2026, 1, 10))

    r = client.post("/api/tasks/mark-overdue", params={"as_of": "2026-02-11"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["updated"] == 2
    assert r.json()["as_of"] == "2026-02-11"

    db.expire_all()
    assert _statuses(db, loan) == ["overdue", "overdue", "pending"]
