# cobros/tests/test_balances.py
from datetime import date
from decimal import Decimal

import pytest

from cobros.errors import NotFoundError
from cobros.models.models import Installment
from cobros.schemas.payments import PaymentCreate
from cobros.services import balances, ledger


def _pay(db, debtor, amount, **kw):
    return ledger.register_payment(db, PaymentCreate(
        debtor_id=debtor.id,
        payment_date=kw.pop("payment_date", date(2026, 1, 10)),
        amount=Decimal(amount),
        method=kw.pop("method", "bank_transfer"),
        **kw,
    ))


@pytest.fixture
def banbif(db, make_debtor, make_loan):
    """Préstamo 40000 en 48 cuotas de 1506.13, con las cuotas 1..23 pagadas."""
    debtor = make_debtor()
    loan = make_loan(debtor, principal="40000.00", count=48, amount="1506.13")
    installments = (
        db.query(Installment)
        .filter_by(loan_id=loan.id)
        .order_by(Installment.number)
        .limit(23)
        .all()
    )
    for ins in installments:
        _pay(db, debtor, "1506.13", installment_id=ins.id, payment_date=ins.due_date)
    return debtor, loan


def test_loan_summary_banbif(db, banbif):
    _, loan = banbif

    s = balances.summarize_loan(db, loan.id)

    assert s["total_disbursed"] == Decimal("40000.00")
    assert s["total_collected"] == Decimal("34640.99")
    assert s["outstanding_balance"] == Decimal("5359.01")
    assert s["installments_paid"] == 23
    assert s["installments_pending"] == 25

    db.refresh(loan)
    assert loan.principal == Decimal("40000.00")
    assert loan.status == "active"


def test_debtor_summary_spans_loans_and_loose_payments(db, banbif, make_loan):
    debtor, _ = banbif
    make_loan(debtor, principal="6000.00", count=12, amount="500.00", start=date(2025, 10, 15))
    # pago suelto, sin préstamo ni cuota
    _pay(db, debtor, "100.00", method="cash")

    s = balances.summarize_debtor(db, debtor.id)

    assert s["total_disbursed"] == Decimal("46000.00")
    assert s["total_collected"] == Decimal("34740.99")
    assert s["outstanding_balance"] == Decimal("11259.01")


def test_overpayment_gives_negative_balance(db, make_debtor, make_loan):
    debtor = make_debtor()
    loan = make_loan(debtor, principal="100.00")
    _pay(db, debtor, "150.00", loan_id=loan.id)

    s = balances.summarize_loan(db, loan.id)
    assert s["outstanding_balance"] == Decimal("-50.00")


def test_empty_scope_is_zero(db, make_debtor):
    debtor = make_debtor()

    s = balances.summarize_debtor(db, debtor.id)
    assert s == {
        "total_disbursed": Decimal("0.00"),
        "total_collected": Decimal("0.00"),
        "outstanding_balance": Decimal("0.00"),
    }


def test_unknown_ids_raise_not_found(db):
    with pytest.raises(NotFoundError):
        balances.summarize_debtor(db, 404)
    with pytest.raises(NotFoundError):
        balances.summarize_loan(db, 404)


def test_debtor_balances_list(db, make_debtor, make_loan):
    ana = make_debtor(first_name="Annie", last_name="Muñoz")
    pedro = make_debtor(first_name="Pedro", last_name="Reátegui Carpi")
    inactive = make_debtor(first_name="Miguel", last_name="Ríos", active=False)

    # dos préstamos y dos pagos: las sumas no deben multiplicarse entre sí
    make_loan(ana, principal="1000.00")
    make_loan(ana, principal="500.00")
    _pay(db, ana, "200.00", payment_date=date(2026, 1, 5))
    _pay(db, ana, "300.00", payment_date=date(2026, 2, 5))
    make_loan(inactive, principal="999.00")

    rows = balances.list_debtor_balances(db)

    assert [r["debtor"].id for r in rows] == [ana.id, pedro.id]
    first = rows[0]
    assert first["total_lent"] == Decimal("1500.00")
    assert first["total_paid"] == Decimal("500.00")
    assert first["balance"] == Decimal("1000.00")
    assert first["loans_count"] == 2
    assert first["payments_count"] == 2
    assert first["last_payment_date"] == date(2026, 2, 5)

    second = rows[1]
    assert second["total_lent"] == Decimal("0.00")
    assert second["last_payment_date"] is None


def test_loan_balances_filtered_by_debtor(db, banbif, make_debtor, make_loan):
    debtor, loan = banbif
    other = make_debtor(first_name="Pedro", last_name="Reátegui Carpi")
    make_loan(other, principal="3300.00", start=date(2021, 3, 28))

    rows = balances.list_loan_balances(db, debtor_id=debtor.id)

    assert len(rows) == 1
    row = rows[0]
    assert row["loan"].id == loan.id
    assert row["debtor_name"] == "Maritza Paredes Piña"
    assert row["total_paid"] == Decimal("34640.99")
    assert row["balance"] == Decimal("5359.01")
    assert row["installments_paid"] == 23
    assert row["installments_pending"] == 25

    assert len(balances.list_loan_balances(db)) == 2


def test_portfolio_totals(db, banbif, make_debtor, make_loan):
    other = make_debtor(first_name="Pedro", last_name="Reátegui Carpi")
    make_loan(other, principal="3300.00")

    t = balances.portfolio_totals(db)
    assert t["total_disbursed"] == Decimal("43300.00")
    assert t["total_collected"] == Decimal("34640.99")
    assert t["outstanding_balance"] == Decimal("8659.01")
