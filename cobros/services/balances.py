# cobros/services/balances.py
"""
Saldos por deudor y por préstamo.

  total_disbursed     = Σ principal de los préstamos del alcance
  total_collected     = Σ monto de los pagos del alcance
  outstanding_balance = total_disbursed - total_collected  (sin tope: puede ser < 0)

Cada resumen se calcula en UNA sola sentencia SELECT con subconsultas
escalares, de modo que todas las sumas salen de la misma lectura.
"""
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from cobros.constants import CENT, InstallmentStatus
from cobros.errors import NotFoundError
from cobros.models.models import Debtor, Installment, Loan, Payment


def _money(v) -> Decimal:
    return Decimal(str(v or 0)).quantize(CENT)


def _sum(col, *where):
    return select(func.coalesce(func.sum(col), 0)).where(*where).scalar_subquery()


def _count(col, *where):
    return select(func.count(col)).where(*where).scalar_subquery()


def _balance(disbursed, collected) -> dict:
    disbursed = _money(disbursed)
    collected = _money(collected)
    return {
        "total_disbursed": disbursed,
        "total_collected": collected,
        "outstanding_balance": disbursed - collected,
    }


def summarize_debtor(db: Session, debtor_id: int) -> dict:
    row = db.execute(
        select(
            _count(Debtor.id, Debtor.id == debtor_id).label("found"),
            _sum(Loan.principal, Loan.debtor_id == debtor_id).label("disbursed"),
            _sum(Payment.amount, Payment.debtor_id == debtor_id).label("collected"),
        )
    ).one()
    if not row.found:
        raise NotFoundError("Deudor no encontrado")
    return _balance(row.disbursed, row.collected)


def summarize_loan(db: Session, loan_id: int) -> dict:
    row = db.execute(
        select(
            _count(Loan.id, Loan.id == loan_id).label("found"),
            _sum(Loan.principal, Loan.id == loan_id).label("disbursed"),
            _sum(Payment.amount, Payment.loan_id == loan_id).label("collected"),
            _count(
                Installment.id,
                Installment.loan_id == loan_id,
                Installment.status == InstallmentStatus.PAID.value,
            ).label("paid"),
            _count(
                Installment.id,
                Installment.loan_id == loan_id,
                Installment.status != InstallmentStatus.PAID.value,
            ).label("pending"),
        )
    ).one()
    if not row.found:
        raise NotFoundError("Préstamo no encontrado")

    out = _balance(row.disbursed, row.collected)
    out["installments_paid"] = int(row.paid or 0)
    out["installments_pending"] = int(row.pending or 0)
    return out


def portfolio_totals(db: Session) -> dict:
    row = db.execute(
        select(
            select(func.coalesce(func.sum(Loan.principal), 0)).scalar_subquery().label("disbursed"),
            select(func.coalesce(func.sum(Payment.amount), 0)).scalar_subquery().label("collected"),
        )
    ).one()
    return _balance(row.disbursed, row.collected)


def list_debtor_balances(db: Session) -> list[dict]:
    """Deudores activos con lo prestado, lo pagado y su saldo (orden: apellidos, nombre)."""
    lent = _sum(Loan.principal, Loan.debtor_id == Debtor.id).correlate(Debtor)
    paid = _sum(Payment.amount, Payment.debtor_id == Debtor.id).correlate(Debtor)
    loans_count = _count(Loan.id, Loan.debtor_id == Debtor.id).correlate(Debtor)
    payments_count = _count(Payment.id, Payment.debtor_id == Debtor.id).correlate(Debtor)
    last_payment = (
        select(func.max(Payment.payment_date))
        .where(Payment.debtor_id == Debtor.id)
        .correlate(Debtor)
        .scalar_subquery()
    )

    rows = db.execute(
        select(
            Debtor,
            lent.label("lent"),
            paid.label("paid"),
            loans_count.label("loans_count"),
            payments_count.label("payments_count"),
            last_payment.label("last_payment"),
        )
        .where(Debtor.active.is_(True))
        .order_by(Debtor.last_name, Debtor.first_name, Debtor.id)
    ).all()

    out = []
    for r in rows:
        total_lent = _money(r.lent)
        total_paid = _money(r.paid)
        out.append({
            "debtor": r.Debtor,
            "total_lent": total_lent,
            "total_paid": total_paid,
            "balance": total_lent - total_paid,
            "loans_count": int(r.loans_count or 0),
            "payments_count": int(r.payments_count or 0),
            "last_payment_date": r.last_payment,
        })
    return out


def list_loan_balances(db: Session, debtor_id: int | None = None) -> list[dict]:
    """Préstamos con lo cobrado, el saldo y el conteo de cuotas pagadas / no pagadas."""
    paid = _sum(Payment.amount, Payment.loan_id == Loan.id).correlate(Loan)
    ins_paid = _count(
        Installment.id,
        Installment.loan_id == Loan.id,
        Installment.status == InstallmentStatus.PAID.value,
    ).correlate(Loan)
    ins_pending = _count(
        Installment.id,
        Installment.loan_id == Loan.id,
        Installment.status != InstallmentStatus.PAID.value,
    ).correlate(Loan)

    q = (
        select(
            Loan,
            Debtor.first_name,
            Debtor.last_name,
            paid.label("paid"),
            ins_paid.label("ins_paid"),
            ins_pending.label("ins_pending"),
        )
        .join(Debtor, Debtor.id == Loan.debtor_id)
        .order_by(Loan.start_date.desc(), Loan.id.desc())
    )
    if debtor_id is not None:
        q = q.where(Loan.debtor_id == debtor_id)

    out = []
    for r in db.execute(q).all():
        total_paid = _money(r.paid)
        out.append({
            "loan": r.Loan,
            "debtor_name": f"{r.first_name} {r.last_name}".strip(),
            "total_paid": total_paid,
            "balance": _money(r.Loan.principal) - total_paid,
            "installments_paid": int(r.ins_paid or 0),
            "installments_pending": int(r.ins_pending or 0),
        })
    return out
