from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from cobros.constants import LoanStatus
from cobros.database.db import get_db, transaction
from cobros.errors import NotFoundError, ValidationError
from cobros.models.models import Debtor, Installment, Loan, Payment
from cobros.schemas.dashboard import LoanBalanceSummary
from cobros.schemas.installments import InstallmentOut
from cobros.schemas.loans import (
    LoanDetailOut, LoanListItem, LoansCreate, LoansOut, LoanStatusUpdate,
)
from cobros.schemas.payments import PaymentOut
from cobros.services.balances import list_loan_balances, summarize_loan
from cobros.utils.auth import get_current_user
from cobros.utils.schedule import build_monthly_schedule

router = APIRouter(
    dependencies=[Depends(get_current_user)],  # 👈 exige Bearer válido en todo el router
)


def _get_loan_or_404(loan_id: int, db: Session) -> Loan:
    loan = db.get(Loan, loan_id)
    if not loan:
        raise HTTPException(status_code=404, detail="Préstamo no encontrado")
    return loan


# ============== LIST ==============
@router.get("/", response_model=List[LoanListItem])
def list_loans(
    debtor_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    return [
        LoanListItem(
            **LoansOut.model_validate(row["loan"]).model_dump(),
            debtor_name=row["debtor_name"],
            total_paid=row["total_paid"],
            balance=row["balance"],
            installments_paid=row["installments_paid"],
            installments_pending=row["installments_pending"],
        )
        for row in list_loan_balances(db, debtor_id=debtor_id)
    ]


# ============== DETAIL (con cuotas y pagos) ==============
@router.get("/{loan_id}", response_model=LoanDetailOut)
def get_loan(loan_id: int, db: Session = Depends(get_db)):
    loan = _get_loan_or_404(loan_id, db)

    installments = (
        db.query(Installment)
        .filter(Installment.loan_id == loan_id)
        .order_by(Installment.number.asc())
        .all()
    )
    payments = (
        db.query(Payment)
        .filter(Payment.loan_id == loan_id)
        .order_by(Payment.payment_date.desc(), Payment.id.desc())
        .all()
    )

    return LoanDetailOut(
        **LoansOut.model_validate(loan).model_dump(),
        debtor_name=loan.debtor.full_name if loan.debtor else None,
        installments=[InstallmentOut.model_validate(i) for i in installments],
        payments=[PaymentOut.model_validate(p) for p in payments],
    )


@router.get("/{loan_id}/installments", response_model=List[InstallmentOut])
def get_loan_installments(loan_id: int, db: Session = Depends(get_db)):
    _get_loan_or_404(loan_id, db)
    return (
        db.query(Installment)
        .filter(Installment.loan_id == loan_id)
        .order_by(Installment.number.asc())
        .all()
    )


@router.get("/{loan_id}/summary", response_model=LoanBalanceSummary)
def loan_summary(loan_id: int, db: Session = Depends(get_db)):
    return summarize_loan(db, loan_id)


# ============== CREATE ==============
@router.post("/", response_model=LoansOut, status_code=status.HTTP_201_CREATED)
def create_loan(payload: LoansCreate, db: Session = Depends(get_db)):
    if not db.get(Debtor, payload.debtor_id):
        raise NotFoundError("Deudor no encontrado")

    with_schedule = bool(payload.generate_schedule and payload.installment_amount)
    has_bonus = payload.bonus_installment_number is not None or payload.bonus_amount is not None
    if has_bonus and not with_schedule:
        raise ValidationError("La cuota de premio requiere generar el cronograma (installment_amount)")

    data = payload.model_dump(
        exclude={"generate_schedule", "bonus_installment_number", "bonus_amount"}
    )
    data["status"] = data.get("status") or LoanStatus.ACTIVE.value

    with transaction(db):
        loan = Loan(**data)
        db.add(loan)
        db.flush()

        if with_schedule:
            schedule = build_monthly_schedule(
                loan_id=loan.id,
                start_date=payload.start_date,
                count=payload.total_installments,
                amount=payload.installment_amount,
                bonus_number=payload.bonus_installment_number,
                bonus_amount=payload.bonus_amount,
            )
            db.add_all(schedule)
            if loan.end_date is None:
                loan.end_date = schedule[-1].due_date

    db.refresh(loan)
    return loan


# ============== STATUS ==============
@router.patch("/{loan_id}/status", response_model=LoansOut)
def update_loan_status(
    loan_id: int,
    body: LoanStatusUpdate,
    db: Session = Depends(get_db),
):
    loan = _get_loan_or_404(loan_id, db)
    # Sólo cambia el estado: el capital desembolsado nunca se modifica
    with transaction(db):
        loan.status = body.status
        db.add(loan)
    db.refresh(loan)
    return loan
