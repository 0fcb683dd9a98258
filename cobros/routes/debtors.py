from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from cobros.database.db import get_db, transaction
from cobros.models.models import Debtor, Loan
from cobros.schemas.dashboard import BalanceSummary
from cobros.schemas.debtors import (
    DebtorCreate, DebtorDetailOut, DebtorListItem, DebtorOut, DebtorUpdate,
)
from cobros.schemas.loans import LoansOut
from cobros.schemas.payments import PaymentListItem
from cobros.services.balances import list_debtor_balances, summarize_debtor
from cobros.services.ledger import list_payments
from cobros.utils.auth import get_current_user

router = APIRouter(
    dependencies=[Depends(get_current_user)],  # 🔒 exige Bearer válido en todo el router
)


def _404():
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Deudor no encontrado")


# ===========================
#        LIST
# ===========================
@router.get("/", response_model=List[DebtorListItem])
def list_debtors(db: Session = Depends(get_db)):
    return [
        DebtorListItem(
            **DebtorOut.model_validate(row["debtor"]).model_dump(),
            total_lent=row["total_lent"],
            total_paid=row["total_paid"],
            balance=row["balance"],
            loans_count=row["loans_count"],
            last_payment_date=row["last_payment_date"],
        )
        for row in list_debtor_balances(db)
    ]


# ===========================
#        DETAIL
# ===========================
@router.get("/{debtor_id}", response_model=DebtorDetailOut)
def get_debtor(debtor_id: int, db: Session = Depends(get_db)):
    debtor = db.get(Debtor, debtor_id)
    if not debtor or not debtor.active:
        _404()

    loans = (
        db.query(Loan)
        .filter(Loan.debtor_id == debtor_id)
        .order_by(Loan.start_date.desc(), Loan.id.desc())
        .all()
    )
    payments, total = list_payments(db, debtor_id=debtor_id, limit=None)

    return DebtorDetailOut(
        **DebtorOut.model_validate(debtor).model_dump(),
        loans=[LoansOut.model_validate(l) for l in loans],
        payments=[PaymentListItem.from_payment(p) for p in payments],
        summary=summarize_debtor(db, debtor_id),
        payments_count=total,
    )


@router.get("/{debtor_id}/summary", response_model=BalanceSummary)
def debtor_summary(debtor_id: int, db: Session = Depends(get_db)):
    return summarize_debtor(db, debtor_id)


# ===========================
#        CREATE
# ===========================
@router.post("/", response_model=DebtorOut, status_code=status.HTTP_201_CREATED)
def create_debtor(payload: DebtorCreate, db: Session = Depends(get_db)):
    obj = Debtor(**payload.model_dump())
    with transaction(db):
        db.add(obj)
    db.refresh(obj)
    return obj


# ===========================
#        UPDATE
# ===========================
@router.put("/{debtor_id}", response_model=DebtorOut)
def update_debtor(debtor_id: int, payload: DebtorUpdate, db: Session = Depends(get_db)):
    debtor = db.get(Debtor, debtor_id)
    if not debtor:
        _404()

    # PUT reemplaza todos los campos: lo no enviado queda vacío
    with transaction(db):
        for k, v in payload.model_dump().items():
            setattr(debtor, k, v)
        db.add(debtor)
    db.refresh(debtor)
    return debtor


# ===========================
#        DELETE (baja lógica)
# ===========================
@router.delete("/{debtor_id}")
def delete_debtor(debtor_id: int, db: Session = Depends(get_db)):
    debtor = db.get(Debtor, debtor_id)
    if not debtor:
        _404()

    with transaction(db):
        debtor.active = False
        db.add(debtor)
    return {"message": "Deudor desactivado", "id": debtor_id}
