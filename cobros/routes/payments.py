from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import Response
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from cobros.database.db import get_db
from cobros.errors import ValidationError
from cobros.models.models import User
from cobros.schemas.dashboard import DebtorBalanceRow, PaymentsSummaryResponse
from cobros.schemas.payments import (
    PaymentCreate, PaymentListItem, PaymentOut, PaymentPage, PaymentUpdate,
)
from cobros.services import ledger
from cobros.services.balances import list_debtor_balances, portfolio_totals
from cobros.services.receipts import build_payment_receipt_pdf, receipt_data_from_payment
from cobros.services.reports import payments_by_method, payments_by_month
from cobros.utils.auth import get_current_user
from cobros.utils.normalize import norm_payment_method
from cobros.utils.vouchers import save_voucher

router = APIRouter(
    dependencies=[Depends(get_current_user)]  # 🔒 exige Bearer válido en todo el router
)


def _parse_form(model: type[BaseModel], form: dict):
    """
    Valida los campos del formulario multipart contra el schema.
    Los errores de negocio salen como 400 (no 422), igual que el resto del ledger.
    """
    data = {k: v for k, v in form.items() if v is not None}
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        detail = "; ".join(
            f"{'.'.join(str(x) for x in err['loc']) or 'body'}: {err['msg']}"
            for err in e.errors()
        )
        raise ValidationError(detail)


def _voucher_or_none(voucher: Optional[UploadFile]):
    if voucher is None or not voucher.filename:
        return None
    return save_voucher(voucher)


# ============== SUMMARY (dashboard) ==============
@router.get("/summary", response_model=PaymentsSummaryResponse)
def get_payments_summary(
    months: int = Query(12, ge=1, le=120),
    debtor_id: Optional[int] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    by_debtor = [
        DebtorBalanceRow(
            id=row["debtor"].id,
            name=row["debtor"].full_name,
            total_lent=row["total_lent"],
            total_paid=row["total_paid"],
            balance=row["balance"],
            loans_count=row["loans_count"],
            payments_count=row["payments_count"],
            last_payment_date=row["last_payment_date"],
        )
        for row in list_debtor_balances(db)
    ]
    return PaymentsSummaryResponse(
        by_debtor=by_debtor,
        by_method=payments_by_method(db, debtor_id=debtor_id, date_from=date_from, date_to=date_to),
        by_month=payments_by_month(
            db, limit=months, debtor_id=debtor_id, date_from=date_from, date_to=date_to,
        ),
        totals=portfolio_totals(db),
    )


# ============== LIST ==============
@router.get("/", response_model=PaymentPage)
def list_payments(
    debtor_id: Optional[int] = Query(None),
    loan_id: Optional[int] = Query(None),
    method: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    if method:
        try:
            method = norm_payment_method(method).value
        except ValueError as e:
            raise ValidationError(str(e))

    rows, total = ledger.list_payments(
        db,
        debtor_id=debtor_id,
        loan_id=loan_id,
        method=method,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )
    return PaymentPage(
        data=[PaymentListItem.from_payment(p) for p in rows],
        total=total,
        page=page,
        limit=limit,
    )


# ============== DETAIL ==============
@router.get("/{payment_id}", response_model=PaymentListItem)
def get_payment(payment_id: int, db: Session = Depends(get_db)):
    return PaymentListItem.from_payment(ledger.get_payment(db, payment_id))


@router.get("/{payment_id}/receipt")
def get_payment_receipt(payment_id: int, db: Session = Depends(get_db)):
    pay = ledger.get_payment(db, payment_id)
    pdf = build_payment_receipt_pdf(receipt_data_from_payment(pay))
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="pago-{pay.id}.pdf"'},
    )


# ============== REGISTER (multipart, voucher opcional) ==============
@router.post("/", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
def create_payment(
    debtor_id: Optional[str] = Form(None),
    loan_id: Optional[str] = Form(None),
    installment_id: Optional[str] = Form(None),
    payment_date: Optional[str] = Form(None),
    amount: Optional[str] = Form(None),
    method: Optional[str] = Form(None),
    operation_number: Optional[str] = Form(None),
    source_bank: Optional[str] = Form(None),
    concept: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    voucher: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
):
    payload = _parse_form(PaymentCreate, {
        "debtor_id": debtor_id,
        "loan_id": loan_id,
        "installment_id": installment_id,
        "payment_date": payment_date,
        "amount": amount,
        "method": method,
        "operation_number": operation_number,
        "source_bank": source_bank,
        "concept": concept,
        "notes": notes,
    })
    return ledger.register_payment(
        db, payload, recorded_by=current.id, voucher=_voucher_or_none(voucher),
    )


# ============== EDIT (reemplazo completo) ==============
@router.put("/{payment_id}", response_model=PaymentOut)
def update_payment(
    payment_id: int,
    payment_date: Optional[str] = Form(None),
    amount: Optional[str] = Form(None),
    method: Optional[str] = Form(None),
    operation_number: Optional[str] = Form(None),
    source_bank: Optional[str] = Form(None),
    concept: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    remove_voucher: bool = Form(False),
    voucher: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    payload = _parse_form(PaymentUpdate, {
        "payment_date": payment_date,
        "amount": amount,
        "method": method,
        "operation_number": operation_number,
        "source_bank": source_bank,
        "concept": concept,
        "notes": notes,
    })
    return ledger.update_payment(
        db,
        payment_id,
        payload,
        voucher=_voucher_or_none(voucher),
        remove_voucher=remove_voucher,
    )


# ============== DELETE ==============
@router.delete("/{payment_id}")
def delete_payment(payment_id: int, db: Session = Depends(get_db)):
    ledger.delete_payment(db, payment_id)
    return {"message": "Pago eliminado", "id": payment_id}
