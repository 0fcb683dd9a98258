from decimal import Decimal
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from cobros.utils.normalize import norm_payment_method


def _blank_to_none(v):
    # Los formularios multipart mandan "" para campos vacíos
    if isinstance(v, str) and not v.strip():
        return None
    return v


class PaymentFields(BaseModel):
    payment_date: date
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    method: str
    operation_number: Optional[str] = None
    source_bank: Optional[str] = None
    concept: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("operation_number", "source_bank", "concept", "notes", mode="before")
    @classmethod
    def empty_text_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator("method")
    @classmethod
    def method_must_be_valid(cls, v: str) -> str:
        return norm_payment_method(v).value


class PaymentCreate(PaymentFields):
    debtor_id: int
    loan_id: Optional[int] = None
    installment_id: Optional[int] = None

    @field_validator("loan_id", "installment_id", mode="before")
    @classmethod
    def empty_ref_to_none(cls, v):
        return _blank_to_none(v)


# Edición completa: reemplaza todos los campos editables del pago
class PaymentUpdate(PaymentFields):
    pass


class PaymentOut(BaseModel):
    id: int
    debtor_id: int
    loan_id: Optional[int] = None
    installment_id: Optional[int] = None
    payment_date: date
    amount: float
    method: str
    operation_number: Optional[str] = None
    source_bank: Optional[str] = None
    concept: Optional[str] = None
    notes: Optional[str] = None
    voucher_url: Optional[str] = None
    voucher_name: Optional[str] = None
    recorded_by: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PaymentListItem(PaymentOut):
    debtor_name: Optional[str] = None
    loan_description: Optional[str] = None

    @classmethod
    def from_payment(cls, p) -> "PaymentListItem":
        item = cls.model_validate(p)
        item.debtor_name = p.debtor.full_name if p.debtor else None
        item.loan_description = p.loan.description if p.loan else None
        return item


class PaymentPage(BaseModel):
    data: List[PaymentListItem] = []
    total: int
    page: int
    limit: int
