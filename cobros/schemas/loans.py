from decimal import Decimal
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from cobros.utils.normalize import norm_loan_status, norm_loan_type
from .installments import InstallmentOut
from .payments import PaymentOut


class LoansBase(BaseModel):
    debtor_id: int
    loan_type: str
    description: Optional[str] = None
    principal: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    interest_rate: Decimal = Field(Decimal("0"), ge=0, max_digits=6, decimal_places=4)
    total_installments: int = Field(1, ge=1)
    installment_amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    start_date: date
    end_date: Optional[date] = None
    status: Optional[str] = None
    bank: Optional[str] = None
    operation_number: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("loan_type")
    @classmethod
    def loan_type_must_be_valid(cls, v: str) -> str:
        return norm_loan_type(v).value

    @field_validator("status")
    @classmethod
    def status_must_be_valid(cls, v: Optional[str]) -> str:
        return norm_loan_status(v).value


class LoansCreate(LoansBase):
    # Cronograma mensual de cuotas (si hay monto de cuota)
    generate_schedule: bool = True
    # Pandero: cuota en la que se cobra el premio
    bonus_installment_number: Optional[int] = Field(None, ge=1)
    bonus_amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)

    @model_validator(mode="after")
    def bonus_within_schedule(self):
        if self.bonus_installment_number is not None:
            if self.bonus_installment_number > self.total_installments:
                raise ValueError("La cuota de premio excede el total de cuotas")
            if self.bonus_amount is None:
                raise ValueError("bonus_amount es requerido si se indica cuota de premio")
        elif self.bonus_amount is not None:
            raise ValueError("bonus_amount requiere bonus_installment_number")
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date no puede ser anterior a start_date")
        return self


class LoanStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def status_must_be_valid(cls, v: str) -> str:
        if not v:
            raise ValueError("status es requerido")
        return norm_loan_status(v).value


class LoansOut(BaseModel):
    id: int
    debtor_id: int
    loan_type: str
    description: Optional[str] = None
    principal: float
    interest_rate: float
    total_installments: int
    installment_amount: Optional[float] = None
    start_date: date
    end_date: Optional[date] = None
    status: str
    bank: Optional[str] = None
    operation_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True  # pydantic v2 (equiv. a orm_mode=True)


class LoanListItem(LoansOut):
    debtor_name: str
    total_paid: float
    balance: float
    installments_paid: int
    installments_pending: int


class LoanDetailOut(LoansOut):
    debtor_name: Optional[str] = None
    installments: List[InstallmentOut] = []
    payments: List[PaymentOut] = []
