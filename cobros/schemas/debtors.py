from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime

from .dashboard import BalanceSummary
from .loans import LoansOut
from .payments import PaymentListItem


# ---------- Base (entrada) ----------
class DebtorBase(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name:  str = Field(..., min_length=1)
    dni: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Nombre y apellidos son requeridos")
        return v

    @field_validator("email", "dni", "phone")
    @classmethod
    def empty_to_none(cls, v):
        v = (v or "").strip()
        return v if v else None

# ---------- Crear ----------
class DebtorCreate(DebtorBase):
    pass

# ---------- Actualizar (reemplazo completo; 'active' omitido => True) ----------
class DebtorUpdate(DebtorBase):
    active: bool = True

# ---------- Salida ----------
class DebtorOut(BaseModel):
    id: int
    first_name: str
    last_name: str
    dni: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True  # (pydantic v2)


class DebtorListItem(DebtorOut):
    total_lent: float
    total_paid: float
    balance: float
    loans_count: int
    last_payment_date: Optional[date] = None


class DebtorDetailOut(DebtorOut):
    loans: List[LoansOut] = []
    payments: List[PaymentListItem] = []
    summary: BalanceSummary
    payments_count: int
