from pydantic import BaseModel
from datetime import date
from typing import Optional


class InstallmentOut(BaseModel):
    id: int
    loan_id: int
    number: int
    due_date: date
    expected_amount: float
    paid_amount: float
    status: str
    is_bonus: bool = False
    bonus_amount: Optional[float] = None

    class Config:
        from_attributes = True  # pydantic v2 (equiv. orm_mode=True)
