# cobros/schemas/dashboard.py
from __future__ import annotations

from datetime import date
from pydantic import BaseModel
from typing import List, Optional


class BalanceSummary(BaseModel):
    total_disbursed: float
    total_collected: float
    outstanding_balance: float   # puede ser negativo (sobrepago)


class LoanBalanceSummary(BalanceSummary):
    installments_paid: int
    installments_pending: int    # cualquier estado distinto de 'paid'


class DebtorBalanceRow(BaseModel):
    id: int
    name: str
    total_lent: float
    total_paid: float
    balance: float
    loans_count: int
    payments_count: int
    last_payment_date: Optional[date] = None


class MethodRow(BaseModel):
    method: str
    count: int
    total: float


class MonthRow(BaseModel):
    month: str       # 'YYYY-MM'
    total: float
    count: int


class PaymentsSummaryResponse(BaseModel):
    by_debtor: List[DebtorBalanceRow] = []
    by_method: List[MethodRow] = []
    by_month: List[MonthRow] = []
    totals: BalanceSummary
