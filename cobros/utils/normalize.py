# cobros/utils/normalize.py
from typing import Optional
from cobros.constants import (
    NORMALIZE_INSTALLMENT_STATUS, NORMALIZE_LOAN_STATUS,
    NORMALIZE_LOAN_TYPE, NORMALIZE_PAYMENT_METHOD,
    InstallmentStatus, LoanStatus, LoanType, PaymentMethod,
)


def _lookup(table: dict, raw: Optional[str], what: str):
    key = (raw or "").strip().lower()
    try:
        return table[key]
    except KeyError:
        raise ValueError(f"{what} inválido: {raw!r}")


def norm_installment_status(raw: Optional[str]) -> InstallmentStatus:
    if not raw:
        return InstallmentStatus.PENDING
    return _lookup(NORMALIZE_INSTALLMENT_STATUS, raw, "Estado de cuota")


def norm_loan_status(raw: Optional[str]) -> LoanStatus:
    if not raw:
        return LoanStatus.ACTIVE
    return _lookup(NORMALIZE_LOAN_STATUS, raw, "Estado de préstamo")


def norm_loan_type(raw: Optional[str]) -> LoanType:
    return _lookup(NORMALIZE_LOAN_TYPE, raw, "Tipo de préstamo")


def norm_payment_method(raw: Optional[str]) -> PaymentMethod:
    return _lookup(NORMALIZE_PAYMENT_METHOD, raw, "Método de pago")
