# cobros/constants.py
from decimal import Decimal
from enum import Enum

CENT = Decimal("0.01")

# ==============================
# Installments (cuotas)
# ==============================
class InstallmentStatus(str, Enum):
    PENDING = "pending"      # Pendiente
    PARTIAL = "partial"      # Parcialmente pagada
    PAID    = "paid"         # Pagada
    OVERDUE = "overdue"      # Vencida


def next_installment_status(current: str | None, paid_amount, expected_amount) -> InstallmentStatus:
    """
    Única función de transición de estado de una cuota al recibir un pago.

    pending/overdue/partial -> paid    si lo pagado alcanza lo esperado
    pending/overdue/partial -> partial si no
    paid                    -> paid    (terminal, nunca se revierte)
    """
    if current == InstallmentStatus.PAID.value:
        return InstallmentStatus.PAID
    if Decimal(str(paid_amount or 0)) >= Decimal(str(expected_amount or 0)):
        return InstallmentStatus.PAID
    return InstallmentStatus.PARTIAL

# ==============================
# Loans (préstamos)
# ==============================
class LoanStatus(str, Enum):
    ACTIVE    = "active"      # Activo
    PAID      = "paid"        # Pagado
    OVERDUE   = "overdue"     # Vencido
    CANCELLED = "cancelled"   # Cancelado


class LoanType(str, Enum):
    PERSONAL_LOAN = "personal_loan"
    BANK_LOAN     = "bank_loan"
    ROTATING_FUND = "rotating_fund"   # Pandero
    OTHER         = "other"

# ==============================
# Payments (pagos)
# ==============================
class PaymentMethod(str, Enum):
    CASH          = "cash"
    YAPE          = "yape"
    PLIN          = "plin"
    BANK_TRANSFER = "bank_transfer"
    ROTATING_FUND = "rotating_fund"
    OTHER         = "other"

# ==============================
# Normalización de entradas “legacy”
# (ES y variantes → EN canónico)
# ==============================
NORMALIZE_INSTALLMENT_STATUS = {
    "pendiente": InstallmentStatus.PENDING,
    "pending":   InstallmentStatus.PENDING,

    "parcial":   InstallmentStatus.PARTIAL,
    "partial":   InstallmentStatus.PARTIAL,

    "pagado":    InstallmentStatus.PAID,
    "pagada":    InstallmentStatus.PAID,
    "paid":      InstallmentStatus.PAID,

    "vencido":   InstallmentStatus.OVERDUE,
    "vencida":   InstallmentStatus.OVERDUE,
    "overdue":   InstallmentStatus.OVERDUE,
}

NORMALIZE_LOAN_STATUS = {
    "active":    LoanStatus.ACTIVE,
    "paid":      LoanStatus.PAID,
    "overdue":   LoanStatus.OVERDUE,
    "cancelled": LoanStatus.CANCELLED,
    "canceled":  LoanStatus.CANCELLED,  # variante

    # ES legacy
    "activo":    LoanStatus.ACTIVE,
    "pagado":    LoanStatus.PAID,
    "vencido":   LoanStatus.OVERDUE,
    "cancelado": LoanStatus.CANCELLED,
}

NORMALIZE_LOAN_TYPE = {
    "personal_loan":      LoanType.PERSONAL_LOAN,
    "bank_loan":          LoanType.BANK_LOAN,
    "rotating_fund":      LoanType.ROTATING_FUND,
    "other":              LoanType.OTHER,

    "prestamo_personal":  LoanType.PERSONAL_LOAN,
    "prestamo_bancario":  LoanType.BANK_LOAN,
    "pandero":            LoanType.ROTATING_FUND,
    "otro":               LoanType.OTHER,
}

NORMALIZE_PAYMENT_METHOD = {
    "cash":          PaymentMethod.CASH,
    "yape":          PaymentMethod.YAPE,
    "plin":          PaymentMethod.PLIN,
    "bank_transfer": PaymentMethod.BANK_TRANSFER,
    "rotating_fund": PaymentMethod.ROTATING_FUND,
    "other":         PaymentMethod.OTHER,

    "efectivo":      PaymentMethod.CASH,
    "transferencia": PaymentMethod.BANK_TRANSFER,
    "transfer":      PaymentMethod.BANK_TRANSFER,
    "pandero":       PaymentMethod.ROTATING_FUND,
    "otro":          PaymentMethod.OTHER,
}
