from sqlalchemy.orm import Session

from cobros.constants import InstallmentStatus, LoanStatus
from cobros.models.models import Loan, Installment


def update_loan_status_if_fully_paid(db: Session, loan_id: int | None) -> bool:
    """
    Si todas las cuotas del préstamo están pagadas, lo marca como 'paid'.
    No toca préstamos cancelados ni préstamos sin cronograma.
    """
    if not loan_id:
        return False

    loan = db.get(Loan, loan_id)
    if not loan or loan.status in (LoanStatus.PAID.value, LoanStatus.CANCELLED.value):
        return False

    installments = db.query(Installment).filter_by(loan_id=loan_id).all()
    if installments and all(ins.status == InstallmentStatus.PAID.value for ins in installments):
        loan.status = LoanStatus.PAID.value
        db.add(loan)
        return True
    return False
