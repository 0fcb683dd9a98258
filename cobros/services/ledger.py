# cobros/services/ledger.py
"""
Registro de pagos y conciliación contra cuotas.

Alta de pago:
  1) Valida deudor / préstamo / cuota.
  2) Dentro de UNA transacción inserta el Payment y, si referencia una
     cuota, suma el monto a lo pagado y recalcula su estado.
  3) Si el préstamo queda con todas sus cuotas pagadas, pasa a 'paid'.

Edición y borrado NO recalculan cuotas (una cuota 'paid' nunca vuelve a
'partial'/'pending' por estas operaciones).
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from cobros.database.db import transaction
from cobros.errors import NotFoundError, ValidationError
from cobros.models.models import Debtor, Installment, Loan, Payment
from cobros.schemas.payments import PaymentCreate, PaymentUpdate
from cobros.utils.status import update_loan_status_if_fully_paid
from cobros.utils.vouchers import delete_voucher

logger = logging.getLogger(__name__)

Voucher = Optional[tuple[str, str]]  # (url, nombre original)


def reconcile_installment(db: Session, installment_id: int | None, amount) -> Installment | None:
    """
    Aplica `amount` a la cuota. No-op si no hay cuota o si ya no existe
    (el pago igual queda registrado).
    """
    if installment_id is None:
        return None

    ins = db.get(Installment, installment_id)
    if ins is None:
        logger.warning("Cuota %s inexistente: se omite la conciliación", installment_id)
        return None

    ins.register_payment(amount)
    db.add(ins)
    db.flush()
    return ins


def _resolve_references(db: Session, data: PaymentCreate) -> tuple[int | None, int | None]:
    debtor = db.get(Debtor, data.debtor_id)
    if not debtor:
        raise NotFoundError("Deudor no encontrado")

    loan_id = data.loan_id
    if loan_id is not None:
        loan = db.get(Loan, loan_id)
        if not loan:
            raise NotFoundError("Préstamo no encontrado")
        if loan.debtor_id != debtor.id:
            raise ValidationError("El préstamo no pertenece al deudor")

    installment_id = data.installment_id
    if installment_id is not None:
        ins = db.get(Installment, installment_id)
        if ins is None:
            # Caso tolerado: se registra el pago sin referencia a la cuota
            logger.warning(
                "Pago de deudor %s referencia cuota %s inexistente; se registra sin cuota",
                debtor.id, installment_id,
            )
            installment_id = None
        elif loan_id is None:
            if ins.loan.debtor_id != debtor.id:
                raise ValidationError("La cuota no pertenece a un préstamo del deudor")
            loan_id = ins.loan_id
        elif ins.loan_id != loan_id:
            raise ValidationError("La cuota no pertenece al préstamo indicado")

    return loan_id, installment_id


def register_payment(
    db: Session,
    data: PaymentCreate,
    recorded_by: int | None = None,
    voucher: Voucher = None,
) -> Payment:
    voucher_url, voucher_name = voucher or (None, None)

    try:
        loan_id, installment_id = _resolve_references(db, data)
        with transaction(db):
            pay = Payment(
                debtor_id=data.debtor_id,
                loan_id=loan_id,
                installment_id=installment_id,
                payment_date=data.payment_date,
                amount=data.amount,
                method=data.method,
                operation_number=data.operation_number,
                source_bank=data.source_bank,
                concept=data.concept,
                notes=data.notes,
                voucher_url=voucher_url,
                voucher_name=voucher_name,
                recorded_by=recorded_by,
            )
            db.add(pay)
            db.flush()

            ins = reconcile_installment(db, pay.installment_id, pay.amount)
            if ins is not None:
                update_loan_status_if_fully_paid(db, ins.loan_id)
    except Exception:
        # El pago no quedó: el archivo subido tampoco
        delete_voucher(voucher_url)
        raise

    db.refresh(pay)
    logger.info(
        "Pago %s registrado: deudor=%s préstamo=%s cuota=%s monto=%s",
        pay.id, pay.debtor_id, pay.loan_id, pay.installment_id, pay.amount,
    )
    return pay


def get_payment(db: Session, payment_id: int) -> Payment:
    pay = (
        db.query(Payment)
        .options(joinedload(Payment.debtor), joinedload(Payment.loan))
        .filter(Payment.id == payment_id)
        .one_or_none()
    )
    if not pay:
        raise NotFoundError("Pago no encontrado")
    return pay


def update_payment(
    db: Session,
    payment_id: int,
    data: PaymentUpdate,
    voucher: Voucher = None,
    remove_voucher: bool = False,
) -> Payment:
    pay = db.get(Payment, payment_id)
    if not pay:
        delete_voucher(voucher[0] if voucher else None)
        raise NotFoundError("Pago no encontrado")

    old_url = pay.voucher_url
    replace_file = voucher is not None or remove_voucher

    try:
        with transaction(db):
            pay.payment_date = data.payment_date
            pay.amount = data.amount
            pay.method = data.method
            pay.operation_number = data.operation_number
            pay.source_bank = data.source_bank
            pay.concept = data.concept
            pay.notes = data.notes
            if voucher is not None:
                pay.voucher_url, pay.voucher_name = voucher
            elif remove_voucher:
                pay.voucher_url = None
                pay.voucher_name = None
            db.add(pay)
    except Exception:
        delete_voucher(voucher[0] if voucher else None)
        raise

    if replace_file and old_url and old_url != pay.voucher_url:
        delete_voucher(old_url)

    db.refresh(pay)
    return pay


def delete_payment(db: Session, payment_id: int) -> None:
    pay = db.get(Payment, payment_id)
    if not pay:
        raise NotFoundError("Pago no encontrado")

    voucher_url = pay.voucher_url
    with transaction(db):
        db.delete(pay)

    delete_voucher(voucher_url)
    logger.info("Pago %s eliminado", payment_id)


def list_payments(
    db: Session,
    debtor_id: int | None = None,
    loan_id: int | None = None,
    method: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    page: int = 1,
    limit: int | None = 50,
) -> tuple[list[Payment], int]:
    q = db.query(Payment)

    if debtor_id is not None:
        q = q.filter(Payment.debtor_id == debtor_id)
    if loan_id is not None:
        q = q.filter(Payment.loan_id == loan_id)
    if method:
        q = q.filter(Payment.method == method)
    if date_from is not None:
        q = q.filter(Payment.payment_date >= date_from)
    if date_to is not None:
        q = q.filter(Payment.payment_date <= date_to)

    total = q.count()

    q = (
        q.options(joinedload(Payment.debtor), joinedload(Payment.loan))
        .order_by(Payment.payment_date.desc(), Payment.created_at.desc(), Payment.id.desc())
    )
    if limit is not None:
        q = q.offset((page - 1) * limit).limit(limit)

    return q.all(), total
