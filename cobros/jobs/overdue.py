# cobros/jobs/overdue.py
import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from cobros.config import LOCAL_TZ
from cobros.constants import InstallmentStatus
from cobros.database.db import SessionLocal, transaction
from cobros.models.models import Installment

logger = logging.getLogger(__name__)


def local_today() -> date:
    return datetime.now(ZoneInfo(LOCAL_TZ)).date()


def mark_overdue_installments(db: Session, today: date | None = None) -> int:
    """
    Marca como 'overdue' las cuotas pendientes o parciales cuyo vencimiento
    ya pasó. Las pagadas no se tocan. Idempotente.
    """
    today = today or local_today()

    with transaction(db):
        updated = (
            db.query(Installment)
              .filter(
                  Installment.due_date < today,
                  Installment.status.in_([InstallmentStatus.PENDING.value,
                                          InstallmentStatus.PARTIAL.value]),
              )
              .update(
                  {Installment.status: InstallmentStatus.OVERDUE.value},
                  synchronize_session=False,
              )
        )
    logger.info("Cuotas marcadas como vencidas: %s (hoy=%s)", updated, today)
    return int(updated or 0)


def mark_overdue_installments_job() -> int:
    """Corre con su propia sesión (CLI)."""
    db = SessionLocal()
    try:
        return mark_overdue_installments(db)
    finally:
        db.close()
