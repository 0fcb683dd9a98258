# cobros/routes/tasks.py
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from cobros.config import LOCAL_TZ
from cobros.database.db import get_db
from cobros.jobs.overdue import local_today, mark_overdue_installments
from cobros.utils.auth import get_current_user

router = APIRouter(
    prefix="/tasks",
    tags=["Tasks"],
    dependencies=[Depends(get_current_user)],
)


@router.post("/mark-overdue")
def mark_overdue(
    as_of: Optional[date] = Query(None, description="Fecha de corte; por defecto hoy (hora local)"),
    db: Session = Depends(get_db),
):
    """Pasa a 'overdue' las cuotas pendientes o parciales vencidas antes de `as_of`."""
    cutoff = as_of or local_today()
    return {
        "updated": mark_overdue_installments(db, today=cutoff),
        "as_of": cutoff.isoformat(),
        "ran_at": datetime.now(ZoneInfo(LOCAL_TZ)).isoformat(),
    }
