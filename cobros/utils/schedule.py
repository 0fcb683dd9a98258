import calendar
from datetime import date
from decimal import Decimal

from cobros.constants import InstallmentStatus
from cobros.models.models import Installment


def add_months(d: date, months: int) -> date:
    """Suma meses calendario; si el día no existe en el mes destino usa el último."""
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def build_monthly_schedule(
    loan_id: int,
    start_date: date,
    count: int,
    amount: Decimal,
    bonus_number: int | None = None,
    bonus_amount: Decimal | None = None,
) -> list[Installment]:
    """
    Cuotas 1..count, la primera vence en start_date y luego cada mes.
    En un pandero, la cuota `bonus_number` lleva el premio.
    """
    out = []
    for n in range(1, count + 1):
        is_bonus = bonus_number is not None and n == bonus_number
        out.append(Installment(
            loan_id=loan_id,
            number=n,
            due_date=add_months(start_date, n - 1),
            expected_amount=amount,
            paid_amount=Decimal("0"),
            status=InstallmentStatus.PENDING.value,
            is_bonus=is_bonus,
            bonus_amount=bonus_amount if is_bonus else None,
        ))
    return out
