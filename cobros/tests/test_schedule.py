from datetime import date
from decimal import Decimal

from cobros.utils.schedule import add_months, build_monthly_schedule


def test_add_months_clamps_to_month_end():
    assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert add_months(date(2023, 4, 1), 47) == date(2027, 3, 1)
    assert add_months(date(2025, 10, 15), 11) == date(2026, 9, 15)


def test_monthly_schedule_with_bonus():
    rows = build_monthly_schedule(
        loan_id=7,
        start_date=date(2025, 10, 15),
        count=12,
        amount=Decimal("500.00"),
        bonus_number=9,
        bonus_amount=Decimal("6000.00"),
    )

    assert len(rows) == 12
    assert {r.loan_id for r in rows} == {7}
    assert rows[8].number == 9
    assert rows[8].is_bonus is True
    assert rows[8].bonus_amount == Decimal("6000.00")
    assert rows[8].due_date == date(2026, 6, 15)
    assert all(r.status == "pending" and r.paid_amount == 0 for r in rows)
    assert sum(1 for r in rows if r.is_bonus) == 1
