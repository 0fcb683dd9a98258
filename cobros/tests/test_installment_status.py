from decimal import Decimal

import pytest

from cobros.constants import InstallmentStatus, next_installment_status
from cobros.models.models import Installment


@pytest.mark.parametrize(
    "current, paid, expected, result",
    [
        ("pending", "500", "500", InstallmentStatus.PAID),
        ("pending", "499.99", "500", InstallmentStatus.PARTIAL),
        ("partial", "500", "500", InstallmentStatus.PAID),
        ("overdue", "100", "500", InstallmentStatus.PARTIAL),
        ("overdue", "700", "500", InstallmentStatus.PAID),
        # terminal: aunque lo esperado suba, 'paid' no se revierte
        ("paid", "100", "500", InstallmentStatus.PAID),
    ],
)
def test_next_installment_status(current, paid, expected, result):
    assert next_installment_status(current, Decimal(paid), Decimal(expected)) is result


def test_register_payment_full_then_overpay():
    ins = Installment(
        number=1,
        expected_amount=Decimal("500"),
        paid_amount=Decimal("0"),
        status="pending",
    )

    ins.register_payment(Decimal("500"))
    assert ins.paid_amount == Decimal("500")
    assert ins.status == "paid"

    # sobrepago: no se recorta ni se revierte el estado
    ins.register_payment(Decimal("100"))
    assert ins.paid_amount == Decimal("600")
    assert ins.status == "paid"


def test_register_payment_partial_steps():
    ins = Installment(
        number=2,
        expected_amount=Decimal("1506.13"),
        paid_amount=Decimal("0"),
        status="pending",
    )

    ins.register_payment(Decimal("1000"))
    assert ins.status == "partial"
    assert ins.paid_amount == Decimal("1000")

    ins.register_payment(Decimal("506.13"))
    assert ins.status == "paid"
    assert ins.paid_amount == Decimal("1506.13")
