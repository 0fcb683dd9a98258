# cobros/seeds/seed_demo.py
# python -m cobros.seeds.seed_demo
"""
Carga la cartera de demostración: usuario admin, cuatro deudores, el préstamo
BanBif (48 cuotas, 23 pagadas), un pandero de 12 meses (5 pagados, premio en
la cuota 9) y tres préstamos personales sin cronograma.

Las cuotas pagadas se registran como pagos reales vía el ledger, de modo que
los saldos cuadran con lo cobrado.
"""
import logging
from datetime import date
from decimal import Decimal

from cobros.constants import LoanType, PaymentMethod
from cobros.database.db import Base, SessionLocal, engine, transaction
from cobros.models.models import Debtor, Loan, User
from cobros.schemas.payments import PaymentCreate
from cobros.services.ledger import register_payment
from cobros.utils.auth import create_access_token, hash_password
from cobros.utils.schedule import build_monthly_schedule

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@cobros.com"
ADMIN_PASSWORD = "admin123"


def _loan_with_schedule(db, debtor, *, count, amount, bonus_number=None, bonus_amount=None, **fields):
    loan = Loan(debtor_id=debtor.id, total_installments=count, installment_amount=amount, **fields)
    db.add(loan)
    db.flush()
    db.add_all(build_monthly_schedule(
        loan_id=loan.id,
        start_date=loan.start_date,
        count=count,
        amount=amount,
        bonus_number=bonus_number,
        bonus_amount=bonus_amount,
    ))
    db.flush()
    return loan


def _pay_installments(db, loan, upto: int, method: str, user_id: int):
    for ins in loan.installments[:upto]:
        register_payment(db, PaymentCreate(
            debtor_id=loan.debtor_id,
            loan_id=loan.id,
            installment_id=ins.id,
            payment_date=ins.due_date,
            amount=ins.expected_amount,
            method=method,
            concept=f"Cuota {ins.number}",
        ), recorded_by=user_id)


def ensure_seed():
    Base.metadata.create_all(engine)
    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == ADMIN_EMAIL).first():
            print("Seed ya ejecutado anteriormente; omitido.")
            return

        with transaction(db):
            admin = User(
                name="Administrador",
                email=ADMIN_EMAIL,
                password=hash_password(ADMIN_PASSWORD),
                role="admin",
            )
            maritza = Debtor(first_name="Maritza", last_name="Paredes Piña",
                             notes="Préstamo BanBif + Pandero activo")
            pedro = Debtor(first_name="Pedro", last_name="Reátegui Carpi",
                           notes="Préstamo personal")
            miguel = Debtor(first_name="Miguel", last_name="Ríos",
                            notes="Cuotas variables registradas en cuaderno")
            annie = Debtor(first_name="Annie", last_name="Muñoz",
                           notes="Pagos vía Interbank")
            db.add_all([admin, maritza, pedro, miguel, annie])
            db.flush()

            banbif = _loan_with_schedule(
                db, maritza, count=48, amount=Decimal("1506.13"),
                loan_type=LoanType.BANK_LOAN.value,
                description="Préstamo Personal BanBif",
                principal=Decimal("40000.00"),
                interest_rate=Decimal("0.3737"),
                start_date=date(2023, 4, 1),
                end_date=date(2027, 4, 1),
                bank="BanBif",
                operation_number="241101778500",
            )
            pandero = _loan_with_schedule(
                db, maritza, count=12, amount=Decimal("500.00"),
                bonus_number=9, bonus_amount=Decimal("6000.00"),
                loan_type=LoanType.ROTATING_FUND.value,
                description="Pandero 12 meses",
                principal=Decimal("6000.00"),
                start_date=date(2025, 10, 15),
                end_date=date(2026, 9, 15),
                notes="Premio de S/6,000 en junio 2026 (mes 9)",
            )
            db.add_all([
                Loan(debtor_id=pedro.id, loan_type=LoanType.PERSONAL_LOAN.value,
                     description="Préstamo personal (1000+2000+300)",
                     principal=Decimal("3300.00"), start_date=date(2021, 3, 28)),
                Loan(debtor_id=miguel.id, loan_type=LoanType.PERSONAL_LOAN.value,
                     description="Préstamo personal Lena Mayan",
                     principal=Decimal("3600.00"), start_date=date(2024, 1, 1)),
                Loan(debtor_id=annie.id, loan_type=LoanType.PERSONAL_LOAN.value,
                     description="Préstamo personal",
                     principal=Decimal("4052.26"), start_date=date(2026, 1, 13)),
            ])

        _pay_installments(db, banbif, 23, PaymentMethod.BANK_TRANSFER.value, admin.id)
        _pay_installments(db, pandero, 5, PaymentMethod.YAPE.value, admin.id)

        print("Seed OK ✅")
        print(f"- Admin: {ADMIN_EMAIL} / {ADMIN_PASSWORD}")
        print(f"- Token de desarrollo: {create_access_token(admin)}")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    ensure_seed()
