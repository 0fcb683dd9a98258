from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer,
    Numeric, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from cobros.database.db import Base
from cobros.constants import (
    InstallmentStatus, LoanStatus, LoanType, next_installment_status,
)


def _utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(150), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)  # hash bcrypt
    role = Column(String(20), nullable=False, default="admin")
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Debtor(Base):
    __tablename__ = "debtors"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(150), nullable=False, index=True)
    last_name = Column(String(150), nullable=False, index=True)
    dni = Column(String(20), nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(150), nullable=True)
    address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    # Baja lógica: nunca se borra físicamente mientras tenga referencias
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    loans = relationship(
        "Loan", back_populates="debtor", cascade="all, delete-orphan", passive_deletes=True,
    )
    payments = relationship(
        "Payment", back_populates="debtor", cascade="all, delete-orphan", passive_deletes=True,
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Loan(Base):
    __tablename__ = "loans"

    id = Column(Integer, primary_key=True, index=True)
    debtor_id = Column(
        Integer, ForeignKey("debtors.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    loan_type = Column(String(30), nullable=False, default=LoanType.PERSONAL_LOAN.value)
    description = Column(String(255), nullable=True)

    # Monto desembolsado: fijo desde la creación, los pagos NO lo modifican
    principal = Column(Numeric(12, 2), nullable=False)
    interest_rate = Column(Numeric(6, 4), nullable=False, default=0)
    total_installments = Column(Integer, nullable=False, default=1)
    installment_amount = Column(Numeric(12, 2), nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default=LoanStatus.ACTIVE.value)

    bank = Column(String(100), nullable=True)
    operation_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    debtor = relationship("Debtor", back_populates="loans")
    installments = relationship(
        "Installment",
        back_populates="loan",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Installment.number",
    )
    payments = relationship("Payment", back_populates="loan", passive_deletes=True)


class Installment(Base):
    __tablename__ = "installments"

    id = Column(Integer, primary_key=True, index=True)
    loan_id = Column(
        Integer, ForeignKey("loans.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    number = Column(Integer, nullable=False)  # Cuota 1, 2, 3...
    due_date = Column(Date, nullable=False)
    expected_amount = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default=InstallmentStatus.PENDING.value)

    # Pandero: cuota en la que se cobra el premio
    is_bonus = Column(Boolean, nullable=False, default=False)
    bonus_amount = Column(Numeric(12, 2), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    loan = relationship("Loan", back_populates="installments")
    payments = relationship("Payment", back_populates="installment", passive_deletes=True)

    __table_args__ = (
        UniqueConstraint("loan_id", "number", name="uq_installments_loan_number"),
    )

    def register_payment(self, amount) -> None:
        """Suma el pago a lo abonado y recalcula el estado (sin tope: se admite sobrepago)."""
        self.paid_amount = (self.paid_amount or 0) + amount
        self.status = next_installment_status(
            self.status, self.paid_amount, self.expected_amount
        ).value


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    debtor_id = Column(
        Integer, ForeignKey("debtors.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    loan_id = Column(
        Integer, ForeignKey("loans.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    installment_id = Column(
        Integer, ForeignKey("installments.id", ondelete="SET NULL"), nullable=True,
    )

    payment_date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(String(30), nullable=False)

    operation_number = Column(String(100), nullable=True)
    source_bank = Column(String(100), nullable=True)
    concept = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    # Comprobante adjunto (solo referencia: URL + nombre original)
    voucher_url = Column(String(500), nullable=True)
    voucher_name = Column(String(255), nullable=True)

    recorded_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    debtor = relationship("Debtor", back_populates="payments")
    loan = relationship("Loan", back_populates="payments")
    installment = relationship("Installment", back_populates="payments")
    recorder = relationship("User")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
    )
