# cobros/tests/conftest.py
import os
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from cobros.main import app
from cobros.database.db import Base, get_db
from cobros.models.models import Debtor, Loan, User
from cobros.utils import vouchers
from cobros.utils.auth import hash_password, create_access_token
from cobros.utils.schedule import build_monthly_schedule

# SQLite en archivo para evitar problemas de conexión en memoria
TEST_DB_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///./test_unit.db")

# ---------- ENGINE (session-scoped) ----------
@pytest.fixture(scope="session")
def engine():
    eng = create_engine(
        TEST_DB_URL,
        echo=False,
        # TestClient corre los endpoints en otro hilo
        connect_args={"check_same_thread": False} if TEST_DB_URL.startswith("sqlite") else {},
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()

# ---------- DB (function-scoped) ----------
@pytest.fixture
def db(engine):
    """Base limpia por test: dropea y crea tablas antes de cada test."""
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

# ---------- Override de get_db ----------
@pytest.fixture(autouse=True)
def _override_db(db):
    def _get_db():
        try:
            yield db
        finally:
            pass
    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)

# ---------- Vouchers a un directorio temporal ----------
@pytest.fixture(autouse=True)
def uploads_dir(tmp_path, monkeypatch):
    d = tmp_path / "uploads"
    d.mkdir()
    monkeypatch.setattr(vouchers, "UPLOADS_DIR", str(d))
    return d

# ---------- Cliente FastAPI ----------
@pytest.fixture
def client():
    return TestClient(app)

# ---------- Seed: usuario ----------
@pytest.fixture
def seeded_user(db):
    user = User(
        name="Administrador",
        email="admin@test.local",
        password=hash_password("admin123"),
        role="admin",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user

# ---------- Header Authorization ----------
@pytest.fixture
def auth_headers(seeded_user):
    return {"Authorization": f"Bearer {create_access_token(seeded_user)}"}

# ---------- Fábricas ----------
@pytest.fixture
def make_debtor(db):
    def _make(first_name="Maritza", last_name="Paredes Piña", **kw):
        d = Debtor(first_name=first_name, last_name=last_name, **kw)
        db.add(d)
        db.commit()
        db.refresh(d)
        return d
    return _make


@pytest.fixture
def make_loan(db):
    def _make(debtor, principal="40000.00", count=None, amount=None, start=date(2023, 4, 1), **kw):
        loan = Loan(
            debtor_id=debtor.id,
            loan_type=kw.pop("loan_type", "bank_loan"),
            principal=Decimal(principal),
            total_installments=count or 1,
            installment_amount=Decimal(amount) if amount else None,
            start_date=start,
            **kw,
        )
        db.add(loan)
        db.flush()
        if count and amount:
            db.add_all(build_monthly_schedule(loan.id, start, count, Decimal(amount)))
        db.commit()
        db.refresh(loan)
        return loan
    return _make
