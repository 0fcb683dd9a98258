import os
import sqlite3
from contextlib import contextmanager

from sqlalchemy import create_engine, event, MetaData
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from dotenv import load_dotenv  # type: ignore

from cobros.errors import ConflictError, StorageError

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./cobros.db")

# 👇 Normaliza scheme si viene como 'postgres://'
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# connect_args solo para SQLite
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
metadata = MetaData()


# SQLite no aplica ON DELETE CASCADE / SET NULL sin este pragma
@event.listens_for(Engine, "connect")
def _sqlite_foreign_keys(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Importa modelos para registrar tablas
from cobros.models import models  # noqa: E402,F401

# Sin herramienta de migraciones: en dev se crean las tablas al arrancar
if os.getenv("ENV", "dev").lower() == "dev":
    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """
    Unidad de trabajo explícita sobre la sesión recibida.

    Hace commit si el bloque termina bien y rollback ante cualquier excepción.
    Los errores de SQLAlchemy se re-lanzan como errores de dominio
    (ConflictError para violaciones de unicidad/integridad, StorageError
    para el resto); cualquier otra excepción se propaga tal cual.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(f"Violación de integridad: {e.orig}") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Error de base de datos: {e}") from e
    except Exception:
        db.rollback()
        raise
