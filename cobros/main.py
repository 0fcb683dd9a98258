import os
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from cobros.config import ENV, UPLOADS_DIR, UPLOADS_URL_PREFIX
from cobros.errors import LedgerError, StorageError
from cobros.routes import debtors, loans, payments, tasks

# -----------------------------------------------------------------------------
# Logging base
# -----------------------------------------------------------------------------
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger("uvicorn.error")

API_PREFIX = "/api"

# -----------------------------------------------------------------------------
# App
# -----------------------------------------------------------------------------
app = FastAPI(title="Cobros API")

# -----------------------------------------------------------------------------
# CORS por entorno
# -----------------------------------------------------------------------------
_raw = os.getenv("CORS_ORIGINS", "")
ALLOWED_ORIGINS = [o.strip() for o in _raw.split(",") if o.strip()]

if ENV == "prod":
    if any(o == "*" for o in ALLOWED_ORIGINS):
        raise RuntimeError('En prod, CORS_ORIGINS no puede contener "*". Definí dominios explícitos.')
elif not ALLOWED_ORIGINS:
    ALLOWED_ORIGINS = ["http://localhost:4200"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With"],
    expose_headers=["Content-Disposition"],  # recibos PDF
    max_age=600,
)

# -----------------------------------------------------------------------------
# Handlers y health
# -----------------------------------------------------------------------------
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error("422 detail: %s", exc.errors())
    return JSONResponse(status_code=422, content={"detail": exc.errors()})


@app.exception_handler(LedgerError)
async def ledger_exception_handler(request: Request, exc: LedgerError):
    if isinstance(exc, StorageError):
        logger.error("%s %s -> %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get(f"{API_PREFIX}/health")
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

# -----------------------------------------------------------------------------
# Routers
# -----------------------------------------------------------------------------
app.include_router(debtors.router,  prefix=f"{API_PREFIX}/debtors",  tags=["Debtors"])
app.include_router(loans.router,    prefix=f"{API_PREFIX}/loans",    tags=["Loans"])
app.include_router(payments.router, prefix=f"{API_PREFIX}/payments", tags=["Payments"])
app.include_router(tasks.router,    prefix=API_PREFIX)

# Comprobantes subidos
os.makedirs(UPLOADS_DIR, exist_ok=True)
app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=UPLOADS_DIR), name="uploads")
