# cobros/utils/vouchers.py
"""
Almacén de comprobantes (vouchers) en disco.

El ledger sólo guarda la referencia (URL pública + nombre original); aquí se
escribe el archivo subido y se borra cuando el pago se edita con reemplazo
o se elimina.
"""
import logging
import os
import secrets
import time

from fastapi import UploadFile

from cobros.config import (
    ALLOWED_VOUCHER_EXTENSIONS,
    MAX_FILE_SIZE_MB,
    UPLOADS_DIR,
    UPLOADS_URL_PREFIX,
)
from cobros.errors import PayloadTooLargeError, ValidationError

logger = logging.getLogger(__name__)


def save_voucher(upload: UploadFile) -> tuple[str, str]:
    original_name = upload.filename or ""
    ext = os.path.splitext(original_name)[1].lower()
    if ext not in ALLOWED_VOUCHER_EXTENSIONS:
        raise ValidationError("Solo se permiten imágenes JPG, PNG, WEBP o PDF")

    max_bytes = MAX_FILE_SIZE_MB * 1024 * 1024
    content = upload.file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise PayloadTooLargeError("Archivo demasiado grande")

    os.makedirs(UPLOADS_DIR, exist_ok=True)
    filename = f"voucher-{int(time.time() * 1000)}-{secrets.randbelow(10**6)}{ext}"
    with open(os.path.join(UPLOADS_DIR, filename), "wb") as fh:
        fh.write(content)

    return f"{UPLOADS_URL_PREFIX}/{filename}", original_name


def voucher_path(url: str) -> str:
    return os.path.join(UPLOADS_DIR, os.path.basename(url))


def delete_voucher(url: str | None) -> None:
    """Borra el archivo referenciado; si no existe o falla sólo se registra."""
    if not url:
        return
    if not url.startswith(UPLOADS_URL_PREFIX + "/"):
        logger.warning("Voucher fuera de %s, no se borra: %s", UPLOADS_URL_PREFIX, url)
        return
    try:
        os.remove(voucher_path(url))
    except FileNotFoundError:
        logger.warning("Voucher ya no existe en disco: %s", url)
    except OSError as e:
        logger.warning("No se pudo eliminar voucher %s: %s", url, e)
