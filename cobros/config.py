# cobros/config.py
import os
from dotenv import load_dotenv

load_dotenv()

ENV = os.getenv("ENV", "dev").lower()

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-no-usar-en-produccion")
if ENV == "prod":
    # En prod: clave obligatoria y suficientemente larga (>=32 bytes)
    if not os.getenv("SECRET_KEY") or len(SECRET_KEY) < 32:
        raise RuntimeError("SECRET_KEY requerido en prod (>=32 bytes)")

# JWT
JWT_ALGORITHM = os.getenv("JWT_ALGO", "HS256")
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_MINS", "10080"))  # 7 días

# Vouchers (comprobantes de pago)
UPLOADS_DIR = os.getenv("UPLOADS_DIR", "./uploads")
UPLOADS_URL_PREFIX = "/uploads"
MAX_FILE_SIZE_MB = int(os.getenv("MAX_FILE_SIZE_MB", "5"))
ALLOWED_VOUCHER_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".pdf"}

# Zona horaria local para "hoy" (vencimientos)
LOCAL_TZ = os.getenv("LOCAL_TZ", "America/Lima")
