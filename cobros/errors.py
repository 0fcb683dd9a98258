# cobros/errors.py
"""
Errores de dominio del ledger de cobros.

Los servicios lanzan estas excepciones; `cobros.main` las traduce a
respuestas JSON `{"detail": ...}` con el status HTTP de cada clase.
"""


class LedgerError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(LedgerError):
    """Campo requerido ausente o inválido."""
    status_code = 400


class NotFoundError(LedgerError):
    """Deudor / préstamo / cuota / pago inexistente."""
    status_code = 404


class ConflictError(LedgerError):
    """Unicidad violada (p.ej. número de cuota repetido en un préstamo)."""
    status_code = 409


class PayloadTooLargeError(ValidationError):
    status_code = 413


class StorageError(LedgerError):
    """Falla de transacción o conectividad; la transacción ya fue revertida."""
    status_code = 500
