from dataclasses import dataclass
from datetime import date
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A5
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from cobros.models.models import Payment

METHOD_LABELS = {
    "cash": "Efectivo",
    "yape": "Yape",
    "plin": "Plin",
    "bank_transfer": "Transferencia",
    "rotating_fund": "Pandero",
    "other": "Otro",
}


@dataclass
class ReceiptData:
    payment_id: int
    payment_date: date
    amount: float
    method: str

    debtor_name: str
    debtor_doc: str | None

    loan_description: str | None
    installment_number: int | None
    installment_expected: float | None
    installment_paid: float | None
    installment_status: str | None

    operation_number: str | None
    source_bank: str | None
    concept: str | None
    recorded_by: str | None


def receipt_data_from_payment(p: Payment) -> ReceiptData:
    ins = p.installment
    return ReceiptData(
        payment_id=p.id,
        payment_date=p.payment_date,
        amount=float(p.amount or 0),
        method=p.method,
        debtor_name=p.debtor.full_name if p.debtor else "-",
        debtor_doc=p.debtor.dni if p.debtor else None,
        loan_description=(p.loan.description or f"Préstamo #{p.loan.id}") if p.loan else None,
        installment_number=ins.number if ins else None,
        installment_expected=float(ins.expected_amount) if ins else None,
        installment_paid=float(ins.paid_amount) if ins else None,
        installment_status=ins.status if ins else None,
        operation_number=p.operation_number,
        source_bank=p.source_bank,
        concept=p.concept,
        recorded_by=p.recorder.name if p.recorder else None,
    )


def _money(v: float | None) -> str:
    return f"S/ {v or 0:,.2f}"


def build_payment_receipt_pdf(d: ReceiptData) -> bytes:
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A5)
    W, H = A5
    pad = 12 * mm
    cur = H - pad

    c.setFont("Helvetica-Bold", 14)
    c.drawString(pad, cur, "Constancia de pago")
    c.setFont("Helvetica", 9)
    c.setFillColor(colors.grey)
    c.drawRightString(W - pad, cur, f"N° {d.payment_id:06d}")
    c.setFillColor(colors.black)

    cur -= 8 * mm
    c.setLineWidth(0.5)
    c.line(pad, cur, W - pad, cur)
    cur -= 8 * mm

    rows = [
        ("Fecha", d.payment_date.strftime("%d/%m/%Y")),
        ("Deudor", d.debtor_name + (f" (DNI {d.debtor_doc})" if d.debtor_doc else "")),
        ("Método", METHOD_LABELS.get(d.method, d.method)),
    ]
    if d.loan_description:
        rows.append(("Préstamo", d.loan_description))
    if d.installment_number is not None:
        rows.append(("Cuota", f"#{d.installment_number}"))
    if d.operation_number:
        rows.append(("N° operación", d.operation_number))
    if d.source_bank:
        rows.append(("Banco origen", d.source_bank))
    if d.concept:
        rows.append(("Concepto", d.concept))
    if d.recorded_by:
        rows.append(("Registrado por", d.recorded_by))

    for label, value in rows:
        c.setFont("Helvetica", 9)
        c.setFillColor(colors.grey)
        c.drawString(pad, cur, label)
        c.setFillColor(colors.black)
        c.setFont("Helvetica", 10)
        c.drawString(pad + 32 * mm, cur, value)
        cur -= 6 * mm

    cur -= 4 * mm
    c.setFont("Helvetica-Bold", 16)
    c.drawString(pad, cur, "Monto")
    c.drawRightString(W - pad, cur, _money(d.amount))

    if d.installment_number is not None:
        cur -= 10 * mm
        c.setFont("Helvetica", 9)
        c.drawString(
            pad, cur,
            f"Cuota: esperado {_money(d.installment_expected)} · "
            f"pagado {_money(d.installment_paid)} · estado {d.installment_status}",
        )

    c.showPage()
    c.save()
    return buf.getvalue()
