"""Generate printable bill invoices."""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from .config import ClinicInfo
from .database import Bill, Patient

logger = logging.getLogger(__name__)


class InvoicePDFGenerator:
    """Lay out one bill into an A4 invoice."""

    def __init__(self, output_dir: Path, currency: str = "₹") -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.currency = currency

    def generate(
        self,
        clinic: ClinicInfo,
        patient: Patient,
        bill: Bill,
        logo_path: Optional[Path] = None,
    ) -> Path:
        output_path = self.output_dir / self._build_filename(patient, bill)

        pdf = canvas.Canvas(str(output_path), pagesize=A4)
        width, height = A4
        margin = 18 * mm

        header_bottom = self._draw_header(pdf, clinic, logo_path, margin, height - margin)
        current_y = header_bottom - 14
        pdf.setFont("Helvetica-Bold", 18)
        pdf.drawCentredString(width / 2, current_y, "Invoice")
        current_y -= 18
        pdf.line(margin, current_y, width - margin, current_y)
        current_y -= 20

        current_y = self._draw_parties(pdf, patient, bill, margin, width - margin, current_y)
        current_y -= 22
        current_y = self._draw_service_table(pdf, bill, margin, width - margin, current_y)
        current_y -= 24
        self._draw_status(pdf, bill, width - margin, current_y)

        pdf.showPage()
        pdf.save()
        logger.info("Wrote invoice for bill %s to %s", bill.bill_id, output_path)
        return output_path

    # ------------------------------------------------------------------

    def _build_filename(self, patient: Patient, bill: Bill) -> str:
        patient_slug = self._slugify(patient.full_name) or "patient"
        date_label = bill.bill_date.strftime("%Y%m%d") if bill.bill_date else "undated"
        return f"invoice_{bill.bill_id}_{patient_slug}_{date_label}.pdf"

    @staticmethod
    def _slugify(text: str) -> str:
        cleaned = re.sub(r"[^A-Za-z0-9]+", "_", text.strip())
        return cleaned.strip("_")[:80]

    def _draw_header(
        self,
        pdf: canvas.Canvas,
        clinic: ClinicInfo,
        logo_path: Optional[Path],
        left: float,
        top: float,
    ) -> float:
        text_x = left
        if logo_path and Path(logo_path).exists():
            try:
                image = ImageReader(str(logo_path))
                img_w, img_h = image.getSize()
                scale = min(40 * mm / img_w, 24 * mm / img_h, 1.0)
                pdf.drawImage(
                    image,
                    left,
                    top - img_h * scale,
                    width=img_w * scale,
                    height=img_h * scale,
                    mask="auto",
                    preserveAspectRatio=True,
                )
                text_x += img_w * scale + 10
            except (OSError, ValueError) as exc:
                logger.warning("Skipping unreadable logo %s: %s", logo_path, exc)

        text = pdf.beginText()
        text.setTextOrigin(text_x, top - 6)
        text.setFont("Helvetica-Bold", 14)
        text.textLine(clinic.name.strip() or "Clinic")
        text.setFont("Helvetica", 10)
        max_width = max(10.0, A4[0] - text_x - left)
        for raw_line in self._split_lines(clinic.address):
            for line in self._wrap_text(raw_line, max_width, "Helvetica", 10):
                text.textLine(line)
        if clinic.phone:
            text.textLine(f"Phone: {clinic.phone}")
        if clinic.email:
            text.textLine(f"Email: {clinic.email}")
        pdf.drawText(text)
        return text.getY()

    def _draw_parties(
        self,
        pdf: canvas.Canvas,
        patient: Patient,
        bill: Bill,
        left: float,
        right: float,
        top: float,
    ) -> float:
        column_width = (right - left - 14) / 2

        patient_text = pdf.beginText()
        patient_text.setTextOrigin(left, top)
        patient_text.setFont("Helvetica-Bold", 11)
        patient_text.textLine("Billed to")
        patient_text.setFont("Helvetica", 10)
        patient_text.textLine(patient.full_name)
        patient_text.textLine(f"Patient ID: {patient.patient_id}")
        if patient.phone:
            patient_text.textLine(f"Phone: {patient.phone}")
        if patient.email:
            patient_text.textLine(f"Email: {patient.email}")
        for line in self._wrap_text(patient.address, column_width, "Helvetica", 10):
            patient_text.textLine(line)
        pdf.drawText(patient_text)

        meta_text = pdf.beginText()
        meta_text.setTextOrigin(left + column_width + 14, top)
        meta_text.setFont("Helvetica", 10)
        meta_text.textLine(f"Bill No: {bill.bill_id}")
        if bill.bill_date:
            meta_text.textLine(f"Bill Date: {bill.bill_date.isoformat()}")
        if bill.due_date:
            meta_text.textLine(f"Due Date: {bill.due_date.isoformat()}")
        if bill.appointment_id:
            meta_text.textLine(f"Appointment: {bill.appointment_id}")
        pdf.drawText(meta_text)

        return min(patient_text.getY(), meta_text.getY())

    def _draw_service_table(
        self,
        pdf: canvas.Canvas,
        bill: Bill,
        left: float,
        right: float,
        top: float,
    ) -> float:
        width = right - left
        description_width = width * 0.75
        header_height = 18

        pdf.setFillColorRGB(0.9, 0.9, 0.9)
        pdf.rect(left, top - header_height, width, header_height, fill=1, stroke=0)
        pdf.setFillColorRGB(0, 0, 0)
        pdf.rect(left, top - header_height, width, header_height, fill=0, stroke=1)
        pdf.setFont("Helvetica-Bold", 10)
        pdf.drawString(left + 6, top - header_height + 5, "Service")
        pdf.drawRightString(right - 6, top - header_height + 5, "Amount")

        pdf.setFont("Helvetica", 9)
        wrapped = self._wrap_text(bill.service_description, description_width - 10, "Helvetica", 9)
        row_height = 8 + max(1, len(wrapped)) * 11
        current_y = top - header_height - row_height
        pdf.rect(left, current_y, width, row_height, fill=0, stroke=1)
        text_y = current_y + row_height - 12
        for line in wrapped:
            pdf.drawString(left + 6, text_y, line)
            text_y -= 11
        pdf.drawRightString(right - 6, current_y + 6, self._fmt_currency(bill.amount))
        return current_y

    def _draw_status(self, pdf: canvas.Canvas, bill: Bill, right: float, top: float) -> None:
        pdf.setFont("Helvetica-Bold", 11)
        pdf.drawRightString(right, top, f"Total: {self._fmt_currency(bill.amount)}")
        pdf.setFont("Helvetica", 10)
        pdf.drawRightString(right, top - 16, f"Status: {bill.payment_status}")
        if bill.payment_method:
            pdf.drawRightString(right, top - 30, f"Payment Method: {bill.payment_method}")

    def _fmt_currency(self, value: float) -> str:
        return f"{self.currency} {float(value or 0.0):,.2f}"

    def _split_lines(self, text: str) -> Iterable[str]:
        for line in (text or "").replace("\r\n", "\n").split("\n"):
            line = line.strip()
            if line:
                yield line

    def _wrap_text(self, text: str, max_width: float, font: str, size: int) -> List[str]:
        words = (text or "").split()
        if not words:
            return []
        lines: List[str] = []
        current = words[0]
        for word in words[1:]:
            candidate = f"{current} {word}"
            if stringWidth(candidate, font, size) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
        return lines
