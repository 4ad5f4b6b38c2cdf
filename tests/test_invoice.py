import tempfile
import unittest
from datetime import date
from pathlib import Path

from clinicdesk.config import ClinicInfo
from clinicdesk.invoice import InvoicePDFGenerator
from tests.support import DatabaseTestCase


class TestInvoicePDF(DatabaseTestCase):
    def test_writes_pdf_for_stored_bill(self):
        patient_id = self.add_patient("Asha", "Rao", email="asha@example.com")
        bill_id = self.db.add_bill(
            patient_id=patient_id,
            service_description="Consultation and full blood count with follow-up review",
            amount="450.00",
            payment_status="Paid",
            payment_method="Cash",
            bill_date=date(2024, 3, 15),
            due_date=date(2024, 4, 15),
        )
        clinic = ClinicInfo(name="Sunrise Clinic", address="4 Lake Road\nPune", phone="020-555")
        generator = InvoicePDFGenerator(self.tmp_path / "invoices", currency="Rs.")

        path = generator.generate(clinic, self.db.get_patient(patient_id), self.db.get_bill(bill_id))

        self.assertEqual(path.name, f"invoice_{bill_id}_Asha_Rao_20240315.pdf")
        self.assertTrue(path.read_bytes().startswith(b"%PDF"))

    def test_wrap_text_respects_width(self):
        with tempfile.TemporaryDirectory() as tmp:
            generator = InvoicePDFGenerator(Path(tmp))
            lines = generator._wrap_text("one two three four five six seven", 60, "Helvetica", 10)
        self.assertGreater(len(lines), 1)
        self.assertEqual(" ".join(lines), "one two three four five six seven")


if __name__ == "__main__":
    unittest.main()
