import unittest
from datetime import date, timedelta
from pathlib import Path

from clinicdesk.database import ClinicDatabase, StorageError
from clinicdesk.metrics import ClinicMetrics, DashboardSummary, SalesReportRow
from tests.support import DatabaseTestCase


class TestScalarMetrics(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.metrics = ClinicMetrics(self.db)
        self.patient_id = self.add_patient()

    def test_fresh_clinic_with_one_patient(self):
        self.assertEqual(
            self.metrics.summary(),
            DashboardSummary(total_patients=1, todays_appointments=0, pending_bills=0, todays_revenue=0),
        )

    def test_counts(self):
        self.add_patient("Vikram", "Singh")
        for when in (date.today(), date.today(), date.today() - timedelta(days=1)):
            self.db.add_appointment(
                patient_id=self.patient_id,
                doctor_name="Dr. Kulkarni",
                appointment_date=when,
                appointment_time="10:00",
                department="ENT",
            )
        self.db.add_bill(patient_id=self.patient_id, service_description="X-ray", amount=400)
        self.db.add_bill(patient_id=self.patient_id, service_description="Lab", amount=150, payment_status="Paid")
        self.assertEqual(self.metrics.total_patients(), 2)
        self.assertEqual(self.metrics.todays_appointments(), 2)
        self.assertEqual(self.metrics.pending_bills(), 1)

    def test_revenue_is_zero_without_paid_bills_today(self):
        self.db.add_bill(patient_id=self.patient_id, service_description="Consultation", amount=300)
        self.db.add_bill(
            patient_id=self.patient_id,
            service_description="Dressing",
            amount=120,
            payment_status="Paid",
            bill_date=date.today() - timedelta(days=1),
        )
        self.assertEqual(self.metrics.todays_revenue(), 0)

    def test_revenue_sums_paid_bills_dated_today(self):
        self.db.add_bill(patient_id=self.patient_id, service_description="A", amount="40.00", payment_status="Paid")
        self.db.add_bill(patient_id=self.patient_id, service_description="B", amount="2.50", payment_status="Paid")
        self.db.add_bill(patient_id=self.patient_id, service_description="C", amount="99.00", payment_status="Partial")
        self.assertEqual(self.metrics.todays_revenue(), 42.5)

    def test_revenue_follows_status_updates(self):
        bill_id = self.db.add_bill(patient_id=self.patient_id, service_description="A", amount=75)
        self.assertEqual(self.metrics.todays_revenue(), 0)
        self.db.update_bill_status(bill_id, "Paid")
        self.assertEqual(self.metrics.todays_revenue(), 75.0)
        self.assertEqual(self.metrics.pending_bills(), 0)


class TestSalesReport(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.metrics = ClinicMetrics(self.db)
        self.patient_id = self.add_patient()

    def bill(self, amount, status, when):
        self.db.add_bill(
            patient_id=self.patient_id,
            service_description="Service",
            amount=amount,
            payment_status=status,
            bill_date=when,
        )

    def test_groups_one_day(self):
        day = date(2024, 3, 15)
        self.bill("100.00", "Paid", day)
        self.bill("50.00", "Paid", day)
        self.bill("30.00", "Pending", day)
        self.assertEqual(
            self.metrics.sales_report(day, day),
            [SalesReportRow(date=day, total_bills=3, paid_amount=150.0, pending_amount=30.0, total_amount=180.0)],
        )

    def test_range_is_inclusive_and_newest_first(self):
        self.bill(10, "Paid", date(2024, 3, 1))
        self.bill(20, "Overdue", date(2024, 3, 5))
        self.bill(30, "Pending", date(2024, 3, 10))
        self.bill(40, "Paid", date(2024, 3, 11))
        rows = self.metrics.sales_report(date(2024, 3, 1), date(2024, 3, 10))
        self.assertEqual([r.date for r in rows], [date(2024, 3, 10), date(2024, 3, 5), date(2024, 3, 1)])
        overdue = rows[1]
        self.assertEqual((overdue.paid_amount, overdue.pending_amount, overdue.total_amount), (0.0, 0.0, 20.0))

    def test_empty_when_range_is_reversed(self):
        self.bill(10, "Paid", date(2024, 3, 1))
        self.assertEqual(self.metrics.sales_report(date(2024, 3, 2), date(2024, 2, 1)), [])


class TestMetricFailures(unittest.TestCase):
    def setUp(self):
        self.metrics = ClinicMetrics(ClinicDatabase(Path("/nonexistent-dir/for/clinic.db")))

    def test_scalar_metrics_fall_back_to_zero(self):
        self.assertEqual(
            self.metrics.summary(),
            DashboardSummary(total_patients=0, todays_appointments=0, pending_bills=0, todays_revenue=0.0),
        )

    def test_report_failure_is_raised(self):
        with self.assertRaises(StorageError):
            self.metrics.sales_report(date(2024, 1, 1), date(2024, 1, 31))


if __name__ == "__main__":
    unittest.main()
