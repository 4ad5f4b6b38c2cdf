import unittest
from datetime import date
from decimal import Decimal
from pathlib import Path

from clinicdesk.database import ClinicDatabase, StorageError, ValidationError
from tests.support import DatabaseTestCase


class TestPatients(DatabaseTestCase):
    def test_ids_increase_with_each_insert(self):
        first = self.add_patient("Asha")
        second = self.add_patient("Vikram")
        third = self.add_patient("Meera")
        self.assertLess(first, second)
        self.assertLess(second, third)

    def test_required_fields_are_rejected_before_writing(self):
        self.add_patient()
        for field in ("first_name", "last_name", "phone", "address"):
            with self.subTest(field=field):
                with self.assertRaises(ValidationError):
                    self.add_patient(**{field: "   "})
        self.assertEqual(len(self.db.list_patients()), 1)

    def test_missing_gender_and_date_of_birth_are_reported(self):
        with self.assertRaises(ValidationError) as ctx:
            self.add_patient(gender="", date_of_birth=None)
        self.assertIn("Gender", ctx.exception.fields)
        self.assertIn("Date of Birth", ctx.exception.fields)

    def test_date_of_birth_round_trips(self):
        patient_id = self.add_patient(date_of_birth=date(1975, 12, 31))
        listed = {p.patient_id: p for p in self.db.list_patients()}
        self.assertEqual(listed[patient_id].date_of_birth, date(1975, 12, 31))
        self.assertEqual(self.db.get_patient(patient_id).date_of_birth, date(1975, 12, 31))

    def test_date_of_birth_accepts_iso_text(self):
        patient_id = self.add_patient(date_of_birth="2001-02-03")
        self.assertEqual(self.db.get_patient(patient_id).date_of_birth, date(2001, 2, 3))

    def test_listing_is_newest_first(self):
        first = self.add_patient("Asha")
        second = self.add_patient("Vikram")
        ids = [p.patient_id for p in self.db.list_patients()]
        self.assertEqual(ids, [second, first])

    def test_search_matches_name_or_phone(self):
        self.add_patient("Asha", "Rao", phone="111")
        self.add_patient("Vikram", "Singh", phone="222")
        self.assertEqual([p.full_name for p in self.db.list_patients("singh")], ["Vikram Singh"])
        self.assertEqual([p.full_name for p in self.db.list_patients("111")], ["Asha Rao"])
        self.assertEqual([p.full_name for p in self.db.list_patients("Asha Rao")], ["Asha Rao"])

    def test_patient_options_are_labelled_and_sorted_by_first_name(self):
        vikram = self.add_patient("Vikram", "Singh")
        asha = self.add_patient("Asha", "Rao")
        options = self.db.patient_options()
        self.assertEqual([o.patient_id for o in options], [asha, vikram])
        self.assertEqual(options[0].label, f"Asha Rao (ID: {asha})")

    def test_get_patient_returns_none_for_unknown_id(self):
        self.assertIsNone(self.db.get_patient(999))


class TestAppointments(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.patient_id = self.add_patient()

    def add_appointment(self, **overrides):
        values = dict(
            patient_id=self.patient_id,
            doctor_name="Dr. Kulkarni",
            appointment_date=date(2024, 5, 1),
            appointment_time="10:00",
            department="Cardiology",
        )
        values.update(overrides)
        return self.db.add_appointment(**values)

    def test_new_appointment_is_scheduled(self):
        appointment_id = self.add_appointment(notes="Follow-up ECG")
        (appointment,) = self.db.list_appointments()
        self.assertEqual(appointment.appointment_id, appointment_id)
        self.assertEqual(appointment.status, "Scheduled")
        self.assertEqual(appointment.patient_name, "Asha Rao")
        self.assertEqual(appointment.notes, "Follow-up ECG")

    def test_ordered_by_date_descending_then_time(self):
        early = self.add_appointment(appointment_date=date(2024, 5, 1), appointment_time="09:00")
        later_day = self.add_appointment(appointment_date=date(2024, 5, 3), appointment_time="14:00")
        same_day_late = self.add_appointment(appointment_date=date(2024, 5, 1), appointment_time="11:30")
        ids = [a.appointment_id for a in self.db.list_appointments()]
        self.assertEqual(ids, [later_day, early, same_day_late])

    def test_required_selections(self):
        for overrides, label in (
            ({"patient_id": None}, "Patient"),
            ({"doctor_name": ""}, "Doctor"),
            ({"department": ""}, "Department"),
            ({"appointment_time": ""}, "Time"),
            ({"appointment_date": "not a date"}, "Date"),
        ):
            with self.subTest(label=label):
                with self.assertRaises(ValidationError) as ctx:
                    self.add_appointment(**overrides)
                self.assertEqual(ctx.exception.fields, [label])
        self.assertEqual(self.db.list_appointments(), [])

    def test_unknown_patient_is_a_storage_error(self):
        with self.assertRaises(StorageError):
            self.add_appointment(patient_id=4242)
        self.assertEqual(self.db.list_appointments(), [])

    def test_status_update_on_missing_id_changes_nothing(self):
        self.add_appointment()
        self.assertEqual(self.db.update_appointment_status(999, "Completed"), 0)
        self.assertEqual([a.status for a in self.db.list_appointments()], ["Scheduled"])

    def test_status_can_be_overwritten_from_any_status(self):
        appointment_id = self.add_appointment()
        self.assertEqual(self.db.update_appointment_status(appointment_id, "Cancelled"), 1)
        self.assertEqual(self.db.update_appointment_status(appointment_id, "Scheduled"), 1)
        self.assertEqual(self.db.list_appointments()[0].status, "Scheduled")

    def test_unknown_status_value_is_rejected(self):
        appointment_id = self.add_appointment()
        with self.assertRaises(ValidationError):
            self.db.update_appointment_status(appointment_id, "Lost")

    def test_filter_by_patient(self):
        other = self.add_patient("Vikram", "Singh")
        self.add_appointment()
        mine = self.add_appointment(patient_id=other)
        self.assertEqual([a.appointment_id for a in self.db.list_appointments(patient_id=other)], [mine])


class TestPrescriptions(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.patient_id = self.add_patient()

    def test_saved_with_today_as_default_date(self):
        self.db.add_prescription(
            patient_id=self.patient_id,
            doctor_name="Dr. Kulkarni",
            diagnosis="Hypertension",
            medicines="Amlodipine 5mg once daily",
            follow_up_date=date(2024, 6, 1),
        )
        (prescription,) = self.db.list_prescriptions()
        self.assertEqual(prescription.prescription_date, date.today())
        self.assertEqual(prescription.follow_up_date, date(2024, 6, 1))
        self.assertEqual(prescription.medicines, "Amlodipine 5mg once daily")

    def test_diagnosis_and_medicines_are_required(self):
        with self.assertRaises(ValidationError) as ctx:
            self.db.add_prescription(
                patient_id=self.patient_id,
                doctor_name="Dr. Kulkarni",
                diagnosis=" ",
                medicines="\n",
            )
        self.assertEqual(ctx.exception.fields, ["Diagnosis", "Medicines"])
        self.assertEqual(self.db.list_prescriptions(), [])

    def test_newest_prescription_date_first(self):
        older = self.db.add_prescription(
            patient_id=self.patient_id, doctor_name="Dr. A", diagnosis="Flu", medicines="Rest",
            prescription_date=date(2024, 1, 10),
        )
        newer = self.db.add_prescription(
            patient_id=self.patient_id, doctor_name="Dr. A", diagnosis="Cough", medicines="Syrup",
            prescription_date=date(2024, 3, 2),
        )
        self.assertEqual([p.prescription_id for p in self.db.list_prescriptions()], [newer, older])


class TestBilling(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.patient_id = self.add_patient()

    def add_bill(self, **overrides):
        values = dict(
            patient_id=self.patient_id,
            service_description="Consultation",
            amount="250.00",
        )
        values.update(overrides)
        return self.db.add_bill(**values)

    def test_non_positive_amounts_are_rejected(self):
        for amount in (0, "0.00", -5, "abc", None):
            with self.subTest(amount=amount):
                with self.assertRaises(ValidationError) as ctx:
                    self.add_bill(amount=amount)
                self.assertEqual(ctx.exception.fields, ["Amount"])
        self.assertEqual(self.db.list_bills(), [])

    def test_amounts_above_limit_are_rejected(self):
        for amount in ("1000000.00", "1e30", "99999999999999999999999999999"):
            with self.subTest(amount=amount):
                with self.assertRaises(ValidationError) as ctx:
                    self.add_bill(amount=amount)
                self.assertEqual(ctx.exception.fields, ["Amount"])
        self.assertEqual(self.db.list_bills(), [])

    def test_largest_amount_is_accepted(self):
        bill_id = self.add_bill(amount="999999.99")
        self.assertAlmostEqual(self.db.get_bill(bill_id).amount, 999999.99)

    def test_smallest_positive_amount_is_accepted(self):
        bill_id = self.add_bill(amount=Decimal("0.01"))
        self.assertAlmostEqual(self.db.get_bill(bill_id).amount, 0.01)

    def test_defaults(self):
        bill_id = self.add_bill(payment_status="")
        bill = self.db.get_bill(bill_id)
        self.assertEqual(bill.payment_status, "Pending")
        self.assertEqual(bill.bill_date, date.today())
        self.assertIsNone(bill.due_date)
        self.assertIsNone(bill.appointment_id)
        self.assertEqual(bill.patient_name, "Asha Rao")

    def test_optional_appointment_link(self):
        appointment_id = self.db.add_appointment(
            patient_id=self.patient_id,
            doctor_name="Dr. Kulkarni",
            appointment_date=date(2024, 5, 1),
            appointment_time="10:00",
            department="ENT",
        )
        bill_id = self.add_bill(appointment_id=appointment_id, payment_method="Cash")
        bill = self.db.get_bill(bill_id)
        self.assertEqual(bill.appointment_id, appointment_id)
        self.assertEqual(bill.payment_method, "Cash")

    def test_unknown_status_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            self.add_bill(payment_status="Waived")
        self.assertEqual(ctx.exception.fields, ["Payment Status"])
        self.assertEqual(str(ctx.exception), "Missing or invalid fields: Payment Status")

    def test_ordered_by_bill_date_descending(self):
        older = self.add_bill(bill_date=date(2024, 1, 1))
        newer = self.add_bill(bill_date=date(2024, 2, 1))
        self.assertEqual([b.bill_id for b in self.db.list_bills()], [newer, older])

    def test_status_update(self):
        bill_id = self.add_bill()
        self.assertEqual(self.db.update_bill_status(bill_id, "Paid"), 1)
        self.assertEqual(self.db.get_bill(bill_id).payment_status, "Paid")
        self.assertEqual(self.db.update_bill_status(bill_id + 100, "Paid"), 0)


class TestStorageFailures(unittest.TestCase):
    def test_unopenable_file_raises_storage_error(self):
        db = ClinicDatabase(Path("/nonexistent-dir/for/clinic.db"))
        with self.assertRaises(StorageError):
            db.list_patients()

    def test_validation_happens_before_storage(self):
        db = ClinicDatabase(Path("/nonexistent-dir/for/clinic.db"))
        with self.assertRaises(ValidationError):
            db.add_bill(patient_id=1, service_description="X", amount=0)


if __name__ == "__main__":
    unittest.main()
