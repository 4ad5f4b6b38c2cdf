"""Data access layer for the clinic SQLite database."""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

GENDERS = ("Male", "Female", "Other")
BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")
DEPARTMENTS = (
    "General Medicine",
    "Cardiology",
    "Orthopedics",
    "Pediatrics",
    "Gynecology",
    "Dermatology",
    "ENT",
    "Ophthalmology",
)
TIME_SLOTS = (
    "09:00", "09:30", "10:00", "10:30", "11:00", "11:30",
    "14:00", "14:30", "15:00", "15:30", "16:00", "16:30",
)
PAYMENT_METHODS = ("Cash", "Credit Card", "Debit Card", "Insurance", "Online Transfer")
APPOINTMENT_STATUSES = ("Scheduled", "Completed", "Cancelled")
BILL_STATUSES = ("Pending", "Paid", "Partial", "Overdue")
# Largest amount the billing form accepts.
MAX_BILL_AMOUNT = Decimal("999999.99")

DateInput = Union[date, str, None]
AmountInput = Union[Decimal, float, int, str, None]


class ClinicError(Exception):
    """Base class for errors reported to the user."""


class ValidationError(ClinicError):
    """Raised when required form values are missing or invalid."""

    def __init__(self, fields: Sequence[str]) -> None:
        self.fields = list(fields)
        super().__init__("Missing or invalid fields: " + ", ".join(self.fields))


class StorageError(ClinicError):
    """Raised when the database cannot be opened, queried or written."""


@dataclass(frozen=True)
class Patient:
    patient_id: int
    first_name: str
    last_name: str
    date_of_birth: Optional[date]
    gender: str
    phone: str
    email: str
    address: str
    emergency_contact: str
    blood_group: str
    medical_history: str
    registered_on: Optional[datetime]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class PatientOption:
    patient_id: int
    label: str


@dataclass(frozen=True)
class Appointment:
    appointment_id: int
    patient_id: int
    patient_name: str
    doctor_name: str
    appointment_date: Optional[date]
    appointment_time: str
    department: str
    status: str
    notes: str


@dataclass(frozen=True)
class Prescription:
    prescription_id: int
    patient_id: int
    patient_name: str
    doctor_name: str
    prescription_date: Optional[date]
    diagnosis: str
    medicines: str
    instructions: str
    follow_up_date: Optional[date]


@dataclass(frozen=True)
class Bill:
    bill_id: int
    patient_id: int
    patient_name: str
    appointment_id: Optional[int]
    service_description: str
    amount: float
    payment_status: str
    payment_method: str
    bill_date: Optional[date]
    due_date: Optional[date]


def _clean(value: Optional[str]) -> str:
    if value is None:
        return ""
    return str(value).replace("\r\n", "\n").strip()


def _to_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text_value = value.strip()
        for fmt in ("%Y-%m-%d", "%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S", "%d/%m/%Y"):
            try:
                return datetime.strptime(text_value, fmt).date()
            except ValueError:
                continue
    return None


def _to_datetime(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M:%S"):
            try:
                return datetime.strptime(value.strip(), fmt)
            except ValueError:
                continue
    return None


def _to_float(value) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_amount(value: AmountInput) -> Optional[Decimal]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        amount = Decimal(str(value).strip())
        if not amount.is_finite():
            return None
        return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None


def _to_id(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


class ClinicDatabase:
    """Query helpers over the local clinic database file.

    No connection is kept between calls: every operation opens its own
    connection through :meth:`connection` and closes it before returning.
    """

    def __init__(self, path: Path, *, timeout: float = 5.0) -> None:
        self.path = Path(path)
        self.timeout = timeout

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.path, timeout=self.timeout)
        except sqlite3.Error as exc:
            logger.error("Unable to open database %s: %s", self.path, exc)
            raise StorageError(f"Unable to open database: {exc}") from exc
        try:
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            logger.error("Database operation failed: %s", exc)
            raise StorageError(str(exc)) from exc
        finally:
            conn.close()

    def _insert(self, sql: str, params: Tuple[object, ...]) -> int:
        with self.connection() as conn:
            cursor = conn.execute(sql, params)
            return int(cursor.lastrowid)

    # ---------------- patients

    def add_patient(
        self,
        *,
        first_name: str,
        last_name: str,
        date_of_birth: DateInput,
        gender: str,
        phone: str,
        address: str,
        email: str = "",
        emergency_contact: str = "",
        blood_group: str = "",
        medical_history: str = "",
    ) -> int:
        dob = _to_date(date_of_birth)
        values = {
            "First Name": _clean(first_name),
            "Last Name": _clean(last_name),
            "Gender": _clean(gender),
            "Phone": _clean(phone),
            "Address": _clean(address),
        }
        missing = [label for label, value in values.items() if not value]
        if dob is None:
            missing.insert(2, "Date of Birth")
        if missing:
            raise ValidationError(missing)

        sql = """
            INSERT INTO Patients (
                FirstName,
                LastName,
                DateOfBirth,
                Gender,
                PhoneNumber,
                Email,
                Address,
                EmergencyContact,
                BloodGroup,
                MedicalHistory
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        patient_id = self._insert(
            sql,
            (
                values["First Name"],
                values["Last Name"],
                _iso(dob),
                values["Gender"],
                values["Phone"],
                _clean(email),
                values["Address"],
                _clean(emergency_contact),
                _clean(blood_group),
                _clean(medical_history),
            ),
        )
        logger.info("Registered patient %s", patient_id)
        return patient_id

    def _patient_from_row(self, row: sqlite3.Row) -> Patient:
        return Patient(
            patient_id=int(row["PatientID"]),
            first_name=row["FirstName"] or "",
            last_name=row["LastName"] or "",
            date_of_birth=_to_date(row["DateOfBirth"]),
            gender=row["Gender"] or "",
            phone=row["PhoneNumber"] or "",
            email=row["Email"] or "",
            address=row["Address"] or "",
            emergency_contact=row["EmergencyContact"] or "",
            blood_group=row["BloodGroup"] or "",
            medical_history=row["MedicalHistory"] or "",
            registered_on=_to_datetime(row["RegistrationDate"]),
        )

    def list_patients(self, search: Optional[str] = None) -> List[Patient]:
        sql = "SELECT * FROM Patients"
        params: List[object] = []
        term = _clean(search)
        if term:
            like = f"%{term}%"
            sql += (
                " WHERE FirstName LIKE ? OR LastName LIKE ? OR PhoneNumber LIKE ?"
                " OR (FirstName || ' ' || LastName) LIKE ?"
            )
            params.extend([like, like, like, like])
        sql += " ORDER BY RegistrationDate DESC, PatientID DESC"
        with self.connection() as conn:
            rows = conn.execute(sql, tuple(params)).fetchall()
        return [self._patient_from_row(row) for row in rows]

    def get_patient(self, patient_id: int) -> Optional[Patient]:
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM Patients WHERE PatientID = ?", (int(patient_id),)).fetchone()
        return self._patient_from_row(row) if row else None

    def patient_options(self) -> List[PatientOption]:
        """Dropdown entries labelled ``First Last (ID: n)``, sorted by first name."""
        sql = (
            "SELECT PatientID, FirstName || ' ' || LastName || ' (ID: ' || PatientID || ')' AS DisplayName "
            "FROM Patients ORDER BY FirstName, PatientID"
        )
        with self.connection() as conn:
            rows = conn.execute(sql).fetchall()
        return [PatientOption(patient_id=int(row["PatientID"]), label=row["DisplayName"]) for row in rows]

    # ---------------- appointments

    def add_appointment(
        self,
        *,
        patient_id: Optional[int],
        doctor_name: str,
        appointment_date: DateInput,
        appointment_time: str,
        department: str,
        notes: str = "",
    ) -> int:
        cleaned_patient = _to_id(patient_id)
        when = _to_date(appointment_date)
        doctor = _clean(doctor_name)
        slot = _clean(appointment_time)
        dept = _clean(department)
        missing: List[str] = []
        if cleaned_patient is None:
            missing.append("Patient")
        if not doctor:
            missing.append("Doctor")
        if not dept:
            missing.append("Department")
        if when is None:
            missing.append("Date")
        if not slot:
            missing.append("Time")
        if missing:
            raise ValidationError(missing)

        sql = """
            INSERT INTO Appointments (
                PatientID,
                DoctorName,
                AppointmentDate,
                AppointmentTime,
                Department,
                Notes
            ) VALUES (?, ?, ?, ?, ?, ?)
        """
        appointment_id = self._insert(sql, (cleaned_patient, doctor, _iso(when), slot, dept, _clean(notes)))
        logger.info("Scheduled appointment %s for patient %s", appointment_id, cleaned_patient)
        return appointment_id

    def list_appointments(self, patient_id: Optional[int] = None) -> List[Appointment]:
        sql = (
            "SELECT a.AppointmentID, a.PatientID, p.FirstName || ' ' || p.LastName AS PatientName, "
            "a.DoctorName, a.AppointmentDate, a.AppointmentTime, a.Department, a.Status, a.Notes "
            "FROM Appointments a JOIN Patients p ON a.PatientID = p.PatientID"
        )
        params: List[object] = []
        if patient_id is not None:
            sql += " WHERE a.PatientID = ?"
            params.append(int(patient_id))
        sql += " ORDER BY a.AppointmentDate DESC, a.AppointmentTime"
        with self.connection() as conn:
            rows = conn.execute(sql, tuple(params)).fetchall()
        return [
            Appointment(
                appointment_id=int(row["AppointmentID"]),
                patient_id=int(row["PatientID"]),
                patient_name=row["PatientName"] or "",
                doctor_name=row["DoctorName"] or "",
                appointment_date=_to_date(row["AppointmentDate"]),
                appointment_time=row["AppointmentTime"] or "",
                department=row["Department"] or "",
                status=row["Status"] or "",
                notes=row["Notes"] or "",
            )
            for row in rows
        ]

    def update_appointment_status(self, appointment_id: int, status: str) -> int:
        """Overwrite the status; returns the number of rows changed (0 for an unknown id)."""
        cleaned = _clean(status)
        if cleaned not in APPOINTMENT_STATUSES:
            raise ValidationError(["Status"])
        with self.connection() as conn:
            cursor = conn.execute(
                "UPDATE Appointments SET Status = ? WHERE AppointmentID = ?",
                (cleaned, int(appointment_id)),
            )
            changed = cursor.rowcount
        logger.info("Appointment %s marked as %s (%d row(s))", appointment_id, cleaned, changed)
        return changed

    # ---------------- prescriptions

    def add_prescription(
        self,
        *,
        patient_id: Optional[int],
        doctor_name: str,
        diagnosis: str,
        medicines: str,
        instructions: str = "",
        follow_up_date: DateInput = None,
        prescription_date: DateInput = None,
    ) -> int:
        cleaned_patient = _to_id(patient_id)
        doctor = _clean(doctor_name)
        cleaned_diagnosis = _clean(diagnosis)
        cleaned_medicines = _clean(medicines)
        missing: List[str] = []
        if cleaned_patient is None:
            missing.append("Patient")
        if not doctor:
            missing.append("Doctor")
        if not cleaned_diagnosis:
            missing.append("Diagnosis")
        if not cleaned_medicines:
            missing.append("Medicines")
        if missing:
            raise ValidationError(missing)

        issued = _to_date(prescription_date) or date.today()
        sql = """
            INSERT INTO Prescriptions (
                PatientID,
                DoctorName,
                PrescriptionDate,
                Diagnosis,
                Medicines,
                Instructions,
                FollowUpDate
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
        """
        prescription_id = self._insert(
            sql,
            (
                cleaned_patient,
                doctor,
                _iso(issued),
                cleaned_diagnosis,
                cleaned_medicines,
                _clean(instructions),
                _iso(_to_date(follow_up_date)),
            ),
        )
        logger.info("Saved prescription %s for patient %s", prescription_id, cleaned_patient)
        return prescription_id

    def list_prescriptions(self, patient_id: Optional[int] = None) -> List[Prescription]:
        sql = (
            "SELECT pr.PrescriptionID, pr.PatientID, p.FirstName || ' ' || p.LastName AS PatientName, "
            "pr.DoctorName, pr.PrescriptionDate, pr.Diagnosis, pr.Medicines, pr.Instructions, pr.FollowUpDate "
            "FROM Prescriptions pr JOIN Patients p ON pr.PatientID = p.PatientID"
        )
        params: List[object] = []
        if patient_id is not None:
            sql += " WHERE pr.PatientID = ?"
            params.append(int(patient_id))
        sql += " ORDER BY pr.PrescriptionDate DESC, pr.PrescriptionID DESC"
        with self.connection() as conn:
            rows = conn.execute(sql, tuple(params)).fetchall()
        return [
            Prescription(
                prescription_id=int(row["PrescriptionID"]),
                patient_id=int(row["PatientID"]),
                patient_name=row["PatientName"] or "",
                doctor_name=row["DoctorName"] or "",
                prescription_date=_to_date(row["PrescriptionDate"]),
                diagnosis=row["Diagnosis"] or "",
                medicines=row["Medicines"] or "",
                instructions=row["Instructions"] or "",
                follow_up_date=_to_date(row["FollowUpDate"]),
            )
            for row in rows
        ]

    # ---------------- billing

    def add_bill(
        self,
        *,
        patient_id: Optional[int],
        service_description: str,
        amount: AmountInput,
        payment_status: str = "Pending",
        payment_method: str = "",
        due_date: DateInput = None,
        bill_date: DateInput = None,
        appointment_id: Optional[int] = None,
    ) -> int:
        cleaned_patient = _to_id(patient_id)
        service = _clean(service_description)
        value = _to_amount(amount)
        status = _clean(payment_status) or "Pending"
        missing: List[str] = []
        if cleaned_patient is None:
            missing.append("Patient")
        if not service:
            missing.append("Service")
        if value is None or value <= 0 or value > MAX_BILL_AMOUNT:
            missing.append("Amount")
        if status not in BILL_STATUSES:
            missing.append("Payment Status")
        if missing:
            raise ValidationError(missing)

        issued = _to_date(bill_date) or date.today()
        sql = """
            INSERT INTO Billing (
                PatientID,
                AppointmentID,
                ServiceDescription,
                Amount,
                PaymentStatus,
                PaymentMethod,
                BillDate,
                DueDate
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """
        bill_id = self._insert(
            sql,
            (
                cleaned_patient,
                _to_id(appointment_id),
                service,
                float(value),
                status,
                _clean(payment_method),
                _iso(issued),
                _iso(_to_date(due_date)),
            ),
        )
        logger.info("Created bill %s for patient %s (%s)", bill_id, cleaned_patient, value)
        return bill_id

    _BILL_SELECT = (
        "SELECT b.BillID, b.PatientID, p.FirstName || ' ' || p.LastName AS PatientName, b.AppointmentID, "
        "b.ServiceDescription, b.Amount, b.PaymentStatus, b.PaymentMethod, b.BillDate, b.DueDate "
        "FROM Billing b JOIN Patients p ON b.PatientID = p.PatientID"
    )

    def _bill_from_row(self, row: sqlite3.Row) -> Bill:
        appointment = row["AppointmentID"]
        return Bill(
            bill_id=int(row["BillID"]),
            patient_id=int(row["PatientID"]),
            patient_name=row["PatientName"] or "",
            appointment_id=int(appointment) if appointment is not None else None,
            service_description=row["ServiceDescription"] or "",
            amount=_to_float(row["Amount"]),
            payment_status=row["PaymentStatus"] or "",
            payment_method=row["PaymentMethod"] or "",
            bill_date=_to_date(row["BillDate"]),
            due_date=_to_date(row["DueDate"]),
        )

    def list_bills(self, patient_id: Optional[int] = None) -> List[Bill]:
        sql = self._BILL_SELECT
        params: List[object] = []
        if patient_id is not None:
            sql += " WHERE b.PatientID = ?"
            params.append(int(patient_id))
        sql += " ORDER BY b.BillDate DESC, b.BillID DESC"
        with self.connection() as conn:
            rows = conn.execute(sql, tuple(params)).fetchall()
        return [self._bill_from_row(row) for row in rows]

    def get_bill(self, bill_id: int) -> Optional[Bill]:
        with self.connection() as conn:
            row = conn.execute(self._BILL_SELECT + " WHERE b.BillID = ?", (int(bill_id),)).fetchone()
        return self._bill_from_row(row) if row else None

    def update_bill_status(self, bill_id: int, status: str) -> int:
        """Overwrite the payment status; returns the number of rows changed."""
        cleaned = _clean(status)
        if cleaned not in BILL_STATUSES:
            raise ValidationError(["Payment Status"])
        with self.connection() as conn:
            cursor = conn.execute(
                "UPDATE Billing SET PaymentStatus = ? WHERE BillID = ?",
                (cleaned, int(bill_id)),
            )
            changed = cursor.rowcount
        logger.info("Bill %s marked as %s (%d row(s))", bill_id, cleaned, changed)
        return changed
