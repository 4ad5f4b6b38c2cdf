"""Create the clinic tables in the SQLite file."""
from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Sequence, Tuple

from .database import StorageError

logger = logging.getLogger(__name__)

PATIENTS_SQL = """
    CREATE TABLE IF NOT EXISTS Patients (
        PatientID INTEGER PRIMARY KEY AUTOINCREMENT,
        FirstName TEXT NOT NULL,
        LastName TEXT NOT NULL,
        DateOfBirth DATE NOT NULL,
        Gender TEXT NOT NULL,
        PhoneNumber TEXT NOT NULL,
        Email TEXT,
        Address TEXT NOT NULL,
        EmergencyContact TEXT,
        BloodGroup TEXT,
        MedicalHistory TEXT,
        RegistrationDate DATETIME DEFAULT CURRENT_TIMESTAMP
    )
"""

APPOINTMENTS_SQL = """
    CREATE TABLE IF NOT EXISTS Appointments (
        AppointmentID INTEGER PRIMARY KEY AUTOINCREMENT,
        PatientID INTEGER NOT NULL,
        DoctorName TEXT NOT NULL,
        AppointmentDate DATE NOT NULL,
        AppointmentTime TEXT NOT NULL,
        Department TEXT NOT NULL,
        Status TEXT DEFAULT 'Scheduled',
        Notes TEXT,
        CreatedDate DATETIME DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (PatientID) REFERENCES Patients (PatientID)
    )
"""

PRESCRIPTIONS_SQL = """
    CREATE TABLE IF NOT EXISTS Prescriptions (
        PrescriptionID INTEGER PRIMARY KEY AUTOINCREMENT,
        PatientID INTEGER NOT NULL,
        DoctorName TEXT NOT NULL,
        PrescriptionDate DATE NOT NULL,
        Diagnosis TEXT NOT NULL,
        Medicines TEXT NOT NULL,
        Instructions TEXT,
        FollowUpDate DATE,
        CreatedDate DATETIME DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (PatientID) REFERENCES Patients (PatientID)
    )
"""

BILLING_SQL = """
    CREATE TABLE IF NOT EXISTS Billing (
        BillID INTEGER PRIMARY KEY AUTOINCREMENT,
        PatientID INTEGER NOT NULL,
        AppointmentID INTEGER,
        ServiceDescription TEXT NOT NULL,
        Amount DECIMAL(10,2) NOT NULL,
        PaymentStatus TEXT DEFAULT 'Pending',
        PaymentMethod TEXT,
        BillDate DATE NOT NULL,
        DueDate DATE,
        CreatedDate DATETIME DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (PatientID) REFERENCES Patients (PatientID),
        FOREIGN KEY (AppointmentID) REFERENCES Appointments (AppointmentID)
    )
"""

# Referenced tables come first.
TABLE_PLANS: Sequence[Tuple[str, str]] = (
    ("Patients", PATIENTS_SQL),
    ("Appointments", APPOINTMENTS_SQL),
    ("Prescriptions", PRESCRIPTIONS_SQL),
    ("Billing", BILLING_SQL),
)

TABLES: Tuple[str, ...] = tuple(name for name, _sql in TABLE_PLANS)


def ensure_schema(db_path: Path) -> None:
    """Create any missing table; existing tables and rows are left untouched."""
    db_path = Path(db_path)
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        with closing(sqlite3.connect(db_path, timeout=5)) as conn:
            for table, create_sql in TABLE_PLANS:
                conn.execute(create_sql)
                logger.debug("Ensured table %s", table)
            conn.commit()
    except (sqlite3.Error, OSError) as exc:
        logger.error("Database initialization failed for %s: %s", db_path, exc)
        raise StorageError(f"Database initialization error: {exc}") from exc
    logger.info("Database schema ready at %s", db_path)
