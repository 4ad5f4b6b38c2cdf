import tempfile
import unittest
from datetime import date
from pathlib import Path

from clinicdesk.database import ClinicDatabase
from clinicdesk.schema import ensure_schema


class DatabaseTestCase(unittest.TestCase):
    """Fresh database file per test."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp_path = Path(self._tmp.name)
        self.db_path = self.tmp_path / "PatientManagement.db"
        ensure_schema(self.db_path)
        self.db = ClinicDatabase(self.db_path)

    def add_patient(self, first_name="Asha", last_name="Rao", **overrides):
        values = dict(
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date(1988, 4, 12),
            gender="Female",
            phone="9876543210",
            address="12 MG Road, Pune",
        )
        values.update(overrides)
        return self.db.add_patient(**values)
