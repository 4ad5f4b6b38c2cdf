"""Dashboard figures and the per-day sales report."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List

from .database import ClinicDatabase, StorageError

logger = logging.getLogger(__name__)

# "Today" is the database engine's local calendar day.
TODAY_SQL = "DATE('now', 'localtime')"


@dataclass(frozen=True)
class DashboardSummary:
    total_patients: int
    todays_appointments: int
    pending_bills: int
    todays_revenue: float


@dataclass(frozen=True)
class SalesReportRow:
    date: date
    total_bills: int
    paid_amount: float
    pending_amount: float
    total_amount: float


REPORT_HEADERS = ("Date", "TotalBills", "PaidAmount", "PendingAmount", "TotalAmount")


class ClinicMetrics:
    """Figures recomputed from the tables on every call."""

    def __init__(self, database: ClinicDatabase) -> None:
        self.database = database

    def _scalar(self, name: str, sql: str):
        try:
            with self.database.connection() as conn:
                row = conn.execute(sql).fetchone()
        except StorageError as exc:
            logger.warning("Could not compute %s, reporting 0: %s", name, exc)
            return 0
        return row[0] if row and row[0] is not None else 0

    def total_patients(self) -> int:
        return int(self._scalar("total patients", "SELECT COUNT(*) FROM Patients"))

    def todays_appointments(self) -> int:
        sql = f"SELECT COUNT(*) FROM Appointments WHERE DATE(AppointmentDate) = {TODAY_SQL}"
        return int(self._scalar("today's appointments", sql))

    def pending_bills(self) -> int:
        sql = "SELECT COUNT(*) FROM Billing WHERE PaymentStatus = 'Pending'"
        return int(self._scalar("pending bills", sql))

    def todays_revenue(self) -> float:
        sql = (
            "SELECT COALESCE(SUM(Amount), 0) FROM Billing "
            f"WHERE DATE(BillDate) = {TODAY_SQL} AND PaymentStatus = 'Paid'"
        )
        return round(float(self._scalar("today's revenue", sql)), 2)

    def summary(self) -> DashboardSummary:
        return DashboardSummary(
            total_patients=self.total_patients(),
            todays_appointments=self.todays_appointments(),
            pending_bills=self.pending_bills(),
            todays_revenue=self.todays_revenue(),
        )

    def sales_report(self, from_date: date, to_date: date) -> List[SalesReportRow]:
        """Bill totals per day between ``from_date`` and ``to_date`` inclusive, newest first."""
        sql = """
            SELECT
                DATE(b.BillDate) AS Date,
                COUNT(*) AS TotalBills,
                SUM(CASE WHEN b.PaymentStatus = 'Paid' THEN b.Amount ELSE 0 END) AS PaidAmount,
                SUM(CASE WHEN b.PaymentStatus = 'Pending' THEN b.Amount ELSE 0 END) AS PendingAmount,
                SUM(b.Amount) AS TotalAmount
            FROM Billing b
            WHERE DATE(b.BillDate) BETWEEN ? AND ?
            GROUP BY DATE(b.BillDate)
            ORDER BY DATE(b.BillDate) DESC
        """
        with self.database.connection() as conn:
            rows = conn.execute(sql, (from_date.isoformat(), to_date.isoformat())).fetchall()
        report: List[SalesReportRow] = []
        for row in rows:
            report.append(
                SalesReportRow(
                    date=date.fromisoformat(row["Date"]),
                    total_bills=int(row["TotalBills"]),
                    paid_amount=round(float(row["PaidAmount"] or 0), 2),
                    pending_amount=round(float(row["PendingAmount"] or 0), 2),
                    total_amount=round(float(row["TotalAmount"] or 0), 2),
                )
            )
        return report
