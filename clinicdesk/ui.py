# clinicdesk/ui.py
from __future__ import annotations

import datetime as dt
import logging
import tkinter as tk
from pathlib import Path
from tkinter import filedialog, messagebox, ttk
from typing import Callable, Optional

from . import __version__
from .config import ConfigManager
from .database import (
    BILL_STATUSES,
    BLOOD_GROUPS,
    DEPARTMENTS,
    GENDERS,
    PAYMENT_METHODS,
    TIME_SLOTS,
    ClinicDatabase,
    StorageError,
    ValidationError,
)
from .export import backup_database, default_backup_filename, default_report_filename, export_report_csv
from .invoice import InvoicePDFGenerator
from .logs import configure_logging
from .metrics import REPORT_HEADERS, ClinicMetrics, SalesReportRow
from .schema import ensure_schema
from .theme import card, metric_card, style_app

logger = logging.getLogger(__name__)


def fmt_money(value: float | int | None, currency: str) -> str:
    v = float(value or 0.0)
    return f"{currency}{v:,.2f}"


def parse_date(d: str) -> dt.date | None:
    d = (d or "").strip()
    for fmt in ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y"):
        try:
            return dt.datetime.strptime(d, fmt).date()
        except ValueError:
            continue
    return None


def _fmt_date(value: dt.date | None) -> str:
    return value.isoformat() if value else ""


def _row(s: ttk.Frame, label: str, widget: tk.Widget, *, row: int, col: int) -> None:
    ttk.Label(s, text=label).grid(row=row, column=col, sticky="w", pady=4)
    widget.grid(row=row, column=col + 1, sticky="we", padx=8, pady=4)
    s.grid_columnconfigure(col + 1, weight=1)


def _tree(parent: ttk.Frame, columns, height: int = 12) -> ttk.Treeview:
    """Scrollable read-only grid; ``columns`` holds (name, heading, width, anchor)."""
    frame = ttk.Frame(parent)
    frame.pack(fill="both", expand=True)
    frame.columnconfigure(0, weight=1)
    frame.rowconfigure(0, weight=1)
    tree = ttk.Treeview(frame, columns=[c[0] for c in columns], show="headings", height=height, selectmode="browse")
    for name, label, width, anchor in columns:
        tree.heading(name, text=label)
        tree.column(name, width=width, anchor=anchor)
    tree.grid(row=0, column=0, sticky="nsew")
    scroll = ttk.Scrollbar(frame, orient="vertical", command=tree.yview)
    scroll.grid(row=0, column=1, sticky="ns")
    tree.configure(yscrollcommand=scroll.set)
    return tree


class ClinicApp(tk.Tk):
    def __init__(self, config_path: Path) -> None:
        super().__init__()
        self.withdraw()
        self._ready = False

        style_app(self)

        # Services
        self.cfg = ConfigManager(config_path)
        configure_logging(self.cfg.settings.logging, self.cfg.resolve_log_file())
        db_path = self.cfg.resolve_database_path()
        try:
            ensure_schema(db_path)
        except StorageError as exc:
            messagebox.showerror("Error", str(exc))
            self.destroy()
            return
        self.db = ClinicDatabase(db_path)
        self.metrics = ClinicMetrics(self.db)

        # State
        self.patient_option_map: dict[str, int] = {}
        self.patient_combos: list[ttk.Combobox] = []
        self.report_rows: list[SalesReportRow] = []
        self.status_var = tk.StringVar(value="")

        self.title("Patient Management System")
        self.geometry("1200x800")
        self.minsize(960, 640)

        self._build_menu()
        self._build_tabs()
        ttk.Label(self, textvariable=self.status_var, style="Status.TLabel").pack(fill="x", padx=12, pady=(0, 6))

        self._refresh_patient_options()
        self._load_patients()
        self._load_appointments()
        self._load_prescriptions()
        self._load_bills()
        self._refresh_summary()
        self._generate_report()

        self.deiconify()
        self._ready = True

    @property
    def currency(self) -> str:
        return self.cfg.settings.reports.currency

    # ---------------- shared helpers
    def _perform(self, title: str, action: Callable[[], object]) -> bool:
        try:
            action()
        except ValidationError as exc:
            messagebox.showwarning("Validation Error", str(exc))
            return False
        except StorageError as exc:
            messagebox.showerror("Error", f"Error {title}: {exc}")
            return False
        return True

    def _selected_id(self, tree: ttk.Treeview) -> Optional[int]:
        selection = tree.selection()
        if not selection:
            return None
        return int(selection[0])

    def _selected_patient_id(self, combo: ttk.Combobox) -> Optional[int]:
        return self.patient_option_map.get(combo.get())

    def _patient_combo(self, parent: ttk.Frame) -> ttk.Combobox:
        combo = ttk.Combobox(parent, state="readonly", width=36)
        self.patient_combos.append(combo)
        return combo

    def _refresh_patient_options(self) -> None:
        try:
            options = self.db.patient_options()
        except StorageError as exc:
            messagebox.showerror("Error", f"Error loading patients: {exc}")
            return
        self.patient_option_map = {option.label: option.patient_id for option in options}
        labels = list(self.patient_option_map)
        for combo in self.patient_combos:
            current = combo.get()
            combo.configure(values=labels)
            if current not in self.patient_option_map:
                combo.set("")

    # ---------------- menu / tabs
    def _build_menu(self) -> None:
        menubar = tk.Menu(self)
        file_menu = tk.Menu(menubar, tearoff=False)
        file_menu.add_command(label="Exit", command=self.destroy)
        menubar.add_cascade(label="File", menu=file_menu)

        tools_menu = tk.Menu(menubar, tearoff=False)
        tools_menu.add_command(label="Backup Database", command=self._backup_database)
        tools_menu.add_command(label="Settings", command=self._open_settings)
        menubar.add_cascade(label="Tools", menu=tools_menu)

        help_menu = tk.Menu(menubar, tearoff=False)
        help_menu.add_command(label="About", command=self._show_about)
        menubar.add_cascade(label="Help", menu=help_menu)
        self.configure(menu=menubar)

    def _build_tabs(self) -> None:
        self.nb = ttk.Notebook(self)
        self.nb.pack(fill="both", expand=True, padx=8, pady=8)

        self.patients_tab = ttk.Frame(self.nb, padding=12)
        self.appointments_tab = ttk.Frame(self.nb, padding=12)
        self.prescriptions_tab = ttk.Frame(self.nb, padding=12)
        self.billing_tab = ttk.Frame(self.nb, padding=12)
        self.reports_tab = ttk.Frame(self.nb, padding=12)
        self.nb.add(self.patients_tab, text="Patient Registration")
        self.nb.add(self.appointments_tab, text="Appointments")
        self.nb.add(self.prescriptions_tab, text="Prescriptions")
        self.nb.add(self.billing_tab, text="Billing")
        self.nb.add(self.reports_tab, text="Reports & Summary")

        self._build_patients_tab()
        self._build_appointments_tab()
        self._build_prescriptions_tab()
        self._build_billing_tab()
        self._build_reports_tab()
        self.nb.bind("<<NotebookTabChanged>>", self._on_tab_changed)

    def _on_tab_changed(self, _event=None) -> None:
        if self.nb.select() == str(self.reports_tab):
            self._refresh_summary()

    # ---------------- patients
    def _build_patients_tab(self) -> None:
        tab = self.patients_tab
        forms = ttk.Frame(tab)
        forms.pack(fill="x", pady=(0, 10))
        forms.columnconfigure(0, weight=1)
        forms.columnconfigure(1, weight=1)

        personal = card(forms, "Personal Information")
        personal.grid(row=0, column=0, sticky="nsew", padx=(0, 10))
        self.first_name_var = tk.StringVar()
        self.last_name_var = tk.StringVar()
        self.dob_var = tk.StringVar(value=dt.date.today().isoformat())
        self.gender_var = tk.StringVar()
        self.phone_var = tk.StringVar()
        self.email_var = tk.StringVar()
        _row(personal, "First Name *", ttk.Entry(personal, textvariable=self.first_name_var), row=0, col=0)
        _row(personal, "Last Name *", ttk.Entry(personal, textvariable=self.last_name_var), row=1, col=0)
        _row(personal, "Date of Birth *", ttk.Entry(personal, textvariable=self.dob_var), row=2, col=0)
        _row(personal, "Gender *", ttk.Combobox(personal, state="readonly", values=GENDERS,
                                                textvariable=self.gender_var), row=3, col=0)
        _row(personal, "Phone *", ttk.Entry(personal, textvariable=self.phone_var), row=4, col=0)
        _row(personal, "Email", ttk.Entry(personal, textvariable=self.email_var), row=5, col=0)
        self.address_text = tk.Text(personal, height=3, width=36)
        _row(personal, "Address *", self.address_text, row=6, col=0)

        medical = card(forms, "Medical Information")
        medical.grid(row=0, column=1, sticky="nsew")
        self.blood_group_var = tk.StringVar()
        self.emergency_var = tk.StringVar()
        _row(medical, "Blood Group", ttk.Combobox(medical, state="readonly", values=BLOOD_GROUPS,
                                                  textvariable=self.blood_group_var), row=0, col=0)
        _row(medical, "Emergency Contact", ttk.Entry(medical, textvariable=self.emergency_var), row=1, col=0)
        self.history_text = tk.Text(medical, height=6, width=36)
        _row(medical, "Medical History", self.history_text, row=2, col=0)

        bar = ttk.Frame(medical)
        bar.grid(row=3, column=0, columnspan=2, sticky="e", pady=(8, 0))
        ttk.Button(bar, text="Save Patient", style="Primary.TButton", command=self._save_patient).pack(side="right")
        ttk.Button(bar, text="Clear", style="Ghost.TButton", command=self._clear_patient_form).pack(side="right", padx=8)

        search = ttk.Frame(tab)
        search.pack(fill="x", pady=(0, 6))
        ttk.Label(search, text="Search").pack(side="left")
        self.patient_search_var = tk.StringVar()
        entry = ttk.Entry(search, textvariable=self.patient_search_var, width=30)
        entry.pack(side="left", padx=8)
        entry.bind("<Return>", lambda _e: self._load_patients())
        ttk.Button(search, text="Search", style="Ghost.TButton", command=self._load_patients).pack(side="left")

        self.patient_tree = _tree(tab, (
            ("id", "ID", 60, tk.CENTER),
            ("name", "Full Name", 220, tk.W),
            ("dob", "Date of Birth", 120, tk.W),
            ("gender", "Gender", 90, tk.W),
            ("phone", "Phone", 140, tk.W),
            ("email", "Email", 220, tk.W),
        ))

    def _save_patient(self) -> None:
        dob_text = self.dob_var.get()

        def action() -> None:
            patient_id = self.db.add_patient(
                first_name=self.first_name_var.get(),
                last_name=self.last_name_var.get(),
                date_of_birth=parse_date(dob_text) or dob_text,
                gender=self.gender_var.get(),
                phone=self.phone_var.get(),
                email=self.email_var.get(),
                address=self.address_text.get("1.0", "end"),
                emergency_contact=self.emergency_var.get(),
                blood_group=self.blood_group_var.get(),
                medical_history=self.history_text.get("1.0", "end"),
            )
            self.status_var.set(f"Registered patient {patient_id}")

        if not self._perform("saving patient", action):
            return
        messagebox.showinfo("Success", "Patient registered successfully!")
        self._clear_patient_form()
        self._load_patients()
        self._refresh_patient_options()

    def _clear_patient_form(self) -> None:
        for var in (self.first_name_var, self.last_name_var, self.gender_var, self.phone_var,
                    self.email_var, self.blood_group_var, self.emergency_var):
            var.set("")
        self.dob_var.set(dt.date.today().isoformat())
        self.address_text.delete("1.0", "end")
        self.history_text.delete("1.0", "end")

    def _load_patients(self) -> None:
        self.patient_tree.delete(*self.patient_tree.get_children())
        try:
            patients = self.db.list_patients(self.patient_search_var.get())
        except StorageError as exc:
            messagebox.showerror("Error", f"Error loading patients: {exc}")
            return
        for p in patients:
            self.patient_tree.insert("", "end", iid=str(p.patient_id), values=(
                p.patient_id, p.full_name, _fmt_date(p.date_of_birth), p.gender, p.phone, p.email,
            ))

    # ---------------- appointments
    def _build_appointments_tab(self) -> None:
        tab = self.appointments_tab
        box = card(tab, "Schedule Appointment")
        box.pack(fill="x", pady=(0, 10))
        self.appt_patient = self._patient_combo(box)
        self.appt_doctor_var = tk.StringVar()
        self.appt_department_var = tk.StringVar()
        self.appt_date_var = tk.StringVar(value=dt.date.today().isoformat())
        self.appt_time_var = tk.StringVar()
        self.appt_notes_var = tk.StringVar()
        _row(box, "Patient *", self.appt_patient, row=0, col=0)
        _row(box, "Doctor *", ttk.Entry(box, textvariable=self.appt_doctor_var), row=0, col=2)
        _row(box, "Department *", ttk.Combobox(box, state="readonly", values=DEPARTMENTS,
                                               textvariable=self.appt_department_var), row=1, col=0)
        _row(box, "Date *", ttk.Entry(box, textvariable=self.appt_date_var), row=1, col=2)
        _row(box, "Time *", ttk.Combobox(box, state="readonly", values=TIME_SLOTS,
                                         textvariable=self.appt_time_var), row=2, col=0)
        _row(box, "Notes", ttk.Entry(box, textvariable=self.appt_notes_var), row=2, col=2)
        ttk.Button(box, text="Schedule Appointment", style="Primary.TButton",
                   command=self._save_appointment).grid(row=3, column=3, sticky="e", pady=(8, 0))

        actions = ttk.Frame(tab)
        actions.pack(fill="x", pady=(0, 6))
        ttk.Button(actions, text="Mark Completed", style="Ghost.TButton",
                   command=lambda: self._update_appointment_status("Completed")).pack(side="left")
        ttk.Button(actions, text="Mark Cancelled", style="Ghost.TButton",
                   command=lambda: self._update_appointment_status("Cancelled")).pack(side="left", padx=8)

        self.appointment_tree = _tree(tab, (
            ("id", "ID", 60, tk.CENTER),
            ("patient", "Patient", 200, tk.W),
            ("doctor", "Doctor", 160, tk.W),
            ("date", "Date", 110, tk.W),
            ("time", "Time", 70, tk.CENTER),
            ("department", "Department", 150, tk.W),
            ("status", "Status", 100, tk.W),
            ("notes", "Notes", 220, tk.W),
        ))

    def _save_appointment(self) -> None:
        date_text = self.appt_date_var.get()

        def action() -> None:
            self.db.add_appointment(
                patient_id=self._selected_patient_id(self.appt_patient),
                doctor_name=self.appt_doctor_var.get(),
                appointment_date=parse_date(date_text) or date_text,
                appointment_time=self.appt_time_var.get(),
                department=self.appt_department_var.get(),
                notes=self.appt_notes_var.get(),
            )

        if not self._perform("scheduling appointment", action):
            return
        messagebox.showinfo("Success", "Appointment scheduled successfully!")
        for var in (self.appt_doctor_var, self.appt_department_var, self.appt_time_var, self.appt_notes_var):
            var.set("")
        self._load_appointments()

    def _update_appointment_status(self, status: str) -> None:
        appointment_id = self._selected_id(self.appointment_tree)
        if appointment_id is None:
            return
        if not self._perform("updating appointment",
                             lambda: self.db.update_appointment_status(appointment_id, status)):
            return
        messagebox.showinfo("Success", f"Appointment marked as {status.lower()}!")
        self._load_appointments()

    def _load_appointments(self) -> None:
        self.appointment_tree.delete(*self.appointment_tree.get_children())
        try:
            appointments = self.db.list_appointments()
        except StorageError as exc:
            messagebox.showerror("Error", f"Error loading appointments: {exc}")
            return
        for a in appointments:
            self.appointment_tree.insert("", "end", iid=str(a.appointment_id), values=(
                a.appointment_id, a.patient_name, a.doctor_name, _fmt_date(a.appointment_date),
                a.appointment_time, a.department, a.status, a.notes,
            ))

    # ---------------- prescriptions
    def _build_prescriptions_tab(self) -> None:
        tab = self.prescriptions_tab
        box = card(tab, "New Prescription")
        box.pack(fill="x", pady=(0, 10))
        self.rx_patient = self._patient_combo(box)
        self.rx_doctor_var = tk.StringVar()
        self.rx_diagnosis_var = tk.StringVar()
        self.rx_follow_up_var = tk.StringVar()
        _row(box, "Patient *", self.rx_patient, row=0, col=0)
        _row(box, "Doctor *", ttk.Entry(box, textvariable=self.rx_doctor_var), row=0, col=2)
        _row(box, "Diagnosis *", ttk.Entry(box, textvariable=self.rx_diagnosis_var), row=1, col=0)
        _row(box, "Follow-up Date", ttk.Entry(box, textvariable=self.rx_follow_up_var), row=1, col=2)
        self.rx_medicines_text = tk.Text(box, height=4, width=40)
        self.rx_instructions_text = tk.Text(box, height=4, width=40)
        _row(box, "Medicines *", self.rx_medicines_text, row=2, col=0)
        _row(box, "Instructions", self.rx_instructions_text, row=2, col=2)
        ttk.Button(box, text="Save Prescription", style="Primary.TButton",
                   command=self._save_prescription).grid(row=3, column=3, sticky="e", pady=(8, 0))

        self.prescription_tree = _tree(tab, (
            ("id", "ID", 60, tk.CENTER),
            ("patient", "Patient", 200, tk.W),
            ("doctor", "Doctor", 160, tk.W),
            ("date", "Date", 110, tk.W),
            ("diagnosis", "Diagnosis", 200, tk.W),
            ("medicines", "Medicines", 260, tk.W),
            ("follow_up", "Follow-up", 110, tk.W),
        ))

    def _save_prescription(self) -> None:
        follow_up_text = self.rx_follow_up_var.get().strip()

        def action() -> None:
            self.db.add_prescription(
                patient_id=self._selected_patient_id(self.rx_patient),
                doctor_name=self.rx_doctor_var.get(),
                diagnosis=self.rx_diagnosis_var.get(),
                medicines=self.rx_medicines_text.get("1.0", "end"),
                instructions=self.rx_instructions_text.get("1.0", "end"),
                follow_up_date=parse_date(follow_up_text),
            )

        if follow_up_text and parse_date(follow_up_text) is None:
            messagebox.showwarning("Validation Error", "Follow-up date must look like YYYY-MM-DD.")
            return
        if not self._perform("saving prescription", action):
            return
        messagebox.showinfo("Success", "Prescription saved successfully!")
        for var in (self.rx_doctor_var, self.rx_diagnosis_var, self.rx_follow_up_var):
            var.set("")
        self.rx_medicines_text.delete("1.0", "end")
        self.rx_instructions_text.delete("1.0", "end")
        self._load_prescriptions()

    def _load_prescriptions(self) -> None:
        self.prescription_tree.delete(*self.prescription_tree.get_children())
        try:
            prescriptions = self.db.list_prescriptions()
        except StorageError as exc:
            messagebox.showerror("Error", f"Error loading prescriptions: {exc}")
            return
        for rx in prescriptions:
            self.prescription_tree.insert("", "end", iid=str(rx.prescription_id), values=(
                rx.prescription_id, rx.patient_name, rx.doctor_name, _fmt_date(rx.prescription_date),
                rx.diagnosis, rx.medicines.replace("\n", "; "), _fmt_date(rx.follow_up_date),
            ))

    # ---------------- billing
    def _build_billing_tab(self) -> None:
        tab = self.billing_tab
        box = card(tab, "Create Bill")
        box.pack(fill="x", pady=(0, 10))
        self.bill_patient = self._patient_combo(box)
        self.bill_service_var = tk.StringVar()
        self.bill_amount_var = tk.StringVar(value="0.00")
        self.bill_method_var = tk.StringVar()
        self.bill_status_var = tk.StringVar(value=BILL_STATUSES[0])
        self.bill_due_var = tk.StringVar(value=(dt.date.today() + dt.timedelta(days=30)).isoformat())
        _row(box, "Patient *", self.bill_patient, row=0, col=0)
        _row(box, "Service *", ttk.Entry(box, textvariable=self.bill_service_var), row=0, col=2)
        _row(box, "Amount *", ttk.Entry(box, textvariable=self.bill_amount_var), row=1, col=0)
        _row(box, "Payment Method", ttk.Combobox(box, state="readonly", values=PAYMENT_METHODS,
                                                 textvariable=self.bill_method_var), row=1, col=2)
        _row(box, "Status", ttk.Combobox(box, state="readonly", values=BILL_STATUSES,
                                         textvariable=self.bill_status_var), row=2, col=0)
        _row(box, "Due Date", ttk.Entry(box, textvariable=self.bill_due_var), row=2, col=2)
        ttk.Button(box, text="Create Bill", style="Primary.TButton",
                   command=self._save_bill).grid(row=3, column=3, sticky="e", pady=(8, 0))

        actions = ttk.Frame(tab)
        actions.pack(fill="x", pady=(0, 6))
        self.bill_update_status_var = tk.StringVar(value="Paid")
        ttk.Combobox(actions, state="readonly", values=BILL_STATUSES, width=12,
                     textvariable=self.bill_update_status_var).pack(side="left")
        ttk.Button(actions, text="Update Status", style="Ghost.TButton",
                   command=self._update_bill_status).pack(side="left", padx=8)
        ttk.Button(actions, text="Print Invoice", style="Ghost.TButton",
                   command=self._print_invoice).pack(side="left")

        self.bill_tree = _tree(tab, (
            ("id", "ID", 60, tk.CENTER),
            ("patient", "Patient", 200, tk.W),
            ("service", "Service", 220, tk.W),
            ("amount", "Amount", 110, tk.E),
            ("status", "Status", 90, tk.W),
            ("method", "Method", 120, tk.W),
            ("bill_date", "Bill Date", 110, tk.W),
            ("due_date", "Due Date", 110, tk.W),
        ))

    def _save_bill(self) -> None:
        due_text = self.bill_due_var.get().strip()

        def action() -> None:
            self.db.add_bill(
                patient_id=self._selected_patient_id(self.bill_patient),
                service_description=self.bill_service_var.get(),
                amount=self.bill_amount_var.get(),
                payment_status=self.bill_status_var.get(),
                payment_method=self.bill_method_var.get(),
                due_date=parse_date(due_text),
            )

        if not self._perform("creating bill", action):
            return
        messagebox.showinfo("Success", "Bill created successfully!")
        self.bill_service_var.set("")
        self.bill_amount_var.set("0.00")
        self.bill_method_var.set("")
        self.bill_status_var.set(BILL_STATUSES[0])
        self._load_bills()

    def _update_bill_status(self) -> None:
        bill_id = self._selected_id(self.bill_tree)
        if bill_id is None:
            return
        status = self.bill_update_status_var.get()
        if not self._perform("updating bill", lambda: self.db.update_bill_status(bill_id, status)):
            return
        messagebox.showinfo("Success", f"Bill marked as {status.lower()}!")
        self._load_bills()

    def _print_invoice(self) -> None:
        bill_id = self._selected_id(self.bill_tree)
        if bill_id is None:
            return
        try:
            bill = self.db.get_bill(bill_id)
            patient = self.db.get_patient(bill.patient_id) if bill else None
        except StorageError as exc:
            messagebox.showerror("Error", f"Error loading bill: {exc}")
            return
        if not (bill and patient):
            messagebox.showwarning("Invoice", "The selected bill no longer exists.")
            return
        try:
            generator = InvoicePDFGenerator(self.cfg.resolve_output_dir(), currency=self.currency)
            path = generator.generate(self.cfg.settings.clinic, patient, bill, self.cfg.resolve_logo_path())
        except OSError as exc:
            messagebox.showerror("Error", f"Error writing invoice: {exc}")
            return
        self.status_var.set(f"Invoice saved to {path}")
        messagebox.showinfo("Invoice", f"Saved {path}")

    def _load_bills(self) -> None:
        self.bill_tree.delete(*self.bill_tree.get_children())
        try:
            bills = self.db.list_bills()
        except StorageError as exc:
            messagebox.showerror("Error", f"Error loading bills: {exc}")
            return
        for b in bills:
            self.bill_tree.insert("", "end", iid=str(b.bill_id), values=(
                b.bill_id, b.patient_name, b.service_description, fmt_money(b.amount, self.currency),
                b.payment_status, b.payment_method, _fmt_date(b.bill_date), _fmt_date(b.due_date),
            ))

    # ---------------- reports
    def _build_reports_tab(self) -> None:
        tab = self.reports_tab
        cards = ttk.Frame(tab)
        cards.pack(fill="x", pady=(0, 12))
        self.total_patients_var = tk.StringVar(value="0")
        self.todays_appointments_var = tk.StringVar(value="0")
        self.pending_bills_var = tk.StringVar(value="0")
        self.todays_revenue_var = tk.StringVar(value=fmt_money(0, self.currency))
        for index, (title, var) in enumerate((
            ("Total Patients", self.total_patients_var),
            ("Today's Appointments", self.todays_appointments_var),
            ("Pending Bills", self.pending_bills_var),
            ("Today's Revenue", self.todays_revenue_var),
        )):
            metric_card(cards, index, title, var).grid(row=0, column=index, sticky="nsew", padx=(0, 10))
            cards.columnconfigure(index, weight=1)

        box = card(tab, "Sales Summary")
        box.pack(fill="x", pady=(0, 10))
        today = dt.date.today()
        range_days = self.cfg.settings.reports.default_range_days
        self.report_from_var = tk.StringVar(value=(today - dt.timedelta(days=range_days)).isoformat())
        self.report_to_var = tk.StringVar(value=today.isoformat())
        ttk.Label(box, text="From Date").grid(row=0, column=0, sticky="w")
        ttk.Entry(box, textvariable=self.report_from_var, width=14).grid(row=0, column=1, padx=8)
        ttk.Label(box, text="To Date").grid(row=0, column=2, sticky="w")
        ttk.Entry(box, textvariable=self.report_to_var, width=14).grid(row=0, column=3, padx=8)
        ttk.Button(box, text="Generate Report", style="Primary.TButton",
                   command=self._generate_report).grid(row=0, column=4, padx=(8, 0))
        ttk.Button(box, text="Export to CSV", style="Ghost.TButton",
                   command=self._export_report).grid(row=0, column=5, padx=(8, 0))

        self.report_tree = _tree(tab, (
            ("date", "Date", 120, tk.W),
            ("bills", "Total Bills", 100, tk.CENTER),
            ("paid", "Paid Amount", 140, tk.E),
            ("pending", "Pending Amount", 140, tk.E),
            ("total", "Total Amount", 140, tk.E),
        ))

    def _refresh_summary(self) -> None:
        summary = self.metrics.summary()
        self.total_patients_var.set(str(summary.total_patients))
        self.todays_appointments_var.set(str(summary.todays_appointments))
        self.pending_bills_var.set(str(summary.pending_bills))
        self.todays_revenue_var.set(fmt_money(summary.todays_revenue, self.currency))

    def _generate_report(self) -> None:
        from_date = parse_date(self.report_from_var.get())
        to_date = parse_date(self.report_to_var.get())
        if from_date is None or to_date is None:
            messagebox.showwarning("Validation Error", "Dates must look like YYYY-MM-DD.")
            return
        try:
            rows = self.metrics.sales_report(from_date, to_date)
        except StorageError as exc:
            messagebox.showerror("Error", f"Error loading sales report: {exc}")
            return
        self.report_rows = rows
        self.report_tree.delete(*self.report_tree.get_children())
        for row in rows:
            self.report_tree.insert("", "end", values=(
                _fmt_date(row.date), row.total_bills, f"{row.paid_amount:.2f}",
                f"{row.pending_amount:.2f}", f"{row.total_amount:.2f}",
            ))

    def _export_report(self) -> None:
        if not self.report_rows:
            messagebox.showinfo("Export", "No report rows to export. Generate a report first.")
            return
        target = filedialog.asksaveasfilename(
            parent=self,
            defaultextension=".csv",
            initialdir=str(self.cfg.resolve_output_dir()),
            initialfile=default_report_filename(),
            filetypes=[("CSV files", "*.csv")],
        )
        if not target:
            return
        rows = [
            (_fmt_date(r.date), r.total_bills, f"{r.paid_amount:.2f}", f"{r.pending_amount:.2f}",
             f"{r.total_amount:.2f}")
            for r in self.report_rows
        ]
        try:
            export_report_csv(Path(target), REPORT_HEADERS, rows)
        except StorageError as exc:
            messagebox.showerror("Error", str(exc))
            return
        messagebox.showinfo("Success", "Report exported successfully!")

    # ---------------- menu actions
    def _backup_database(self) -> None:
        target = filedialog.asksaveasfilename(
            parent=self,
            defaultextension=".db",
            initialdir=str(self.cfg.resolve_backup_dir()),
            initialfile=default_backup_filename(),
            filetypes=[("Database files", "*.db")],
        )
        if not target:
            return
        try:
            backup_database(self.db.path, Path(target))
        except StorageError as exc:
            messagebox.showerror("Error", str(exc))
            return
        messagebox.showinfo("Success", "Database backed up successfully!")

    def _open_settings(self) -> None:
        win = tk.Toplevel(self)
        win.title("Settings")
        win.transient(self)
        win.grab_set()
        body = card(win, "Clinic Profile")
        body.pack(fill="both", expand=True, padx=12, pady=12)

        clinic = self.cfg.settings.clinic
        reports = self.cfg.settings.reports
        name_var = tk.StringVar(value=clinic.name)
        phone_var = tk.StringVar(value=clinic.phone)
        email_var = tk.StringVar(value=clinic.email)
        logo_var = tk.StringVar(value=clinic.logo_path)
        currency_var = tk.StringVar(value=reports.currency)
        output_var = tk.StringVar(value=reports.output_directory)
        range_var = tk.StringVar(value=str(reports.default_range_days))
        _row(body, "Clinic Name", ttk.Entry(body, textvariable=name_var, width=40), row=0, col=0)
        _row(body, "Phone", ttk.Entry(body, textvariable=phone_var), row=1, col=0)
        _row(body, "Email", ttk.Entry(body, textvariable=email_var), row=2, col=0)
        address_text = tk.Text(body, height=3, width=40)
        address_text.insert("1.0", clinic.address)
        _row(body, "Address", address_text, row=3, col=0)
        _row(body, "Logo", ttk.Entry(body, textvariable=logo_var), row=4, col=0)
        _row(body, "Currency", ttk.Entry(body, textvariable=currency_var, width=6), row=5, col=0)
        _row(body, "Output Folder", ttk.Entry(body, textvariable=output_var), row=6, col=0)
        _row(body, "Report Range (days)", ttk.Entry(body, textvariable=range_var, width=6), row=7, col=0)

        def save() -> None:
            try:
                range_days = int(range_var.get().strip() or 0)
            except ValueError:
                messagebox.showwarning("Validation Error", "Report range must be a whole number.", parent=win)
                return
            self.cfg.update_clinic(
                name=name_var.get().strip(),
                phone=phone_var.get().strip(),
                email=email_var.get().strip(),
                address=address_text.get("1.0", "end").strip(),
                logo_path=logo_var.get().strip(),
            )
            self.cfg.update_reports(
                currency=currency_var.get().strip(),
                output_directory=output_var.get().strip(),
                default_range_days=range_days,
            )
            try:
                self.cfg.save()
            except OSError as exc:
                messagebox.showerror("Settings", f"Could not save settings: {exc}", parent=win)
                return
            win.destroy()
            self._refresh_summary()
            self._load_bills()

        bar = ttk.Frame(win)
        bar.pack(fill="x", padx=12, pady=(0, 12))
        ttk.Button(bar, text="Save", style="Primary.TButton", command=save).pack(side="right")
        ttk.Button(bar, text="Cancel", style="Ghost.TButton", command=win.destroy).pack(side="right", padx=8)

    def _show_about(self) -> None:
        messagebox.showinfo(
            "About",
            f"Patient Management System v{__version__}\n\n"
            "A comprehensive healthcare management solution\n"
            "Features: Patient Registration, Appointments, Prescriptions, Billing & Reports",
        )


def run_app(config_path: Path) -> None:
    app = ClinicApp(config_path)
    if getattr(app, "_ready", False):
        app.mainloop()
