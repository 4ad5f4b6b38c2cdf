"""Configuration helpers for the clinic desk application."""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass
class ClinicInfo:
    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    logo_path: str = ""


@dataclass
class DatabaseInfo:
    path: str = "PatientManagement.db"
    backup_directory: str = ""


@dataclass
class ReportOptions:
    output_directory: str = "reports"
    currency: str = "₹"
    default_range_days: int = 7


@dataclass
class LoggingOptions:
    level: str = "INFO"
    file: str = ""


@dataclass
class AppSettings:
    clinic: ClinicInfo = field(default_factory=ClinicInfo)
    database: DatabaseInfo = field(default_factory=DatabaseInfo)
    reports: ReportOptions = field(default_factory=ReportOptions)
    logging: LoggingOptions = field(default_factory=LoggingOptions)


class ConfigManager:
    """Load and persist application configuration."""

    def __init__(self, config_path: Path) -> None:
        self.config_path = Path(config_path)
        self.settings = AppSettings()
        self.load()

    def load(self) -> None:
        if not self.config_path.exists():
            return
        data = json.loads(self.config_path.read_text(encoding="utf-8"))
        self.settings = self._from_dict(data)

    def save(self) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        payload = self._to_dict()
        self.config_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    def _to_dict(self) -> Dict[str, Any]:
        return {
            "clinic": asdict(self.settings.clinic),
            "database": asdict(self.settings.database),
            "reports": asdict(self.settings.reports),
            "logging": asdict(self.settings.logging),
        }

    def _from_dict(self, data: Dict[str, Any]) -> AppSettings:
        clinic_data = data.get("clinic", {})
        database_data = data.get("database", {})
        reports_data = data.get("reports", {})
        logging_data = data.get("logging", {})
        return AppSettings(
            clinic=ClinicInfo(**{**asdict(ClinicInfo()), **self._known(ClinicInfo, clinic_data)}),
            database=DatabaseInfo(**{**asdict(DatabaseInfo()), **self._known(DatabaseInfo, database_data)}),
            reports=ReportOptions(**{**asdict(ReportOptions()), **self._known(ReportOptions, reports_data)}),
            logging=LoggingOptions(**{**asdict(LoggingOptions()), **self._known(LoggingOptions, logging_data)}),
        )

    @staticmethod
    def _known(section: type, values: Dict[str, Any]) -> Dict[str, Any]:
        # Keys written by newer or older versions are ignored.
        allowed = section.__dataclass_fields__
        return {key: value for key, value in (values or {}).items() if key in allowed}

    def update_clinic(self, **kwargs: Any) -> None:
        for key, value in kwargs.items():
            if hasattr(self.settings.clinic, key):
                setattr(self.settings.clinic, key, value)

    def update_reports(self, **kwargs: Any) -> None:
        for key, value in kwargs.items():
            if hasattr(self.settings.reports, key):
                if key == "default_range_days":
                    value = max(int(value), 0)
                setattr(self.settings.reports, key, value)

    def _resolve(self, value: str) -> Path:
        candidate = Path(value)
        if not candidate.is_absolute():
            candidate = self.config_path.parent / candidate
        return candidate

    def resolve_database_path(self) -> Path:
        value = self.settings.database.path.strip() or DatabaseInfo().path
        return self._resolve(value)

    def resolve_backup_dir(self) -> Path:
        value = self.settings.database.backup_directory.strip()
        if not value:
            return self.resolve_database_path().parent
        return self._resolve(value)

    def resolve_output_dir(self) -> Path:
        value = self.settings.reports.output_directory.strip() or ReportOptions().output_directory
        out_dir = self._resolve(value).resolve()
        out_dir.mkdir(parents=True, exist_ok=True)
        return out_dir

    def resolve_logo_path(self) -> Optional[Path]:
        logo_value = self.settings.clinic.logo_path.strip()
        if not logo_value:
            return None
        candidate = self._resolve(logo_value)
        if candidate.exists():
            return candidate
        return None

    def resolve_log_file(self) -> Optional[Path]:
        value = self.settings.logging.file.strip()
        if not value:
            return None
        return self._resolve(value)
