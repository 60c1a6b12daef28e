"""Configuration utilities for the Cash Flow Tracker.

Settings come from built-in defaults, optionally overlaid by a JSON file and
then by ``CASHFLOW_*`` environment variables.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from .exceptions import ConfigurationError

PACKAGE_ROOT = Path(__file__).resolve().parent
PROJECT_ROOT = PACKAGE_ROOT.parent

DEFAULT_DATABASE_URI = f"sqlite:///{PROJECT_ROOT / 'cashflow_tracker.db'}"
DEFAULT_SECRET_KEY = "dev-cashflow-secret"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Environment variable -> AppConfig field
ENV_VARS: Dict[str, str] = {
    "CASHFLOW_SECRET_KEY": "secret_key",
    "CASHFLOW_DATABASE_URI": "database_uri",
    "CASHFLOW_LOG_LEVEL": "log_level",
}


@dataclass
class AppConfig:
    secret_key: str = DEFAULT_SECRET_KEY
    database_uri: str = DEFAULT_DATABASE_URI
    log_level: str = "INFO"

    @staticmethod
    def load(
        config_path: Optional[str | Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "AppConfig":
        """Load config from JSON if provided, then apply environment overrides.

        JSON format:
        {
          "secret_key": "...",
          "database_uri": "sqlite:////var/lib/cashflow/cashflow.db",
          "log_level": "INFO"
        }
        """

        values = asdict(AppConfig())
        environ = os.environ if environ is None else environ

        if config_path:
            p = Path(config_path)
            if p.exists():
                with p.open("r", encoding="utf-8") as f:
                    try:
                        raw = json.load(f)
                    except json.JSONDecodeError as exc:
                        raise ConfigurationError(
                            f"{p.name}: invalid JSON", details={"path": str(p)}
                        ) from exc
                if isinstance(raw, dict):
                    for key in values:
                        if raw.get(key) not in (None, ""):
                            values[key] = str(raw[key])

        for env_name, field_name in ENV_VARS.items():
            if environ.get(env_name):
                values[field_name] = environ[env_name]

        values["log_level"] = values["log_level"].upper()
        if values["log_level"] not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Log level must be one of: {', '.join(VALID_LOG_LEVELS)}",
                details={"log_level": values["log_level"]},
            )
        return AppConfig(**values)

    def flask_settings(self) -> Dict[str, object]:
        return {
            "SECRET_KEY": self.secret_key,
            "SQLALCHEMY_DATABASE_URI": self.database_uri,
            "LOG_LEVEL": self.log_level,
        }


def resolve_config_path(config_path: Optional[str]) -> Optional[Path]:
    if not config_path:
        return None
    path = Path(config_path)
    if path.is_absolute():
        return path
    return PROJECT_ROOT / path
