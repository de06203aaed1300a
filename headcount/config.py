"""Application configuration loaded from environment variables."""

import os
from pathlib import Path
from pydantic_settings import BaseSettings

from headcount.domain.catalog import INDUSTRY_POLICY_ORDER, TOWNS

# Check if .env file exists and is readable
_env_file = None
try:
    env_path = Path(".env")
    if env_path.exists() and os.access(env_path, os.R_OK):
        _env_file = ".env"
except (OSError, PermissionError):
    # If we can't access .env, continue without it
    pass


class Settings(BaseSettings):
    """All configuration for the headcount monitoring service.

    Values are loaded from environment variables or a .env file.
    """

    # Application
    app_name: str = "headcount-monitor"
    debug: bool = False
    json_logs: bool = False
    log_level: str = "INFO"
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Database
    database_url: str = "sqlite:///./data/headcount.db"

    # Review thresholds
    anomaly_threshold: float = 0.30  # |Δ| / previous → warning badge

    # A month whose filing completion is below this share is skipped when
    # choosing the reference month for dashboard figures.
    filing_completion_threshold: float = 0.5

    # Towns with fewer employees than this are folded into "其他" in
    # the filter dropdowns.
    minor_town_employee_floor: int = 50

    # Industries whose total shortage does not exceed this are left out of
    # the skill-gap view as noise.
    skill_gap_shortage_floor: int = 50

    # Fixed enumerations a company must draw from
    towns: list[str] = list(TOWNS)
    industries: list[str] = list(INDUSTRY_POLICY_ORDER)

    model_config = {
        "env_file": _env_file,
        "env_file_encoding": "utf-8",
        "env_file_ignore_empty": True,
    }
