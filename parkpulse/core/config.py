"""
Runtime configuration for the parking availability simulation.
All values come from environment variables (a local .env file is honoured).
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

# Debug flag (enables /docs and verbose logging)
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Availability simulation (periodic perturbation of availability counts)
SIMULATION_ENABLED = os.getenv("SIMULATION_ENABLED", "true").lower() == "true"
SIMULATION_INTERVAL_SEC = int(os.getenv("SIMULATION_INTERVAL_SEC", "30"))
PERTURBATION_MAX_STEP = int(os.getenv("PERTURBATION_MAX_STEP", "5"))

# Derived value thresholds
STALENESS_THRESHOLD_SEC = int(os.getenv("STALENESS_THRESHOLD_SEC", "900"))  # 15 minutes
REPORT_FULL_RATIO = float(os.getenv("REPORT_FULL_RATIO", "0.05"))

# How the HTTP boundary answers reports for unknown place ids
REPORT_UNKNOWN_POLICY = os.getenv("REPORT_UNKNOWN_POLICY", "lenient")  # lenient|strict

# Seed catalog (defaults to the JSON file bundled with the package)
SEED_CATALOG_PATH = os.getenv("SEED_CATALOG_PATH")
DEFAULT_CATALOG_PATH = Path(__file__).parent / "seed_catalog.json"

# Location provider defaults (downtown Pasadena)
DEFAULT_LATITUDE = float(os.getenv("DEFAULT_LATITUDE", "34.1478"))
DEFAULT_LONGITUDE = float(os.getenv("DEFAULT_LONGITUDE", "-118.1445"))
FORCE_DEFAULT_LOCATION = os.getenv("FORCE_DEFAULT_LOCATION", "true").lower() == "true"

# Version string
VERSION = "1.0.0"


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def is_simulation_enabled():
    """Check if the availability simulation should run."""
    return SIMULATION_ENABLED


def get_simulation_interval():
    """Get the perturbation interval in seconds."""
    return SIMULATION_INTERVAL_SEC


def get_perturbation_max_step():
    """Get the largest absolute change applied by one perturbation."""
    return PERTURBATION_MAX_STEP


def get_staleness_threshold():
    """Get the age in seconds after which availability data counts as stale."""
    return STALENESS_THRESHOLD_SEC


def get_report_full_ratio():
    """Get the fraction of capacity left available by a 'full' report."""
    return REPORT_FULL_RATIO


def get_report_unknown_policy():
    """Get the unknown place id policy (lenient|strict)."""
    return REPORT_UNKNOWN_POLICY


def get_catalog_path() -> Path:
    """Return the configured seed catalog path, or the bundled one."""
    if SEED_CATALOG_PATH:
        return Path(SEED_CATALOG_PATH)
    return DEFAULT_CATALOG_PATH


def get_default_position():
    """Return the default (latitude, longitude) pair for the location provider."""
    return DEFAULT_LATITUDE, DEFAULT_LONGITUDE


def validate_simulation_config(interval_sec: Optional[int] = None) -> List[str]:
    """Validate simulation configuration and return any issues."""
    issues = []
    interval = SIMULATION_INTERVAL_SEC if interval_sec is None else interval_sec

    if interval < 1:
        issues.append("SIMULATION_INTERVAL_SEC must be >= 1")

    if PERTURBATION_MAX_STEP < 0:
        issues.append("PERTURBATION_MAX_STEP must be >= 0")

    if not 0.0 <= REPORT_FULL_RATIO <= 1.0:
        issues.append(f"REPORT_FULL_RATIO must be within [0, 1]: {REPORT_FULL_RATIO}")

    if STALENESS_THRESHOLD_SEC < 0:
        issues.append("STALENESS_THRESHOLD_SEC must be >= 0")

    if REPORT_UNKNOWN_POLICY not in ["lenient", "strict"]:
        issues.append(f"Invalid REPORT_UNKNOWN_POLICY: {REPORT_UNKNOWN_POLICY}")

    return issues
