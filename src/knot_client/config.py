"""Environment-driven settings. Explicit arguments always win over these."""

import os

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_LOCALE = "en"
DEFAULT_LOG_LEVEL = "WARNING"


def get_base_url() -> str:
    return os.getenv("KNOT_BASE_URL") or DEFAULT_BASE_URL


def get_locale() -> str | None:
    return os.getenv("KNOT_LOCALE") or None


def get_log_level() -> str:
    return (os.getenv("KNOT_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
