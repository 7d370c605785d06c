# src/config/settings.py

"""Central configuration for the fuel_monitor service."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class ConfigurationError(Exception):
    """Raised when required settings are missing at startup."""


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean flag such as ``NOTIFY_ONLY_CHANGES=true``."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    """Read a float, falling back to *default* on absent/garbled values."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class Settings:
    """Central configuration for the fuel_monitor service."""

    # --- Source ---
    SOURCE_URL: str = os.getenv(
        "SCRAPER_URL",
        "http://ec2-3-22-240-207.us-east-2.compute.amazonaws.com"
        "/guiasaldos/main/donde/134",
    )

    # --- Scraping ---
    REQUEST_DELAY: float = 2.0          # Seconds between retries
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    MAX_RETRIES: int = 3                # Retry count on transient failures

    # --- Resilience ---
    CIRCUIT_BREAKER_THRESHOLD: int = 3  # Consecutive failures to trip
    CIRCUIT_BREAKER_COOLDOWN: float = 300.0
    MAX_DELAY_MULTIPLIER: int = 8       # Cap for adaptive backoff
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/webp,*/*;q=0.8"
        ),
        "Accept-Language": "es-ES,es;q=0.9,en;q=0.8",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Extraction ---
    CONTEXT_WINDOW: int = 3000          # Chars either side of a fragment
    DEFAULT_WAIT_MINUTES: float = 2.0
    FUEL_KIND: str = "G"
    FUEL_CATEGORY: str = "GASOLINA ESPECIAL"
    SERVICE_DURATION_MINUTES: float = 12.0
    AVERAGE_LOAD_LITERS: float = 40.0

    # --- Notification ---
    TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")
    TELEGRAM_CHAT_ID: str = os.getenv("TELEGRAM_CHAT_ID", "")
    TELEGRAM_API_URL: str = "https://api.telegram.org"
    NOTIFY_TIMEOUT: int = 10
    NOTIFY_ONLY_CHANGES: bool = _env_bool("NOTIFY_ONLY_CHANGES", False)
    MIN_VOLUME_THRESHOLD: float = _env_float("MIN_VOLUME_THRESHOLD", 1000.0)
    SIGNIFICANT_CHANGE_PERCENT: float = _env_float(
        "SIGNIFICANT_CHANGE_PERCENT", 20.0
    )
    NOTIFY_ON_EMPTY: bool = _env_bool("NOTIFY_ON_EMPTY", False)
    ALERT_ON_ERRORS: bool = _env_bool("ALERT_ON_ERRORS", False)
    HIGH_VOLUME_MARK: float = 5000.0    # Green marker above this

    # --- Scheduling ---
    POLL_INTERVAL: float = _env_float("POLL_INTERVAL", 3600.0)
    RUN_ON_START: bool = _env_bool("RUN_ON_START", True)
    FETCH_TIMEOUT: float = 120.0        # Whole fetch, retries included
    TIMEZONE: str = os.getenv("TIMEZONE", "America/La_Paz")

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    STATIONS_PATH: Path = Path(
        os.getenv(
            "STATIONS_PATH",
            str(BASE_DIR / "src" / "config" / "stations.json"),
        )
    )
    OUTPUT_DIR: Path = BASE_DIR / "output"
    LOGS_DIR: Path = BASE_DIR / "logs"

    @classmethod
    def require_notifier(cls) -> None:
        """Fail fast when the Telegram credentials are not configured."""
        missing = [
            name
            for name in ("TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID")
            if not getattr(cls, name)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required setting(s): {', '.join(missing)}"
            )
