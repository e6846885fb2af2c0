"""Application configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_LOCALE = "ko"
DEFAULT_LOG_LEVEL = "INFO"


def _get_optional_float_env(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


def _get_optional_str_env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


@dataclass(frozen=True)
class FaultSettings:
    """Runtime settings for fault translation and message resolution."""

    default_locale: str
    messages_file: str | None
    lookup_timeout_seconds: float | None
    log_level: str

    def safe_for_logging(self) -> dict[str, str | float | None]:
        """Return settings in a log-friendly shape."""
        return {
            "default_locale": self.default_locale,
            "messages_file": self.messages_file,
            "lookup_timeout_seconds": self.lookup_timeout_seconds,
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def get_fault_settings() -> FaultSettings:
    """Load fault settings from the environment."""
    return FaultSettings(
        default_locale=os.getenv("API_FAULTS_DEFAULT_LOCALE", DEFAULT_LOCALE),
        messages_file=_get_optional_str_env("API_FAULTS_MESSAGES_FILE"),
        lookup_timeout_seconds=_get_optional_float_env("API_FAULTS_LOOKUP_TIMEOUT_SECONDS"),
        log_level=os.getenv("API_FAULTS_LOG_LEVEL", DEFAULT_LOG_LEVEL),
    )
