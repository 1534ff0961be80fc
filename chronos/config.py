"""Configuration management for the Living History Engine."""

import os
from pathlib import Path

from dotenv import load_dotenv


# Load environment variables from .env file
def _find_env_file() -> Path | None:
    """Find the .env file, searching up the directory tree."""
    current = Path(__file__).parent
    for _ in range(5):  # Search up to 5 levels
        env_path = current / ".env"
        if env_path.exists():
            return env_path
        current = current.parent
    return None


_env_file = _find_env_file()
if _env_file:
    load_dotenv(_env_file)


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except ValueError:
        return default


class Config:
    """Application configuration from environment variables."""

    # Single credential for every Gemini / Veo call. API_KEY is accepted for
    # deployments that only expose the generic name. Empty = every call fails
    # and degrades to its fallback.
    GOOGLE_API_KEY: str = os.getenv("GOOGLE_API_KEY", "") or os.getenv("API_KEY", "")

    # Model selection
    TEXT_MODEL: str = os.getenv("TEXT_MODEL", "gemini-2.5-flash")
    IMAGE_MODEL: str = os.getenv("IMAGE_MODEL", "gemini-2.5-flash-image")
    VIDEO_MODEL: str = os.getenv("VIDEO_MODEL", "veo-3.1-fast-generate-preview")

    # Video job polling (seconds)
    VIDEO_POLL_INTERVAL: float = _env_float("VIDEO_POLL_INTERVAL", 5.0)
    VIDEO_MAX_POLLS: int = _env_int("VIDEO_MAX_POLLS", 120)
    VIDEO_TIMEOUT: float = _env_float("VIDEO_TIMEOUT", 600.0)

    # Vitals bounds applied by the reducer
    HEALTH_MIN: int = _env_int("HEALTH_MIN", 0)
    HEALTH_MAX: int = _env_int("HEALTH_MAX", 100)

    # Generated video files live here, one folder per session
    MEDIA_DIR: Path = Path(os.getenv("MEDIA_DIR", str(Path(__file__).parent.parent / "data" / "media")))

    # Debug
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    @classmethod
    def validate(cls) -> list[str]:
        """Validate configuration, return list of issues."""
        issues = []

        if not cls.GOOGLE_API_KEY:
            issues.append(
                "No API key configured. Set GOOGLE_API_KEY (or API_KEY) in .env; "
                "every feature will fall back to static content."
            )
        if cls.HEALTH_MIN > cls.HEALTH_MAX:
            issues.append(f"HEALTH_MIN ({cls.HEALTH_MIN}) is above HEALTH_MAX ({cls.HEALTH_MAX})")
        if cls.VIDEO_POLL_INTERVAL <= 0:
            issues.append("VIDEO_POLL_INTERVAL must be positive")

        return issues

    @classmethod
    def is_debug(cls) -> bool:
        """Check if debug mode is enabled."""
        return cls.DEBUG
