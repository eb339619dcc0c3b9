"""Settings read from the environment (and a ``.env`` file, if present)."""

import logging
import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Europe/Stockholm"


@dataclass
class Settings:
    base_url: str
    device_id: str
    school: str
    username: str
    password: str
    timezone: ZoneInfo
    timeout: float = 30


def get_timezone() -> ZoneInfo:
    tz_name = os.getenv("SCHOOLSOFT_TIMEZONE", DEFAULT_TIMEZONE)
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Invalid SCHOOLSOFT_TIMEZONE %s, falling back to %s", tz_name, DEFAULT_TIMEZONE)
        return ZoneInfo(DEFAULT_TIMEZONE)


def get_timeout() -> float:
    raw = os.getenv("SCHOOLSOFT_TIMEOUT", "30")
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid SCHOOLSOFT_TIMEOUT %s, using 30 seconds", raw)
        return 30.0


def get_settings(env_file: str = ".env") -> Settings:
    """Build settings from ``SCHOOLSOFT_*`` environment variables.

    Values already present in the environment win over the ``.env`` file.
    """
    load_dotenv(env_file)
    return Settings(
        base_url=os.getenv("SCHOOLSOFT_BASE_URL", "https://sms.schoolsoft.se/"),
        device_id=os.getenv("SCHOOLSOFT_DEVICE_ID", ""),
        school=os.getenv("SCHOOLSOFT_SCHOOL", ""),
        username=os.getenv("SCHOOLSOFT_USERNAME", ""),
        password=os.getenv("SCHOOLSOFT_PASSWORD", ""),
        timezone=get_timezone(),
        timeout=get_timeout(),
    )
