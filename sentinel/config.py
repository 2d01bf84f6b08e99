"""Configuration management for Inactivity Sentinel"""

import os
import re
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .models import InactivityConfig


_DURATION_PATTERN = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*([smh]?)\s*$', re.IGNORECASE)
_UNIT_SECONDS = {'': 1, 's': 1, 'm': 60, 'h': 3600}


def parse_duration(value: str) -> timedelta:
    """Parse duration like '90', '90s', '5m' or '1h'"""
    match = _DURATION_PATTERN.match(value or '')
    if not match:
        raise ValueError(f"Invalid duration: {value}. Expected seconds or a value like 30s, 5m, 1h")

    amount, unit = match.groups()
    return timedelta(seconds=float(amount) * _UNIT_SECONDS[unit.lower()])


class Config:
    """Application configuration loaded from .env and environment variables"""

    def __init__(self, env_file: Optional[Path] = None):
        # Load .env file from project root
        env_path = env_file or Path(__file__).parent.parent / '.env'
        load_dotenv(env_path)

        # Inactivity policy
        self.timeout = parse_duration(os.getenv('SENTINEL_TIMEOUT', '30m'))
        warning = os.getenv('SENTINEL_WARNING', '').strip()
        self.warning_threshold = parse_duration(warning) if warning else None
        self.activity_spacing = parse_duration(os.getenv('SENTINEL_ACTIVITY_SPACING', '1s'))

        # Behavior
        self.tracking_enabled = self._parse_bool(os.getenv('SENTINEL_TRACKING_ENABLED', 'true'))

        # Logging
        self.log_level = os.getenv('SENTINEL_LOG_LEVEL', 'WARNING').upper()
        log_path = os.getenv('SENTINEL_LOG_PATH', '').strip()
        self.log_path = Path(log_path).expanduser() if log_path else None

    def _parse_bool(self, value: str) -> bool:
        """Parse boolean string"""
        return value.lower() in ('true', '1', 'yes', 'on')

    def inactivity_config(self) -> InactivityConfig:
        """
        Build the inactivity policy

        Raises:
            InvalidConfigError: If the configured values are inconsistent
        """
        return InactivityConfig(
            timeout=self.timeout,
            warning_threshold=self.warning_threshold,
            min_activity_spacing=self.activity_spacing
        )


# Global config instance
config = Config()
