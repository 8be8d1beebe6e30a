"""Runtime package: settings loading and logging setup."""

from .logging import configure_logging
from .settings_loader import load_settings, parse_amount

__all__ = ["configure_logging", "load_settings", "parse_amount"]
