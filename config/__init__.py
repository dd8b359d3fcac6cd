"""Configuration module for loading and managing application settings"""
import logging
from typing import Dict, Any, Optional

from .lib.load_settings_conf import load_settings_conf, SettingsError

__all__ = ['get_settings_conf', 'load_settings_conf', 'configure_logging', 'SettingsError']

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_settings_conf: Optional[Dict[str, Dict[str, Any]]] = None

def get_settings_conf(settings_path: Optional[str] = None) -> Dict[str, Dict[str, Any]]:
    """Return the loaded settings, loading them on first use.

    Args:
        settings_path: Optional path to settings.conf. Passing a path always
            reloads the settings.

    Raises:
        SettingsError: If the settings cannot be loaded
    """
    global _settings_conf

    if _settings_conf is None or settings_path is not None:
        try:
            _settings_conf = load_settings_conf(settings_path)
        except SettingsError as e:
            # Re-raise the error but provide more context
            raise SettingsError(
                f"Configuration Error\n"
                "=================\n\n"
                f"{str(e)}\n\n"
                "Please ensure settings.conf is properly configured.\n"
                "See settings.conf.example for configuration requirements."
            )
    return _settings_conf

def configure_logging(level_name: str) -> None:
    """Configure root logging from the logger.level setting.

    Unknown level names fall back to INFO.
    """
    level = logging.getLevelName(str(level_name).upper())
    invalid = not isinstance(level, int)

    logging.basicConfig(
        level=logging.INFO if invalid else level,
        format=LOG_FORMAT
    )
    if invalid:
        logger.warning(f"Invalid log level {level_name}, using info level")
