"""Settings configuration loader module.

This module handles loading and parsing of the settings.conf file which holds
the logger, HTTP server, database and JWT settings of the marketplace.

The settings file uses INI format with one section per concern. Every key can
be overridden from the environment as APP_<SECTION>_<KEY>, for example
APP_DB_PASSWORD or APP_JWT_SECRET_KEY.

Required settings:
    jwt.secret_key: Secret used to sign access and refresh tokens

Example settings.conf:
    [logger]
    level = info

    [server]
    host = 0.0.0.0
    port = 8080

    [db]
    user = marketplace
    password = secret
    name = marketplace
    host = localhost
    port = 5432
    sslmode = disable

    [jwt]
    secret_key = change-me
    access_token_minutes = 15
    refresh_token_days = 30

Raises:
    SettingsError: If the settings file is missing, invalid, or missing required settings
"""
from configparser import ConfigParser, Error as ConfigParserError
from pathlib import Path
from typing import Dict, Any, List, Mapping, Optional
import os

ENV_PREFIX = 'APP'
DEFAULT_SETTINGS_FILE = 'settings.conf'

class ConfigValidationError:
    """Helper class to format configuration validation errors"""
    def __init__(self):
        self.missing: List[str] = []
        self.invalid_values: List[str] = []
        self.missing_sections: List[str] = []

    def has_errors(self) -> bool:
        """Check if any errors exist"""
        return bool(self.missing or self.invalid_values or self.missing_sections)

    def format_message(self) -> str:
        """Format error message in a clean, readable way"""
        messages = []

        if self.missing_sections:
            messages.append("Missing required sections:")
            messages.extend(f"  - {item}" for item in self.missing_sections)

        if self.missing:
            if messages:
                messages.append("")
            messages.append("Missing required settings:")
            messages.extend(f"  - {item}" for item in self.missing)

        if self.invalid_values:
            if messages:
                messages.append("")
            messages.append("Invalid values:")
            messages.extend(f"  - {item}" for item in self.invalid_values)

        return "\n".join(messages)

class SettingsError(Exception):
    """Raised when there are issues loading or parsing the settings configuration."""
    pass

# Default settings
DEFAULTS: Dict[str, Dict[str, str]] = {
    'logger': {
        'level': 'info',
    },
    'server': {
        'host': '0.0.0.0',
        'port': '8080',
    },
    'db': {
        'user': 'postgres',
        'password': '',
        'name': 'marketplace',
        'host': 'localhost',
        'port': '5432',
        'sslmode': 'disable',
        'min_pool_size': '5',
        'max_pool_size': '20',
    },
    'jwt': {
        'secret_key': '',
        'access_token_minutes': '15',
        'refresh_token_days': '30',
    },
}

REQUIRED_SETTINGS = [('jwt', 'secret_key')]

INTEGER_SETTINGS = [
    ('server', 'port'),
    ('db', 'port'),
    ('db', 'min_pool_size'),
    ('db', 'max_pool_size'),
    ('jwt', 'access_token_minutes'),
    ('jwt', 'refresh_token_days'),
]

def _apply_env_overrides(settings: Dict[str, Dict[str, Any]], environ: Mapping[str, str]) -> None:
    """Override settings with APP_<SECTION>_<KEY> environment variables."""
    for section, values in settings.items():
        for key in values:
            env_name = f"{ENV_PREFIX}_{section}_{key}".upper()
            if env_name in environ:
                values[key] = environ[env_name]

def load_settings_conf(
    settings_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None
) -> Dict[str, Dict[str, Any]]:
    """Load and parse settings.conf with strict validation

    Args:
        settings_path: Path to the settings file. When omitted, APP_CONFIG or
            ./settings.conf is used and a missing file falls back to defaults.
        environ: Environment used for overrides, os.environ by default

    Returns:
        Nested dictionary of settings keyed by section

    Raises:
        SettingsError: If file not found, parsing fails, or validation fails
    """
    environ = os.environ if environ is None else environ
    explicit = settings_path is not None or 'APP_CONFIG' in environ
    config_path = Path(settings_path or environ.get('APP_CONFIG', DEFAULT_SETTINGS_FILE))

    if explicit and not config_path.exists():
        raise SettingsError(
            f"Settings file not found at: {config_path}\n"
            "Please create settings.conf based on settings.conf.example"
        )

    settings = {section: dict(values) for section, values in DEFAULTS.items()}

    if config_path.exists():
        parser = ConfigParser()
        try:
            parser.read(config_path)
        except ConfigParserError as e:
            raise SettingsError(f"Error parsing {config_path}: {str(e)}")

        for section in parser.sections():
            if section not in settings:
                continue
            settings[section].update(dict(parser[section]))

    _apply_env_overrides(settings, environ)
    return validate_settings(settings)

def validate_settings(settings: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Validate loaded settings.

    Args:
        settings: Dictionary of settings to validate

    Returns:
        Validated settings with numeric values converted

    Raises:
        SettingsError: If validation fails
    """
    errors = ConfigValidationError()

    for section in DEFAULTS:
        if section not in settings:
            errors.missing_sections.append(f"[{section}]")

    if errors.has_errors():
        raise SettingsError(
            "Settings Configuration Validation Failed\n\n" +
            errors.format_message()
        )

    for section, key in REQUIRED_SETTINGS:
        if not settings[section].get(key):
            errors.missing.append(f"{section}.{key}")

    for section, key in INTEGER_SETTINGS:
        try:
            value = int(settings[section][key])
        except (KeyError, TypeError, ValueError):
            errors.invalid_values.append(
                f"{section}.{key}: expected an integer, got {settings[section].get(key)!r}"
            )
            continue
        if value < 0:
            errors.invalid_values.append(f"{section}.{key}: must not be negative")
            continue
        settings[section][key] = value

    if not errors.has_errors():
        if settings['db']['min_pool_size'] > settings['db']['max_pool_size']:
            errors.invalid_values.append("db.min_pool_size: must not exceed db.max_pool_size")
        if settings['jwt']['access_token_minutes'] < 1:
            errors.invalid_values.append("jwt.access_token_minutes: must be at least 1")
        if settings['jwt']['refresh_token_days'] < 1:
            errors.invalid_values.append("jwt.refresh_token_days: must be at least 1")

    if errors.has_errors():
        raise SettingsError(
            "Settings Configuration Validation Failed\n\n" +
            errors.format_message()
        )

    return settings
