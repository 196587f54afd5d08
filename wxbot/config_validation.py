#!/usr/bin/env python3
"""
Configuration validation for Weather Bot config.ini.

Checks required sections, credentials (config or environment), typed values
and writable paths, and flags non-standard section names (e.g. Admin instead
of Admin_ACL). Can be run standalone via validate_config.py or at bot startup
with --validate-config.
"""

import configparser
import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytz

from .settings import (
    ENV_API_KEY,
    ENV_CLIENT_ID,
    ENV_DISCORD_TOKEN,
    ENV_GUILD_ID,
    credential,
    parse_snowflake,
    resolve_path,
)

# Severity levels for validation results
SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITY_INFO = "info"

# Canonical non-command section names (as used in config.ini.example and code)
CANONICAL_NON_COMMAND_SECTIONS = frozenset({
    "Bot",
    "Discord",
    "Weather",
    "Logging",
    "Admin_ACL",
})

# Sections the bot reads credentials and storage settings from
REQUIRED_SECTIONS = frozenset({
    "Bot",       # command_prefix, locations_file, timezone
    "Discord",   # token, client_id, guild_id (env may override the values)
    "Weather",   # api_key, request_timeout
})

# Optional sections: when absent, use defaults or treat as empty/disabled
ADMIN_ACL_SECTION = "Admin_ACL"    # admin commands denied to everyone
LOGGING_SECTION = "Logging"        # console only, INFO

# Non-standard section name -> suggested canonical name (exact match)
SECTION_TYPO_MAP = {
    "Admin": "Admin_ACL",
    "AdminACL": "Admin_ACL",
    "OpenWeatherMap": "Weather",
    "OpenWeather": "Weather",
    "Log": "Logging",
}

KNOWN_COMMANDS = (
    "weather", "forecast", "addlocation", "removelocation", "listlocations", "help", "debugweather",
)


def _get_command_prefix_to_section() -> Dict[str, str]:
    """Map command name (lowercase) to its canonical section, e.g. "forecast" -> "Forecast_Command"."""
    return {name: f"{name.title()}_Command" for name in KNOWN_COMMANDS}


def _suggest_similar_command(section: str, prefix_to_section: Dict[str, str]) -> Optional[str]:
    """If section looks like a command name (e.g. Forecast), suggest the canonical section."""
    return prefix_to_section.get(section.strip().lower())


def _check_path_writable(
    file_path: str, base_dir: Path, description: str
) -> Optional[str]:
    """Check if a file path can be written. Returns warning message if not."""
    if not file_path or not file_path.strip():
        return None
    try:
        resolved = resolve_path(file_path.strip(), base_dir)
    except (OSError, RuntimeError):
        return f"{description}: cannot resolve path '{file_path}'"
    parent = resolved.parent
    # Find first existing ancestor to check writability
    check_dir = parent
    while not check_dir.exists():
        check_dir = check_dir.parent
        if check_dir == check_dir.parent:  # reached root
            return f"{description} '{resolved}': parent directory does not exist"
    if not os.access(str(check_dir), os.W_OK):
        return f"{description} '{resolved}': directory {check_dir} is not writable"
    # If file exists, verify it's writable
    if resolved.exists() and not os.access(str(resolved), os.W_OK):
        return f"{description} '{resolved}': file exists but is not writable"
    return None


def _check_credentials(config: configparser.ConfigParser) -> List[Tuple[str, str]]:
    results: List[Tuple[str, str]] = []

    if not credential(config, ENV_DISCORD_TOKEN, "Discord", "token"):
        results.append((
            SEVERITY_ERROR,
            f"No Discord bot token: set {ENV_DISCORD_TOKEN} or [Discord] token; bot will not start without it.",
        ))

    if not credential(config, ENV_API_KEY, "Weather", "api_key"):
        results.append((
            SEVERITY_WARNING,
            f"No OpenWeatherMap API key: set {ENV_API_KEY} or [Weather] api_key; all weather lookups will fail.",
        ))

    for env_name, key in ((ENV_CLIENT_ID, "client_id"), (ENV_GUILD_ID, "guild_id")):
        raw = credential(config, env_name, "Discord", key)
        if raw and parse_snowflake(raw) is None:
            results.append((SEVERITY_WARNING, f"[Discord] {key} '{raw}' is not a numeric Discord id; ignored."))

    return results


def _check_values(config: configparser.ConfigParser) -> List[Tuple[str, str]]:
    results: List[Tuple[str, str]] = []

    if config.has_section("Bot"):
        prefix = config.get("Bot", "command_prefix", fallback="!")
        if not prefix.strip():
            results.append((SEVERITY_WARNING, "[Bot] command_prefix is empty; using '!'."))
        tz_name = config.get("Bot", "timezone", fallback="").strip()
        if tz_name:
            try:
                pytz.timezone(tz_name)
            except pytz.exceptions.UnknownTimeZoneError:
                results.append((SEVERITY_WARNING, f"[Bot] timezone '{tz_name}' is unknown; using UTC."))

    if config.has_option("Weather", "request_timeout"):
        try:
            if config.getfloat("Weather", "request_timeout") <= 0:
                results.append((SEVERITY_WARNING, "[Weather] request_timeout must be greater than 0."))
        except ValueError:
            results.append((SEVERITY_ERROR, "[Weather] request_timeout is not a number."))

    for section in config.sections():
        if not section.endswith("_Command"):
            continue
        for key in ("cooldown_seconds", "hourly_entries"):
            if config.has_option(section, key):
                try:
                    config.getint(section, key)
                except ValueError:
                    results.append((SEVERITY_WARNING, f"[{section}] {key} is not an integer; using default."))
        if config.has_option(section, "enabled"):
            try:
                config.getboolean(section, "enabled")
            except ValueError:
                results.append((SEVERITY_WARNING, f"[{section}] enabled is not a boolean; using default."))

    return results


def validate_config(config_path: str) -> List[Tuple[str, str]]:
    """
    Validate a config file. Returns a list of (severity, message).

    Args:
        config_path: Path to config.ini (or other config file).

    Returns:
        List of (severity, message). severity is one of SEVERITY_*.
    """
    path = Path(config_path)
    if not path.exists():
        return [(SEVERITY_ERROR, f"Config file not found: {config_path}")]

    config = configparser.ConfigParser()
    try:
        config.read(config_path, encoding="utf-8")
    except configparser.Error as e:
        return [(SEVERITY_ERROR, f"Failed to parse config: {e}")]

    results: List[Tuple[str, str]] = []

    # Check required sections
    sections_present = frozenset(s.strip() for s in config.sections() if s.strip())
    missing_required = REQUIRED_SECTIONS - sections_present
    for section in sorted(missing_required):
        results.append((
            SEVERITY_ERROR,
            f"Missing required section [{section}].",
        ))

    # Note when optional sections are absent
    if ADMIN_ACL_SECTION not in sections_present:
        results.append((
            SEVERITY_INFO,
            f"Section [{ADMIN_ACL_SECTION}] absent; admin commands (debugweather) denied to everyone.",
        ))
    if LOGGING_SECTION not in sections_present:
        results.append((
            SEVERITY_INFO,
            f"Section [{LOGGING_SECTION}] absent; logging to console only at INFO.",
        ))

    results.extend(_check_credentials(config))
    results.extend(_check_values(config))

    # Check writable paths (locations file, log file)
    bot_root = Path(config_path).resolve().parent
    if config.has_section("Bot"):
        locations_file = config.get("Bot", "locations_file", fallback="").strip()
        if locations_file:
            msg = _check_path_writable(locations_file, bot_root, "Locations file path")
            if msg:
                results.append((SEVERITY_WARNING, msg))
    if config.has_section("Logging"):
        log_file = config.get("Logging", "log_file", fallback="").strip()
        if log_file:
            msg = _check_path_writable(log_file, bot_root, "Log file path")
            if msg:
                results.append((SEVERITY_WARNING, msg))

    prefix_to_section: Optional[Dict[str, str]] = None

    for section in config.sections():
        section_stripped = section.strip()
        if not section_stripped:
            continue

        # Valid: canonical non-command section
        if section_stripped in CANONICAL_NON_COMMAND_SECTIONS:
            continue
        # Valid: command section (ends with _Command)
        if section_stripped.endswith("_Command"):
            continue

        # Check typo map for known non-standard names
        if section_stripped in SECTION_TYPO_MAP:
            suggestion = SECTION_TYPO_MAP[section_stripped]
            results.append((
                SEVERITY_WARNING,
                f"Non-standard section [{section_stripped}]; did you mean [{suggestion}]?",
            ))
        else:
            # Check if section looks like a command name (e.g. [Forecast] -> [Forecast_Command])
            if prefix_to_section is None:
                prefix_to_section = _get_command_prefix_to_section()
            similar = _suggest_similar_command(section_stripped, prefix_to_section)
            if similar:
                msg = f"Unknown section [{section_stripped}]; did you mean [{similar}]?"
            else:
                msg = f"Unknown section [{section_stripped}] (not in canonical list and not a *_Command section)."
            results.append((SEVERITY_INFO, msg))

    return results
