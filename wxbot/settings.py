#!/usr/bin/env python3
"""
Runtime settings for the Weather Bot
Collects config.ini values and environment overrides into immutable objects
that are handed to the gateway, the location store and the Discord client.
"""

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

# OpenWeatherMap endpoints
DEFAULT_WEATHER_API_URL = 'https://api.openweathermap.org/data/2.5/weather'
DEFAULT_FORECAST_API_URL = 'https://api.openweathermap.org/data/2.5/forecast'
DEFAULT_AIR_POLLUTION_API_URL = 'https://api.openweathermap.org/data/2.5/air_pollution'
DEFAULT_GEOCODING_API_URL = 'https://api.openweathermap.org/geo/1.0/direct'
DEFAULT_ICON_URL = 'https://openweathermap.org/img/wn/'
DEFAULT_MAP_URL = 'https://openweathermap.org/weathermap'

DEFAULT_LOCATIONS_FILE = 'data/locations.json'
DEFAULT_REQUEST_TIMEOUT = 10.0

# Environment variables that take precedence over config.ini
ENV_DISCORD_TOKEN = 'DISCORD_TOKEN'
ENV_API_KEY = 'OPENWEATHER_API_KEY'
ENV_CLIENT_ID = 'CLIENT_ID'
ENV_GUILD_ID = 'GUILD_ID'


@dataclass(frozen=True)
class WeatherSettings:
    """Provider endpoints, credentials and storage location.

    Created once at startup and never mutated afterwards.
    """
    api_key: str
    locations_file: Path
    weather_api_url: str = DEFAULT_WEATHER_API_URL
    forecast_api_url: str = DEFAULT_FORECAST_API_URL
    air_pollution_api_url: str = DEFAULT_AIR_POLLUTION_API_URL
    geocoding_api_url: str = DEFAULT_GEOCODING_API_URL
    icon_url: str = DEFAULT_ICON_URL
    map_url: str = DEFAULT_MAP_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


@dataclass(frozen=True)
class DiscordSettings:
    """Discord credentials and optional registration scope."""
    token: str
    client_id: Optional[int] = None
    guild_id: Optional[int] = None


def resolve_path(file_path: Union[str, Path], base_dir: Union[str, Path]) -> Path:
    """Resolve a path relative to base_dir (absolute paths are used as-is)."""
    p = Path(file_path)
    if p.is_absolute():
        return p
    return Path(base_dir).resolve() / p


def parse_snowflake(value: Optional[str]) -> Optional[int]:
    """Parse a Discord id from config/env text, returning None when unset or invalid."""
    if value is None:
        return None
    value = value.strip().strip('"\'')
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def strip_optional_quotes(s: str) -> str:
    """Strip one layer of surrounding double or single quotes if present.

    Allows credentials to be pasted as "abc123" without the quotes becoming
    part of the value. Unquoted values are returned unchanged.
    """
    if not isinstance(s, str):
        return s
    s = s.strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in '"\'':
        return s[1:-1]
    return s


def credential(config: configparser.ConfigParser, env_name: str,
               section: str, key: str) -> str:
    """Environment value if set, otherwise the config value with optional quotes removed."""
    env_value = strip_optional_quotes(os.environ.get(env_name, ''))
    if env_value:
        return env_value
    return strip_optional_quotes(config.get(section, key, fallback=''))


def load_weather_settings(config: configparser.ConfigParser, bot_root: Union[str, Path]) -> WeatherSettings:
    """Build WeatherSettings from the [Weather] and [Bot] sections.

    Args:
        config: Parsed configuration.
        bot_root: Directory relative paths are resolved against.

    Returns:
        WeatherSettings: The immutable provider/storage settings.
    """
    locations_file = config.get('Bot', 'locations_file', fallback=DEFAULT_LOCATIONS_FILE).strip()
    return WeatherSettings(
        api_key=credential(config, ENV_API_KEY, 'Weather', 'api_key'),
        locations_file=resolve_path(locations_file or DEFAULT_LOCATIONS_FILE, bot_root),
        weather_api_url=config.get('Weather', 'weather_api_url', fallback=DEFAULT_WEATHER_API_URL),
        forecast_api_url=config.get('Weather', 'forecast_api_url', fallback=DEFAULT_FORECAST_API_URL),
        air_pollution_api_url=config.get('Weather', 'air_pollution_api_url', fallback=DEFAULT_AIR_POLLUTION_API_URL),
        geocoding_api_url=config.get('Weather', 'geocoding_api_url', fallback=DEFAULT_GEOCODING_API_URL),
        icon_url=config.get('Weather', 'icon_url', fallback=DEFAULT_ICON_URL),
        map_url=config.get('Weather', 'map_url', fallback=DEFAULT_MAP_URL),
        request_timeout=config.getfloat('Weather', 'request_timeout', fallback=DEFAULT_REQUEST_TIMEOUT),
    )


def load_discord_settings(config: configparser.ConfigParser) -> DiscordSettings:
    """Build DiscordSettings from the [Discord] section and environment."""
    return DiscordSettings(
        token=credential(config, ENV_DISCORD_TOKEN, 'Discord', 'token'),
        client_id=parse_snowflake(credential(config, ENV_CLIENT_ID, 'Discord', 'client_id')),
        guild_id=parse_snowflake(credential(config, ENV_GUILD_ID, 'Discord', 'guild_id')),
    )
