#!/usr/bin/env python3
"""
Pytest fixtures for Weather Bot tests
"""

import configparser
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest

from wxbot.location_store import LocationStore
from wxbot.models import (
    AirQuality,
    CommandRequest,
    ForecastEntry,
    ForecastResponse,
    NormalizedWeather,
    SURFACE_PREFIX,
    WeatherCondition,
)
from wxbot.settings import WeatherSettings

# 2024-06-03 12:00:00 UTC, a Monday
BASE_TIME = 1717416000


class FakeResponder:
    """Responder double recording every reply."""

    def __init__(self, reply_result: bool = True):
        self.defer = AsyncMock(return_value=True)
        self.reply = AsyncMock(return_value=reply_result)
        self.send_followup = AsyncMock(return_value=True)

    @property
    def last_content(self) -> Optional[str]:
        if not self.reply.call_args:
            return None
        return self.reply.call_args.kwargs.get('content')

    @property
    def last_payload(self):
        if not self.reply.call_args:
            return None
        return self.reply.call_args.kwargs.get('payload')


def mock_request(
    argument: str = "",
    command: str = "weather",
    surface: str = SURFACE_PREFIX,
    sender_id: Optional[str] = "1001",
    guild_id: Optional[int] = 42,
    responder: Optional[FakeResponder] = None,
    **kwargs: Any,
) -> CommandRequest:
    """Factory for creating CommandRequest instances in tests."""
    return CommandRequest(
        command=command,
        argument=argument,
        sender_id=sender_id,
        sender_name=kwargs.pop('sender_name', "TestUser"),
        channel=kwargs.pop('channel', "general"),
        guild_id=guild_id,
        surface=surface,
        responder=responder or FakeResponder(),
        **kwargs,
    )


def make_weather(name: str = "Portland", condition_id: int = 800, **overrides: Any) -> NormalizedWeather:
    """Factory for NormalizedWeather records."""
    values: Dict[str, Any] = dict(
        name=name,
        state="Oregon",
        country="US",
        lat=45.5152,
        lon=-122.6784,
        temp=55.4,
        feels_like=53.6,
        temp_min=51.0,
        temp_max=59.0,
        humidity=71,
        pressure=1016,
        condition=WeatherCondition(id=condition_id, description="clear sky", icon="01d"),
        wind_speed=5.0,
        wind_deg=220,
        wind_direction="SW",
        visibility_miles=6.2,
        cloudiness=0,
        sunrise=BASE_TIME - 6 * 3600,
        sunset=BASE_TIME + 6 * 3600,
        utc_offset=-25200,
        air_quality=AirQuality(aqi=2, pollutants={'pm2_5': 4.1, 'pm10': 6.0}),
    )
    values.update(overrides)
    return NormalizedWeather(**values)


def make_entry(offset_hours: float, temp: float, condition_id: int = 800,
               description: str = "clear sky", pop: float = 0.0) -> ForecastEntry:
    return ForecastEntry(
        dt=int(BASE_TIME + offset_hours * 3600),
        temp=temp,
        condition=WeatherCondition(id=condition_id, description=description, icon="01d"),
        pop=pop,
    )


def make_forecast(entries: Optional[List[ForecastEntry]] = None, utc_offset: int = 0,
                  **overrides: Any) -> ForecastResponse:
    """Factory for ForecastResponse records."""
    values: Dict[str, Any] = dict(
        city_name="Seattle",
        country="US",
        lat=47.6062,
        lon=-122.3321,
        entries=entries if entries is not None else [
            make_entry(0, 60.2), make_entry(3, 63.8, 500, "light rain", 0.4), make_entry(6, 58.0),
        ],
        utc_offset=utc_offset,
    )
    values.update(overrides)
    return ForecastResponse(**values)


def current_weather_json(**overrides: Any) -> Dict[str, Any]:
    """Provider current-conditions response body."""
    data: Dict[str, Any] = {
        "coord": {"lon": -122.6784, "lat": 45.5152},
        "weather": [{"id": 500, "main": "Rain", "description": "light rain", "icon": "10d"}],
        "main": {"temp": 55.4, "feels_like": 54.1, "temp_min": 52.0, "temp_max": 58.3,
                 "pressure": 1012, "humidity": 87},
        "visibility": 10000,
        "wind": {"speed": 8.05, "deg": 200, "gust": 15.0},
        "rain": {"1h": 0.42},
        "clouds": {"all": 90},
        "sys": {"country": "US", "sunrise": 1717416000, "sunset": 1717470000},
        "timezone": -25200,
        "name": "Portland",
    }
    data.update(overrides)
    return data


def forecast_json(**overrides: Any) -> Dict[str, Any]:
    """Provider 5-day/3-hour forecast response body."""
    data: Dict[str, Any] = {
        "list": [
            {"dt": BASE_TIME, "main": {"temp": 61.0},
             "weather": [{"id": 801, "description": "few clouds", "icon": "02d"}], "pop": 0},
            {"dt": BASE_TIME + 10800, "main": {"temp": 64.5},
             "weather": [{"id": 500, "description": "light rain", "icon": "10d"}], "pop": 0.35},
        ],
        "city": {"name": "Seattle", "country": "US", "coord": {"lat": 47.6062, "lon": -122.3321},
                 "timezone": -25200},
    }
    data.update(overrides)
    return data


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing."""
    logger = Mock()
    logger.info = Mock()
    logger.debug = Mock()
    logger.warning = Mock()
    logger.error = Mock()
    return logger


@pytest.fixture
def minimal_config():
    """Minimal ConfigParser for command tests (Bot, Discord, Weather)."""
    config = configparser.ConfigParser()
    config.add_section("Bot")
    config.set("Bot", "bot_name", "TestBot")
    config.set("Bot", "command_prefix", "!")
    config.add_section("Discord")
    config.set("Discord", "token", "test-token")
    config.add_section("Weather")
    config.set("Weather", "api_key", "test-key")
    return config


@pytest.fixture
def weather_settings(tmp_path):
    """WeatherSettings pointing the locations file into tmp_path."""
    return WeatherSettings(api_key="test-key", locations_file=tmp_path / "data" / "locations.json")


@pytest.fixture
def location_store(weather_settings, mock_logger):
    return LocationStore(weather_settings, logger=mock_logger)


@pytest.fixture
def command_mock_bot(mock_logger, minimal_config, weather_settings, location_store):
    """Lightweight mock bot for command tests. Real location store, mocked gateway."""
    bot = MagicMock()
    bot.logger = mock_logger
    bot.config = minimal_config
    bot.weather_settings = weather_settings
    bot.location_store = location_store
    bot.timezone = None
    bot.weather_gateway = MagicMock()
    bot.weather_gateway.get_current_conditions = AsyncMock(return_value=make_weather())
    bot.weather_gateway.get_forecast = AsyncMock(return_value=make_forecast())
    bot.weather_gateway.probe_current_conditions = AsyncMock(return_value=(200, current_weather_json()))
    bot.command_manager = MagicMock()
    bot.command_manager.commands = {}
    return bot
