#!/usr/bin/env python3
"""
Data models for the Weather Bot
Plain dataclasses shared by the gateway, the formatters and the commands
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

DEFAULT_COLOR = 0x0099FF

SURFACE_PREFIX = 'prefix'
SURFACE_SLASH = 'slash'


@dataclass
class GeoMatch:
    """First result of a direct geocoding lookup."""
    lat: float
    lon: float
    name: str
    country: str
    state: Optional[str] = None


@dataclass
class WeatherCondition:
    """Provider weather condition (id, description, icon code)."""
    id: int
    description: str = ''
    icon: str = ''


@dataclass
class AirQuality:
    """Air quality index (1-5) plus raw pollutant concentrations in μg/m³."""
    aqi: Optional[int]
    pollutants: Dict[str, float] = field(default_factory=dict)


@dataclass
class NormalizedWeather:
    """Current conditions merged with geocoding and air quality data.

    Temperatures are °F, wind speeds mph, visibility miles.
    """
    name: str
    country: str
    lat: float
    lon: float
    temp: float
    feels_like: float
    condition: WeatherCondition
    humidity: Optional[int] = None
    pressure: Optional[int] = None
    wind_speed: float = 0.0
    state: Optional[str] = None
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    wind_deg: Optional[float] = None
    wind_direction: str = ''
    wind_gust: Optional[float] = None
    visibility_miles: Optional[float] = None
    cloudiness: Optional[int] = None
    rain_1h: Optional[float] = None
    snow_1h: Optional[float] = None
    sunrise: Optional[int] = None
    sunset: Optional[int] = None
    utc_offset: int = 0
    air_quality: Optional[AirQuality] = None

    @property
    def display_name(self) -> str:
        """Location name with state appended when known (e.g. 'Portland, Oregon')."""
        if self.state:
            return f"{self.name}, {self.state}"
        return self.name


@dataclass
class ForecastEntry:
    """One 3-hour forecast interval."""
    dt: int
    temp: float
    condition: WeatherCondition
    pop: float = 0.0


@dataclass
class ForecastResponse:
    """5-day / 3-hour forecast with optional resolved location annotations."""
    city_name: str
    country: str
    lat: float
    lon: float
    entries: List[ForecastEntry] = field(default_factory=list)
    utc_offset: int = 0
    location_name: Optional[str] = None
    location_state: Optional[str] = None
    location_country: Optional[str] = None

    @property
    def display_name(self) -> str:
        name = self.location_name or self.city_name
        if self.location_state:
            return f"{name}, {self.location_state}"
        return name

    @property
    def display_country(self) -> str:
        return self.location_country or self.country


@dataclass
class DayBucket:
    """Forecast entries that fall on one local calendar day."""
    day: date
    entries: List[ForecastEntry] = field(default_factory=list)


@dataclass
class EmbedField:
    name: str
    value: str
    inline: bool = False


@dataclass
class DisplayPayload:
    """Platform-neutral message payload (titled panel with a colored accent).

    Converted into a discord.Embed by wxbot.embeds at send time.
    """
    title: str = ''
    description: str = ''
    color: int = DEFAULT_COLOR
    fields: List[EmbedField] = field(default_factory=list)
    thumbnail_url: Optional[str] = None
    footer: Optional[str] = None
    timestamp: Optional[datetime] = None

    def add_field(self, name: str, value: str, inline: bool = False) -> 'DisplayPayload':
        self.fields.append(EmbedField(name=name, value=value, inline=inline))
        return self


@dataclass
class CommandRequest:
    """An inbound command from either surface.

    Attributes:
        command: Keyword or slash name that triggered the command.
        argument: Argument text (prefix tokens joined by single spaces, or the slash option).
        sender_id: Discord user id of the author.
        sender_name: Display name of the author.
        channel: Channel name, None for DMs.
        guild_id: Guild id, None for DMs.
        surface: SURFACE_PREFIX or SURFACE_SLASH.
        responder: Surface-specific responder used to reply.
    """
    command: str
    argument: str = ''
    sender_id: Optional[str] = None
    sender_name: Optional[str] = None
    channel: Optional[str] = None
    guild_id: Optional[int] = None
    surface: str = SURFACE_PREFIX
    responder: Any = None

    @property
    def is_slash(self) -> bool:
        return self.surface == SURFACE_SLASH
