#!/usr/bin/env python3
"""
Display formatting for the Weather Bot
Pure functions that turn normalized weather records into display payloads.
Both the slash and the prefix surfaces render through these helpers.
"""

import math
from collections import namedtuple
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pytz

from .models import (
    DEFAULT_COLOR,
    DayBucket,
    DisplayPayload,
    ForecastEntry,
    ForecastResponse,
    NormalizedWeather,
    WeatherCondition,
)
from .settings import DEFAULT_ICON_URL, DEFAULT_MAP_URL

COMPASS_POINTS = ['N', 'NNE', 'NE', 'ENE', 'E', 'ESE', 'SE', 'SSE',
                  'S', 'SSW', 'SW', 'WSW', 'W', 'WNW', 'NW', 'NNW']

PROVIDER_CREDIT = "Data provided by OpenWeatherMap"

AqiInfo = namedtuple('AqiInfo', ['label', 'emoji', 'description'])

AQI_TABLE = {
    1: AqiInfo('Good', '🟢', 'Air quality is considered satisfactory, and air pollution poses little or no risk.'),
    2: AqiInfo('Fair', '🟡', 'Air quality is acceptable; however, some pollutants may be moderate.'),
    3: AqiInfo('Moderate', '🟠', 'Members of sensitive groups may experience health effects.'),
    4: AqiInfo('Poor', '🔴', 'Everyone may begin to experience health effects; '
                             'sensitive groups may experience more serious effects.'),
    5: AqiInfo('Very Poor', '🟣', 'Health warnings of emergency conditions. '
                                  'The entire population is more likely to be affected.'),
}
AQI_UNKNOWN = AqiInfo('Unknown', '❓', 'No air quality data available.')

POLLUTANT_LABELS = [
    ('pm2_5', 'PM2.5'),
    ('pm10', 'PM10'),
    ('o3', 'O₃'),
    ('no2', 'NO₂'),
    ('so2', 'SO₂'),
    ('co', 'CO'),
]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def round_half_away(value: float) -> int:
    """Round to the nearest integer with .5 going away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _num(value: float) -> str:
    """Render a number without a trailing '.0'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return f"{value:g}"


def capitalize(text: str) -> str:
    """Upper-case the first character only ('light rain' -> 'Light rain')."""
    if not text:
        return ''
    return text[0].upper() + text[1:]


def weather_color(condition_id: int) -> int:
    """Embed accent color for a provider condition code."""
    if 200 <= condition_id < 300:
        return 0x5A5A5A  # thunderstorm
    if 300 <= condition_id < 400:
        return 0x89CFF0  # drizzle
    if 500 <= condition_id < 600:
        return 0x0066CC  # rain
    if 600 <= condition_id < 700:
        return 0xFFFFFF  # snow
    if 700 <= condition_id < 800:
        return 0xAAAAAA  # atmosphere
    if condition_id == 800:
        return 0xFFD700  # clear
    if condition_id > 800:
        return 0x87CEEB  # clouds
    return DEFAULT_COLOR


def weather_emoji(condition_id: int) -> str:
    """Emoji for a provider condition code."""
    if 200 <= condition_id < 300:
        return '⚡'
    if 300 <= condition_id < 600:
        return '🌧️'
    if 600 <= condition_id < 700:
        return '❄️'
    if 700 <= condition_id < 800:
        return '🌫️'
    if condition_id == 800:
        return '☀️'
    if condition_id > 800:
        return '⛅'
    return '☁️'


def wind_direction(degrees: float) -> str:
    """16-point compass direction for a bearing in degrees (wraps at 360)."""
    return COMPASS_POINTS[round_half_up(degrees / 22.5) % 16]


def aqi_info(aqi: Optional[int]) -> AqiInfo:
    return AQI_TABLE.get(aqi, AQI_UNKNOWN)


def is_daytime(sunrise: Optional[int], sunset: Optional[int], now: Optional[float] = None) -> Optional[bool]:
    """True between sunrise and sunset, None when either timestamp is unknown."""
    if not sunrise or not sunset:
        return None
    if now is None:
        now = datetime.now(timezone.utc).timestamp()
    return sunrise < now < sunset


def location_tz(utc_offset: int) -> pytz.tzinfo.BaseTzInfo:
    """Fixed-offset timezone for a provider UTC offset given in seconds."""
    return pytz.FixedOffset(utc_offset // 60)


def local_datetime(unix_time: int, utc_offset: int) -> datetime:
    return datetime.fromtimestamp(unix_time, tz=location_tz(utc_offset))


def format_time(unix_time: int, utc_offset: int = 0) -> str:
    """Clock time at the location, e.g. '06:42 AM'."""
    return local_datetime(unix_time, utc_offset).strftime('%I:%M %p')


def format_hour(unix_time: int, utc_offset: int = 0) -> str:
    """Hour at the location without leading zero, e.g. '3 PM'."""
    dt = local_datetime(unix_time, utc_offset)
    return f"{int(dt.strftime('%I'))} {dt.strftime('%p')}"


def footer_text(tz: Optional[pytz.tzinfo.BaseTzInfo] = None, now: Optional[datetime] = None) -> str:
    """Provider credit with the update time in the bot's configured timezone."""
    if now is None:
        now = datetime.now(timezone.utc)
    local = now.astimezone(tz or pytz.utc)
    return f"{PROVIDER_CREDIT} • Updated {local.strftime('%I:%M:%S %p')}"


def get_weather_map_urls(lat: float, lon: float, map_url: str = DEFAULT_MAP_URL) -> Dict[str, str]:
    """Links to the provider's rain, temperature and cloud map layers."""
    urls = {}
    for key, layer in (('rain', 'radar'), ('temp', 'temperature'), ('cloud', 'clouds')):
        urls[key] = f"{map_url}?basemap=map&cities=false&layer={layer}&lat={lat}&lon={lon}&zoom=6"
    return urls


def _maps_section(lat: float, lon: float, map_url: str) -> str:
    urls = get_weather_map_urls(lat, lon, map_url)
    return (f"[🌧️ Rain Map]({urls['rain']}) • [🌡️ Temperature Map]({urls['temp']}) • "
            f"[☁️ Cloud Map]({urls['cloud']})")


def icon_image_url(icon: str, icon_url: str = DEFAULT_ICON_URL) -> Optional[str]:
    if not icon:
        return None
    return f"{icon_url}{icon}@4x.png"


def dominant_condition(conditions: Iterable[WeatherCondition]) -> Optional[WeatherCondition]:
    """Pick the condition that represents a group of forecast entries.

    A lower condition id wins, except that rain (5xx) or snow (6xx) also
    replaces a currently selected clear/cloudy id (>= 800). A clear id never
    replaces rain or snow.
    """
    dominant = None
    for condition in conditions:
        if dominant is None:
            dominant = condition
            continue
        cid = condition.id
        if (cid < dominant.id
                or (500 <= cid < 600 and dominant.id >= 800)
                or (600 <= cid < 700 and dominant.id >= 800)):
            dominant = condition
    return dominant


def bucket_by_day(entries: Sequence[ForecastEntry], utc_offset: int = 0) -> List[DayBucket]:
    """Group forecast entries by local calendar day, in first-seen order."""
    buckets: Dict[object, DayBucket] = {}
    for entry in entries:
        day = local_datetime(entry.dt, utc_offset).date()
        if day not in buckets:
            buckets[day] = DayBucket(day=day)
        buckets[day].entries.append(entry)
    return list(buckets.values())


DaySummary = namedtuple('DaySummary', ['min_temp', 'max_temp', 'precip_percent', 'condition'])


def summarize_day(bucket: DayBucket) -> DaySummary:
    """Min/max temperature, peak precipitation chance and dominant condition for one day."""
    temps = [entry.temp for entry in bucket.entries]
    precip = None
    if any(entry.pop for entry in bucket.entries):
        precip = round_half_up(max(entry.pop or 0 for entry in bucket.entries) * 100)
    return DaySummary(
        min_temp=round_half_away(min(temps)),
        max_temp=round_half_away(max(temps)),
        precip_percent=precip,
        condition=dominant_condition(entry.condition for entry in bucket.entries),
    )


def _wind_text(weather: NormalizedWeather) -> str:
    text = f"{_num(weather.wind_speed)} mph"
    if weather.wind_direction:
        text += f" {weather.wind_direction}"
    return text


def _temp_range(weather: NormalizedWeather) -> str:
    if weather.temp_min is None or weather.temp_max is None:
        return ''
    return f"Range: {round_half_up(weather.temp_min)}°F - {round_half_up(weather.temp_max)}°F"


def _pollutant_line(pollutants: Dict[str, float]) -> str:
    parts = [f"{label}: {_num(pollutants[key])}" for key, label in POLLUTANT_LABELS if key in pollutants]
    if not parts:
        return ''
    return ' • '.join(parts) + ' μg/m³'


def format_current(weather: NormalizedWeather, icon_url: str = DEFAULT_ICON_URL,
                   map_url: str = DEFAULT_MAP_URL, tz: Optional[pytz.tzinfo.BaseTzInfo] = None,
                   now: Optional[datetime] = None) -> DisplayPayload:
    """Build the detailed current-conditions panel for one location.

    Args:
        weather: Normalized conditions.
        icon_url: Base URL for condition icons.
        map_url: Base URL for the weather map links.
        tz: Timezone for the footer update time (UTC when omitted).
        now: Override for the current time (aware datetime).

    Returns:
        DisplayPayload: Panel colored by the condition code.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    condition = weather.condition
    temp = round_half_up(weather.temp)
    feels_like = round_half_up(weather.feels_like)

    daytime = is_daytime(weather.sunrise, weather.sunset, now.timestamp())
    time_of_day = '' if daytime is None else (' ☀️' if daytime else ' 🌙')

    current = [f"🌡️ **Temperature:** {temp}°F (Feels like {feels_like}°F)"]
    temp_range = _temp_range(weather)
    if temp_range:
        current.append(temp_range)
    if weather.humidity is not None:
        current.append(f"💧 **Humidity:** {weather.humidity}%")
    wind = f"🌬️ **Wind:** {_wind_text(weather)}"
    if weather.wind_gust:
        wind += f" (Gusts: {round_half_up(weather.wind_gust)} mph)"
    current.append(wind)

    details = [
        f"☁️ **Cloudiness:** {weather.cloudiness}%" if weather.cloudiness is not None else "☁️ **Cloudiness:** N/A",
        f"👁️ **Visibility:** {_num(weather.visibility_miles)} miles" if weather.visibility_miles else
        "👁️ **Visibility:** N/A",
        f"🧭 **Pressure:** {weather.pressure} hPa" if weather.pressure else "🧭 **Pressure:** N/A",
    ]

    sunrise = format_time(weather.sunrise, weather.utc_offset) if weather.sunrise else 'N/A'
    sunset = format_time(weather.sunset, weather.utc_offset) if weather.sunset else 'N/A'

    description = '\n'.join([
        f"**{capitalize(condition.description)}**{time_of_day}",
        f"**Coordinates:** {weather.lat:.2f}, {weather.lon:.2f}",
        '',
        '### Current Conditions',
        *current,
        '',
        '### Details',
        *details,
        '',
        '### Sun Times',
        f"🌅 **Sunrise:** {sunrise}",
        f"🌇 **Sunset:** {sunset}",
    ])

    payload = DisplayPayload(
        title=f"{weather_emoji(condition.id)} Weather in {weather.display_name}, {weather.country}",
        description=description,
        color=weather_color(condition.id),
        thumbnail_url=icon_image_url(condition.icon, icon_url),
        footer=footer_text(tz, now),
        timestamp=now,
    )

    if weather.air_quality is not None and weather.air_quality.aqi is not None:
        info = aqi_info(weather.air_quality.aqi)
        lines = [f"{info.emoji} **Air Quality:** {info.label} ({weather.air_quality.aqi}/5)", info.description]
        pollutants = _pollutant_line(weather.air_quality.pollutants)
        if pollutants:
            lines.append(pollutants)
        payload.add_field('Air Quality', '\n'.join(lines))

    if weather.rain_1h is not None:
        payload.add_field('Precipitation', f"☔ **Rainfall:** {_num(weather.rain_1h)} mm")
    elif weather.snow_1h is not None:
        payload.add_field('Precipitation', f"❄️ **Snowfall:** {_num(weather.snow_1h)} mm")

    payload.add_field('Weather Maps', _maps_section(weather.lat, weather.lon, map_url))
    return payload


def format_saved_locations(results: Sequence[NormalizedWeather], command_hint: str = '/weather',
                           now: Optional[datetime] = None) -> DisplayPayload:
    """Summary panel with one field per saved location that returned data."""
    payload = DisplayPayload(
        title='📍 Weather for Your Saved Locations',
        description='Current weather conditions for your saved locations.',
        timestamp=now or datetime.now(timezone.utc),
    )
    for weather in results:
        condition = weather.condition
        temp_line = (f"🌡️ **Temperature:** {round_half_up(weather.temp)}°F "
                     f"(Feels like: {round_half_up(weather.feels_like)}°F)")
        stats_line = f"🌬️ **Wind:** {_wind_text(weather)}"
        if weather.humidity is not None:
            stats_line = f"💧 **Humidity:** {weather.humidity}% | " + stats_line
        if weather.air_quality is not None and weather.air_quality.aqi is not None:
            info = aqi_info(weather.air_quality.aqi)
            stats_line += f" | {info.emoji} AQI: {info.label}"
        sunrise = format_time(weather.sunrise, weather.utc_offset) if weather.sunrise else 'N/A'
        sunset = format_time(weather.sunset, weather.utc_offset) if weather.sunset else 'N/A'

        lines = [f"**{capitalize(condition.description)}**", '', temp_line]
        temp_range = _temp_range(weather)
        if temp_range:
            lines.append(temp_range)
        lines.append(stats_line)
        lines.append(f"🌅 **Sunrise:** {sunrise} | 🌇 **Sunset:** {sunset}")
        payload.add_field(f"{weather_emoji(condition.id)} {weather.display_name}, {weather.country}",
                          '\n'.join(lines))

    payload.add_field('Need more details?',
                      f"Use `{command_hint} <location_name>` to get detailed weather for a specific location.")
    return payload


def format_forecast(forecast: ForecastResponse, icon_url: str = DEFAULT_ICON_URL,
                    map_url: str = DEFAULT_MAP_URL, tz: Optional[pytz.tzinfo.BaseTzInfo] = None,
                    now: Optional[datetime] = None) -> DisplayPayload:
    """Build the 5-day overview panel.

    Each local day gets one line with its dominant condition, temperature
    range and peak precipitation chance. The title emoji reflects the
    dominant condition across the whole forecast.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    buckets = bucket_by_day(forecast.entries, forecast.utc_offset)
    overall = dominant_condition(entry.condition for entry in forecast.entries)
    title_emoji = weather_emoji(overall.id) if overall else '☁️'

    lines = [
        f"**Coordinates:** {forecast.lat:.2f}, {forecast.lon:.2f}",
        '',
        '### 5-Day Forecast Overview',
    ]
    for bucket in buckets:
        summary = summarize_day(bucket)
        day_name = f"{bucket.day:%a}, {bucket.day:%b} {bucket.day.day}"
        line = (f"**{day_name}**: {weather_emoji(summary.condition.id)} "
                f"{capitalize(summary.condition.description)}, "
                f"🌡️ {summary.min_temp}°F to {summary.max_temp}°F")
        if summary.precip_percent is not None:
            line += f" ☔ {summary.precip_percent}% chance of precipitation"
        lines.append(line)
    if not buckets:
        lines.append('No forecast entries available.')

    thumbnail = None
    if forecast.entries:
        thumbnail = icon_image_url(forecast.entries[0].condition.icon, icon_url)

    payload = DisplayPayload(
        title=f"{title_emoji} 5-Day Forecast for {forecast.display_name}, {forecast.display_country}",
        description='\n'.join(lines),
        color=DEFAULT_COLOR,
        thumbnail_url=thumbnail,
        footer=footer_text(tz, now),
        timestamp=now,
    )
    payload.add_field('Weather Maps', _maps_section(forecast.lat, forecast.lon, map_url))
    return payload


def format_hourly_breakdown(forecast: ForecastResponse, limit: int = 6) -> Optional[str]:
    """Plain-text breakdown of the first local day's entries.

    Returns:
        Optional[str]: Message text, or None when the forecast has no entries.
    """
    buckets = bucket_by_day(forecast.entries, forecast.utc_offset)
    if not buckets:
        return None
    first = buckets[0]
    dominant = dominant_condition(entry.condition for entry in first.entries)
    day_name = f"{first.day:%A}, {first.day:%b} {first.day.day}"

    lines = [f"## {weather_emoji(dominant.id)} Today's Hourly Forecast: {day_name}", '']
    for entry in first.entries[:limit]:
        line = (f"**{format_hour(entry.dt, forecast.utc_offset)}**: {weather_emoji(entry.condition.id)} "
                f"{round_half_up(entry.temp)}°F - {capitalize(entry.condition.description)}")
        if entry.pop:
            line += f" ({round_half_up(entry.pop * 100)}% chance of precipitation)"
        lines.append(line)
    return '\n'.join(lines)


def format_location_list(locations: Sequence[str], now: Optional[datetime] = None) -> DisplayPayload:
    """Numbered list of saved locations."""
    return DisplayPayload(
        title='Saved Locations',
        description='\n'.join(f"{index}. {name}" for index, name in enumerate(locations, start=1)),
        timestamp=now or datetime.now(timezone.utc),
    )


def format_help(sections: List[Tuple[str, List[str]]], footer: str,
                now: Optional[datetime] = None) -> DisplayPayload:
    """Help panel with one field per command category."""
    payload = DisplayPayload(
        title='🌦️ Weather Bot Commands',
        description='Here are all the available commands and features you can use with the Weather Bot:',
        footer=footer,
        timestamp=now or datetime.now(timezone.utc),
    )
    for heading, lines in sections:
        if lines:
            payload.add_field(heading, '\n'.join(lines))
    return payload
