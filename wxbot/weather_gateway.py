#!/usr/bin/env python3
"""
OpenWeatherMap gateway for the Weather Bot
Resolves free-text locations, fetches conditions, forecasts and air quality,
and normalizes the provider JSON into the bot's data models
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

import aiohttp

from .formatters import round_half_up, wind_direction
from .models import (
    AirQuality,
    ForecastEntry,
    ForecastResponse,
    GeoMatch,
    NormalizedWeather,
    WeatherCondition,
)
from .settings import WeatherSettings

# All temperatures, wind speeds and distances are requested in imperial units
UNITS = 'imperial'

METERS_PER_MILE = 1609.34

POLLUTANT_KEYS = ('co', 'no2', 'o3', 'pm2_5', 'pm10', 'so2')


def parse_geo_match(data: Any) -> Optional[GeoMatch]:
    """Return the first geocoding hit, or None for an empty/invalid result."""
    if not isinstance(data, list) or not data:
        return None
    first = data[0]
    return GeoMatch(
        lat=first['lat'],
        lon=first['lon'],
        name=first.get('name', ''),
        country=first.get('country', ''),
        state=first.get('state') or None,
    )


def parse_air_quality(data: Any) -> Optional[AirQuality]:
    """Extract AQI and pollutant concentrations from an air pollution response."""
    if not isinstance(data, dict):
        return None
    readings = data.get('list') or []
    if not readings:
        return None
    reading = readings[0]
    components = reading.get('components') or {}
    pollutants = {key: components[key] for key in POLLUTANT_KEYS if key in components}
    return AirQuality(aqi=(reading.get('main') or {}).get('aqi'), pollutants=pollutants)


def _parse_condition(weather_list: Any) -> WeatherCondition:
    first = weather_list[0]
    return WeatherCondition(
        id=int(first['id']),
        description=first.get('description', ''),
        icon=first.get('icon', ''),
    )


def normalize_current(data: Dict[str, Any], geo: Optional[GeoMatch] = None,
                      air_quality: Optional[AirQuality] = None) -> NormalizedWeather:
    """Merge a current-conditions response with geocoding and air quality data.

    Raises:
        KeyError, TypeError, ValueError, IndexError: If required fields are missing.
    """
    main = data['main']
    wind = data.get('wind') or {}
    sys_info = data.get('sys') or {}
    coord = data.get('coord') or {}

    wind_deg = wind.get('deg')
    visibility = data.get('visibility')
    visibility_miles = None
    if visibility:
        visibility_miles = round_half_up(visibility / METERS_PER_MILE * 10) / 10

    clouds = data.get('clouds')
    rain = data.get('rain') or {}
    snow = data.get('snow') or {}

    return NormalizedWeather(
        name=geo.name if geo else data.get('name', ''),
        state=geo.state if geo else None,
        country=geo.country if geo else sys_info.get('country', ''),
        lat=coord.get('lat', geo.lat if geo else 0.0),
        lon=coord.get('lon', geo.lon if geo else 0.0),
        temp=main['temp'],
        feels_like=main.get('feels_like', main['temp']),
        temp_min=main.get('temp_min'),
        temp_max=main.get('temp_max'),
        humidity=main.get('humidity'),
        pressure=main.get('pressure'),
        condition=_parse_condition(data['weather']),
        wind_speed=wind.get('speed', 0.0),
        wind_deg=wind_deg,
        wind_direction=wind_direction(wind_deg) if wind_deg is not None else '',
        wind_gust=wind.get('gust'),
        visibility_miles=visibility_miles,
        cloudiness=clouds.get('all') if isinstance(clouds, dict) else None,
        rain_1h=rain.get('1h'),
        snow_1h=snow.get('1h'),
        sunrise=sys_info.get('sunrise'),
        sunset=sys_info.get('sunset'),
        utc_offset=data.get('timezone', 0) or 0,
        air_quality=air_quality,
    )


def normalize_forecast(data: Dict[str, Any], geo: Optional[GeoMatch] = None) -> ForecastResponse:
    """Convert a 5-day/3-hour forecast response into a ForecastResponse.

    Raises:
        KeyError, TypeError, ValueError, IndexError: If required fields are missing.
    """
    city = data['city']
    coord = city.get('coord') or {}
    entries = [
        ForecastEntry(
            dt=int(item['dt']),
            temp=item['main']['temp'],
            condition=_parse_condition(item['weather']),
            pop=item.get('pop') or 0.0,
        )
        for item in data['list']
    ]
    return ForecastResponse(
        city_name=city.get('name', ''),
        country=city.get('country', ''),
        lat=coord.get('lat', geo.lat if geo else 0.0),
        lon=coord.get('lon', geo.lon if geo else 0.0),
        entries=entries,
        utc_offset=city.get('timezone', 0) or 0,
        location_name=geo.name if geo else None,
        location_state=geo.state if geo else None,
        location_country=geo.country if geo else None,
    )


class WeatherGateway:
    """Async client for the OpenWeatherMap endpoints used by the bot.

    Every call makes a single attempt. Network errors, non-2xx statuses and
    empty results all come back as None; the cause is only logged.
    """

    def __init__(self, settings: WeatherSettings, session: Optional[aiohttp.ClientSession] = None,
                 logger: Optional[logging.Logger] = None):
        self.settings = settings
        self.logger = logger or logging.getLogger('WeatherBot.gateway')
        self.session = session
        self._owns_session = session is None

        if not settings.api_key:
            self.logger.warning("No OpenWeatherMap API key configured; weather requests will fail")

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.settings.request_timeout)
            )
            self._owns_session = True
        return self.session

    async def open(self) -> aiohttp.ClientSession:
        """Create the shared HTTP session ahead of the first request."""
        return await self._get_session()

    async def close(self) -> None:
        """Close the HTTP session if this gateway created it."""
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def _request(self, url: str, params: Dict[str, Any], label: str) -> Tuple[Optional[int], Any]:
        """Perform one GET request.

        Returns:
            Tuple[Optional[int], Any]: (status, decoded JSON body). Status is
            None when the request never completed, in which case the body is
            the error text.
        """
        session = await self._get_session()
        try:
            async with session.get(url, params=params) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = await response.text()
                return response.status, body
        except asyncio.TimeoutError:
            self.logger.error(f"Timeout during {label} request")
            return None, "timeout"
        except aiohttp.ClientError as e:
            self.logger.error(f"Error during {label} request: {e}")
            return None, str(e)

    async def _get_json(self, url: str, params: Dict[str, Any], label: str) -> Optional[Any]:
        """GET url and return the JSON body, or None on any failure."""
        status, body = await self._request(url, params, label)
        if status is None:
            return None
        if not 200 <= status < 300:
            self.logger.warning(f"{label} request failed with status {status}: {body}")
            return None
        return body

    async def resolve_coordinates(self, location: str) -> Optional[GeoMatch]:
        """Geocode free text to the first matching place.

        Args:
            location: Free-text location (e.g. "Portland, OR, US").

        Returns:
            Optional[GeoMatch]: The first match, or None.
        """
        params = {'q': location, 'limit': 1, 'appid': self.settings.api_key}
        data = await self._get_json(self.settings.geocoding_api_url, params, f"geocoding '{location}'")
        try:
            match = parse_geo_match(data)
        except (KeyError, TypeError, ValueError) as e:
            self.logger.error(f"Malformed geocoding response for '{location}': {e}")
            return None
        if match is None:
            self.logger.debug(f"No geocoding results for '{location}'")
        return match

    async def get_air_quality(self, lat: float, lon: float) -> Optional[AirQuality]:
        params = {'lat': lat, 'lon': lon, 'appid': self.settings.api_key}
        data = await self._get_json(self.settings.air_pollution_api_url, params,
                                    f"air quality ({lat},{lon})")
        try:
            return parse_air_quality(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            self.logger.error(f"Malformed air quality response for ({lat},{lon}): {e}")
            return None

    async def get_current_conditions(self, location: str) -> Optional[NormalizedWeather]:
        """Fetch current conditions for a free-text location.

        Resolves coordinates first and fetches conditions plus air quality by
        coordinates. If geocoding fails, falls back to a direct by-name query
        without air quality.

        Returns:
            Optional[NormalizedWeather]: Normalized conditions, or None.
        """
        geo = await self.resolve_coordinates(location)
        air_quality = None
        if geo is None:
            self.logger.info(f"Falling back to direct conditions query for '{location}'")
            params = {'q': location, 'appid': self.settings.api_key, 'units': UNITS}
            data = await self._get_json(self.settings.weather_api_url, params,
                                        f"current conditions '{location}'")
        else:
            params = {'lat': geo.lat, 'lon': geo.lon, 'appid': self.settings.api_key, 'units': UNITS}
            data, air_quality = await asyncio.gather(
                self._get_json(self.settings.weather_api_url, params,
                               f"current conditions ({geo.lat},{geo.lon})"),
                self.get_air_quality(geo.lat, geo.lon),
            )

        if not data:
            return None
        try:
            return normalize_current(data, geo, air_quality)
        except (KeyError, TypeError, ValueError, IndexError) as e:
            self.logger.error(f"Malformed conditions response for '{location}': {e}")
            return None

    async def get_forecast(self, location: str) -> Optional[ForecastResponse]:
        """Fetch the 5-day/3-hour forecast for a free-text location.

        Returns:
            Optional[ForecastResponse]: The forecast annotated with the resolved
            name/state/country when geocoding succeeded, or None.
        """
        geo = await self.resolve_coordinates(location)
        if geo is None:
            self.logger.info(f"Falling back to direct forecast query for '{location}'")
            params = {'q': location, 'appid': self.settings.api_key, 'units': UNITS}
        else:
            params = {'lat': geo.lat, 'lon': geo.lon, 'appid': self.settings.api_key, 'units': UNITS}

        data = await self._get_json(self.settings.forecast_api_url, params, f"forecast '{location}'")
        if not data:
            return None
        try:
            return normalize_forecast(data, geo)
        except (KeyError, TypeError, ValueError, IndexError) as e:
            self.logger.error(f"Malformed forecast response for '{location}': {e}")
            return None

    async def probe_current_conditions(self, location: str) -> Tuple[Optional[int], Any]:
        """Raw by-name conditions request used by the debug command.

        Returns:
            Tuple[Optional[int], Any]: (HTTP status or None, response body or error text).
        """
        params = {'q': location, 'appid': self.settings.api_key, 'units': UNITS}
        return await self._request(self.settings.weather_api_url, params, f"debug conditions '{location}'")
