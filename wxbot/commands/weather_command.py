#!/usr/bin/env python3
"""
Weather command for the Weather Bot
Shows current conditions for one location, or for every saved location
"""

import asyncio
from typing import List

from .base_command import ARGUMENT_OPTIONAL, BaseCommand
from ..formatters import format_current, format_saved_locations
from ..models import CommandRequest, NormalizedWeather


class WeatherCommand(BaseCommand):
    """Handles the weather command.

    With a location argument, replies with the detailed conditions panel.
    Without one, fans out a lookup per saved location concurrently and
    summarizes whichever lookups succeeded.
    """

    # Plugin metadata
    name = "weather"
    keywords = ['weather']
    description = "Show current weather for a location, or for all saved locations"
    category = "weather"
    cooldown_seconds = 3

    slash_name = "weather"
    argument = ARGUMENT_OPTIONAL
    argument_description = "The location to get weather for (optional)"

    # Documentation
    usage = "weather [location]"

    async def execute(self, request: CommandRequest) -> bool:
        if request.argument:
            return await self._single_location(request, request.argument)
        return await self._saved_locations(request)

    async def _single_location(self, request: CommandRequest, location: str) -> bool:
        await request.responder.defer('⌛ Fetching the latest weather data...')

        weather = await self.bot.weather_gateway.get_current_conditions(location)
        if weather is None:
            await self.send_response(request, f"Could not find weather data for {location}.")
            return False

        settings = self.bot.weather_settings
        payload = format_current(weather, icon_url=settings.icon_url, map_url=settings.map_url,
                                 tz=self.bot.timezone)
        return await self.send_response(request, payload=payload)

    async def _saved_locations(self, request: CommandRequest) -> bool:
        locations = await self.load_locations()
        if not locations:
            hint = self.command_hint(request, 'addlocation')
            await self.send_response(request, f"No locations are saved. Add locations with `{hint} <location_name>`.")
            return False

        await request.responder.defer('⌛ Fetching weather for all saved locations...')
        self.logger.info(f"Fetching weather for {len(locations)} saved location(s)")

        results = await asyncio.gather(
            *(self.bot.weather_gateway.get_current_conditions(location) for location in locations),
            return_exceptions=True,
        )

        valid: List[NormalizedWeather] = []
        for location, result in zip(locations, results):
            if isinstance(result, BaseException):
                self.logger.error(f"Weather lookup for saved location '{location}' raised: {result}")
            elif result is None:
                self.logger.info(f"No weather data for saved location '{location}', skipping")
            else:
                valid.append(result)

        if not valid:
            await self.send_response(request, 'Could not fetch weather data for any saved locations.')
            return False

        payload = format_saved_locations(valid, command_hint=self.command_hint(request, 'weather'))
        return await self.send_response(request, payload=payload)
