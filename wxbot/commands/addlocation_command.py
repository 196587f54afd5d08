#!/usr/bin/env python3
"""
Add location command for the Weather Bot
"""

from .base_command import ARGUMENT_REQUIRED, BaseCommand
from ..models import CommandRequest


class AddLocationCommand(BaseCommand):
    """Adds a location to the saved list after checking it resolves to weather data."""

    # Plugin metadata
    name = "addlocation"
    keywords = ['addlocation']
    description = "Add a location to your saved locations"
    category = "locations"

    slash_name = "addlocation"
    argument = ARGUMENT_REQUIRED
    argument_description = "The location to add"
    missing_argument_message = "Please provide a location to add."

    # Documentation
    usage = "addlocation <location>"

    async def execute(self, request: CommandRequest) -> bool:
        location = request.argument
        await request.responder.defer('⌛ Checking location...')

        weather = await self.bot.weather_gateway.get_current_conditions(location)
        if weather is None:
            await self.send_response(
                request, f"Could not find weather data for {location}. Please check the spelling and try again."
            )
            return False

        locations = await self.load_locations()
        if not self.bot.location_store.add(locations, location):
            await self.send_response(request, f"{location} is already in the saved locations.")
            return False

        if not await self.save_locations(locations):
            await self.send_response(request, 'Failed to save location. Please try again later.')
            return False

        self.logger.info(f"{request.sender_name} added saved location '{location}'")
        return await self.send_response(request, f"Added {location} to saved locations.")
