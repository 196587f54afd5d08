#!/usr/bin/env python3
"""
Remove location command for the Weather Bot
"""

from .base_command import ARGUMENT_REQUIRED, BaseCommand
from ..models import CommandRequest


class RemoveLocationCommand(BaseCommand):
    """Removes an exact-match entry from the saved list."""

    # Plugin metadata
    name = "removelocation"
    keywords = ['removelocation']
    description = "Remove a location from your saved locations"
    category = "locations"

    slash_name = "removelocation"
    argument = ARGUMENT_REQUIRED
    argument_description = "The location to remove"
    missing_argument_message = "Please provide a location to remove."

    # Documentation
    usage = "removelocation <location>"

    async def execute(self, request: CommandRequest) -> bool:
        location = request.argument
        locations = await self.load_locations()

        if not self.bot.location_store.remove(locations, location):
            await self.send_response(request, f"{location} is not in the saved locations.")
            return False

        if not await self.save_locations(locations):
            await self.send_response(request, 'Failed to remove location. Please try again later.')
            return False

        self.logger.info(f"{request.sender_name} removed saved location '{location}'")
        return await self.send_response(request, f"Removed {location} from saved locations.")
