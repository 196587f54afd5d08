#!/usr/bin/env python3
"""
List locations command for the Weather Bot
"""

from .base_command import BaseCommand
from ..formatters import format_location_list
from ..models import CommandRequest


class ListLocationsCommand(BaseCommand):
    """Shows the saved locations as a numbered list."""

    # Plugin metadata
    name = "listlocations"
    keywords = ['listlocations']
    description = "List all your saved locations"
    category = "locations"

    slash_name = "listlocations"

    # Documentation
    usage = "listlocations"

    async def execute(self, request: CommandRequest) -> bool:
        locations = await self.load_locations()
        if not locations:
            hint = self.command_hint(request, 'addlocation')
            await self.send_response(request, f"No locations are saved. Add locations with `{hint} <location_name>`.")
            return True

        return await self.send_response(request, payload=format_location_list(locations))
