#!/usr/bin/env python3
"""
Debug weather command for the Weather Bot
Admin-only raw conditions request that reports the provider status
"""

import json

from .base_command import ARGUMENT_REQUIRED, BaseCommand
from ..models import CommandRequest

MAX_BODY_LENGTH = 1500


class DebugWeatherCommand(BaseCommand):
    """Runs a single by-name conditions request and echoes the outcome.

    Always requires admin access, whether or not [Admin_ACL] lists it.
    """

    # Plugin metadata
    name = "debugweather"
    keywords = ['debugweather']
    description = "Debug weather API call (admin only)"
    category = "admin"

    argument = ARGUMENT_REQUIRED
    missing_argument_message = "Please provide a location for debugging."

    # Documentation
    usage = "debugweather <location>"

    def requires_admin_access(self) -> bool:
        return True

    async def execute(self, request: CommandRequest) -> bool:
        location = request.argument
        await request.responder.defer(f'Attempting to get weather for: "{location}"')

        settings = self.bot.weather_settings
        self.logger.info(f"Debug request for '{location}' (API key defined: {bool(settings.api_key)}, "
                         f"URL: {settings.weather_api_url})")

        status, body = await self.bot.weather_gateway.probe_current_conditions(location)
        if status is None:
            return await self.send_response(request, f"API Error: {body}")

        if 200 <= status < 300 and isinstance(body, dict):
            name = body.get('name', 'unknown')
            country = (body.get('sys') or {}).get('country', '')
            return await self.send_response(request, f"API call successful! Found weather for {name}, {country}")

        detail = json.dumps(body) if not isinstance(body, str) else body
        if len(detail) > MAX_BODY_LENGTH:
            detail = detail[:MAX_BODY_LENGTH] + '…'
        await self.send_response(request, f"API Error: {status} - {detail}")
        return False
