#!/usr/bin/env python3
"""
Forecast command for the Weather Bot
Replies with a 5-day overview, then posts today's hourly breakdown
"""

import asyncio

from .base_command import ARGUMENT_REQUIRED, BaseCommand
from ..formatters import format_forecast, format_hourly_breakdown
from ..models import CommandRequest


class ForecastCommand(BaseCommand):
    """Handles the forecast command.

    The hourly breakdown is a separate follow-up task scheduled through the
    CommandManager after the overview was delivered. It is never scheduled
    when the overview reply failed, and its own failure is only logged.
    """

    # Plugin metadata
    name = "forecast"
    keywords = ['forecast']
    description = "Get a 5-day weather forecast with today's hourly breakdown"
    category = "weather"
    cooldown_seconds = 5

    slash_name = "forecast"
    argument = ARGUMENT_REQUIRED
    argument_description = "The location to get forecast for"
    missing_argument_message = "Please provide a location for the forecast."

    # Documentation
    usage = "forecast <location>"

    def __init__(self, bot):
        super().__init__(bot)
        self.followup_delay = self.get_config_value('Forecast_Command', 'followup_delay_seconds',
                                                    fallback=0.5, value_type='float')
        self.hourly_entries = self.get_config_value('Forecast_Command', 'hourly_entries',
                                                    fallback=6, value_type='int')

    async def execute(self, request: CommandRequest) -> bool:
        location = request.argument
        self.logger.info(f"Fetching forecast for {location}")
        await request.responder.defer('⌛ Fetching forecast data...')

        forecast = await self.bot.weather_gateway.get_forecast(location)
        if forecast is None:
            await self.send_response(request, f"Could not find forecast data for {location}.")
            return False

        settings = self.bot.weather_settings
        payload = format_forecast(forecast, icon_url=settings.icon_url, map_url=settings.map_url,
                                  tz=self.bot.timezone)
        sent = await self.send_response(request, payload=payload)
        if not sent:
            self.logger.warning(f"Forecast reply for {location} failed; skipping hourly follow-up")
            return False

        breakdown = format_hourly_breakdown(forecast, limit=max(1, self.hourly_entries))
        if breakdown:
            self.bot.command_manager.schedule_followup(self._send_hourly_breakdown(request, breakdown))
        return True

    async def _send_hourly_breakdown(self, request: CommandRequest, text: str) -> bool:
        await asyncio.sleep(max(0.0, self.followup_delay))
        sent = await request.responder.send_followup(text)
        if not sent:
            self.logger.warning("Hourly forecast follow-up could not be delivered")
        return sent
