"""Tests for wxbot.commands.forecast_command."""

from unittest.mock import AsyncMock

import pytest

from wxbot.commands.forecast_command import ForecastCommand
from tests.conftest import FakeResponder, make_forecast, mock_request


@pytest.fixture
def forecast_bot(command_mock_bot):
    command_mock_bot.config.add_section("Forecast_Command")
    command_mock_bot.config.set("Forecast_Command", "followup_delay_seconds", "0")
    return command_mock_bot


def _scheduled_coroutine(bot):
    return bot.command_manager.schedule_followup.call_args.args[0]


class TestForecastCommand:
    """Tests for ForecastCommand."""

    def test_config_defaults(self, command_mock_bot):
        cmd = ForecastCommand(command_mock_bot)
        assert cmd.followup_delay == 0.5
        assert cmd.hourly_entries == 6
        assert cmd.cooldown_seconds == 5

    def test_config_overrides(self, forecast_bot):
        forecast_bot.config.set("Forecast_Command", "hourly_entries", "4")
        cmd = ForecastCommand(forecast_bot)
        assert cmd.followup_delay == 0.0
        assert cmd.hourly_entries == 4

    @pytest.mark.asyncio
    async def test_overview_then_followup(self, forecast_bot):
        cmd = ForecastCommand(forecast_bot)
        request = mock_request("Seattle", command="forecast")
        assert await cmd.execute(request) is True

        request.responder.defer.assert_awaited_once_with('⌛ Fetching forecast data...')
        assert request.responder.last_payload.title.startswith("🌧️ 5-Day Forecast for Seattle")
        forecast_bot.command_manager.schedule_followup.assert_called_once()

        # The overview is sent before the follow-up runs
        request.responder.send_followup.assert_not_called()
        assert await _scheduled_coroutine(forecast_bot) is True
        text = request.responder.send_followup.call_args.args[0]
        assert text.startswith("## 🌧️ Today's Hourly Forecast: Monday, Jun 3")

    @pytest.mark.asyncio
    async def test_not_found(self, forecast_bot):
        forecast_bot.weather_gateway.get_forecast = AsyncMock(return_value=None)
        cmd = ForecastCommand(forecast_bot)
        request = mock_request("Atlantis", command="forecast")
        assert await cmd.execute(request) is False
        assert request.responder.last_content == "Could not find forecast data for Atlantis."
        forecast_bot.command_manager.schedule_followup.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_followup_when_overview_fails(self, forecast_bot):
        cmd = ForecastCommand(forecast_bot)
        request = mock_request("Seattle", command="forecast", responder=FakeResponder(reply_result=False))
        assert await cmd.execute(request) is False
        forecast_bot.command_manager.schedule_followup.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_followup_for_empty_forecast(self, forecast_bot):
        forecast_bot.weather_gateway.get_forecast = AsyncMock(return_value=make_forecast(entries=[]))
        cmd = ForecastCommand(forecast_bot)
        request = mock_request("Seattle", command="forecast")
        assert await cmd.execute(request) is True
        assert "No forecast entries available." in request.responder.last_payload.description
        forecast_bot.command_manager.schedule_followup.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_followup_is_logged(self, forecast_bot, mock_logger):
        cmd = ForecastCommand(forecast_bot)
        request = mock_request("Seattle", command="forecast")
        request.responder.send_followup = AsyncMock(return_value=False)
        assert await cmd._send_hourly_breakdown(request, "text") is False
        mock_logger.warning.assert_called()
