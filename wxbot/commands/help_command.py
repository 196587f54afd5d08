#!/usr/bin/env python3
"""
Help command for the Weather Bot
Builds the help panel from the metadata of every loaded command
"""

from collections import defaultdict
from typing import Dict, List, Tuple

from .base_command import BaseCommand
from .. import __version__
from ..formatters import PROVIDER_CREDIT, format_help
from ..models import CommandRequest

CATEGORY_HEADINGS = [
    ('weather', '📊 Weather Information'),
    ('locations', '📝 Location Management'),
    ('help', '❓ Help'),
    ('admin', '🛠️ Admin'),
]

DETAIL_LINES = [
    '• Wind speed, direction, and gusts',
    '• Humidity and atmospheric pressure',
    '• Visibility and cloudiness percentage',
    '• Air quality index and pollutant concentrations',
    '• Precipitation measurements and probabilities',
    '• Sunrise and sunset times',
    '• Temperature feels-like and min/max values',
]


class HelpCommand(BaseCommand):
    """Handles the help command.

    Lists the commands available on the surface the request came from,
    grouped by category. Prefix-only commands are left out of the slash
    version.
    """

    # Plugin metadata
    name = "help"
    keywords = ['help', 'weatherhelp']
    description = "Show this help message"
    category = "help"

    slash_name = "weatherhelp"

    # Documentation
    usage = "help"

    def build_sections(self, request: CommandRequest) -> List[Tuple[str, List[str]]]:
        """Group usage lines of the loaded commands by category heading."""
        grouped: Dict[str, List[str]] = defaultdict(list)
        for command in self.bot.command_manager.commands.values():
            if not command.enabled:
                continue
            if request.is_slash and not command.slash_name:
                continue
            grouped[command.category].append(
                f"{command.format_usage(request.surface)} - {command.get_help_text()}"
            )

        sections = []
        for category, heading in CATEGORY_HEADINGS:
            if category == 'help':
                sections.append(('🔍 Detailed Weather Data', DETAIL_LINES))
            sections.append((heading, grouped.pop(category, [])))
        for category, lines in sorted(grouped.items()):
            sections.append((category.title(), lines))
        return sections

    async def execute(self, request: CommandRequest) -> bool:
        bot_name = self.bot.config.get('Bot', 'bot_name', fallback='Weather Bot')
        footer = f"{PROVIDER_CREDIT} • {bot_name} v{__version__}"
        payload = format_help(self.build_sections(request), footer)
        return await self.send_response(request, payload=payload)
