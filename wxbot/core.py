#!/usr/bin/env python3
"""
Core Weather Bot functionality
Contains the main bot class: configuration, logging, Discord client and lifecycle
"""

import configparser
import logging
from pathlib import Path
from typing import Optional

import colorlog
import discord
import pytz
from discord import app_commands

from .command_manager import CommandManager
from .location_store import LocationStore
from .settings import load_discord_settings, load_weather_settings, resolve_path
from .weather_gateway import WeatherGateway


class MissingTokenError(RuntimeError):
    """Raised when no Discord bot token is configured."""


class WeatherBot:
    """Discord weather bot.

    Owns the parsed configuration, the logger, the Discord client and its
    command tree, the weather gateway (and its HTTP session) and the
    location store. Commands reach all of these through the bot instance.
    """

    def __init__(self, config_file: str = "config.ini"):
        self.config_file = config_file
        self.config = configparser.ConfigParser()
        self.load_config()

        # Setup logging
        self.setup_logging()

        self.enabled = self.config.getboolean('Bot', 'enabled', fallback=True)
        self.timezone = self._load_timezone()

        # Settings are gathered once and never mutated afterwards
        self.weather_settings = load_weather_settings(self.config, self.bot_root)
        self.discord_settings = load_discord_settings(self.config)

        self.weather_gateway = WeatherGateway(self.weather_settings,
                                              logger=self.logger.getChild('gateway'))
        self.location_store = LocationStore(self.weather_settings,
                                            logger=self.logger.getChild('locations'))
        self.logger.info(f"Saved locations file: {self.weather_settings.locations_file}")

        intents = discord.Intents.default()
        intents.message_content = True
        self.client = discord.Client(intents=intents, application_id=self.discord_settings.client_id)
        self.tree = app_commands.CommandTree(self.client)

        self.command_manager = CommandManager(self)
        self.command_manager.register_slash_commands(self.tree)
        self._register_events()

    @property
    def bot_root(self) -> Path:
        """Get bot root directory (where config.ini is located)"""
        return Path(self.config_file).parent.resolve()

    def load_config(self) -> None:
        """Load configuration from file.

        Reads the configuration file specified in self.config_file. If the file
        does not exist, a default configuration is created first.
        """
        if not Path(self.config_file).exists():
            self.create_default_config()

        # Force UTF-8 so emoji and non-ASCII characters in config.ini parse on Windows.
        self.config.read(self.config_file, encoding="utf-8")

    def create_default_config(self) -> None:
        """Create default configuration file.

        Writes a default config file to disk with standard settings and
        comments explaining each option. Credentials are left empty and are
        expected from the environment (or .env).
        """
        default_config = """[Bot]
# Bot name shown in the help footer and logs
bot_name = WeatherBot

# Prefix for text commands (e.g. !weather)
command_prefix = !

# Saved locations file (relative to this config file)
locations_file = data/locations.json

# Timezone for "Updated" footer times (e.g. America/Los_Angeles); empty = UTC
timezone =

# Enable/disable bot responses
enabled = true

[Discord]
# Bot token; the DISCORD_TOKEN environment variable takes precedence
token =

# Application id; CLIENT_ID environment variable takes precedence
client_id =

# Guild for guild-scoped command registration; empty = global (GUILD_ID overrides)
guild_id =

[Weather]
# OpenWeatherMap API key; OPENWEATHER_API_KEY environment variable takes precedence
api_key =

# Total timeout per provider request in seconds
request_timeout = 10

[Logging]
# Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL
log_level = INFO

# Colored console output
colored_output = true

# Log file (empty = console only)
log_file = weather_bot.log

# Log level for the discord.py library
discord_log_level = WARNING

[Admin_ACL]
# Discord user ids allowed to run admin commands (comma-separated)
admin_users =

# Commands that require admin access
admin_commands = debugweather

[Weather_Command]
enabled = true
cooldown_seconds = 3

[Forecast_Command]
enabled = true
cooldown_seconds = 5

# Delay before the hourly breakdown follow-up message (seconds)
followup_delay_seconds = 0.5

# Number of 3-hour entries in the hourly breakdown
hourly_entries = 6
"""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            f.write(default_config)
        # Note: Using print here since logger may not be initialized yet
        print(f"Created default config file: {self.config_file}")

    def setup_logging(self) -> None:
        """Setup logging configuration.

        Configures console and file handlers for the bot logger and sets a
        separate level for the discord.py loggers. If the [Logging] section is
        missing, uses defaults (console only, no file).
        """
        if self.config.has_section('Logging'):
            log_level = getattr(logging, self.config.get('Logging', 'log_level', fallback='INFO').upper(),
                                logging.INFO)
            colored_output = self.config.getboolean('Logging', 'colored_output', fallback=True)
            log_file = self.config.get('Logging', 'log_file', fallback='weather_bot.log')
            discord_log_level = getattr(logging, self.config.get('Logging', 'discord_log_level',
                                                                 fallback='WARNING').upper(), logging.WARNING)
        else:
            log_level = logging.INFO
            colored_output = True
            log_file = ''  # Console only when no [Logging] section
            discord_log_level = logging.WARNING

        # Create formatter
        if colored_output:
            formatter = colorlog.ColoredFormatter(
                '%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S',
                log_colors={
                    'DEBUG': 'cyan',
                    'INFO': 'green',
                    'WARNING': 'yellow',
                    'ERROR': 'red',
                    'CRITICAL': 'red,bg_white',
                }
            )
        else:
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )

        # Setup logger
        self.logger = logging.getLogger('WeatherBot')
        self.logger.setLevel(log_level)

        # Clear any existing handlers to prevent duplicates
        self.logger.handlers.clear()

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        log_file = log_file.strip() if log_file else ''
        if not log_file:
            self.logger.info("No log file specified, using console logging only")
        else:
            log_path = resolve_path(log_file, self.bot_root)
            try:
                log_path.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(log_path, encoding='utf-8')
                file_handler.setFormatter(formatter)
                self.logger.addHandler(file_handler)
            except OSError as e:
                self.logger.warning(f"Could not open log file {log_path}: {e}. Using console logging only.")

        # Prevent propagation to root logger to avoid duplicate output
        self.logger.propagate = False

        # Configure discord.py logging (separate from bot logging)
        discord_logger = logging.getLogger('discord')
        discord_logger.setLevel(discord_log_level)
        discord_logger.handlers.clear()
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        discord_logger.addHandler(handler)
        discord_logger.propagate = False

        self.logger.info(f"Logging configured - Bot: {logging.getLevelName(log_level)}, "
                         f"Discord: {logging.getLevelName(discord_log_level)}")

    def _load_timezone(self) -> pytz.BaseTzInfo:
        """Timezone used for footer timestamps (UTC when unset or invalid)."""
        timezone_str = self.config.get('Bot', 'timezone', fallback='').strip()
        if not timezone_str:
            return pytz.utc
        try:
            return pytz.timezone(timezone_str)
        except pytz.exceptions.UnknownTimeZoneError:
            self.logger.warning(f"Invalid timezone '{timezone_str}', using UTC")
            return pytz.utc

    def _register_events(self) -> None:
        client = self.client

        @client.event
        async def on_ready():
            self.logger.info(f"Logged in as {client.user} (id: {client.user.id})")

        @client.event
        async def on_message(message: discord.Message):
            if not self.enabled:
                return
            await self.command_manager.handle_message(message)

    async def sync_commands(self, guild_id: Optional[int] = None) -> list:
        """Push the slash-command schema to Discord (full replace).

        Args:
            guild_id: Guild to register in; None registers globally.

        Returns:
            list: The application commands Discord now has for that scope.
        """
        if guild_id:
            guild = discord.Object(id=guild_id)
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
            self.logger.info(f"Successfully reloaded {len(synced)} guild application (/) commands for {guild_id}")
        else:
            synced = await self.tree.sync()
            self.logger.info(f"Successfully reloaded {len(synced)} global application (/) commands")
        return synced

    async def start(self) -> None:
        """Start the bot.

        Opens the shared HTTP session and runs the Discord client until it is
        closed.

        Raises:
            MissingTokenError: If no bot token is configured.
            discord.LoginFailure: If Discord rejects the token.
        """
        token = self.discord_settings.token
        if not token:
            self.logger.error("No Discord bot token configured (set DISCORD_TOKEN or [Discord] token)")
            raise MissingTokenError("Discord bot token is not configured")

        self.logger.info("Starting Weather Bot...")
        await self.weather_gateway.open()

        try:
            await self.client.start(token)
        except discord.LoginFailure as e:
            self.logger.error(f"Discord rejected the bot token: {e}")
            raise

    async def stop(self) -> None:
        """Stop the bot.

        Cancels pending follow-up messages, closes the Discord connection and
        the HTTP session.
        """
        self.logger.info("Stopping Weather Bot...")

        await self.command_manager.cancel_followups()

        if not self.client.is_closed():
            await self.client.close()

        await self.weather_gateway.close()
        self.logger.info("Bot stopped")
