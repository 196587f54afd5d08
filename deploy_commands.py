#!/usr/bin/env python3
"""
Register the Weather Bot slash commands with Discord.

Run once after changing commands: python deploy_commands.py [--config config.ini] [--guild-id ID]
Guild registration applies immediately; global registration can take up to an
hour to propagate. Each run replaces the full command set for its scope.
"""

import argparse
import asyncio
import sys

import discord
from dotenv import load_dotenv

from wxbot.core import WeatherBot
from wxbot.settings import parse_snowflake


async def deploy(bot: WeatherBot, guild_id=None) -> int:
    """Log in with the bot token, sync the command tree and log out again.

    Returns:
        int: Number of commands Discord reports for the scope.
    """
    token = bot.discord_settings.token
    if not token:
        raise SystemExit("Error: no Discord bot token configured (set DISCORD_TOKEN or [Discord] token)")

    async with bot.client:
        await bot.client.login(token)
        synced = await bot.sync_commands(guild_id)
    return len(synced)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Register Weather Bot slash commands"
    )
    parser.add_argument(
        "--config",
        default="config.ini",
        help="Path to configuration file (default: config.ini)",
    )
    parser.add_argument(
        "--guild-id",
        default=None,
        help="Register in this guild only (default: GUILD_ID / [Discord] guild_id, else global)",
    )
    args = parser.parse_args()

    load_dotenv()

    bot = WeatherBot(config_file=args.config)
    guild_id = parse_snowflake(args.guild_id) if args.guild_id else bot.discord_settings.guild_id
    scope = f"guild {guild_id}" if guild_id else "global"
    print(f"Started refreshing {len(bot.tree.get_commands())} {scope} application (/) commands.")

    try:
        count = asyncio.run(deploy(bot, guild_id))
    except discord.LoginFailure as e:
        print(f"Error: Discord rejected the bot token: {e}", file=sys.stderr)
        return 1
    except discord.HTTPException as e:
        print(f"Error: command registration failed: {e}", file=sys.stderr)
        return 1

    print(f"Successfully reloaded {count} {scope} application (/) commands.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
