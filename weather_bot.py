#!/usr/bin/env python3
"""
Weather Bot for Discord using OpenWeatherMap
Uses a modular structure for command creation and organization
"""

import argparse
import asyncio
import signal
import sys

from dotenv import load_dotenv


def main():
    parser = argparse.ArgumentParser(
        description="Weather Bot - Discord bot for OpenWeatherMap conditions and forecasts"
    )
    parser.add_argument(
        "--config",
        default="config.ini",
        help="Path to configuration file (default: config.ini)",
    )
    parser.add_argument(
        "--validate-config",
        action="store_true",
        help="Validate config and exit before starting the bot (exit 1 on errors)",
    )

    args = parser.parse_args()

    # DISCORD_TOKEN / OPENWEATHER_API_KEY / CLIENT_ID / GUILD_ID may live in .env
    load_dotenv()

    if args.validate_config:
        from validate_config import report
        from wxbot.config_validation import validate_config
        sys.exit(1 if report(validate_config(args.config)) else 0)

    import discord

    from wxbot.core import MissingTokenError, WeatherBot
    bot = WeatherBot(config_file=args.config)

    async def run_bot():
        """Run bot with proper signal handling"""
        # Set up signal handlers for graceful shutdown (Unix only)
        if sys.platform != 'win32':
            loop = asyncio.get_running_loop()
            shutdown_event = asyncio.Event()
            bot_task = None

            def signal_handler():
                """Signal handler for graceful shutdown"""
                print("\nShutting down...")
                shutdown_event.set()

            try:
                for sig in (signal.SIGTERM, signal.SIGINT):
                    loop.add_signal_handler(sig, signal_handler)

                bot_task = asyncio.create_task(bot.start())

                # Wait for shutdown or completion
                done, pending = await asyncio.wait(
                    [bot_task, asyncio.create_task(shutdown_event.wait())],
                    return_when=asyncio.FIRST_COMPLETED
                )

                for task in pending:
                    task.cancel()
                    try:
                        await task
                    except asyncio.CancelledError:
                        pass

                # Await bot_task so its exception (if any) surfaces here
                if bot_task:
                    try:
                        await bot_task
                    except asyncio.CancelledError:
                        pass
            finally:
                await bot.stop()
        else:
            # Windows: just run and catch KeyboardInterrupt
            try:
                await bot.start()
            finally:
                await bot.stop()

    try:
        asyncio.run(run_bot())
    except KeyboardInterrupt:
        # Cleanup already handled in run_bot's finally block
        print("\nShutdown complete.")
    except MissingTokenError as e:
        print(f"Error: {e}. Set DISCORD_TOKEN or [Discord] token.", file=sys.stderr)
        sys.exit(1)
    except discord.LoginFailure as e:
        print(f"Error: Discord rejected the bot token: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
