#!/usr/bin/env python3
"""
Team Trivia Board entry point.

Runs the Discord trivia board with settings from config.json. The bot token
comes from the DISCORD_BOT_TOKEN environment variable or, failing that, from
the ``bot.token`` field of the config file.

Usage:
    python main.py [path/to/config.json]
"""

import asyncio
import logging
import os
import sys
from pathlib import Path

from trivia_board.config_manager import ConfigManager

PLACEHOLDER_TOKEN = "YOUR_DISCORD_BOT_TOKEN_HERE"


def load_config(path="config.json"):
    """Read the config file, exiting with a readable message if it is unusable."""
    result = ConfigManager().load_config_file(path)
    if not result['success']:
        print(result['user_message'])
        sys.exit(1)
    return result['config']


def get_bot_token(config):
    """Resolve the bot token, the environment variable winning over config.json."""
    token = os.getenv('DISCORD_BOT_TOKEN') or config.get('bot', {}).get('token')
    if not token or token == PLACEHOLDER_TOKEN:
        print("❌ No Discord bot token: set DISCORD_BOT_TOKEN or bot.token in config.json")
        sys.exit(1)
    return token


def setup_logging_from_config(config):
    """Log to the console and to <log_directory>/bot.log at the configured level."""
    log_config = config.get('logging', {})
    level = getattr(logging, str(log_config.get('level', 'INFO')).upper(), logging.INFO)
    log_directory = Path(log_config.get('log_directory', './logs/'))
    log_directory.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_directory / "bot.log", encoding='utf-8')
        ]
    )

    # discord.py is chatty at INFO
    for name in ('discord', 'discord.http'):
        logging.getLogger(name).setLevel(logging.WARNING)


async def run_bot_with_config(config_path="config.json"):
    config = load_config(config_path)
    setup_logging_from_config(config)
    token = get_bot_token(config)

    from trivia_board.bot import run_bot
    await run_bot(token, config)


if __name__ == "__main__":
    path = sys.argv[1] if len(sys.argv) > 1 else "config.json"
    try:
        print("🎲 Starting Team Trivia Board...")
        asyncio.run(run_bot_with_config(path))
    except KeyboardInterrupt:
        print("\n👋 Bot stopped by user")
    except Exception as e:
        print(f"❌ Failed to start bot: {e}")
        sys.exit(1)
