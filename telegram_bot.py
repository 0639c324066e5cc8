#!/usr/bin/env python3
from __future__ import annotations

"""
Telegram front end for transmission_notifier.

Usage
-----
python telegram_bot.py --token <bot-token> [--config config.json]

Flow
----
- User sends a ``.torrent`` file.
- Bot adds it to Transmission, replies ``Added "<name>"`` and wait-lists it.
- Once Transmission reports the torrent as seeding, the same chat gets
  ``✅ Torrent finished "<name>"``.
"""

import argparse
import logging

from telegram.ext import Application, ApplicationBuilder, CommandHandler, MessageHandler, filters

from transmission_notifier.config import AppConfig, ConfigError, ConfigLoader
from transmission_notifier.monitor import WaitListMonitor
from transmission_notifier.submission import SubmissionHandler
from transmission_notifier.telegram import MessageFactory, TelegramNotifier, TelegramNotifierController
from transmission_notifier.transmission import TransmissionController
from transmission_notifier.wait_list import WaitListStore

LOGGER = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Telegram bot that reports finished Transmission downloads.")
    parser.add_argument("--config", default="config.json", help="Path to the JSON configuration file.")
    parser.add_argument("--token", help="Telegram Bot API token (overrides config/env).")
    parser.add_argument("--redis-url", help="Redis URL holding the wait list (overrides config).")
    parser.add_argument("--poll-interval", type=float, help="Seconds between wait list checks (default: 1).")
    parser.add_argument(
        "--telemetry-level",
        help="Logging level for stdout (DEBUG/INFO/WARNING/ERROR); defaults to the config value.",
    )
    return parser.parse_args()


def build_app(config: AppConfig, token: str) -> Application:
    transmission = TransmissionController(config.transmission)
    wait_list = WaitListStore.from_config(config.redis)
    messages = MessageFactory()
    submissions = SubmissionHandler(transmission, wait_list)
    controller = TelegramNotifierController(
        transmission,
        submissions,
        messages,
        allowed_users=config.telegram.allowed_users,
    )

    application = ApplicationBuilder().token(token).build()
    monitor = WaitListMonitor(
        wait_list,
        transmission,
        TelegramNotifier(application.bot),
        messages,
        interval_seconds=config.monitor.poll_interval,
    )

    application.add_handler(CommandHandler("start", controller.handle_start))
    application.add_handler(CommandHandler("help", controller.handle_help))
    application.add_handler(CommandHandler("list", controller.handle_list))
    application.add_handler(MessageHandler(filters.Document.ALL, controller.handle_document))
    monitor.enable_background_tasks(application)

    async def close_wait_list(_: Application) -> None:
        await wait_list.close()

    application.post_shutdown = close_wait_list
    return application


def main() -> None:
    args = parse_args()

    loader = ConfigLoader(args.config)
    try:
        config = loader.load()
        config = ConfigLoader.apply_overrides(
            config,
            {"token": args.token, "redis_url": args.redis_url, "poll_interval": args.poll_interval},
        )
        token = ConfigLoader.resolve_token(config)
    except ConfigError as exc:
        raise SystemExit(f"Config error: {exc}") from exc

    level_name = (args.telemetry_level or config.logging.level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not config.telegram.allowed_users:
        LOGGER.warning("telegram.allowed_users is empty; every sender will be refused.")

    application = build_app(config, token)

    LOGGER.info("Starting Telegram bot in polling mode.")
    application.run_polling()


if __name__ == "__main__":
    main()
