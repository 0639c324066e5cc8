#!/usr/bin/env python3
from __future__ import annotations

"""
Operator CLI for Transmission Notifier.

Peek at the wait list, submit a torrent on someone's behalf, or run a
single reconciliation pass without starting the whole bot.
"""

import argparse
import asyncio
import logging
from typing import Any

from telegram import Bot

from transmission_notifier.config import AppConfig, ConfigError, ConfigLoader
from transmission_notifier.errors import SubmissionError
from transmission_notifier.monitor import WaitListMonitor
from transmission_notifier.submission import SubmissionHandler
from transmission_notifier.telegram import TelegramNotifier
from transmission_notifier.transmission import TransmissionController
from transmission_notifier.wait_list import WaitListStore


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Build and parse the CLI arguments.

    Returns
    -------
    argparse.Namespace
        The parsed arguments, with ``command`` naming the subcommand.
    """

    parser = argparse.ArgumentParser(description="Inspect and drive the Transmission Notifier wait list.")
    parser.add_argument("--config", default="config.json", help="Path to the JSON configuration file.")
    parser.add_argument("--host", help="Override Transmission host.")
    parser.add_argument("--port", type=int, help="Override Transmission port.")
    parser.add_argument("--username", help="Transmission RPC username.")
    parser.add_argument("--password", help="Transmission RPC password.")
    parser.add_argument("--redis-url", help="Override the Redis URL.")
    parser.add_argument("--token", help="Telegram Bot API token, needed by `check` to send notifications.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging regardless of config.")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("pending", help="Print every wait-listed torrent and its chat.")
    add_parser = subparsers.add_parser("add", help="Add a torrent URL and wait-list it for a chat.")
    add_parser.add_argument("url", help="Fetchable .torrent URL or magnet link.")
    add_parser.add_argument("--chat-id", type=int, required=True, help="Chat to notify when the torrent finishes.")
    subparsers.add_parser("check", help="Run one reconciliation pass and print the result.")
    return parser.parse_args(argv)


def configure_logging(config: AppConfig, debug: bool) -> None:
    level_name = "DEBUG" if debug else config.logging.level.upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def collect_overrides(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "host": args.host,
        "port": args.port,
        "username": args.username,
        "password": args.password,
        "redis_url": args.redis_url,
        "token": args.token,
    }


async def show_pending(wait_list: WaitListStore) -> None:
    entries = await wait_list.entries()
    if not entries:
        print("Wait list is empty.")
        return
    for entry in entries:
        print(f"{entry.torrent_id}\t-> chat {entry.recipient_id}")


async def add_torrent(config: AppConfig, wait_list: WaitListStore, url: str, chat_id: int) -> None:
    handler = SubmissionHandler(TransmissionController(config.transmission), wait_list)
    try:
        added = await handler.submit(url, chat_id)
    except SubmissionError as exc:
        raise SystemExit(f"ERROR: {exc}") from exc
    print(f'Added "{added.name}" as torrent {added.torrent_id}, chat {chat_id} is waiting for it.')


async def check_once(config: AppConfig, wait_list: WaitListStore) -> None:
    try:
        token = ConfigLoader.resolve_token(config)
    except ConfigError as exc:
        raise SystemExit(str(exc)) from exc

    async with Bot(token) as bot:
        monitor = WaitListMonitor(wait_list, TransmissionController(config.transmission), TelegramNotifier(bot))
        result = await monitor.run_guarded_pass()

    if result.error is not None:
        raise SystemExit(f"ERROR: pass failed: {result.error}")
    if result.idle:
        print("Wait list is empty, Transmission was not queried.")
        return
    print(
        f"checked={result.checked} finished={result.finished} vanished={result.vanished} "
        f"pending={result.pending} notified={result.notified}"
    )


async def run(args: argparse.Namespace, config: AppConfig) -> None:
    wait_list = WaitListStore.from_config(config.redis)
    try:
        if args.command == "pending":
            await show_pending(wait_list)
        elif args.command == "add":
            await add_torrent(config, wait_list, args.url, args.chat_id)
        elif args.command == "check":
            await check_once(config, wait_list)
    finally:
        await wait_list.close()


def main(argv: list[str] | None = None) -> None:
    """
    Run the CLI workflow.

    Steps
    -----
    1. Parse CLI arguments.
    2. Load config and apply overrides.
    3. Dispatch to the chosen subcommand.
    """

    args = parse_args(argv)

    loader = ConfigLoader(args.config)
    try:
        config = ConfigLoader.apply_overrides(loader.load(), collect_overrides(args))
    except ConfigError as exc:
        raise SystemExit(str(exc)) from exc

    configure_logging(config, args.debug)
    asyncio.run(run(args, config))


if __name__ == "__main__":
    main()
