from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Tuple

import pagechat.config as _cfg
from pagechat import log
from pagechat.config import Config, load_config
from pagechat.errors import LoginFailed
from pagechat.instance import SharedInstance, new_instance
from pagechat.transport import Client, Sender

logger = logging.getLogger(__name__)


async def log_in(config: Config) -> Tuple[str, Client, Sender]:
    """Log in with the primary alias, falling back to the second one."""
    print(f"Trying to log in as {config.user} in {config.server_address}...")
    try:
        client, sender = await Client.log_in(config.user, config.password, config.server_address)
        return config.user, client, sender
    except LoginFailed as e:
        print(f"Unable to log in as {config.user} in {config.server_address}. Error: {e}", file=sys.stderr)
        logger.warning("login as %s failed: %s", config.user, e)

    print(f"Trying to log in as {config.user_option_2}")
    client, sender = await Client.log_in(config.user_option_2, config.password, config.server_address)
    return config.user_option_2, client, sender


async def run_session(config: Config) -> int:
    from pagechat.tui import PagechatApp

    username, client, sender = await log_in(config)
    shared = SharedInstance(new_instance())
    app = PagechatApp(username, shared, client, sender)
    await app.run_async()
    return app.return_code or 0


def _load(args: argparse.Namespace) -> Config:
    try:
        return load_config(args.config)
    except FileNotFoundError:
        print(f"Config file not found: {args.config or _cfg.CONFIG_FILE}", file=sys.stderr)
        raise SystemExit(2)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)


def cmd_run(args: argparse.Namespace) -> None:
    config = _load(args)
    log_path = log.configure(args.log_level)
    logger.info("pagechat starting, log file %s", log_path)
    try:
        code = asyncio.run(run_session(config))
    except LoginFailed as e:
        print(f"Unable to log in as {config.user_option_2} in {config.server_address}. Error: {e}", file=sys.stderr)
        print("Cannot connect to server. Exiting...", file=sys.stderr)
        raise SystemExit(1)
    except KeyboardInterrupt:
        code = 0
    raise SystemExit(code)


def cmd_check_config(args: argparse.Namespace) -> None:
    config = _load(args)
    print("Config OK.")
    print(f" server : {config.server_address}")
    print(f" user   : {config.user}")
    print(f" alt    : {config.user_option_2}")
    print(f" logs   : {_cfg.LOG_DIR}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pagechat", description="Multi-page terminal chat client")
    p.add_argument("--config", type=Path, help=f"Config file (default: {_cfg.CONFIG_FILE})")
    p.add_argument("--log-level", help="Log level (default: $PAGECHAT_LOG_LEVEL or INFO)")
    sub = p.add_subparsers(dest="cmd", required=False)

    sp = sub.add_parser("run", help="Log in and open the chat screen (default)")
    sp.set_defaults(func=cmd_run)

    sp = sub.add_parser("check-config", help="Validate the config file and print it")
    sp.set_defaults(func=cmd_check_config)

    return p


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    if not getattr(args, "cmd", None):
        cmd_run(args)
        return
    args.func(args)
