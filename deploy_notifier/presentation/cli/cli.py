"""
CLI Module

Architectural Intent:
- Command-line interface for the deploy notifier
- Process entry point: loads config once, wires the container and serves
- Supports --verbose/--debug flags for log level control
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
import traceback

from deploy_notifier.infrastructure.config import load_config, NotifierConfig
from deploy_notifier.infrastructure.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Deploy Notifier: live deployment status in Slack"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output with tracebacks"
    )
    parser.add_argument(
        "--config", "-c", default=None, help="Path to JSON config file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser(
        "serve", help="Listen for pipeline stage events and broadcast status"
    )
    serve_parser.add_argument("--host", default=None, help="Listen address")
    serve_parser.add_argument("--port", "-p", type=int, default=None, help="Listen port")
    serve_parser.add_argument(
        "--interval", "-i", type=int, default=None,
        help="Periodic broadcast interval in seconds",
    )
    serve_parser.add_argument(
        "--json-logs", action="store_true", help="Emit structured JSON logs"
    )
    return parser


def _apply_overrides(config: NotifierConfig, args: argparse.Namespace) -> NotifierConfig:
    """Apply command-line flags on top of the loaded config."""
    web = config.web
    if args.host is not None:
        web = dataclasses.replace(web, host=args.host)
    if args.port is not None:
        web = dataclasses.replace(web, port=args.port)

    broadcast = config.broadcast
    if args.interval is not None:
        broadcast = dataclasses.replace(broadcast, interval_seconds=args.interval)

    return dataclasses.replace(
        config,
        web=web,
        broadcast=broadcast,
        log_json=config.log_json or args.json_logs,
    )


async def serve(config: NotifierConfig) -> None:
    """Run the listener and the periodic broadcaster until cancelled."""
    from deploy_notifier.composition_root import create_container

    container = create_container(config)
    logger = logging.getLogger("deploy_notifier.cli")
    if container.slack_adapter.stub:
        logger.warning("No Slack token configured, running in stub mode")

    await container.web_app.start(config.web.host, config.web.port)
    container.periodic_broadcast.start()
    print(f"[*] Deploy notifier listening on {config.web.host}:{container.web_app.port}")
    try:
        await asyncio.Event().wait()
    finally:
        container.periodic_broadcast.stop()
        container.web_app.stop()
        container.telemetry.shutdown()


async def async_main():
    parser = build_parser()
    args = parser.parse_args()
    verbose = args.verbose or args.debug

    if args.command == "serve":
        try:
            config = _apply_overrides(load_config(args.config), args)
        except ValueError as e:
            print(f"[-] Invalid configuration: {e}")
            if verbose:
                traceback.print_exc()
            sys.exit(1)

        # Configure logging based on flags
        if args.debug:
            level = logging.DEBUG
        elif args.verbose:
            level = logging.INFO
        else:
            level = config.log_level
        configure_logging(level=level, json_format=config.log_json)

        try:
            await serve(config)
        except (OSError, ValueError) as e:
            print(f"[-] Could not start deploy notifier: {e}")
            if verbose:
                traceback.print_exc()
            sys.exit(1)
        return

    parser.print_help()


def main():
    try:
        asyncio.run(async_main())
    except KeyboardInterrupt:
        print("\n[*] Deploy notifier stopped.")


if __name__ == "__main__":
    main()
