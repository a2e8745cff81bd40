#!/usr/bin/env python3
"""
Main entry point for the boot IRC bot
"""

import asyncio
import logging
import sys

from .application_context import ApplicationContext
from .config import get_configuration
from .errors.handling import log_error
from .errors.internal import StoreError
from .irc.client import IRCClient
from .logging_config import LoggerConfigurator


async def main() -> None:
    """Load configuration, build the context and run until disconnected.

    Raises:
        SystemExit: If the configuration or database cannot be opened.
    """
    config = get_configuration()
    try:
        context = await ApplicationContext.create(config)
    except StoreError as e:
        log_error("Unable to open the database", e)
        sys.exit(1)
    runner = context.runner
    if runner is None:
        raise RuntimeError("Application context was created without a runner")
    client = IRCClient(config, runner, context.sink)
    runner_task = asyncio.create_task(runner.run(), name="runner")
    try:
        await client.run()
    except (OSError, TimeoutError) as e:
        log_error("IRC connection failed", e, {"server": config.server})
    finally:
        runner.stop()
        await asyncio.gather(runner_task, return_exceptions=True)
        await context.shutdown()
        logging.info("✅ Application shutdown complete")


def run() -> None:
    """Synchronous entry point for the application.

    Raises:
        SystemExit: If a critical error occurs during execution.
    """
    LoggerConfigurator().configure()
    logging.info("🚀 Starting boot")
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        sys.exit(0)
    except asyncio.CancelledError:
        sys.exit(0)
    except Exception as e:
        log_error("Top-level error", e)
        sys.exit(1)


if __name__ == "__main__":
    run()
