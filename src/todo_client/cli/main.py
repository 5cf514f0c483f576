# src/todo_client/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, validates any stored session against
the server, then runs the console front-end until /exit or Ctrl+C.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import close_state, create_initial_state
from ..config import Settings, get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(settings: Settings) -> None:
    state = create_initial_state(settings=settings)
    try:
        user = await state.session.restore_session()
        if user is not None:
            print(f"Welcome back, {user.name}.")
        else:
            last = state.credentials.last_registration()
            hint = f" /login {last.email} <password>" if last else " /login <email> <password>"
            print(f"Not logged in. Use{hint} or /register.")

        if settings.console_enabled:
            await run_console_loop(state)
        else:
            logger.info("Console disabled; session check done, nothing else to run.")
    finally:
        await close_state(state)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(log_dir=settings.data_dir, console_level=settings.log_level)

    logger.info("Starting %s (server=%s, log=%s)...", settings.app_name, settings.api_base_url, log_file)

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
