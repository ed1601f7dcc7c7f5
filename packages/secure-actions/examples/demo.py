"""Demo: issue a one-click unsubscribe link and serve it.

Usage:
    python -m examples.demo --debug

Then open the printed link. The first visit unsubscribes, the second one
reports that the link was already used.
"""

from __future__ import annotations

import argparse
import logging

from secure_actions import (
    ACTION_EXECUTED,
    ACTION_REJECTED,
    ActionNotFoundError,
    SecureActions,
    Settings,
)
from secure_actions.server import build_action_url, serve
from examples.unsubscribe_handler import UnsubscribeHandler


def main() -> None:
    parser = argparse.ArgumentParser(description="Secure actions demo server")
    parser.add_argument("--host", default="localhost", help="Bind address (default: localhost)")
    parser.add_argument("--port", type=int, default=8991, help="Port (default: 8991)")
    parser.add_argument("--db", default="demo.db", help="SQLite database file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = Settings(db_path=args.db)
    system = SecureActions(settings=settings)
    handler = UnsubscribeHandler()
    handler.subscribe("weekly", "ada@example.com")
    system.register_handler(handler)

    system.events.on(ACTION_EXECUTED, lambda action, result: print(f"Executed {action.name}: {result}"))
    system.events.on(ACTION_REJECTED, lambda error: print(f"Rejected: {error}"))

    # Clear out leftovers from previous runs before issuing a new link
    system.sweep()
    name = "unsubscribe-weekly-ada"
    try:
        system.delete_action(system.get_action_by_name(name), force=True)
    except ActionNotFoundError:
        pass
    token = system.add_action(
        name,
        handler.handler_id,
        ["weekly", "ada@example.com"],
        expiration=7 * 24 * 3600,
        limit=1,
    )

    base = f"http://{args.host}:{args.port}"
    print(f"\nUnsubscribe link: {build_action_url(base, token, settings.token_query_param)}\n")
    serve(system, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
