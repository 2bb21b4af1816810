"""CLI entry point for the TerminPilot agent.

A terminal chat for testing and development.  Like the HTTP endpoint, every
message starts a fresh session.  For production, use the FastAPI server
(src/server.py).

Usage:
    uv run python -m src.main                  # normal mode (quiet)
    uv run python -m src.main --debug          # debug mode (shows API calls)
    uv run python -m src.main --max-rounds 4   # tighter loop limit
"""

from __future__ import annotations

import argparse
import logging

from dotenv import load_dotenv

from src.agent import create_booking_agent, run_chat
from src.catalog import build_settings
from src.errors import ModelServiceError, RoundLimitExceeded

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool = False) -> None:
    """Set up logging: WARNING by default, DEBUG when --debug is passed."""
    root_level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=root_level,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )

    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("src").setLevel(logging.DEBUG if debug else logging.INFO)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="TerminPilot agent CLI")
    parser.add_argument(
        "--debug", action="store_true",
        help="Show all log messages including HTTP requests",
    )
    parser.add_argument(
        "--max-rounds", type=int, default=None,
        help="Override the maximum number of model rounds per message",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Run the interactive CLI chat loop."""
    args = _parse_args(argv)

    load_dotenv()
    _configure_logging(debug=args.debug)

    overrides = {}
    if args.max_rounds is not None:
        overrides["max_rounds"] = args.max_rounds
    settings = build_settings(**overrides)

    print("\n" + "=" * 60)
    print("  TerminPilot - CLI Chat")
    print("=" * 60)
    print("  Type your message and press Enter. 'quit' to exit.")
    print("=" * 60 + "\n")

    agent = create_booking_agent(settings)

    while True:
        try:
            user_input = input("Sie: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\nAuf Wiedersehen!")
            break

        if not user_input:
            continue

        if user_input.lower() in ("exit", "quit", "q"):
            print("\nAuf Wiedersehen!")
            break

        try:
            reply = run_chat(agent, user_input, settings)
            print(f"\nTerminPilot: {reply}\n")
        except KeyboardInterrupt:
            print("\n\nAuf Wiedersehen!")
            break
        except (RoundLimitExceeded, ModelServiceError) as e:
            logger.warning("Chat failed: %s", e)
            print(f"\nTerminPilot: Entschuldigung, das hat nicht geklappt ({type(e).__name__}: {e}).\n")
        except Exception as e:
            logger.exception("Error processing message")
            print(f"\nTerminPilot: Entschuldigung, ein Fehler ist aufgetreten: {e}\n")


if __name__ == "__main__":
    main()
