"""Command-line entry point for the ``ai`` tool."""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional, Sequence

import questionary
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .core import AICLIError, ConversationStore, UsageError
from .core.orchestrator import Orchestrator, PromptRequest
from .utils import Ansi, ERROR_LABEL, console, err_console

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Conversation listing & switching
# ---------------------------------------------------------------------------


def list_conversations(store: ConversationStore) -> None:
    conversations = store.list_conversations()
    if not conversations:
        console.print("(no saved conversations)")
        return
    current = store.get_current_conversation_id()
    console.print(Ansi.style("Saved conversations:", Ansi.BOLD, Ansi.FG_MAGENTA))
    for conv in conversations:
        updated = datetime.fromisoformat(conv.updated_at).astimezone().strftime("%Y-%m-%d %H:%M:%S")
        is_current = conv.id == current
        indicator_char = "★" if is_current else " "
        colour = Ansi.FG_GREEN if is_current else Ansi.FG_CYAN
        label = Ansi.style(conv.id, colour)
        console.print(f"  {indicator_char} {label} (updated: {updated})")


def _interactive_picker(
    title: str, options: List[str], current: Optional[str] = None
) -> Optional[str]:
    """Present *options* to the user and return the selected value."""
    if not options:
        console.print("(no items available)")
        return None
    try:
        return questionary.select(title, choices=options, default=current).ask()
    except (KeyboardInterrupt, EOFError):
        console.print()
        return None


def switch_conversation(store: ConversationStore, target: str) -> None:
    """Point the current conversation at *target*, or pick one when empty."""
    if not target:
        options = [conv.id for conv in store.list_conversations()]
        selection = _interactive_picker(
            "Switch to conversation:", options, current=store.get_current_conversation_id()
        )
        if not selection:
            return
        target = selection

    known = {conv.id for conv in store.list_conversations()}
    if target not in known:
        raise UsageError(f"Conversation '{target}' does not exist.")
    store.set_current_conversation(target)
    console.print(f"[switched to conversation {target}]", markup=False)


# ---------------------------------------------------------------------------
# Entrypoint helpers
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai",
        description="Ask a language model from the terminal.",
        epilog="Example: ai What is the capital of France?",
    )
    parser.add_argument("prompt", nargs="*", help="Prompt words, joined with single spaces")
    parser.add_argument("--version", "-V", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--search", "-s", action="store_true", help="Use the web-search model")
    parser.add_argument("--url", "-u", help="Restrict search results to URLs containing URL (implies --search)")
    parser.add_argument("--new", "-n", action="store_true", help="Start a new conversation")
    parser.add_argument("--list", "-l", action="store_true", help="List saved conversations")
    parser.add_argument(
        "--switch",
        nargs="?",
        const="",
        metavar="ID",
        help="Make conversation ID the current one (pick interactively without ID)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output to stderr")
    return parser


def configure_logging(verbose: bool = False) -> None:
    package_logger = logging.getLogger("ai_cli")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        handler = RichHandler(console=err_console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(handler)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        if args.list:
            with ConversationStore() as store:
                list_conversations(store)
            return 0

        if args.switch is not None:
            with ConversationStore() as store:
                switch_conversation(store, args.switch)
            return 0

        request = PromptRequest(
            prompt=" ".join(args.prompt).strip(),
            search=args.search,
            url=args.url,
            new_conversation=args.new,
        )
        Orchestrator().run(request)
    except UsageError as exc:
        parser.print_help(sys.stderr)
        err_console.print(f"{ERROR_LABEL}: {escape(str(exc))}")
        return exc.exit_code
    except AICLIError as exc:
        logger.debug("Fatal error", exc_info=True)
        err_console.print(f"{ERROR_LABEL}: {escape(str(exc))}")
        return exc.exit_code
    except KeyboardInterrupt:
        err_console.print("\n[interrupted]", markup=False)
        return 130
    return 0


def run_cli(argv: Optional[Sequence[str]] = None) -> None:  # pragma: no cover
    sys.exit(main(argv))


if __name__ == "__main__":  # pragma: no cover
    run_cli()
