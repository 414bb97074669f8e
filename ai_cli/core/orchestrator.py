"""Assemble the prompt, call the provider and keep the conversation log."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .client import ASSISTANT, SEARCH, ProviderClient
from .errors import UsageError
from .scanner import CodeBlockScanner
from .store import ConversationStore, Message
from ..utils import Spinner, TerminalRenderer

logger = logging.getLogger(__name__)

# Written once as the first turn of every conversation so the model knows its
# answer ends up in a terminal.
SYSTEM_PROMPT = (
    "You are an AI assistant running in a terminal (CLI) environment. "
    "Optimise all answers for 80-column readability, prefer plain text "
    "or concise bullet lists over heavy markup, and wrap code snippets in "
    "fenced blocks with a language tag."
)

SITE_DIRECTIVE = "inurl:"


@dataclass
class PromptRequest:
    prompt: str
    search: bool = False
    url: Optional[str] = None
    new_conversation: bool = False

    @property
    def mode(self) -> str:
        # A URL hint only makes sense for the search model.
        return SEARCH if self.search or self.url else ASSISTANT


def build_search_prompt(prompt: str, url: Optional[str] = None) -> str:
    if url:
        return f"{prompt} {SITE_DIRECTIVE}{url}"
    return prompt


def render_history(messages: Sequence[Message], prompt: str, limit: int = 0) -> str:
    """Flatten *messages* plus the new user turn into one composite prompt.

    With a positive *limit* only the last ``limit`` non-system messages are
    kept; system turns always stay.
    """
    if limit > 0:
        system = [m for m in messages if m.role == "system"]
        rest = [m for m in messages if m.role != "system"]
        messages = system + rest[-limit:]
    lines: List[str] = [f"{m.role}: {m.content}" for m in messages]
    lines.append(f"user: {prompt}")
    lines.append("assistant:")
    return "\n".join(lines)


def history_limit_from_env() -> int:
    raw = os.getenv("AI_CLI_HISTORY_LIMIT", "").strip()
    if not raw:
        return 0
    try:
        limit = int(raw)
    except ValueError:
        raise UsageError(f"AI_CLI_HISTORY_LIMIT must be an integer, got {raw!r}") from None
    return max(limit, 0)


class Orchestrator:
    """Route one prompt to the right provider and stream the answer."""

    def __init__(
        self,
        renderer: Optional[TerminalRenderer] = None,
        provider_factory: Callable[[str], ProviderClient] = ProviderClient.from_env,
        store_factory: Callable[[], ConversationStore] = ConversationStore,
        history_limit: Optional[int] = None,
    ):
        self.renderer = renderer or TerminalRenderer()
        self.provider_factory = provider_factory
        self.store_factory = store_factory
        self.history_limit = history_limit_from_env() if history_limit is None else history_limit

    def run(self, request: PromptRequest) -> str:
        """Answer *request* and return the full reply text.

        The provider is built before the store is opened so a missing
        credential fails without touching disk or network.
        """
        prompt = request.prompt.strip()
        if not prompt:
            raise UsageError("prompt is required")

        mode = request.mode
        provider = self.provider_factory(mode)

        if mode == SEARCH:
            return self._stream(provider, build_search_prompt(prompt, request.url))

        with self.store_factory() as store:
            return self._converse(store, provider, prompt, request.new_conversation)

    # ------------------------------------------------------------------
    # Conversation bookkeeping
    # ------------------------------------------------------------------

    @staticmethod
    def resolve_conversation(store: ConversationStore, new_conversation: bool = False) -> str:
        """Return the conversation to append to, creating one when needed."""
        if not new_conversation:
            current = store.get_current_conversation_id()
            if current is not None:
                return current
        conversation_id = store.append_message(None, "system", SYSTEM_PROMPT, create_new=True)
        logger.debug("Started conversation %s", conversation_id)
        return conversation_id

    def _converse(
        self,
        store: ConversationStore,
        provider: ProviderClient,
        prompt: str,
        new_conversation: bool,
    ) -> str:
        conversation_id = self.resolve_conversation(store, new_conversation)
        history = store.get_conversation_messages(conversation_id)
        composite = render_history(history, prompt, self.history_limit)

        # Saved before the call: a failed request leaves the turn in place.
        store.append_message(conversation_id, "user", prompt)

        reply = self._stream(provider, composite)
        store.append_message(conversation_id, "assistant", reply)
        return reply

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def _stream(self, provider: ProviderClient, prompt: str) -> str:
        logger.debug("Sending %d characters to %s", len(prompt), provider.name)
        scanner = CodeBlockScanner(self.renderer)
        spinner = Spinner(enabled=self.renderer.console.is_terminal)
        spinner.start()
        try:
            for fragment in provider.stream(prompt):
                spinner.stop()
                scanner.feed(fragment)
        finally:
            spinner.stop()
            scanner.finish()
            self.renderer.finish()
        return scanner.text
