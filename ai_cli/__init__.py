"""Ask a language model from the terminal.

Usage
-----
    ai [options] <prompt>

    ai What is the capital of France?
    ai -n Start a fresh conversation about sorting algorithms
    ai -s Latest Python release notes
    ai -u docs.python.org How do I use asyncio.TaskGroup?

Replies stream straight to the terminal; fenced code blocks are highlighted
once they are complete. Assistant-mode turns are stored in a local SQLite
database and fed back as context on the next call. Search mode (`-s`, or any
`-u URL`) asks a web-search model and keeps no history.

Environment variables
---------------------
* ANTHROPIC_API_KEY – key for the assistant model (required in assistant mode)
* PERPLEXITY_API_KEY – key for the search model (required in search mode)
* ANTHROPIC_BASE_URL / PERPLEXITY_BASE_URL – custom endpoints (optional)
* AI_CLI_MODEL / AI_CLI_SEARCH_MODEL – model overrides (optional)
* AI_CLI_HOME – where conversations.db lives (default ~/.ai-cli)
* AI_CLI_HISTORY_LIMIT – only send the last N stored turns (default: all)
* AI_CLI_THEME – Pygments theme for code blocks (default monokai)
"""

__version__ = "0.3.0"

# Re-export useful symbols for convenience
from .core import ConversationStore, CodeBlockScanner, Message
from .core.client import ProviderClient
from .core.orchestrator import Orchestrator, PromptRequest, SYSTEM_PROMPT
from .cli import run_cli

__all__ = [
    "__version__",
    "ConversationStore",
    "CodeBlockScanner",
    "Message",
    "ProviderClient",
    "Orchestrator",
    "PromptRequest",
    "SYSTEM_PROMPT",
    "run_cli",
]
