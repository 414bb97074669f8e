import io
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

from rich.console import Console

from ai_cli import ConversationStore, Orchestrator, ProviderClient
from ai_cli.utils import TerminalRenderer


class RecordingSink:
    """Scanner sink that keeps events, merging adjacent plain-text writes."""

    def __init__(self):
        self.events = []

    def write_text(self, text):
        if self.events and self.events[-1][0] == "text":
            self.events[-1] = ("text", self.events[-1][1] + text)
        else:
            self.events.append(("text", text))

    def write_code(self, language, code):
        self.events.append(("code", language, code))


def make_console():
    return Console(file=io.StringIO(), force_terminal=False, color_system=None, width=100)


def chunks(*fragments):
    """Fake streaming response in the shape the OpenAI SDK yields."""
    return [Mock(choices=[Mock(delta=Mock(content=f))]) for f in fragments]


class BaseAICLITest(unittest.TestCase):
    def setUp(self):
        # Keep the conversation database in a throwaway directory
        self.tmp = tempfile.TemporaryDirectory()
        self.data_dir = Path(self.tmp.name)
        self.data_dir_patcher = patch.object(ConversationStore, "DATA_DIR", self.data_dir)
        self.data_dir_patcher.start()

        self.console = make_console()
        self.renderer = TerminalRenderer(console=self.console, theme="monokai")

        # Mock the OpenAI client
        self.mock_client = Mock()
        self.provider = ProviderClient(self.mock_client, model="test-model", name="test")
        self.requested_modes = []

        self.orchestrator = Orchestrator(
            self.renderer,
            provider_factory=self.provider_factory,
            history_limit=0,
        )

    def tearDown(self):
        self.data_dir_patcher.stop()
        self.tmp.cleanup()

    @property
    def db_path(self):
        return self.data_dir / ConversationStore.DB_FILENAME

    @property
    def output(self):
        return self.console.file.getvalue()

    def provider_factory(self, mode):
        self.requested_modes.append(mode)
        return self.provider

    def stream_reply(self, *fragments):
        self.mock_client.chat.completions.create.return_value = chunks(*fragments)

    def sent_prompt(self, call_index=-1):
        call = self.mock_client.chat.completions.create.call_args_list[call_index]
        return call.kwargs["messages"][0]["content"]
