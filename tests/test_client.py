import unittest
from unittest.mock import Mock, patch

import httpx
import openai

from ai_cli import ProviderClient
from ai_cli.core import CredentialError, ProviderError
from ai_cli.core.client import ASSISTANT, SEARCH, resolve_credential

from .test_base import chunks

REQUEST = httpx.Request("POST", "https://example.test/chat/completions")


class TestProviderClient(unittest.TestCase):
    def setUp(self):
        self.mock_client = Mock()
        self.provider = ProviderClient(self.mock_client, model="test-model", name="test")

    def test_missing_credential(self):
        with self.assertRaises(CredentialError) as ctx:
            resolve_credential(ASSISTANT, {})
        self.assertEqual(ctx.exception.env_var, "ANTHROPIC_API_KEY")

        with self.assertRaises(CredentialError) as ctx:
            resolve_credential(SEARCH, {"ANTHROPIC_API_KEY": "a", "PERPLEXITY_API_KEY": "  "})
        self.assertEqual(ctx.exception.env_var, "PERPLEXITY_API_KEY")

    @patch("ai_cli.core.client.OpenAI")
    def test_from_env_checks_credential_before_building_client(self, mock_openai):
        with self.assertRaises(CredentialError):
            ProviderClient.from_env(SEARCH, {})
        mock_openai.assert_not_called()

    @patch("ai_cli.core.client.OpenAI")
    def test_from_env_defaults(self, mock_openai):
        provider = ProviderClient.from_env(ASSISTANT, {"ANTHROPIC_API_KEY": "sk-ant"})
        mock_openai.assert_called_once_with(api_key="sk-ant", base_url="https://api.anthropic.com/v1/")
        self.assertEqual(provider.model, "claude-sonnet-4-5")
        self.assertEqual(provider.name, "anthropic")

        provider = ProviderClient.from_env(SEARCH, {"PERPLEXITY_API_KEY": "pplx"})
        self.assertEqual(provider.model, "sonar")
        self.assertEqual(mock_openai.call_args.kwargs["base_url"], "https://api.perplexity.ai")

    @patch("ai_cli.core.client.OpenAI")
    def test_from_env_overrides(self, mock_openai):
        provider = ProviderClient.from_env(
            SEARCH,
            {
                "PERPLEXITY_API_KEY": "pplx",
                "PERPLEXITY_BASE_URL": "http://localhost:8080",
                "AI_CLI_SEARCH_MODEL": "sonar-pro",
            },
        )
        self.assertEqual(provider.model, "sonar-pro")
        self.assertEqual(mock_openai.call_args.kwargs["base_url"], "http://localhost:8080")

    def test_stream_yields_text_fragments(self):
        response = chunks("Hel", None, "", "lo")
        response.insert(1, Mock(choices=[]))
        self.mock_client.chat.completions.create.return_value = response

        self.assertEqual(list(self.provider.stream("hi")), ["Hel", "lo"])
        self.mock_client.chat.completions.create.assert_called_once_with(
            model="test-model",
            messages=[{"role": "user", "content": "hi"}],
            stream=True,
        )

    def test_status_error_reported_with_status_and_body(self):
        self.mock_client.chat.completions.create.side_effect = openai.APIStatusError(
            "boom",
            response=httpx.Response(401, request=REQUEST),
            body={"error": "invalid key"},
        )
        with self.assertRaises(ProviderError) as ctx:
            list(self.provider.stream("hi"))
        self.assertEqual(ctx.exception.status, 401)
        self.assertEqual(ctx.exception.body, {"error": "invalid key"})
        self.assertIn("401", str(ctx.exception))

    def test_connection_error(self):
        self.mock_client.chat.completions.create.side_effect = openai.APIConnectionError(request=REQUEST)
        with self.assertRaises(ProviderError) as ctx:
            list(self.provider.stream("hi"))
        self.assertIsNone(ctx.exception.status)


if __name__ == "__main__":
    unittest.main()
