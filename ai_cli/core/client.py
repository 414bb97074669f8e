"""Provider clients: streaming chat completions through the OpenAI SDK.

Both providers expose OpenAI-compatible endpoints, so a single wrapper around
:class:`openai.OpenAI` covers the general assistant (Anthropic) and the
web-search model (Perplexity). Only the credential, base URL and model differ.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, Iterator, Mapping, Optional

import openai
from openai import OpenAI  # type: ignore

from .errors import CredentialError, ProviderError

logger = logging.getLogger(__name__)

ASSISTANT = "assistant"
SEARCH = "search"

PROVIDERS: Dict[str, Dict[str, str]] = {
    ASSISTANT: {
        "name": "anthropic",
        "key_env": "ANTHROPIC_API_KEY",
        "base_url_env": "ANTHROPIC_BASE_URL",
        "base_url": "https://api.anthropic.com/v1/",
        "model_env": "AI_CLI_MODEL",
        "model": "claude-sonnet-4-5",
    },
    SEARCH: {
        "name": "perplexity",
        "key_env": "PERPLEXITY_API_KEY",
        "base_url_env": "PERPLEXITY_BASE_URL",
        "base_url": "https://api.perplexity.ai",
        "model_env": "AI_CLI_SEARCH_MODEL",
        "model": "sonar",
    },
}


def resolve_credential(mode: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the API key for *mode* or raise :class:`CredentialError`."""
    environ = os.environ if environ is None else environ
    key_env = PROVIDERS[mode]["key_env"]
    api_key = environ.get(key_env, "").strip()
    if not api_key:
        raise CredentialError(key_env)
    return api_key


class ProviderClient:
    """Thin wrapper around the OpenAI Python SDK yielding text fragments."""

    def __init__(self, client: OpenAI, model: str, name: str = "provider"):
        self.client = client
        self.model = model
        self.name = name

    @classmethod
    def from_env(
        cls, mode: str, environ: Optional[Mapping[str, str]] = None
    ) -> "ProviderClient":
        """Build the client for *mode*; the credential is checked first."""
        environ = os.environ if environ is None else environ
        settings = PROVIDERS[mode]
        api_key = resolve_credential(mode, environ)
        base_url = environ.get(settings["base_url_env"]) or settings["base_url"]
        model = environ.get(settings["model_env"]) or settings["model"]
        logger.debug("Using %s model %s at %s", settings["name"], model, base_url)
        client = OpenAI(api_key=api_key, base_url=base_url)  # type: ignore[arg-type]
        return cls(client, model, name=settings["name"])

    def stream(self, prompt: str) -> Iterator[str]:
        """Send *prompt* as a single user message and yield the reply as it arrives."""
        try:
            response = self.client.chat.completions.create(  # type: ignore[arg-type]
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                stream=True,
            )
            for chunk in response:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    yield content
        except openai.APIStatusError as e:
            raise ProviderError(
                f"Request to {self.name} failed", status=e.status_code, body=_error_body(e)
            ) from e
        except openai.OpenAIError as e:
            raise ProviderError(f"Request to {self.name} failed: {e}") from e


def _error_body(error: "openai.APIStatusError") -> object:
    return error.body if error.body is not None else error.message
