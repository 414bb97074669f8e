"""Exceptions raised by the CLI and mapped to process exit codes."""

from __future__ import annotations

from typing import Any, Optional


class AICLIError(Exception):
    """Base class for every fatal, user-visible error."""

    exit_code = 1


class UsageError(AICLIError):
    """Missing prompt, malformed flag or unknown conversation id."""

    exit_code = 2


class CredentialError(AICLIError):
    """The API key for the selected provider is not set."""

    def __init__(self, env_var: str):
        super().__init__(f"{env_var} must be set as an environment variable")
        self.env_var = env_var


class ProviderError(AICLIError):
    """The provider answered with a non-success status or could not be reached."""

    def __init__(self, message: str, status: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status = status
        self.body = body

    def __str__(self) -> str:
        text = super().__str__()
        if self.status is not None:
            text = f"{text} (status {self.status})"
        if self.body:
            text = f"{text}\n{self.body}"
        return text


class StorageError(AICLIError):
    """The conversation database could not be opened or written."""
