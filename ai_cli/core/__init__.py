from .errors import AICLIError, CredentialError, ProviderError, StorageError, UsageError
from .scanner import CodeBlockScanner, INSIDE_UNRESOLVED_BLOCK, OUTSIDE_BLOCK
from .store import ConversationStore, ConversationSummary, Message

__all__ = [
    "AICLIError",
    "CredentialError",
    "ProviderError",
    "StorageError",
    "UsageError",
    "CodeBlockScanner",
    "INSIDE_UNRESOLVED_BLOCK",
    "OUTSIDE_BLOCK",
    "ConversationStore",
    "ConversationSummary",
    "Message",
]
