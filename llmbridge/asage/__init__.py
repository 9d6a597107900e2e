"""ASage adapter: query client plus the `LanguageModel` provider built on it."""

from .client import Client, Message, QueryParams, QueryResponse, Role
from .provider import (
    DEFAULT_INPUT_TOKEN_LIMIT,
    DEFAULT_PERSONA,
    Provider,
    conversation_to_messages,
    estimate_tokens,
)
