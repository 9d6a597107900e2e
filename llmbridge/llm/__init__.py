"""Generic LLM chat layer.

This package intentionally contains ONLY the provider-neutral contract.

Rules:
- No HTTP here.
- No backend-specific message shapes here.
- No retries.

Backend adapters live in their own packages (e.g. `llmbridge.asage`).
"""

from .base import (
    CompletionRequest,
    LanguageModel,
    LanguageModelConfig,
    LanguageModelOption,
    Post,
    PostRole,
    apply_options,
    with_max_generated_tokens,
    with_model,
)
from .stream import (
    CompletedStream,
    EventType,
    PendingStream,
    TextStreamEvent,
    TextStreamResult,
    stream_from_string,
)
