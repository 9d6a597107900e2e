"""Generic chat-completion contract.

Provider adapters implement `LanguageModel`; callers only ever see the types
defined here and in `llmbridge.llm.stream`. Options are plain
`LanguageModelConfig -> LanguageModelConfig` functions folded in order, so the
last option touching a field wins.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import Enum

from llmbridge.llm.stream import TextStreamResult


class PostRole(str, Enum):
    """Speaker of one conversation turn."""

    SYSTEM = 'system'
    USER = 'user'
    BOT = 'bot'


@dataclass(frozen=True)
class Post:
    """One turn of a conversation."""

    role: PostRole
    message: str


@dataclass(frozen=True)
class CompletionRequest:
    """An ordered conversation to complete.

    Attributes:
        posts: Conversation history, oldest first.
    """

    posts: tuple[Post, ...] = field(default_factory=tuple)

    def extract_system_message(self) -> str:
        """Return the first system turn's text, or an empty string."""
        for post in self.posts:
            if post.role == PostRole.SYSTEM:
                return post.message
        return ''


@dataclass(frozen=True)
class LanguageModelConfig:
    model: str
    max_generated_tokens: int


LanguageModelOption = Callable[[LanguageModelConfig], LanguageModelConfig]


def with_model(model: str) -> LanguageModelOption:
    def option(cfg: LanguageModelConfig) -> LanguageModelConfig:
        return replace(cfg, model=model)

    return option


def with_max_generated_tokens(max_tokens: int) -> LanguageModelOption:
    def option(cfg: LanguageModelConfig) -> LanguageModelConfig:
        return replace(cfg, max_generated_tokens=max_tokens)

    return option


def apply_options(cfg: LanguageModelConfig, options: Iterable[LanguageModelOption]) -> LanguageModelConfig:
    """Fold `options` over `cfg` left to right."""
    for option in options:
        cfg = option(cfg)
    return cfg


class LanguageModel(ABC):
    """Chat-completion adapter for one backend."""

    @abstractmethod
    def get_default_config(self) -> LanguageModelConfig:
        raise NotImplementedError

    @abstractmethod
    async def chat_completion(
            self, request: CompletionRequest, *options: LanguageModelOption
    ) -> TextStreamResult:
        """Complete `request`, returning the output as a stream."""
        raise NotImplementedError

    @abstractmethod
    async def chat_completion_no_stream(
            self, request: CompletionRequest, *options: LanguageModelOption
    ) -> str:
        """Complete `request`, returning the full output text."""
        raise NotImplementedError

    @abstractmethod
    def count_tokens(self, text: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def input_token_limit(self) -> int:
        raise NotImplementedError

