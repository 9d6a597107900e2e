"""ASage language-model provider.

ASage has no streaming and no tool calling upstream, so `chat_completion`
waits for the full answer and hands it back as an already-completed stream.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import Protocol

import httpx

from llmbridge.asage.client import Client, Message, QueryParams, QueryResponse, Role
from llmbridge.config import ServiceConfig
from llmbridge.llm.base import (
    CompletionRequest,
    LanguageModel,
    LanguageModelConfig,
    LanguageModelOption,
    Post,
    PostRole,
    apply_options,
)
from llmbridge.llm.stream import TextStreamResult, stream_from_string
from llmbridge.observability.tracing import traced_call

DEFAULT_PERSONA = 'default'

# Placeholder: ASage does not document its context window.
DEFAULT_INPUT_TOKEN_LIMIT = 200_000

TOKEN_ESTIMATE_BUFFER = 100


class QueryClient(Protocol):
    async def query(self, params: QueryParams) -> QueryResponse:
        ...


# SYSTEM maps to None: system text travels in QueryParams.system_prompt.
_BACKEND_ROLES: dict[PostRole, Role | None] = {
    PostRole.SYSTEM: None,
    PostRole.USER: Role.USER,
    PostRole.BOT: Role.GPT,
}


def conversation_to_messages(posts: Iterable[Post]) -> list[Message]:
    """Convert conversation turns into ASage messages.

    System turns are dropped. Roles ASage has never heard of are sent as USER
    so their text still reaches the model.
    """
    result: list[Message] = []
    for post in posts:
        role = _BACKEND_ROLES.get(post.role, Role.USER)
        if role is None:
            continue
        result.append(Message(user=role, message=post.message))
    return result


def estimate_tokens(text: str) -> int:
    """Rough token count for `text`. An approximation, not a guarantee.

    Averages a 4-chars-per-token and a 0.75-words-per-token estimate, then
    adds a fixed buffer so the result leans high. Characters are Unicode code
    points, not UTF-8 bytes, so non-Latin text estimates lower than a
    byte-based count would.
    """
    char_estimate = len(text) / 4.0
    word_estimate = len(text.split()) / 0.75
    return math.floor((char_estimate + word_estimate) / 2.0) + TOKEN_ESTIMATE_BUFFER


class Provider(LanguageModel):
    """`LanguageModel` backed by the ASage query API."""

    def __init__(
            self,
            service: ServiceConfig,
            http_client: httpx.AsyncClient | None = None,
            *,
            client: QueryClient | None = None,
    ) -> None:
        self._client: QueryClient = (
            client if client is not None else Client(service.api_key, http_client, service.api_url)
        )
        self._default_model = service.default_model
        self._input_token_limit = service.input_token_limit
        self._output_token_limit = service.output_token_limit

    @staticmethod
    def from_env(
            *,
            settings: ServiceConfig | None = None,
            http_client: httpx.AsyncClient | None = None,
    ) -> 'Provider':
        return Provider(settings if settings is not None else ServiceConfig(), http_client)

    def get_default_config(self) -> LanguageModelConfig:
        return LanguageModelConfig(
            model=self._default_model,
            max_generated_tokens=self._output_token_limit,
        )

    def create_config(self, options: Sequence[LanguageModelOption]) -> LanguageModelConfig:
        return apply_options(self.get_default_config(), options)

    @staticmethod
    def query_params_from_config(cfg: LanguageModelConfig) -> QueryParams:
        # ASage has no output-length parameter, so max_generated_tokens stays local.
        return QueryParams(model=cfg.model)

    def build_query(self, request: CompletionRequest, options: Sequence[LanguageModelOption]) -> QueryParams:
        params = self.query_params_from_config(self.create_config(options))
        params.message = conversation_to_messages(request.posts)
        params.system_prompt = request.extract_system_message()
        params.persona = DEFAULT_PERSONA
        return params

    async def chat_completion(
            self, request: CompletionRequest, *options: LanguageModelOption
    ) -> TextStreamResult:
        # ASage does not support streaming.
        result = await self.chat_completion_no_stream(request, *options)
        return stream_from_string(result)

    async def chat_completion_no_stream(
            self, request: CompletionRequest, *options: LanguageModelOption
    ) -> str:
        params = self.build_query(request, options)

        with traced_call('asage.query', model=params.model, messages=len(params.message)):
            response = await self._client.query(params)
        return response.message

    def count_tokens(self, text: str) -> int:
        # TODO: switch to ASage's tokenizer once it is exposed through the API.
        return estimate_tokens(text)

    def input_token_limit(self) -> int:
        if self._input_token_limit > 0:
            return self._input_token_limit
        return DEFAULT_INPUT_TOKEN_LIMIT
