from __future__ import annotations

import httpx
import pytest

from llmbridge.asage.client import Message, Role
from llmbridge.asage.provider import (
    DEFAULT_INPUT_TOKEN_LIMIT,
    Provider,
    conversation_to_messages,
)
from llmbridge.config import ServiceConfig
from llmbridge.llm.base import (
    CompletionRequest,
    Post,
    PostRole,
    with_max_generated_tokens,
    with_model,
)
from llmbridge.llm.stream import CompletedStream, EventType

from tests.fixtures.asage_service_stub import asage_service_stub
from tests.mocks.fake_asage_client import FakeASageClient


def _service(**overrides) -> ServiceConfig:
    fields = {
        "api_key": "test-key",
        "api_url": "https://asage.test",
        "default_model": "asage-default",
        "input_token_limit": 0,
        "output_token_limit": 1024,
    }
    fields.update(overrides)
    return ServiceConfig(**fields)


def _request() -> CompletionRequest:
    return CompletionRequest(
        posts=(
            Post(PostRole.SYSTEM, "be terse"),
            Post(PostRole.USER, "hi"),
            Post(PostRole.BOT, "hey"),
            Post(PostRole.USER, "bye"),
        )
    )


def test_conversation_drops_system_turns_and_keeps_order() -> None:
    posts = [
        Post(PostRole.USER, "a"),
        Post(PostRole.SYSTEM, "s1"),
        Post(PostRole.BOT, "b"),
        Post(PostRole.SYSTEM, "s2"),
        Post(PostRole.USER, "c"),
    ]

    messages = conversation_to_messages(posts)

    assert messages == [
        Message(user=Role.USER, message="a"),
        Message(user=Role.GPT, message="b"),
        Message(user=Role.USER, message="c"),
    ]


def test_conversation_of_only_system_turns_is_empty() -> None:
    assert conversation_to_messages([Post(PostRole.SYSTEM, "x"), Post(PostRole.SYSTEM, "y")]) == []


def test_unknown_role_is_sent_as_user() -> None:
    messages = conversation_to_messages([Post("tool", "result text")])  # type: ignore[arg-type]
    assert messages == [Message(user=Role.USER, message="result text")]


def test_default_config_comes_from_service_settings() -> None:
    provider = Provider(_service(), client=FakeASageClient())

    cfg = provider.get_default_config()

    assert cfg.model == "asage-default"
    assert cfg.max_generated_tokens == 1024


def test_create_config_without_options_equals_default() -> None:
    provider = Provider(_service(), client=FakeASageClient())
    assert provider.create_config([]) == provider.get_default_config()


def test_create_config_last_option_wins() -> None:
    provider = Provider(_service(), client=FakeASageClient())

    cfg = provider.create_config([with_model("first"), with_max_generated_tokens(10), with_model("second")])

    assert cfg.model == "second"
    assert cfg.max_generated_tokens == 10


@pytest.mark.asyncio
async def test_no_stream_builds_query_and_returns_message() -> None:
    # Arrange
    fake = FakeASageClient(message="ok")
    provider = Provider(_service(), client=fake)

    # Act
    text = await provider.chat_completion_no_stream(_request())

    # Assert
    assert text == "ok"
    assert len(fake.calls) == 1
    params = fake.calls[0]
    assert params.model == "asage-default"
    assert params.message == [
        Message(user=Role.USER, message="hi"),
        Message(user=Role.GPT, message="hey"),
        Message(user=Role.USER, message="bye"),
    ]
    assert params.system_prompt == "be terse"
    assert params.persona == "default"


@pytest.mark.asyncio
async def test_options_pick_model_but_token_limit_is_not_sent() -> None:
    fake = FakeASageClient()
    provider = Provider(_service(), client=fake)

    await provider.chat_completion_no_stream(_request(), with_model("asage-large"), with_max_generated_tokens(5))

    body = fake.calls[0].model_dump()
    assert body["model"] == "asage-large"
    assert set(body) == {"model", "message", "system_prompt", "persona"}


@pytest.mark.asyncio
async def test_missing_system_turn_sends_empty_system_prompt() -> None:
    fake = FakeASageClient()
    provider = Provider(_service(), client=fake)

    await provider.chat_completion_no_stream(CompletionRequest(posts=(Post(PostRole.USER, "hi"),)))

    assert fake.calls[0].system_prompt == ""


@pytest.mark.asyncio
async def test_stream_yields_single_chunk_then_end() -> None:
    provider = Provider(_service(), client=FakeASageClient(message="hello"))

    stream = await provider.chat_completion(_request())
    events = [event async for event in stream.events()]

    assert isinstance(stream, CompletedStream)
    assert [e.type for e in events] == [EventType.TEXT, EventType.END]
    assert events[0].value == "hello"
    assert await stream.read_all() == "hello"


@pytest.mark.asyncio
async def test_backend_error_propagates_unwrapped() -> None:
    error = httpx.ConnectError("backend down")
    fake = FakeASageClient(error=error)
    provider = Provider(_service(), client=fake)

    with pytest.raises(httpx.ConnectError) as no_stream_exc:
        await provider.chat_completion_no_stream(_request())
    with pytest.raises(httpx.ConnectError) as stream_exc:
        await provider.chat_completion(_request())

    assert no_stream_exc.value is error
    assert stream_exc.value is error
    assert len(fake.calls) == 2


@pytest.mark.asyncio
async def test_provider_talks_to_asage_over_http() -> None:
    transport = httpx.MockTransport(asage_service_stub)
    async with httpx.AsyncClient(transport=transport) as http_client:
        provider = Provider(_service(), http_client)

        text = await provider.chat_completion_no_stream(_request())

    assert text == "3 messages as default"


def test_count_tokens_uses_estimate() -> None:
    provider = Provider(_service(), client=FakeASageClient())
    assert provider.count_tokens("") == 100


def test_input_token_limit_placeholder_and_override() -> None:
    assert Provider(_service(), client=FakeASageClient()).input_token_limit() == DEFAULT_INPUT_TOKEN_LIMIT
    assert Provider(_service(input_token_limit=8000), client=FakeASageClient()).input_token_limit() == 8000


def test_from_env_reads_asage_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ASAGE_API_KEY", "env-key")
    monkeypatch.setenv("ASAGE_DEFAULT_MODEL", "env-model")
    monkeypatch.setenv("ASAGE_OUTPUT_TOKEN_LIMIT", "77")

    provider = Provider.from_env()

    assert provider.get_default_config().model == "env-model"
    assert provider.get_default_config().max_generated_tokens == 77


@pytest.mark.asyncio
async def test_falsy_injected_client_is_still_used() -> None:
    class EmptyLookingClient(FakeASageClient):
        def __len__(self) -> int:
            return 0

    fake = EmptyLookingClient(message="from fake")
    provider = Provider(_service(), client=fake)

    assert await provider.chat_completion_no_stream(_request()) == "from fake"
    assert len(fake.calls) == 1
