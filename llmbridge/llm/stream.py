"""Streaming result types.

A `TextStreamResult` is either a `PendingStream`, fed by an async iterator of
chunks as the backend produces them, or a `CompletedStream` that already holds
the whole text. Callers iterate `events()` the same way for both.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from enum import Enum
from typing import Any


class EventType(str, Enum):
    TEXT = 'text'
    END = 'end'
    ERROR = 'error'


@dataclass(frozen=True)
class TextStreamEvent:
    type: EventType
    value: Any = None


class TextStreamResult(ABC):
    """A sequence of text chunks terminated by END (or ERROR)."""

    @abstractmethod
    def events(self) -> AsyncIterator[TextStreamEvent]:
        raise NotImplementedError

    async def read_all(self) -> str:
        """Concatenate every TEXT chunk.

        Raises:
            Exception: Whatever the upstream chunk source raised.
        """
        parts: list[str] = []
        async for event in self.events():
            if event.type == EventType.TEXT:
                parts.append(event.value)
            elif event.type == EventType.ERROR:
                raise event.value
        return ''.join(parts)


class PendingStream(TextStreamResult):
    """Stream backed by a live chunk iterator. Can be consumed once."""

    def __init__(self, chunks: AsyncIterator[str]) -> None:
        self._chunks = chunks

    async def events(self) -> AsyncIterator[TextStreamEvent]:
        try:
            async for chunk in self._chunks:
                yield TextStreamEvent(EventType.TEXT, chunk)
        except Exception as exc:
            yield TextStreamEvent(EventType.ERROR, exc)
            return
        yield TextStreamEvent(EventType.END)


class CompletedStream(TextStreamResult):
    """Stream whose text was fully known before the caller got it."""

    def __init__(self, text: str) -> None:
        self.text = text

    async def events(self) -> AsyncIterator[TextStreamEvent]:
        yield TextStreamEvent(EventType.TEXT, self.text)
        yield TextStreamEvent(EventType.END)

    async def read_all(self) -> str:
        return self.text


def stream_from_string(text: str) -> CompletedStream:
    return CompletedStream(text)
