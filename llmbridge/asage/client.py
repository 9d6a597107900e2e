"""ASage query API client (HTTP-based).

ASage answers a whole conversation in one response: there is no streaming
endpoint and no tool calling. The wire shape is:

    POST {api_url}/query
    {"model": ..., "message": [{"user": "USER"|"GPT", "message": ...}],
     "system_prompt": ..., "persona": ...}

    -> {"message": "<completion text>", ...}
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from llmbridge.config import DEFAULT_API_URL
from llmbridge.core.errors import BackendResponseError


class Role(str, Enum):
    """Speakers understood by ASage. There is no system speaker."""

    USER = 'USER'
    GPT = 'GPT'


class Message(BaseModel):
    user: Role
    message: str


class QueryParams(BaseModel):
    """Body of a `/query` call."""

    model: str = ''
    message: list[Message] = Field(default_factory=list)
    system_prompt: str = ''
    persona: str = ''


class QueryResponse(BaseModel):
    model_config = ConfigDict(extra='ignore')

    message: str


class Client:
    """Thin async client for the ASage query endpoint."""

    def __init__(
            self,
            api_key: str,
            client: httpx.AsyncClient | None = None,
            api_url: str = DEFAULT_API_URL,
    ) -> None:
        """Create a client. Performs no I/O.

        Args:
            api_key: ASage API key, sent as a bearer token.
            client: Optional injected httpx client for pooling / transport control.
            api_url: Base URL of the ASage API.
        """
        self._api_key = api_key
        self._client = client
        self._api_url = api_url.rstrip('/')

    async def query(self, params: QueryParams) -> QueryResponse:
        """Run one completion.

        Raises:
            httpx.HTTPError: Transport failure or non-2xx status.
            BackendResponseError: If the 2xx body is not a query response.
        """
        url = f'{self._api_url}/query'
        headers = {
            'Authorization': f'Bearer {self._api_key}',
            'Content-Type': 'application/json',
        }
        body = params.model_dump(mode='json')

        if self._client is not None:
            resp = await self._client.post(url, json=body, headers=headers, timeout=60.0)
            resp.raise_for_status()
            return _parse_query_response(resp)

        async with httpx.AsyncClient() as client:
            resp = await client.post(url, json=body, headers=headers, timeout=60.0)
            resp.raise_for_status()
            return _parse_query_response(resp)


def _parse_query_response(resp: httpx.Response) -> QueryResponse:
    try:
        payload: Any = resp.json()
    except ValueError as exc:
        raise BackendResponseError(f'ASage returned a non-JSON body (HTTP {resp.status_code}).') from exc

    try:
        return QueryResponse.model_validate(payload)
    except ValidationError as exc:
        raise BackendResponseError('ASage response has no message text.') from exc
