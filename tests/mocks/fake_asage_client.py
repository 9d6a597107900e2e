# ------------------------------------------------------------------------------
# Deterministic stand-in for the ASage query client
# ------------------------------------------------------------------------------

from llmbridge.asage.client import QueryParams, QueryResponse


class FakeASageClient:
    """
    Records every QueryParams it receives and answers with a fixed message,
    or raises `error` when one is given.
    """

    def __init__(self, *, message: str = "ok", error: Exception | None = None) -> None:
        self._message = message
        self._error = error
        self.calls: list[QueryParams] = []

    async def query(self, params: QueryParams) -> QueryResponse:
        self.calls.append(params)
        if self._error is not None:
            raise self._error
        return QueryResponse(message=self._message)
