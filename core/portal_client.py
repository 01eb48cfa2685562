# =============================================================================
# core/portal_client.py  —  HTTP client for the Rice Data Portal
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Wraps the two portal endpoints the orchestrator needs:
#
#     POST /chat        natural language → {communication, sql_query}
#     POST /api/query   SQL → {data, columns, rows, execution_time}
#
#   Both are bearer-authenticated JSON POSTs.  Non-success statuses and
#   transport failures are raised as the typed errors in core/errors.py;
#   deciding what to tell the user is the orchestrator's job.
#
# NO RETRIES:
#   Every call is attempted exactly once.  Retry-or-not is left to the
#   human on the other end of the chat.
# =============================================================================

import logging
from typing import Any, Optional

import httpx

from core.errors import (
    AuthenticationError,
    PortalConnectionError,
    PortalTimeoutError,
    QueryExecutionError,
    RateLimitError,
    UpstreamError,
)
from core.models import ChatIntentResult, QueryExecutionResult

logger = logging.getLogger(__name__)

CHAT_PATH = "/chat"
QUERY_PATH = "/api/query"

# The portal keeps turn-taking context per conversation id
CONVERSATION_ID = "mcp_session"

UNBOUNDED_RESULTS_SUFFIX = " (Please provide ALL results without LIMIT clause - I need the complete dataset)"


class PortalClient:
    """Thin async client over the portal's chat and query endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _post(self, path: str, token: str, body: dict[str, Any]) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        try:
            async with self._client() as client:
                return await client.post(path, json=body, headers=headers)
        except httpx.TimeoutException as exc:
            raise PortalTimeoutError(str(exc) or "request timed out") from exc
        except httpx.HTTPError as exc:
            raise PortalConnectionError(str(exc) or exc.__class__.__name__) from exc

    async def chat_intent(self, token: str, prompt: str, model: str) -> ChatIntentResult:
        """Ask the chat endpoint to interpret `prompt` with the given model."""
        body = {
            "message": f"{prompt}{UNBOUNDED_RESULTS_SUFFIX}",
            "conversation_id": CONVERSATION_ID,
            "model": model,
        }
        response = await self._post(CHAT_PATH, token, body)

        if response.status_code == 401:
            raise AuthenticationError(response.status_code)
        if response.status_code == 429:
            raise RateLimitError(response.status_code)
        if not response.is_success:
            raise UpstreamError(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(response.status_code, f"invalid JSON in response: {response.text}") from exc

        result = ChatIntentResult.from_payload(payload)
        logger.debug("chat_intent model=%s has_sql=%s", model, result.sql_query is not None)
        return result

    async def execute_query(self, token: str, sql_query: str) -> QueryExecutionResult:
        """Run `sql_query` on the portal and return its rows."""
        response = await self._post(QUERY_PATH, token, {"query": sql_query})

        if not response.is_success:
            raise QueryExecutionError(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as exc:
            raise QueryExecutionError(response.status_code, f"invalid JSON in response: {response.text}") from exc

        result = QueryExecutionResult.from_payload(payload)
        logger.debug("execute_query rows=%s columns=%d", result.row_count, len(result.columns))
        return result
