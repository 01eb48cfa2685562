# =============================================================================
# core/orchestrator.py  —  One question in, one finished report out
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Drives the two-step portal conversation for a single prompt:
#
#     1. pick a model   (default, or fallback after repeated failures)
#     2. POST /chat     → prose + optional SQL
#     3. branch:
#          no SQL       → the prose is the answer (maybe a clarifying question)
#          SQL          → POST /api/query, then render the rows
#          failure      → a descriptive message, never an exception
#
# MODEL ESCALATION:
#   The orchestrator counts consecutive failed chat steps.  Once the count
#   reaches `max_failures`, the next chat request asks for the fallback model
#   and the report opens with a one-line notice saying so.  A successful
#   chat response resets the count.  401s never count: a bad token will not
#   get better with a bigger model.
#
#   Only chat-step failures are counted.  A failure while running the SQL
#   says nothing about the model that wrote it, and the next successful
#   chat response would reset the count anyway.
# =============================================================================

import asyncio
import logging
import threading
from typing import Optional

from core.config import PortalSettings
from core.csv_store import CsvResultStore
from core.errors import (
    AuthenticationError,
    ConfigurationError,
    PortalConnectionError,
    PortalTimeoutError,
    QueryExecutionError,
    RateLimitError,
    UpstreamError,
)
from core.models import ChatIntentResult, QueryExecutionResult, QuerySession, RenderedReport
from core.portal_client import PortalClient
from core.renderer import MEDIUM_RESULT_MAX_ROWS, render

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# User-facing messages
# -----------------------------------------------------------------------------
MISSING_TOKEN_MESSAGE = (
    "❌ **Configuration Required**: USER_ACCESS_TOKEN environment variable is missing.\n\n"
    "**To configure:**\n"
    "1. Get your access token by confirming your university email at the Rice Data Portal\n"
    "2. Add it to your MCP client config:\n"
    "   ```json\n"
    "   \"env\": {\n"
    "     \"USER_ACCESS_TOKEN\": \"your_token_here\"\n"
    "   }\n"
    "   ```\n"
    "3. Restart the MCP client completely"
)
EMPTY_PROMPT_MESSAGE = "Error: Please provide a query about the stock market data you'd like to access."
AUTH_FAILED_MESSAGE = "Authentication failed. Please check your access token is valid and hasn't expired."
RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please wait a moment before trying again."
TIMEOUT_MESSAGE = "Request timed out. The query might be too complex. Try simplifying your question."
NO_DATA_MESSAGE = "Query executed but returned no data."
CLARIFYING_PREFIX = "**Question for you:** "


def model_display_name(model: str) -> str:
    """'gpt-5' → 'GPT-5.0', 'gpt-4.1' → 'GPT-4.1'; anything else unchanged."""
    prefix, _, version = model.partition("-")
    if prefix.lower() != "gpt" or not version:
        return model
    if version.isdigit():
        version += ".0"
    return f"GPT-{version}"


def select_model(failure_count: int, max_failures: int, default_model: str, fallback_model: str) -> str:
    """Pick the model for the next chat request from the pre-step failure count."""
    return fallback_model if failure_count >= max_failures else default_model


def check_inputs(access_token: Optional[str], prompt: Optional[str]) -> None:
    """Raise ConfigurationError before any network call if inputs are missing."""
    if not access_token or not access_token.strip():
        raise ConfigurationError(MISSING_TOKEN_MESSAGE)
    if not prompt or not prompt.strip():
        raise ConfigurationError(EMPTY_PROMPT_MESSAGE)


def is_clarifying_question(communication: str) -> bool:
    return "?" in communication or "clarif" in communication.lower()


class FailureTracker:
    """Consecutive chat-step failure count, shared by every call on one orchestrator.

    All reads and writes go through a lock so concurrent callers (the HTTP
    front door, for one) never lose an update.
    """

    def __init__(self, value: int = 0):
        self._value = value
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def reset(self) -> None:
        with self._lock:
            self._value = 0


class QueryOrchestrator:
    """Turns a natural-language prompt into a finished report."""

    def __init__(
        self,
        client: PortalClient,
        store: Optional[CsvResultStore] = None,
        default_model: str = "gpt-4.1",
        fallback_model: str = "gpt-5",
        max_failures: int = 3,
        timeout: Optional[float] = None,
        failures: Optional[FailureTracker] = None,
    ):
        self.client = client
        self.store = store
        self.default_model = default_model
        self.fallback_model = fallback_model
        self.max_failures = max_failures
        self.timeout = timeout
        self.failures = failures or FailureTracker()

    @classmethod
    def from_settings(cls, settings: PortalSettings) -> "QueryOrchestrator":
        store = CsvResultStore(settings.data_dir) if settings.save_large_results else None
        return cls(
            client=PortalClient(settings.base_url),
            store=store,
            default_model=settings.default_model,
            fallback_model=settings.fallback_model,
            max_failures=settings.max_failures,
            timeout=settings.request_timeout,
        )

    @property
    def failure_count(self) -> int:
        return self.failures.value

    # -------------------------------------------------------------------------
    # Public entry point
    # -------------------------------------------------------------------------
    async def execute(self, access_token: Optional[str], prompt: Optional[str]) -> RenderedReport:
        """Answer `prompt` using the portal.  Always returns a report, never raises."""
        try:
            check_inputs(access_token, prompt)
        except ConfigurationError as exc:
            return RenderedReport(str(exc))

        session = self._start_session(prompt)
        logger.info("Query with model=%s (failures so far: %d)", session.model, session.failure_count)

        try:
            if self.timeout is not None:
                report = await asyncio.wait_for(self._run(access_token, session), self.timeout)
            else:
                report = await self._run(access_token, session)
        except AuthenticationError:
            return self._report(session, AUTH_FAILED_MESSAGE)
        except RateLimitError:
            self._record_failure(session)
            return self._report(session, RATE_LIMITED_MESSAGE)
        except UpstreamError as exc:
            self._record_failure(session)
            return self._report(session, f"API error (status {exc.status}): {exc.body}")
        except QueryExecutionError as exc:
            return self._report(session, self._switch_notice(session) + f"Query execution failed: {exc.body}")
        except (PortalTimeoutError, asyncio.TimeoutError):
            self._record_failure(session)
            return self._report(session, TIMEOUT_MESSAGE)
        except asyncio.CancelledError:
            # A caller-imposed cancellation is reported like a timeout
            task = asyncio.current_task()
            if task is not None and hasattr(task, "uncancel"):
                task.uncancel()
            self._record_failure(session)
            logger.warning("Query cancelled during the %s step", session.stage)
            return self._report(session, TIMEOUT_MESSAGE)
        except PortalConnectionError as exc:
            self._record_failure(session)
            return self._report(session, f"Error connecting to the data portal: {exc}")
        except Exception as exc:
            logger.exception("Unexpected failure while answering query")
            self._record_failure(session)
            return self._report(session, f"Error connecting to the data portal: {exc}")

        return report

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------
    def _start_session(self, prompt: str) -> QuerySession:
        # Read the counter exactly once; this step's outcome is applied later
        failure_count = self.failures.value
        model = select_model(failure_count, self.max_failures, self.default_model, self.fallback_model)
        return QuerySession(
            prompt=prompt,
            model=model,
            failure_count=failure_count,
            escalated=model == self.fallback_model and failure_count >= self.max_failures,
        )

    async def _run(self, token: str, session: QuerySession) -> RenderedReport:
        chat = await self.client.chat_intent(token, session.prompt, session.model)
        self.failures.reset()

        notice = self._switch_notice(session)

        if chat.sql_query is None:
            return self._report(session, notice + self._conversational_answer(chat))

        session.stage = "execute"
        result = await self.client.execute_query(token, chat.sql_query)
        return self._data_report(session, notice, chat, result)

    def _conversational_answer(self, chat: ChatIntentResult) -> str:
        if is_clarifying_question(chat.communication):
            return CLARIFYING_PREFIX + chat.communication
        return chat.communication

    def _data_report(
        self,
        session: QuerySession,
        notice: str,
        chat: ChatIntentResult,
        result: QueryExecutionResult,
    ) -> RenderedReport:
        if not result.has_rows:
            parts = [chat.communication, NO_DATA_MESSAGE]
            return self._report(session, notice + "\n\n".join(part for part in parts if part))

        rows = result.rows
        csv_path = self._persist_if_large(rows, result.columns)

        timing = f" in {result.execution_time:.2f}s" if result.execution_time is not None else ""
        parts = []
        if chat.communication:
            parts.append(chat.communication)
        parts.append(f"**Query executed:** `{chat.sql_query}`")
        parts.append(f"**Results:** Retrieved {result.row_count:,} rows{timing}")
        parts.append(render(rows, result.columns, csv_path=csv_path))

        return self._report(session, notice + "\n\n".join(parts), csv_path=csv_path)

    def _persist_if_large(self, rows, columns) -> Optional[str]:
        if self.store is None or len(rows) <= MEDIUM_RESULT_MAX_ROWS:
            return None
        try:
            return str(self.store.save(rows, columns))
        except OSError as exc:
            logger.warning("Could not save results as CSV: %s", exc)
            return None

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    def _switch_notice(self, session: QuerySession) -> str:
        if not session.escalated:
            return ""
        return (
            f"🔄 **Switched to {model_display_name(self.fallback_model)}** due to previous "
            f"failures with {model_display_name(self.default_model)}.\n\n"
        )

    def _record_failure(self, session: QuerySession) -> None:
        if session.stage != "chat":
            return
        count = self.failures.increment()
        logger.warning("Chat request failed (%d consecutive failures)", count)

    @staticmethod
    def _report(session: QuerySession, text: str, csv_path: Optional[str] = None) -> RenderedReport:
        return RenderedReport(text=text, csv_path=csv_path, model=session.model)
