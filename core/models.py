# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the shape of every piece of information that flows
# between the portal client, the orchestrator, and the renderer.  They carry
# almost no behavior; the only logic here is normalizing raw JSON payloads
# from the portal into typed values.
#
# DESIGN PRINCIPLE: "Absent means None":
#   The portal signals "no SQL" with a missing field OR an empty/whitespace
#   string.  Both collapse to None here, so downstream code branches on
#   `sql_query is None` and never on string emptiness.
# =============================================================================

from dataclasses import dataclass, field
from typing import Any, Optional


Row = dict[str, Any]


# -----------------------------------------------------------------------------
# ChatIntentResult: what the chat endpoint says about the user's question
# -----------------------------------------------------------------------------
@dataclass
class ChatIntentResult:
    """The chat endpoint's reply: prose plus an optional SQL query."""

    communication: str = ""            # Conversational text, may be empty
    sql_query: Optional[str] = None    # None when there is nothing to run

    @classmethod
    def from_payload(cls, payload: Any) -> "ChatIntentResult":
        if not isinstance(payload, dict):
            return cls()
        communication = payload.get("communication") or ""
        sql_query = payload.get("sql_query") or ""
        if not isinstance(communication, str):
            communication = str(communication)
        if not isinstance(sql_query, str) or not sql_query.strip():
            return cls(communication=communication)
        return cls(communication=communication, sql_query=sql_query)


# -----------------------------------------------------------------------------
# QueryExecutionResult: the row set that came back from /api/query
# -----------------------------------------------------------------------------
@dataclass
class QueryExecutionResult:
    """Rows returned by the query-execution endpoint.

    `rows` is None when the response carried no row array at all, which is
    a different outcome from an empty result set (an empty list).
    """

    rows: Optional[list[Row]] = None
    columns: list[str] = field(default_factory=list)
    row_count: int = 0
    execution_time: Optional[float] = None

    @property
    def has_rows(self) -> bool:
        return self.rows is not None

    @classmethod
    def from_payload(cls, payload: Any) -> "QueryExecutionResult":
        if not isinstance(payload, dict):
            return cls()

        data = payload.get("data")
        rows = None
        if isinstance(data, list):
            rows = [row if isinstance(row, dict) else {} for row in data]

        columns = payload.get("columns")
        if isinstance(columns, list):
            columns = [str(column) for column in columns]
        elif rows:
            # No explicit column list: fall back to the first row's key order
            columns = list(rows[0].keys())
        else:
            columns = []

        reported = payload.get("rows")
        if isinstance(reported, int) and not isinstance(reported, bool):
            row_count = reported
        else:
            row_count = len(rows) if rows is not None else 0

        execution_time = payload.get("execution_time")
        if isinstance(execution_time, bool) or not isinstance(execution_time, (int, float)):
            execution_time = None

        return cls(
            rows=rows,
            columns=columns,
            row_count=row_count,
            execution_time=float(execution_time) if execution_time is not None else None,
        )


# -----------------------------------------------------------------------------
# QuerySession: one orchestration step
# -----------------------------------------------------------------------------
# The failure count is captured ONCE when the step starts.  Model selection
# and the "switched model" notice both read this snapshot, never the live
# counter (which this very step may reset).
# -----------------------------------------------------------------------------
@dataclass
class QuerySession:
    """State for a single `execute` call."""

    prompt: str
    model: str
    failure_count: int                 # Counter value before this step ran
    escalated: bool = False            # True when the fallback model was picked
    stage: str = "chat"                # "chat" or "execute": where we are now


# -----------------------------------------------------------------------------
# RenderedReport: the final answer handed back to the caller
# -----------------------------------------------------------------------------
@dataclass
class RenderedReport:
    """Finished text for the caller, plus the CSV path when one was written."""

    text: str
    csv_path: Optional[str] = None
    model: Optional[str] = None

    def __str__(self) -> str:
        return self.text
