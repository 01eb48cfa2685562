# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (the query_data tool)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes a single MCP tool, `query_data`, that answers a natural-language
#   question about the Rice stock market data portal.  The tool is a thin
#   wrapper around core.orchestrator.QueryOrchestrator: it logs the call,
#   hands over the prompt and the user's access token, and returns the
#   finished report as text.
#
# RUNNING THIS SERVER:
#     a) Standalone:          python -m tools.mcp_server
#     b) From an MCP client:  stdio transport (Claude Desktop, the ADK agent
#                             in agent/data_agent.py, ...)
#
#   Configuration comes from the environment (see core/config.py).
# =============================================================================

import logging
import sys
from typing import Optional

from dotenv import load_dotenv
from fastmcp import FastMCP

from core.config import PortalSettings
from core.orchestrator import QueryOrchestrator

# =============================================================================
# Logging Setup
# =============================================================================
# Log to STDERR: STDOUT carries the MCP JSON stream, and anything else
# written there corrupts it.
#
#   CYAN   → incoming tool calls
#   GREEN  → responses
#   YELLOW → status lines
# =============================================================================

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)

# Keep per-request transport chatter out of the tool log
logging.getLogger("httpx").setLevel(logging.WARNING)


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: str) -> str:
    """Log the first line of the response in GREEN, then return the full text."""
    first_line = result.splitlines()[0] if result else ""
    logging.info(f"{_GREEN}  ← {tool_name} response ({len(result)} chars): {first_line}{_RESET}")
    return result


# =============================================================================
# Server state
# =============================================================================
# One orchestrator per process: its failure counter must survive across tool
# calls so repeated upstream trouble can escalate to the fallback model.
# =============================================================================
load_dotenv()

settings = PortalSettings.from_env()
_orchestrator: Optional[QueryOrchestrator] = None


def get_orchestrator() -> QueryOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = QueryOrchestrator.from_settings(settings)
    return _orchestrator


async def handle_query(
    prompt: Optional[str],
    orchestrator: Optional[QueryOrchestrator] = None,
    access_token: Optional[str] = None,
) -> str:
    """Run one prompt through the orchestrator and return the report text."""
    orchestrator = orchestrator or get_orchestrator()
    token = settings.access_token if access_token is None else access_token

    _log_request("query_data", prompt=prompt)
    report = await orchestrator.execute(token, prompt)
    _log_status(f"model={report.model}, failures={orchestrator.failure_count}")
    if report.csv_path:
        _log_status(f"Saved results to {report.csv_path}")
    return _log_response("query_data", report.text)


mcp = FastMCP("rice-stock-data")


@mcp.tool()
async def query_data(prompt: str) -> str:
    """Query Rice Stock Data Portal using natural language.

    Ask questions about stocks, financial metrics, sectors, or any market data.

    Args:
        prompt: Natural language query about stock market data (e.g.,
            'Show me tech stocks with PE under 20', "What are Apple's
            financial ratios?", 'List healthcare companies by market cap').

    Returns:
        A formatted report: the SQL that was run, the row count, and a table
        or representative sample.  Large results are saved to a CSV file
        whose path is included.  If the portal needs more detail, the report
        is a clarifying question to relay to the user.
    """
    return await handle_query(prompt)


def main() -> None:
    logging.info(f"Rice Stock Data MCP Server starting - connecting to: {settings.base_url}")
    mcp.run()


if __name__ == "__main__":
    main()
