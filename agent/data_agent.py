# =============================================================================
# agent/data_agent.py  —  Google ADK agent wired to the query_data MCP tool
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Builds a console agent that answers stock market questions by calling
#   our own FastMCP server (tools/mcp_server.py) over stdio.
#
#     ADK Agent ──LiteLlm──▶ LLM (reasoning)
#         │
#         └──MCPToolset (stdio)──▶ tools/mcp_server.py ──▶ core/ ──▶ portal
#
#   The agent has no data logic.  It only decides what to ask the tool and
#   how to explain the report it gets back.
#
# MODEL:
#   AGENT_MODEL picks the LiteLlm model string, e.g.
#     "openrouter/openai/gpt-4o"  (default; needs OPENROUTER_API_KEY)
#     "openai/gpt-4o-mini"        (needs OPENAI_API_KEY)
#
# MCP CONNECTION:
#   ADK starts the server as a subprocess with the current interpreter and
#   forwards our environment, so USER_ACCESS_TOKEN and the portal URL reach
#   the tool.
# =============================================================================

import os
import sys
from typing import Optional

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset
from mcp import StdioServerParameters

from agent.prompt import get_data_analyst_prompt
from core.config import PortalSettings

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
AGENT_NAME = "rice_stock_data_analyst"


def mcp_server_parameters() -> StdioServerParameters:
    """How ADK should launch tools/mcp_server.py."""
    return StdioServerParameters(
        command=sys.executable,
        args=["-m", "tools.mcp_server"],
        cwd=PROJECT_ROOT,
        env=dict(os.environ),
    )


def create_agent(settings: Optional[PortalSettings] = None) -> Agent:
    """Create the stock data analyst agent.

    Returns:
        A configured Google ADK Agent with the query_data tool attached.
    """
    settings = settings or PortalSettings.from_env()

    mcp_tools = MCPToolset(connection_params=mcp_server_parameters())

    return Agent(
        name=AGENT_NAME,
        model=LiteLlm(model=settings.agent_model),
        instruction=get_data_analyst_prompt(),
        tools=[mcp_tools],
    )
