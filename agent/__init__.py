# =============================================================================
# agent/__init__.py
# =============================================================================
# Google ADK console agent for the Rice stock data portal.
#
#   prompt.py      system prompt (how to use query_data, large results, errors)
#   data_agent.py  ADK Agent + LiteLlm model + MCPToolset over stdio
#
# The agent is a client of tools/mcp_server.py like any other MCP host.
# It carries no data logic; that all lives in core/.
# =============================================================================
