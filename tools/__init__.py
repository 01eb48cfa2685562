# =============================================================================
# tools/__init__.py
# =============================================================================
# Transports for the query tool.
#
#   mcp_server.py   FastMCP server exposing `query_data` over stdio
#   http_server.py  FastAPI app exposing GET /, GET /health, POST /chat
#
# Both are thin: they validate the incoming call, hand it to
# core.orchestrator.QueryOrchestrator, and return its report.  The
# tool's docstring is what an LLM client reads to decide when to call it,
# so it states exactly what comes back (SQL, row count, table or sample,
# CSV path, or a clarifying question).
# =============================================================================
