# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains ALL decision logic for the Rice stock data tool:
#
#   config.py         settings read from the environment
#   models.py         typed payloads (chat reply, row set, report)
#   errors.py         failure taxonomy raised by the portal client
#   portal_client.py  the two portal HTTP endpoints
#   orchestrator.py   prompt → model choice → chat → query → report
#   renderer.py       row-count-driven result formatting
#   csv_store.py      durable CSV files for large result sets
#
# Nothing in this package imports FastMCP, FastAPI, or Google ADK.  The
# transports in tools/ and the console agent in agent/ are just wiring.
# =============================================================================
