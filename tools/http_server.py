# =============================================================================
# tools/http_server.py  —  HTTP front door for the same query tool
# =============================================================================
#
# WHAT THIS FILE DOES:
#   A small FastAPI app for deployments where an MCP stdio client isn't
#   available (health checks on a hosting platform, curl, a web page):
#
#     GET  /         service descriptor
#     GET  /health   liveness check
#     POST /chat     {message, token} → the orchestrator's report
#
#   It owns no logic of its own; /chat calls the same QueryOrchestrator the
#   MCP tool uses.  The token travels in the request body, so one server can
#   serve many users.
#
# RUNNING:
#   python -m tools.http_server        (PORT defaults to 8000)
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core.config import PortalSettings
from core.orchestrator import QueryOrchestrator

logger = logging.getLogger(__name__)

SERVICE_NAME = "Rice Stock Data MCP Server"
SERVICE_VERSION = "1.0.0"


class ChatRequest(BaseModel):
    message: Optional[str] = None
    token: Optional[str] = None


class ChatResponse(BaseModel):
    message: str
    response: str
    csv_path: Optional[str] = None
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


_orchestrator: Optional[QueryOrchestrator] = None


def get_orchestrator() -> QueryOrchestrator:
    """FastAPI dependency: the process-wide orchestrator."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = QueryOrchestrator.from_settings(PortalSettings.from_env())
    return _orchestrator


app = FastAPI(title=SERVICE_NAME, version=SERVICE_VERSION)


@app.get("/")
async def root():
    return {
        "name": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "description": "MCP server for Rice Business Stock Market Data Portal",
        "status": "running",
        "endpoints": {
            "health": "/health",
            "chat": "/chat",
        },
    }


@app.get("/health")
async def health():
    return {"status": "healthy", "timestamp": _now()}


@app.post("/chat", response_model=ChatResponse)
async def chat(payload: ChatRequest, orchestrator: QueryOrchestrator = Depends(get_orchestrator)):
    if not payload.token:
        return JSONResponse(status_code=401, content={"error": "Access token required"})
    if not payload.message:
        return JSONResponse(status_code=400, content={"error": "Message required"})

    try:
        report = await orchestrator.execute(payload.token, payload.message)
    except Exception as exc:
        logger.exception("Unhandled error in /chat")
        return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})

    return ChatResponse(
        message=payload.message,
        response=report.text,
        csv_path=report.csv_path,
        timestamp=_now(),
    )


def main() -> None:
    import uvicorn

    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [HTTP] %(message)s", datefmt="%H:%M:%S")
    settings = PortalSettings.from_env()
    logger.info("Health check available at http://localhost:%d/health", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
