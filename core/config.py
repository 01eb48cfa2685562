# =============================================================================
# core/config.py  —  Runtime settings read from the environment
# =============================================================================
#
# Each user keeps their personal portal access token in their MCP client
# config (or a local .env file), for example:
#
#   "env": {
#     "USER_ACCESS_TOKEN": "your_token_here",
#     "KOYEB_APP_URL": "https://your-app.koyeb.app"
#   }
#
# Entry points call load_dotenv() first; this module only reads os.environ.
# =============================================================================

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_BASE_URL = "https://your-app.koyeb.app"
DEFAULT_MODEL = "gpt-4.1"
FALLBACK_MODEL = "gpt-5"
DEFAULT_MAX_FAILURES = 3


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    return float(value)


@dataclass
class PortalSettings:
    """Everything the orchestrator and its entry points need to know."""

    base_url: str = DEFAULT_BASE_URL
    access_token: str = ""
    default_model: str = DEFAULT_MODEL
    fallback_model: str = FALLBACK_MODEL
    max_failures: int = DEFAULT_MAX_FAILURES
    request_timeout: Optional[float] = None    # Overall deadline per query (seconds)
    save_large_results: bool = True
    data_dir: Optional[Path] = None            # None → ~/rice-stock-data
    port: int = 8000
    agent_model: str = "openrouter/openai/gpt-4o"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PortalSettings":
        """Build settings from environment variables (os.environ by default)."""
        env = os.environ if environ is None else environ

        data_dir = env.get("DATA_DIR")
        return cls(
            base_url=(env.get("KOYEB_APP_URL") or env.get("APP_URL") or DEFAULT_BASE_URL).rstrip("/"),
            access_token=env.get("USER_ACCESS_TOKEN", ""),
            default_model=env.get("DEFAULT_MODEL") or DEFAULT_MODEL,
            fallback_model=env.get("FALLBACK_MODEL") or FALLBACK_MODEL,
            max_failures=int(env.get("MAX_FAILURES") or DEFAULT_MAX_FAILURES),
            request_timeout=_optional_float(env.get("REQUEST_TIMEOUT_SECONDS")),
            save_large_results=_flag(env.get("SAVE_LARGE_RESULTS"), True),
            data_dir=Path(data_dir).expanduser() if data_dir else None,
            port=int(env.get("PORT") or 8000),
            agent_model=env.get("AGENT_MODEL") or "openrouter/openai/gpt-4o",
        )
