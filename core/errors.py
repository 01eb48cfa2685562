# =============================================================================
# core/errors.py  —  Failure taxonomy for portal calls
# =============================================================================
#
# The portal client raises these; the orchestrator catches them and turns
# each one into the text the user sees.  Nothing here ever reaches the MCP
# transport or the HTTP front door as an exception.
#
#   PortalError
#     ├── ConfigurationError     missing token / prompt (no network attempted)
#     ├── AuthenticationError    401 from the chat endpoint
#     ├── RateLimitError         429 from the chat endpoint
#     ├── UpstreamError          any other non-success chat response
#     ├── QueryExecutionError    non-success response from /api/query
#     ├── PortalTimeoutError     request timed out
#     └── PortalConnectionError  network-level failure
# =============================================================================


class PortalError(Exception):
    """Base class for everything that can go wrong talking to the portal."""


class ConfigurationError(PortalError):
    """Required input (access token or prompt) is missing."""


class AuthenticationError(PortalError):
    """The portal rejected the bearer token."""

    def __init__(self, status: int = 401):
        self.status = status
        super().__init__("Authentication failed")


class RateLimitError(PortalError):
    """The portal asked us to slow down."""

    def __init__(self, status: int = 429):
        self.status = status
        super().__init__("Rate limit exceeded")


class UpstreamError(PortalError):
    """Any other non-success response from the chat endpoint."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"API error (status {status}): {body}")


class QueryExecutionError(PortalError):
    """The query-execution endpoint refused or failed to run the SQL."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"Query execution failed: {body}")


class PortalTimeoutError(PortalError):
    """A request did not complete in time."""


class PortalConnectionError(PortalError):
    """The portal could not be reached."""
