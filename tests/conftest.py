import httpx
import pytest

from core.csv_store import CsvResultStore
from core.orchestrator import QueryOrchestrator
from core.portal_client import PortalClient

BASE_URL = "https://portal.test"


class FakePortal:
    """Scripted stand-in for the portal's /chat and /api/query endpoints.

    Queue an httpx.Response (or an exception to raise) per expected call.
    Every request that reaches the portal is recorded in `requests`.
    """

    def __init__(self):
        self.chat_responses = []
        self.query_responses = []
        self.requests = []

    def handler(self, request: httpx.Request):
        self.requests.append(request)
        queue = self.chat_responses if request.url.path == "/chat" else self.query_responses
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def chat(self, communication="", sql_query="", status=200):
        self.chat_responses.append(
            httpx.Response(status, json={"communication": communication, "sql_query": sql_query})
        )

    def chat_error(self, status, body="upstream exploded"):
        self.chat_responses.append(httpx.Response(status, text=body))

    def query(self, data, columns, execution_time=0.12):
        payload = {"data": data, "columns": columns, "rows": len(data)}
        if execution_time is not None:
            payload["execution_time"] = execution_time
        self.query_responses.append(httpx.Response(200, json=payload))

    def chat_requests(self):
        return [r for r in self.requests if r.url.path == "/chat"]

    def query_requests(self):
        return [r for r in self.requests if r.url.path == "/api/query"]


@pytest.fixture
def portal():
    return FakePortal()


@pytest.fixture
def client(portal):
    return PortalClient(BASE_URL, transport=httpx.MockTransport(portal.handler))


@pytest.fixture
def orchestrator(client, tmp_path):
    return QueryOrchestrator(client=client, store=CsvResultStore(tmp_path))


def make_rows(count, columns=("ticker", "sector", "pe_ratio")):
    """Rows with a distinct ticker per row: TK00, TK01, ..."""
    return [
        {columns[0]: f"TK{i:02d}", columns[1]: "Technology", columns[2]: 10 + i}
        for i in range(count)
    ]
