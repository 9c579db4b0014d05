import json

import httpx
import pytest

from nl_query.backend_client import BackendClient, BackendResponse
from nl_query.config import BackendConfig, NLQueryConfig, ServerConfig
from nl_query.query_parser import QueryParser
from nl_query.vocabulary import Vocabulary

TODOS = [
    {"id": 1, "title": "Buy groceries", "is_done": False},
    {"id": 2, "title": "Walk the dog", "is_done": True},
]


# Keep the developer's .env / shell from leaking into tests
@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "BACKEND_TIMEOUT_MS",
        "NL_QUERY_VOCABULARY",
        "NL_QUERY_HOST",
        "NL_QUERY_PORT",
        "DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def vocabulary():
    return Vocabulary.default()


@pytest.fixture
def parser(vocabulary):
    return QueryParser(vocabulary)


@pytest.fixture
def backend_config():
    return BackendConfig(url="http://backend.test", api_key="test-key", timeout_ms=500)


@pytest.fixture
def config(backend_config):
    return NLQueryConfig(backend=backend_config, server=ServerConfig())


@pytest.fixture
def requests_seen():
    return []


@pytest.fixture
def mock_backend(requests_seen):
    """httpx transport serving TODOS from /rest/v1/todos, 404 elsewhere."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        if not request.url.path.startswith("/rest/v1/todos"):
            return httpx.Response(404, text='{"message":"relation does not exist"}')
        if request.method == "POST":
            return httpx.Response(201, content=request.content)

        rows = TODOS
        is_done = request.url.params.get("is_done")
        if is_done:
            rows = [r for r in rows if str(r["is_done"]).lower() == is_done.split(".", 1)[1]]
        return httpx.Response(200, text=json.dumps(rows))

    return httpx.MockTransport(handler)


@pytest.fixture
def backend_client(backend_config, mock_backend):
    return BackendClient(backend_config, transport=mock_backend)


class FakeClient:
    """Backend client returning a fixed envelope and recording reads."""

    def __init__(self, response=None, exc=None):
        self.response = response or BackendResponse()
        self.exc = exc
        self.reads = []
        self.writes = []

    async def read(self, table, filter=""):
        self.reads.append((table, filter))
        if self.exc:
            raise self.exc
        return self.response

    async def write(self, table, json_body):
        self.writes.append((table, json_body))
        if self.exc:
            raise self.exc
        return self.response


@pytest.fixture
def fake_client_factory():
    return FakeClient
