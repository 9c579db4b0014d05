import pytest

from nl_query.backend_client import BackendResponse
from nl_query.errors import BackendTimeoutError
from nl_query.query_executor import QueryExecutor
from nl_query.services.query_service import answer


@pytest.mark.asyncio
async def test_answer_returns_records(parser, backend_client):
    result = await answer(
        "show completed todos", parser=parser, executor=QueryExecutor(backend_client)
    )

    assert result["success"] is True
    assert result["table"] == "todos"
    assert result["filter"] == "is_done=eq.true"
    assert result["count"] == 1
    assert result["results"][0]["title"] == "Walk the dog"


@pytest.mark.asyncio
async def test_answer_parse_only(parser, fake_client_factory):
    client = fake_client_factory()
    result = await answer(
        "list all users", parser=parser, executor=QueryExecutor(client), execute=False
    )

    assert result["success"] is True
    assert result["parsed"]["matched_table_synonym"] == "users"
    assert "results" not in result
    assert client.reads == []


@pytest.mark.asyncio
async def test_answer_parse_error_never_reaches_backend(parser, fake_client_factory):
    client = fake_client_factory()
    result = await answer("asdfqwer", parser=parser, executor=QueryExecutor(client))

    assert result["success"] is False
    assert result["error_type"] == "unknown_entity"
    assert result["question"] == "asdfqwer"
    assert client.reads == []


@pytest.mark.asyncio
async def test_answer_backend_error(parser, fake_client_factory):
    client = fake_client_factory(BackendResponse(data="[]", error="HTTP 401 - bad key"))
    result = await answer("get all todos", parser=parser, executor=QueryExecutor(client))

    assert result["success"] is False
    assert result["error_type"] == "backend_error"
    assert result["error"] == "HTTP 401 - bad key"
    assert result["table"] == "todos"


@pytest.mark.asyncio
async def test_answer_timeout(parser, fake_client_factory):
    client = fake_client_factory(exc=BackendTimeoutError("no answer"))
    result = await answer("get all todos", parser=parser, executor=QueryExecutor(client))

    assert result["success"] is False
    assert result["error_type"] == "timeout"
