"""Pruebas del repositorio Supabase REST contra un transporte simulado."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

from chatsync.core.config import ConfigurationError
from chatsync.models.interaction import InteractionLog
from chatsync.repositories.interactions import InteractionsRepository, InteractionsRepositoryError


def _repo(handler) -> InteractionsRepository:
    return InteractionsRepository(
        base_url="https://db.supabase.test/",
        service_role="service-key",
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


def test_missing_url_is_a_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("chatsync.repositories.interactions.settings.supabase_url", None)
    with pytest.raises(ConfigurationError):
        InteractionsRepository(service_role="service-key")


@pytest.mark.asyncio
async def test_find_customer_uses_exact_email_filter() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"id": 42}])

    customer_id = await _repo(handler).find_customer_id("a+test@x.com")

    assert customer_id == "42"
    [request] = seen
    assert request.url.path == "/rest/v1/customers"
    assert dict(request.url.params) == {"select": "id", "email": "eq.a+test@x.com", "limit": "1"}
    assert request.headers["apikey"] == "service-key"
    assert request.headers["Authorization"] == "Bearer service-key"


@pytest.mark.asyncio
async def test_find_lead_returns_none_when_empty() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json=[])

    assert await _repo(handler).find_lead_id("b@y.com") is None
    assert seen == ["/rest/v1/leads"]


@pytest.mark.asyncio
async def test_interaction_exists_filters_by_conversation_id() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["source_conversation_id"] == "eq.c1"
        return httpx.Response(200, json=[{"id": "log-1"}])

    assert await _repo(handler).interaction_exists("c1") is True


@pytest.mark.asyncio
async def test_insert_interaction_posts_row() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201)

    log = InteractionLog(
        customer_id=None,
        lead_id="lead-1",
        interaction_type="chatbase_summary",
        summary="hola",
        created_at=datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc),
        source_conversation_id="c9",
    )
    await _repo(handler).insert_interaction(log)

    [request] = seen
    assert request.method == "POST"
    assert request.url.path == "/rest/v1/interaction_logs"
    assert request.headers["Prefer"] == "return=minimal"
    body = json.loads(request.content)
    assert body == {
        "customer_id": None,
        "lead_id": "lead-1",
        "interaction_type": "chatbase_summary",
        "summary": "hola",
        "created_at": "2026-10-19T12:00:00Z",
        "source_conversation_id": "c9",
    }


@pytest.mark.asyncio
async def test_error_status_raises_repository_error() -> None:
    handler = lambda _: httpx.Response(409, text="duplicate key")  # noqa: E731
    with pytest.raises(InteractionsRepositoryError, match="409"):
        await _repo(handler).interaction_exists("c1")


@pytest.mark.asyncio
async def test_network_error_raises_repository_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timeout", request=request)

    with pytest.raises(InteractionsRepositoryError):
        await _repo(handler).find_customer_id("a@x.com")


@pytest.mark.asyncio
async def test_supabase_errors_are_logged_with_error_category(caplog) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with caplog.at_level("ERROR"):
        with pytest.raises(InteractionsRepositoryError):
            await _repo(lambda _: httpx.Response(500, text="boom")).interaction_exists("c1")
        with pytest.raises(InteractionsRepositoryError):
            await _repo(refuse).find_lead_id("a@x.com")

    tagged = {
        r.getMessage(): r.category
        for r in caplog.records
        if r.getMessage() in {"supabase.response_error", "supabase.request_failed"}
    }
    assert tagged == {"supabase.response_error": "ERROR", "supabase.request_failed": "ERROR"}
