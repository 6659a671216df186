"""Fixtures compartidas para las pruebas."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from chatsync.main import app
from chatsync.models.conversation import Conversation
from chatsync.models.interaction import InteractionLog
from chatsync.repositories.interactions import InteractionsRepositoryError


class FakeRepository:
    """Doble en memoria de `InteractionsRepository` que registra cada llamada."""

    def __init__(
        self,
        *,
        customers: dict[str, str] | None = None,
        leads: dict[str, str] | None = None,
    ) -> None:
        self.customers = customers or {}
        self.leads = leads or {}
        self.logs: list[InteractionLog] = []
        self.calls: list[tuple[str, str]] = []
        self.fail_inserts = False

    async def find_customer_id(self, email: str) -> str | None:
        self.calls.append(("customers", email))
        return self.customers.get(email)

    async def find_lead_id(self, email: str) -> str | None:
        self.calls.append(("leads", email))
        return self.leads.get(email)

    async def interaction_exists(self, conversation_id: str) -> bool:
        self.calls.append(("exists", conversation_id))
        return any(log.source_conversation_id == conversation_id for log in self.logs)

    async def insert_interaction(self, log: InteractionLog) -> None:
        self.calls.append(("insert", log.source_conversation_id))
        if self.fail_inserts:
            raise InteractionsRepositoryError("Supabase respondió 500: boom")
        self.logs.append(log)


@pytest.fixture(name="repository")
def fixture_repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture(name="make_conversation")
def fixture_make_conversation():
    """Construye conversaciones validadas a partir de dicts crudos."""

    def _make(**raw) -> Conversation:
        raw.setdefault("id", "c1")
        return Conversation.model_validate(raw)

    return _make


@pytest.fixture(name="async_client")
async def fixture_async_client() -> AsyncClient:
    """Retorna un cliente asíncrono contra la app principal utilizando ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
