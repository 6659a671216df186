"""Consulta de conversaciones recientes en Chatbase."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from chatsync.core.config import ConfigurationError, settings
from chatsync.core.logging import ERROR, get_logger, log_event
from chatsync.core.security import mask_secret
from chatsync.models.conversation import (
    Conversation,
    ConversationPage,
    extract_conversation_list,
    normalize_conversations,
)

logger = get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _isoformat(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class FetchWindow:
    """Intervalo cerrado [start, end] en UTC. Fechas sin zona se leen como UTC."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        start = _as_utc(self.start)
        end = _as_utc(self.end)
        if end < start:
            raise ValueError("El fin de la ventana no puede ser anterior al inicio")
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @classmethod
    def last(cls, minutes: int, *, now: datetime | None = None) -> FetchWindow:
        """Ventana de los últimos `minutes` minutos que termina en `now`."""
        if minutes < 1:
            raise ValueError("La ventana debe cubrir al menos un minuto")
        end = _as_utc(now) if now else datetime.now(timezone.utc)
        return cls(start=end - timedelta(minutes=minutes), end=end)

    def as_params(self) -> dict[str, str]:
        return {"startDate": _isoformat(self.start), "endDate": _isoformat(self.end)}


class ChatbaseError(RuntimeError):
    """Fallo al consultar Chatbase."""


class ChatbaseFetcher:
    """Obtiene la primera página de conversaciones de un bot dentro de una ventana.

    No pagina: si la ventana contiene más conversaciones que `page_size` el
    resto se pierde en silencio. Cualquier fallo de red o de forma se registra
    y produce una lista vacía; la siguiente corrida programada reintenta.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        bot_id: str | None = None,
        api_url: str | None = None,
        page_size: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or settings.chatbase_api_key
        self._bot_id = bot_id or settings.chatbase_bot_id
        if not self._api_key or not self._bot_id:
            raise ConfigurationError("Chatbase no está configurado (CHATBASE_API_KEY/CHATBASE_BOT_ID)")
        self._api_url = api_url or settings.chatbase_api_url
        self._page_size = page_size or settings.chatbase_page_size
        self._timeout = timeout if timeout is not None else settings.chatbase_timeout_seconds
        self._transport = transport

    async def fetch(
        self,
        window: FetchWindow,
        *,
        conversation_ids: Iterable[str] | None = None,
    ) -> list[Conversation]:
        """Retorna las conversaciones de la ventana en el orden del proveedor."""
        page = await self.fetch_page(window, conversation_ids=conversation_ids)
        return page.conversations

    async def fetch_page(
        self,
        window: FetchWindow,
        *,
        conversation_ids: Iterable[str] | None = None,
    ) -> ConversationPage:
        """Como `fetch`, pero conserva también los elementos que no pasaron validación."""
        log_event(
            logger,
            "chatbase.fetch_started",
            start=_isoformat(window.start),
            end=_isoformat(window.end),
            bot_id=mask_secret(self._bot_id),
        )
        try:
            payload = await self._get(window)
        except ChatbaseError:
            return ConversationPage()

        items = extract_conversation_list(payload)
        if items is None:
            log_event(
                logger,
                "chatbase.unexpected_payload",
                level=logging.ERROR,
                category=ERROR,
                payload_type=type(payload).__name__,
                body=repr(payload)[:500],
            )
            return ConversationPage()

        page = normalize_conversations(items)
        if conversation_ids:
            wanted = set(conversation_ids)
            page = ConversationPage(
                conversations=[conv for conv in page.conversations if conv.id in wanted],
                discarded=[item for item in page.discarded if item.conversation_id in wanted],
            )

        log_event(
            logger,
            "chatbase.fetch_completed",
            count=len(page.conversations),
            discarded=len(page.discarded),
        )
        return page

    async def _get(self, window: FetchWindow) -> Any:
        params = {
            "chatbotId": self._bot_id,
            **window.as_params(),
            "page": "1",
            "size": str(self._page_size),
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self._api_url, headers=headers, params=params)
        except httpx.RequestError as exc:
            log_event(
                logger,
                "chatbase.request_failed",
                level=logging.ERROR,
                category=ERROR,
                error=str(exc) or type(exc).__name__,
            )
            raise ChatbaseError(f"Error de red al consultar Chatbase: {exc}") from exc

        if not response.is_success:
            log_event(
                logger,
                "chatbase.response_error",
                level=logging.ERROR,
                category=ERROR,
                status=response.status_code,
                body=response.text,
            )
            raise ChatbaseError(f"Chatbase respondió {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            log_event(
                logger,
                "chatbase.invalid_json",
                level=logging.ERROR,
                category=ERROR,
                status=response.status_code,
                body=response.text[:500],
            )
            raise ChatbaseError("Respuesta no JSON de Chatbase") from exc
