"""Repositorio de personas e interaction_logs vía Supabase REST."""

from __future__ import annotations

from typing import Any

import httpx

from chatsync.core.config import ConfigurationError, settings
from chatsync.core.logging import ERROR, get_logger
from chatsync.models.interaction import InteractionLog

logger = get_logger(__name__)

CUSTOMERS_PATH = "/rest/v1/customers"
LEADS_PATH = "/rest/v1/leads"
INTERACTION_LOGS_PATH = "/rest/v1/interaction_logs"


class InteractionsRepositoryError(RuntimeError):
    """Errores derivados de llamadas a Supabase."""


class InteractionsRepository:
    """Pequeña capa de acceso a Supabase REST para clientes, leads e interacciones.

    La verificación de existencia y la inserción son dos llamadas separadas sin
    transacción; sólo una restricción única sobre `source_conversation_id` en la
    base evitaría duplicados entre corridas solapadas.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        service_role: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        base_url = base_url or settings.supabase_url
        if not base_url:
            raise ConfigurationError("Supabase URL no configurada")
        service_role = service_role or settings.supabase_service_role
        if not service_role:
            raise ConfigurationError("Falta SUPABASE_SERVICE_ROLE_KEY")
        self._base_url = base_url.rstrip("/")
        self._service_role = service_role
        self._timeout = timeout if timeout is not None else settings.supabase_timeout_seconds
        self._transport = transport

    async def find_customer_id(self, email: str) -> str | None:
        """Busca un cliente por coincidencia exacta de correo."""
        return await self._find_id(CUSTOMERS_PATH, email)

    async def find_lead_id(self, email: str) -> str | None:
        """Busca un lead por coincidencia exacta de correo."""
        return await self._find_id(LEADS_PATH, email)

    async def interaction_exists(self, conversation_id: str) -> bool:
        params = {
            "select": "id",
            "source_conversation_id": f"eq.{conversation_id}",
            "limit": "1",
        }
        response = await self._request("GET", INTERACTION_LOGS_PATH, params=params)
        return bool(self._json_list(response))

    async def insert_interaction(self, log: InteractionLog) -> None:
        await self._request(
            "POST",
            INTERACTION_LOGS_PATH,
            json=log.to_row(),
            prefer="return=minimal",
        )

    async def _find_id(self, path: str, email: str) -> str | None:
        params = {"select": "id", "email": f"eq.{email}", "limit": "1"}
        response = await self._request("GET", path, params=params)
        rows = self._json_list(response)
        if not rows or rows[0].get("id") is None:
            return None
        return str(rows[0]["id"])

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        headers = self._headers(prefer, has_body=json is not None)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=headers,
                )
        except httpx.RequestError as exc:
            logger.exception(
                "supabase.request_failed",
                extra={"category": ERROR, "path": path, "error": str(exc)},
            )
            raise InteractionsRepositoryError(f"Error al conectar a Supabase: {exc}") from exc
        if response.status_code >= 400:
            logger.error(
                "supabase.response_error",
                extra={
                    "category": ERROR,
                    "path": path,
                    "status": response.status_code,
                    "body": response.text,
                },
            )
            raise InteractionsRepositoryError(
                f"Supabase respondió {response.status_code}: {response.text}"
            )
        return response

    def _headers(self, prefer: str | None, *, has_body: bool) -> dict[str, str]:
        headers: dict[str, str] = {
            "Accept": "application/json",
            "apikey": self._service_role,
            "Authorization": f"Bearer {self._service_role}",
        }
        if prefer:
            headers["Prefer"] = prefer
        if has_body:
            headers["Content-Type"] = "application/json"
        return headers

    @staticmethod
    def _json_list(response: httpx.Response) -> list[dict[str, Any]]:
        try:
            payload = response.json() or []
        except ValueError as exc:
            raise InteractionsRepositoryError("Respuesta no JSON de Supabase") from exc
        if not isinstance(payload, list):
            raise InteractionsRepositoryError("Respuesta inesperada de Supabase")
        return [row for row in payload if isinstance(row, dict)]
