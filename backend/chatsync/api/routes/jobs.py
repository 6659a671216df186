"""Disparador HTTP para que un scheduler externo ejecute la sincronización."""

from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel, Field

from chatsync.core.config import ConfigurationError, settings
from chatsync.core.logging import ERROR, get_logger
from chatsync.core.security import TokenError, verify_bearer_token
from chatsync.services import sync

logger = get_logger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])


class SyncJobRequest(BaseModel):
    """Parámetros opcionales de una corrida manual o programada."""

    minutes: int | None = Field(default=None, ge=1, description="Ventana hacia atrás en minutos.")
    conversation_ids: list[str] | None = Field(
        default=None,
        min_length=1,
        description="Limita la corrida a estos IDs de conversación dentro de la ventana.",
    )


async def require_job_token(authorization: str | None = Header(default=None)) -> None:
    """Exige el token configurado en `job_token`."""
    if not settings.job_token:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Job token no configurado",
        )
    try:
        verify_bearer_token(settings.job_token, authorization)
    except TokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc


@router.post("/chatbase-sync", summary="Ejecuta una sincronización Chatbase → Supabase")
async def run_chatbase_sync(
    payload: SyncJobRequest | None = None,
    _: None = Depends(require_job_token),
) -> dict[str, Any]:
    """Corre una sincronización completa y devuelve el reporte del lote."""
    payload = payload or SyncJobRequest()
    try:
        report = await sync.run_sync(
            minutes=payload.minutes,
            conversation_ids=payload.conversation_ids,
        )
    except ConfigurationError as exc:
        logger.exception("jobs.configuration_error", extra={"category": ERROR})
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    return report.as_dict()
