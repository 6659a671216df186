"""Endpoint de salud mínimo para validaciones rápidas."""
from fastapi import APIRouter

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", summary="Estado del servicio")
def healthcheck() -> dict[str, str]:
    """Retorna un payload estático indicando que el servicio está vivo."""
    return {"status": "ok"}
