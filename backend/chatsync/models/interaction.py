"""Registros de interacción y resultados por conversación."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, model_validator


class Identity(BaseModel):
    """Persona resuelta por correo: cliente o lead, nunca ambos."""

    customer_id: str | None = None
    lead_id: str | None = None

    @model_validator(mode="after")
    def _exclusive(self) -> Identity:
        if self.customer_id is not None and self.lead_id is not None:
            raise ValueError("Una identidad no puede ser cliente y lead a la vez")
        if self.customer_id is None and self.lead_id is None:
            raise ValueError("La identidad requiere customer_id o lead_id")
        return self

    @property
    def kind(self) -> str:
        return "customer" if self.customer_id is not None else "lead"


class InteractionLog(BaseModel):
    """Fila append-only de la tabla `interaction_logs`."""

    customer_id: str | None = None
    lead_id: str | None = None
    interaction_type: str
    summary: str
    created_at: datetime
    source_conversation_id: str

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class ItemStatus(str, Enum):
    RECORDED = "recorded"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(str, Enum):
    NO_MESSAGES = "no_messages"
    DUPLICATE = "duplicate"
    NO_EMAIL = "no_email"
    UNKNOWN_CONTACT = "unknown_contact"
    INVALID = "invalid"


@dataclass(slots=True)
class ItemResult:
    """Resultado de procesar una conversación."""

    conversation_id: str | None
    status: ItemStatus
    reason: SkipReason | None = None
    email: str | None = None
    detail: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "conversation_id": self.conversation_id,
            "status": self.status.value,
            "reason": self.reason.value if self.reason else None,
            "email": self.email,
            "detail": self.detail,
        }


@dataclass(slots=True)
class BatchReport:
    """Resumen inspeccionable de una corrida completa."""

    results: list[ItemResult] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.results)

    @property
    def recorded(self) -> int:
        return self._count(ItemStatus.RECORDED)

    @property
    def skipped(self) -> int:
        return self._count(ItemStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(ItemStatus.FAILED)

    def _count(self, status: ItemStatus) -> int:
        return sum(1 for result in self.results if result.status is status)

    def as_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "recorded": self.recorded,
            "skipped": self.skipped,
            "failed": self.failed,
            "results": [result.as_dict() for result in self.results],
        }
