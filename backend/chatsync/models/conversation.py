"""Modelos de conversaciones recibidas desde Chatbase."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from chatsync.core.logging import SKIP, get_logger, log_event

logger = get_logger(__name__)

# Llaves bajo las que distintas versiones de la API devuelven la lista.
ENVELOPE_KEYS = ("data", "conversations")


class Message(BaseModel):
    """Mensaje individual; sólo se consume `content`, que puede no ser texto."""

    model_config = ConfigDict(extra="ignore")

    content: Any = None

    @model_validator(mode="before")
    @classmethod
    def _tolerate_non_objects(cls, value: Any) -> Any:
        if isinstance(value, (dict, cls)):
            return value
        return {}

    @property
    def text(self) -> str | None:
        return self.content if isinstance(self.content, str) else None


class ConversationMetadata(BaseModel):
    """Metadatos opcionales capturados por el widget."""

    model_config = ConfigDict(extra="ignore")

    email: str | None = None

    @field_validator("email", mode="before")
    @classmethod
    def _clean_email(cls, value: Any) -> str | None:
        if not isinstance(value, str):
            return None
        return value.strip() or None


class Conversation(BaseModel):
    """Sesión de chat tal como la reporta el proveedor. Nunca se modifica localmente."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    metadata: ConversationMetadata | None = None
    messages: list[Message] | None = Field(default=None)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("metadata", mode="before")
    @classmethod
    def _tolerate_metadata(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, ConversationMetadata)) else None

    @field_validator("messages", mode="before")
    @classmethod
    def _tolerate_messages(cls, value: Any) -> Any:
        return value if isinstance(value, list) else None

    @property
    def email(self) -> str | None:
        return self.metadata.email if self.metadata else None


def extract_conversation_list(payload: Any) -> list[Any] | None:
    """Devuelve la lista cruda de conversaciones o `None` si la forma no se reconoce.

    Se aceptan dos formas: una lista directa, o un objeto con la lista bajo
    alguna de `ENVELOPE_KEYS`.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ENVELOPE_KEYS:
            candidate = payload.get(key)
            if isinstance(candidate, list):
                return candidate
    return None


@dataclass(slots=True)
class DiscardedItem:
    """Elemento de la respuesta que no pudo validarse como conversación."""

    index: int
    conversation_id: str | None
    errors: int


@dataclass(slots=True)
class ConversationPage:
    """Conversaciones válidas más los elementos descartados de la misma página."""

    conversations: list[Conversation] = field(default_factory=list)
    discarded: list[DiscardedItem] = field(default_factory=list)


def _raw_id(item: Any) -> str | None:
    if not isinstance(item, dict):
        return None
    value = item.get("id")
    if isinstance(value, str | int) and not isinstance(value, bool):
        return str(value)
    return None


def normalize_conversations(items: list[Any]) -> ConversationPage:
    """Valida cada elemento conservando el orden; los inválidos se registran como descartados."""
    page = ConversationPage()
    for index, item in enumerate(items):
        try:
            page.conversations.append(Conversation.model_validate(item))
        except ValidationError as exc:
            discarded = DiscardedItem(index=index, conversation_id=_raw_id(item), errors=exc.error_count())
            page.discarded.append(discarded)
            log_event(
                logger,
                "chatbase.conversation_discarded",
                level=logging.WARNING,
                category=SKIP,
                index=index,
                conversation_id=discarded.conversation_id,
                errors=discarded.errors,
            )
    return page
