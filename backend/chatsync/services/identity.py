"""Resolución de identidad a partir del correo de una conversación."""

from __future__ import annotations

import re

from chatsync.models.conversation import Conversation
from chatsync.models.interaction import Identity
from chatsync.repositories.interactions import InteractionsRepository

EMAIL_PATTERN = re.compile(r"[A-Z0-9._%+-]+@(?:[A-Z0-9-]+\.)+[A-Z]{2,}", re.IGNORECASE)


def find_email(conversation: Conversation) -> str | None:
    """Prefiere el correo de metadata; si falta, toma la primera coincidencia en los mensajes."""
    if conversation.email:
        return conversation.email
    for message in conversation.messages or []:
        text = message.text
        if not text:
            continue
        match = EMAIL_PATTERN.search(text)
        if match:
            return match.group(0)
    return None


async def resolve_identity(repository: InteractionsRepository, email: str) -> Identity | None:
    """Busca primero en clientes y sólo si no hay coincidencia en leads."""
    customer_id = await repository.find_customer_id(email)
    if customer_id is not None:
        return Identity(customer_id=customer_id)
    lead_id = await repository.find_lead_id(email)
    if lead_id is not None:
        return Identity(lead_id=lead_id)
    return None
