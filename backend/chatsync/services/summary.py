"""Resumen acotado del contenido de una conversación."""

from collections.abc import Iterable

from chatsync.models.conversation import Message

DEFAULT_MAX_CHARS = 400


def summarize(messages: Iterable[Message], *, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    """Une con un espacio el texto de cada mensaje y corta en `max_chars` caracteres.

    Los contenidos que no son texto se omiten por completo. El corte no respeta
    palabras.
    """
    joined = " ".join(message.text for message in messages if message.text is not None)
    return joined[:max_chars]
