"""Registro de conversaciones de Chatbase como interaction_logs."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from chatsync.core.config import settings
from chatsync.core.logging import ERROR, SKIP, get_logger, log_event
from chatsync.models.conversation import Conversation
from chatsync.models.interaction import (
    BatchReport,
    InteractionLog,
    ItemResult,
    ItemStatus,
    SkipReason,
)
from chatsync.repositories.interactions import (
    InteractionsRepository,
    InteractionsRepositoryError,
)
from chatsync.services.identity import find_email, resolve_identity
from chatsync.services.summary import summarize

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InteractionRecorder:
    """Procesa cada conversación de forma secuencial y aislada.

    Un fallo en una conversación se registra como resultado `failed` y nunca
    interrumpe el resto del lote.
    """

    def __init__(
        self,
        repository: InteractionsRepository | None = None,
        *,
        interaction_type: str | None = None,
        summary_max_chars: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repo = repository or InteractionsRepository()
        self._interaction_type = interaction_type or settings.interaction_type
        self._summary_max_chars = summary_max_chars or settings.summary_max_chars
        self._clock = clock

    async def record(self, conversations: Iterable[Conversation]) -> BatchReport:
        report = BatchReport()
        for conversation in conversations:
            try:
                result = await self.record_one(conversation)
            except Exception as exc:
                logger.exception(
                    "recorder.unexpected_error",
                    extra={"category": ERROR, "conversation_id": conversation.id},
                )
                result = ItemResult(
                    conversation_id=conversation.id,
                    status=ItemStatus.FAILED,
                    detail=str(exc) or type(exc).__name__,
                )
            report.results.append(result)
        return report

    async def record_one(self, conversation: Conversation) -> ItemResult:
        """Aplica guardas, deduplicación, resolución y persistencia a una conversación."""
        if not conversation.messages:
            return self._skip(conversation, SkipReason.NO_MESSAGES)

        try:
            if await self._repo.interaction_exists(conversation.id):
                return self._skip(conversation, SkipReason.DUPLICATE)
        except InteractionsRepositoryError as exc:
            return self._fail(conversation, "recorder.dedup_failed", exc)

        email = find_email(conversation)
        if not email:
            return self._skip(conversation, SkipReason.NO_EMAIL)

        try:
            identity = await resolve_identity(self._repo, email)
        except InteractionsRepositoryError as exc:
            return self._fail(conversation, "recorder.lookup_failed", exc, email=email)
        if identity is None:
            return self._skip(conversation, SkipReason.UNKNOWN_CONTACT, email=email)

        log = InteractionLog(
            customer_id=identity.customer_id,
            lead_id=identity.lead_id,
            interaction_type=self._interaction_type,
            summary=summarize(conversation.messages, max_chars=self._summary_max_chars),
            created_at=self._clock(),
            source_conversation_id=conversation.id,
        )
        try:
            await self._repo.insert_interaction(log)
        except InteractionsRepositoryError as exc:
            return self._fail(conversation, "recorder.insert_failed", exc, email=email)

        log_event(
            logger,
            "recorder.recorded",
            conversation_id=conversation.id,
            email=email,
            identity=identity.kind,
        )
        return ItemResult(
            conversation_id=conversation.id,
            status=ItemStatus.RECORDED,
            email=email,
        )

    def _skip(
        self,
        conversation: Conversation,
        reason: SkipReason,
        *,
        email: str | None = None,
    ) -> ItemResult:
        log_event(
            logger,
            "recorder.skipped",
            category=SKIP,
            conversation_id=conversation.id,
            reason=reason.value,
            email=email,
        )
        return ItemResult(
            conversation_id=conversation.id,
            status=ItemStatus.SKIPPED,
            reason=reason,
            email=email,
        )

    def _fail(
        self,
        conversation: Conversation,
        event: str,
        exc: Exception,
        *,
        email: str | None = None,
    ) -> ItemResult:
        log_event(
            logger,
            event,
            level=logging.ERROR,
            category=ERROR,
            conversation_id=conversation.id,
            email=email,
            error=str(exc),
        )
        return ItemResult(
            conversation_id=conversation.id,
            status=ItemStatus.FAILED,
            email=email,
            detail=str(exc),
        )
