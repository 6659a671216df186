"""Orquesta una corrida completa: consulta a Chatbase y registro en Supabase."""

from __future__ import annotations

from collections.abc import Iterable

from chatsync.core.config import Settings, settings as default_settings
from chatsync.core.logging import SUCCESS, get_logger, log_event
from chatsync.models.interaction import BatchReport, ItemResult, ItemStatus, SkipReason
from chatsync.repositories.interactions import InteractionsRepository
from chatsync.services.chatbase import ChatbaseFetcher, FetchWindow
from chatsync.services.recorder import InteractionRecorder

logger = get_logger(__name__)


class ChatbaseSyncService:
    """Une el fetcher y el recorder para una ejecución del scheduler."""

    def __init__(self, fetcher: ChatbaseFetcher, recorder: InteractionRecorder) -> None:
        self._fetcher = fetcher
        self._recorder = recorder

    async def run(
        self,
        window: FetchWindow,
        *,
        conversation_ids: Iterable[str] | None = None,
    ) -> BatchReport:
        page = await self._fetcher.fetch_page(window, conversation_ids=conversation_ids)
        report = await self._recorder.record(page.conversations)
        # Los descartados en la frontera cuentan como considerados.
        report.results.extend(
            ItemResult(
                conversation_id=item.conversation_id,
                status=ItemStatus.SKIPPED,
                reason=SkipReason.INVALID,
                detail=f"elemento {item.index} con {item.errors} error(es) de validación",
            )
            for item in page.discarded
        )
        log_event(
            logger,
            "sync.completed",
            category=SUCCESS,
            processed=report.processed,
            recorded=report.recorded,
            skipped=report.skipped,
            failed=report.failed,
        )
        return report


def build_sync_service(config: Settings | None = None) -> ChatbaseSyncService:
    """Construye el servicio con clientes reales; falla si falta configuración."""
    config = config or default_settings
    config.ensure_configured()
    fetcher = ChatbaseFetcher(
        api_key=config.chatbase_api_key,
        bot_id=config.chatbase_bot_id,
        api_url=config.chatbase_api_url,
        page_size=config.chatbase_page_size,
        timeout=config.chatbase_timeout_seconds,
    )
    repository = InteractionsRepository(
        base_url=config.supabase_url,
        service_role=config.supabase_service_role,
        timeout=config.supabase_timeout_seconds,
    )
    recorder = InteractionRecorder(
        repository,
        interaction_type=config.interaction_type,
        summary_max_chars=config.summary_max_chars,
    )
    return ChatbaseSyncService(fetcher, recorder)


async def run_sync(
    *,
    minutes: int | None = None,
    conversation_ids: Iterable[str] | None = None,
    config: Settings | None = None,
) -> BatchReport:
    """Ejecuta una corrida sobre los últimos `minutes` minutos (por defecto los configurados)."""
    config = config or default_settings
    service = build_sync_service(config)
    window = FetchWindow.last(minutes or config.sync_window_minutes)
    return await service.run(window, conversation_ids=conversation_ids)
