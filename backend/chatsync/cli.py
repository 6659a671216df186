"""Ejecuta una sincronización Chatbase → Supabase desde cron u otro scheduler."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from chatsync.core.config import Settings
from chatsync.core.logging import ERROR, configure_logging, get_logger, resolve_log_level
from chatsync.services import sync

logger = get_logger("chatsync.cli")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Consulta las conversaciones recientes de Chatbase y registra un resumen "
            "por conversación en interaction_logs."
        )
    )
    parser.add_argument(
        "--minutes",
        type=int,
        help="Minutos hacia atrás a consultar. Por defecto CHATSYNC_SYNC_WINDOW_MINUTES (60).",
    )
    parser.add_argument(
        "--conversation-id",
        dest="conversation_ids",
        action="append",
        help="Procesa sólo este ID de conversación (repetible).",
    )
    parser.add_argument(
        "--dotenv",
        help="Ruta al archivo .env a cargar antes de leer variables de entorno.",
    )
    parser.add_argument(
        "--log-level",
        help="Nivel de logging (debug, info, warning...). Sobrescribe CHATSYNC_LOG_LEVEL.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce el output a sólo advertencias y errores.",
    )
    args = parser.parse_args(argv)
    if args.minutes is not None and args.minutes < 1:
        parser.error("--minutes debe ser mayor o igual a 1")
    return args


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if args.dotenv:
        dotenv_file = Path(args.dotenv)
        if dotenv_file.exists():
            load_dotenv(dotenv_file)
    config = Settings()

    level = logging.WARNING if args.quiet else resolve_log_level(args.log_level or config.log_level)
    configure_logging(level=level, log_file=config.log_file_path)

    try:
        asyncio.run(
            sync.run_sync(
                minutes=args.minutes,
                conversation_ids=args.conversation_ids,
                config=config,
            )
        )
    except Exception:
        logger.exception("sync.fatal", extra={"category": ERROR})
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - script manual
    sys.exit(main())
