"""Configuración central basada en variables de entorno."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(RuntimeError):
    """Falta configuración obligatoria para ejecutar la sincronización."""


_REQUIRED = {
    "chatbase_api_key": "CHATBASE_API_KEY",
    "chatbase_bot_id": "CHATBASE_BOT_ID",
    "supabase_url": "SUPABASE_URL",
    "supabase_service_role": "SUPABASE_SERVICE_ROLE_KEY",
}


class Settings(BaseSettings):
    """Valores globales leídos desde `.env` o el entorno."""

    environment: str = "development"
    log_level: str | None = Field(
        default=None,
        description="Nivel de logging global (ej. debug, info, warning). Cuando no se define, usa un valor por ambiente.",
    )
    log_file_path: str | None = Field(
        default=None,
        description="Archivo opcional donde duplicar los logs en JSON.",
    )
    chatbase_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CHATSYNC_CHATBASE_API_KEY", "CHATBASE_API_KEY"),
    )
    chatbase_bot_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CHATSYNC_CHATBASE_BOT_ID", "CHATBASE_BOT_ID"),
    )
    chatbase_api_url: str = "https://www.chatbase.co/api/v1/get-conversations"
    chatbase_page_size: int = Field(
        default=50,
        ge=1,
        le=100,
        description="Tamaño de la única página solicitada a Chatbase; no se pagina.",
    )
    chatbase_timeout_seconds: float = 15.0
    sync_window_minutes: int = Field(
        default=60,
        ge=1,
        description="Minutos hacia atrás que cubre cada corrida programada.",
    )
    supabase_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CHATSYNC_SUPABASE_URL", "SUPABASE_URL"),
    )
    # Acepta el nombre largo que usa el panel de Supabase y el corto
    supabase_service_role: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "CHATSYNC_SUPABASE_SERVICE_ROLE",
            "SUPABASE_SERVICE_ROLE_KEY",
            "SUPABASE_SERVICE_ROLE",
        ),
    )
    supabase_timeout_seconds: float = 10.0
    interaction_type: str = Field(
        default="chatbase_summary",
        description="Etiqueta fija con la que se registran los resúmenes en interaction_logs.",
    )
    summary_max_chars: int = Field(default=400, ge=1)
    job_token: str | None = Field(
        default=None,
        description="Token bearer que debe presentar el scheduler al invocar /jobs/chatbase-sync.",
    )
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="CHATSYNC_", extra="allow", populate_by_name=True
    )

    def missing_required(self) -> list[str]:
        """Lista las variables obligatorias que no tienen valor."""
        return [env for field, env in _REQUIRED.items() if not getattr(self, field)]

    def ensure_configured(self) -> None:
        """Lanza `ConfigurationError` si falta alguna credencial obligatoria."""
        missing = self.missing_required()
        if missing:
            raise ConfigurationError(f"Configuración incompleta: faltan {', '.join(missing)}")


settings = Settings()
