"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, HttpUrl, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from contact_center_dashboard.domain.rag import RagThresholds

NonEmptyStr = Annotated[str, Field(min_length=1)]
NonNegativeFloat = Annotated[float, Field(ge=0.0)]
PositiveFloat = Annotated[float, Field(gt=0.0)]
PositiveInt = Annotated[int, Field(gt=0)]
MosFloat = Annotated[float, Field(ge=1.0, le=5.0)]
TemperatureFloat = Annotated[float, Field(ge=0.0, le=2.0)]


class Settings(BaseSettings):
    """Environment-driven application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    contact_center_api_url: HttpUrl = Field(validation_alias="CONTACT_CENTER_API_URL")
    contact_center_api_token: NonEmptyStr = Field(validation_alias="CONTACT_CENTER_API_TOKEN")
    contact_center_timeout_seconds: NonNegativeFloat = Field(
        default=20.0,
        validation_alias="CONTACT_CENTER_TIMEOUT_SECONDS",
    )
    default_queue_name: NonEmptyStr = Field(
        default="Support",
        validation_alias="DEFAULT_QUEUE_NAME",
    )
    poll_interval_seconds: PositiveFloat = Field(
        default=30.0,
        validation_alias="POLL_INTERVAL_SECONDS",
    )
    interval_granularity: NonEmptyStr = Field(
        default="PT30M",
        validation_alias="INTERVAL_GRANULARITY",
    )
    recent_interactions_limit: PositiveInt = Field(
        default=25,
        validation_alias="RECENT_INTERACTIONS_LIMIT",
    )
    mos_critical_threshold: MosFloat = Field(
        default=4.3,
        validation_alias="MOS_CRITICAL_THRESHOLD",
    )
    mos_warning_threshold: MosFloat = Field(
        default=4.7,
        validation_alias="MOS_WARNING_THRESHOLD",
    )
    llm_runtime_mode: Literal["deterministic", "provider"] = Field(
        default="deterministic",
        validation_alias="LLM_RUNTIME_MODE",
    )
    openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
    openai_model_analysis: NonEmptyStr = Field(
        default="gpt-4o-mini",
        validation_alias="OPENAI_MODEL_ANALYSIS",
    )
    openai_temperature: TemperatureFloat | None = Field(
        default=None,
        validation_alias="OPENAI_TEMPERATURE",
    )
    openai_timeout_seconds: NonNegativeFloat = Field(
        default=60.0,
        validation_alias="OPENAI_TIMEOUT_SECONDS",
    )
    dashboard_api_host: NonEmptyStr = Field(
        default="0.0.0.0",
        validation_alias="DASHBOARD_API_HOST",
    )
    dashboard_api_port: PositiveInt = Field(
        default=8000,
        validation_alias="DASHBOARD_API_PORT",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @model_validator(mode="after")
    def _check_mos_thresholds(self) -> "Settings":
        if self.mos_warning_threshold < self.mos_critical_threshold:
            raise ValueError("MOS_WARNING_THRESHOLD must be >= MOS_CRITICAL_THRESHOLD")
        return self

    def rag_thresholds(self) -> RagThresholds:
        """Return RAG thresholds with the configured MOS boundaries."""

        return RagThresholds(
            mos_critical=self.mos_critical_threshold,
            mos_warning=self.mos_warning_threshold,
        )


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()  # type: ignore[call-arg]
