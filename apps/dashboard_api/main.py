"""dashboard-api entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from contact_center_dashboard.application.dto.analysis_models import ForensicAnalysisResponse
from contact_center_dashboard.application.ports.analysis_client_port import AnalysisClientPort
from contact_center_dashboard.application.ports.interactions_client_port import (
    InteractionsClientPort,
)
from contact_center_dashboard.application.ports.metrics_client_port import MetricsClientPort
from contact_center_dashboard.application.services.forensic_analysis_service import (
    ForensicAnalysisService,
)
from contact_center_dashboard.application.services.polling_controller import PollingController
from contact_center_dashboard.config.settings import Settings, load_settings
from contact_center_dashboard.infrastructure.http.dashboard_router import (
    build_dashboard_router,
)
from contact_center_dashboard.infrastructure.llm.deterministic_client import (
    DeterministicMosAnalysisClient,
)
from contact_center_dashboard.infrastructure.llm.mos_analysis_client import (
    ANALYSIS_RESPONSE_SCHEMA_NAME,
    LlmMosAnalysisClient,
)
from contact_center_dashboard.infrastructure.llm.openai_client import OpenAiChatCompletionsClient
from contact_center_dashboard.infrastructure.logging import configure_logging
from contact_center_dashboard.infrastructure.platform.reporting_client import (
    ContactCenterHttpClient,
)

logger = logging.getLogger(__name__)


def build_reporting_client(settings: Settings) -> ContactCenterHttpClient:
    """Build the reporting API adapter from settings."""

    return ContactCenterHttpClient(
        base_url=str(settings.contact_center_api_url),
        access_token=settings.contact_center_api_token,
        timeout_seconds=settings.contact_center_timeout_seconds,
        granularity=settings.interval_granularity,
        recent_interactions_limit=settings.recent_interactions_limit,
    )


def build_analysis_client(settings: Settings) -> AnalysisClientPort:
    """Build the analysis client for the configured LLM runtime mode."""

    if settings.llm_runtime_mode == "provider":
        api_key = settings.openai_api_key
        if api_key is None or not api_key.strip():
            raise ValueError("OPENAI_API_KEY is required when LLM_RUNTIME_MODE=provider")
        return LlmMosAnalysisClient(
            llm_client=OpenAiChatCompletionsClient(
                api_key=api_key,
                model=settings.openai_model_analysis,
                temperature=settings.openai_temperature,
                response_schema_name=ANALYSIS_RESPONSE_SCHEMA_NAME,
                response_schema=ForensicAnalysisResponse.model_json_schema(),
                timeout_seconds=settings.openai_timeout_seconds,
            )
        )
    return DeterministicMosAnalysisClient(thresholds=settings.rag_thresholds())


def create_app(
    *,
    settings: Settings | None = None,
    metrics_client: MetricsClientPort | None = None,
    interactions_client: InteractionsClientPort | None = None,
    analysis_client: AnalysisClientPort | None = None,
) -> FastAPI:
    """Create FastAPI app serving the dashboard API."""

    if settings is None:
        settings = load_settings()
        configure_logging(level=settings.log_level)

    if metrics_client is None or interactions_client is None:
        reporting_client = build_reporting_client(settings)
        metrics_client = metrics_client or reporting_client
        interactions_client = interactions_client or reporting_client
    if analysis_client is None:
        analysis_client = build_analysis_client(settings)

    controller = PollingController(
        metrics_client=metrics_client,
        interactions_client=interactions_client,
        poll_interval_seconds=settings.poll_interval_seconds,
    )
    analysis_service = ForensicAnalysisService(analysis_client=analysis_client)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "dashboard_api_starting poll_interval_seconds=%s llm_mode=%s",
            settings.poll_interval_seconds,
            settings.llm_runtime_mode,
        )
        yield
        controller.disconnect()
        logger.info("dashboard_api_stopped")

    app = FastAPI(lifespan=lifespan)
    app.state.controller = controller
    app.state.analysis_service = analysis_service
    app.include_router(
        build_dashboard_router(
            controller=controller,
            analysis_service=analysis_service,
            default_queue_name=settings.default_queue_name,
            thresholds=settings.rag_thresholds(),
        )
    )
    return app


def main() -> None:
    """Run the dashboard API with uvicorn."""

    settings = load_settings()
    log_level = configure_logging(level=settings.log_level)
    uvicorn.run(
        create_app(settings=settings),
        host=settings.dashboard_api_host,
        port=settings.dashboard_api_port,
        log_level=log_level,
        # Clients poll /dashboard/status continuously.
        access_log=log_level <= logging.DEBUG,
    )


if __name__ == "__main__":
    main()
