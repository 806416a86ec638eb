"""Headless poller entrypoint logging KPI snapshots for the default queue."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from apps.dashboard_api.main import build_reporting_client
from contact_center_dashboard.application.services.dashboard_state import DashboardSnapshot
from contact_center_dashboard.application.services.polling_controller import PollingController
from contact_center_dashboard.config.settings import Settings, load_settings
from contact_center_dashboard.domain.kpi_board import build_kpi_tiles
from contact_center_dashboard.domain.rag import RagThresholds
from contact_center_dashboard.infrastructure.logging import configure_logging

logger = logging.getLogger(__name__)


def format_kpi_line(controller: PollingController, *, thresholds: RagThresholds) -> str:
    """Render current KPI tiles as `key=value/severity` pairs."""

    tiles = build_kpi_tiles(controller.state.summary, thresholds=thresholds)
    return " ".join(f"{tile.key}={tile.value:.2f}/{tile.severity.value}" for tile in tiles)


async def run_poller(
    *,
    settings: Settings,
    controller: PollingController,
    stop_event: asyncio.Event,
) -> None:
    """Connect to the default queue and log each newly applied snapshot until stopped."""

    thresholds = settings.rag_thresholds()
    await controller.connect(settings.default_queue_name)
    last_logged: DashboardSnapshot | None = None
    try:
        while not stop_event.is_set():
            snapshot = controller.state.snapshot
            if snapshot is not None and snapshot is not last_logged:
                logger.info(
                    "kpi_snapshot queue=%s %s",
                    settings.default_queue_name,
                    format_kpi_line(controller, thresholds=thresholds),
                )
                last_logged = snapshot
            error = controller.state.error
            if error is not None:
                logger.warning("kpi_snapshot_stale error=%s", error.message)
            with suppress(TimeoutError):
                await asyncio.wait_for(
                    stop_event.wait(),
                    timeout=settings.poll_interval_seconds,
                )
    finally:
        controller.disconnect()


async def _run() -> None:
    settings = load_settings()
    configure_logging(level=settings.log_level)
    logger.info(
        "poller_starting queue=%s poll_interval_seconds=%s",
        settings.default_queue_name,
        settings.poll_interval_seconds,
    )
    reporting_client = build_reporting_client(settings)
    controller = PollingController(
        metrics_client=reporting_client,
        interactions_client=reporting_client,
        poll_interval_seconds=settings.poll_interval_seconds,
    )
    stop_event = asyncio.Event()

    await run_poller(settings=settings, controller=controller, stop_event=stop_event)
    logger.info("poller_stopped")


def main() -> None:
    """Run the headless poller until interrupted."""

    asyncio.run(_run())


if __name__ == "__main__":
    main()
