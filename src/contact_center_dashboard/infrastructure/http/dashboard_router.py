"""FastAPI router exposing dashboard session, KPI and analysis endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response

from contact_center_dashboard.application.dto.dashboard_models import (
    AgentItem,
    AgentListResponse,
    AnalysisPanelResponse,
    ConnectRequest,
    DashboardStatusResponse,
    InteractionItem,
    InteractionListResponse,
    IntervalHistoryResponse,
    IntervalItem,
    KpiTileResponse,
    MetricsSummaryResponse,
    SelectDateRequest,
    SessionResponse,
)
from contact_center_dashboard.application.ports.remote_errors import (
    NotFoundError,
    RateLimitError,
    RemoteServiceError,
    describe_remote_error,
)
from contact_center_dashboard.application.services.dashboard_state import DashboardSession
from contact_center_dashboard.application.services.forensic_analysis_service import (
    AnalysisInProgressError,
    AnalysisPanel,
    EmptyAnalysisSeriesError,
    ForensicAnalysisService,
)
from contact_center_dashboard.application.services.polling_controller import (
    NoActiveSessionError,
    PollingController,
)
from contact_center_dashboard.domain.kpi_board import build_kpi_tiles
from contact_center_dashboard.domain.rag import (
    DEFAULT_THRESHOLDS,
    KpiKind,
    RagThresholds,
    classify,
)


def build_dashboard_router(
    *,
    controller: PollingController,
    analysis_service: ForensicAnalysisService,
    default_queue_name: str,
    thresholds: RagThresholds = DEFAULT_THRESHOLDS,
) -> APIRouter:
    """Build router exposing the dashboard API endpoints."""

    router = APIRouter(prefix="/dashboard", tags=["dashboard"])
    state = controller.state

    @router.post("/connect", response_model=SessionResponse)
    async def connect(payload: ConnectRequest) -> SessionResponse:
        queue_name = payload.queue_name or default_queue_name
        try:
            await controller.connect(queue_name, day=payload.day)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except RemoteServiceError as exc:
            raise _remote_http_error(exc) from exc
        return _session_response(_require_session(controller))

    @router.post("/disconnect", status_code=204)
    async def disconnect() -> Response:
        controller.disconnect()
        return Response(status_code=204)

    @router.put("/date", response_model=SessionResponse)
    async def select_date(payload: SelectDateRequest) -> SessionResponse:
        try:
            session = await controller.select_date(payload.day)
        except NoActiveSessionError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _session_response(session)

    @router.post("/refresh", response_model=DashboardStatusResponse)
    async def refresh() -> DashboardStatusResponse:
        try:
            await controller.refresh()
        except NoActiveSessionError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _status_response(controller)

    @router.get("/status", response_model=DashboardStatusResponse)
    async def status() -> DashboardStatusResponse:
        return _status_response(controller)

    @router.get("/summary", response_model=MetricsSummaryResponse)
    async def summary() -> MetricsSummaryResponse:
        current = state.summary
        return MetricsSummaryResponse(
            average_mos=current.average_mos,
            average_service_level=current.average_service_level,
            total_offered=current.total_offered,
            total_answered=current.total_answered,
            total_abandoned=current.total_abandoned,
            agent_count=current.agent_count,
            average_handle_time=current.average_handle_time,
            tiles=[
                KpiTileResponse(
                    key=tile.key,
                    label=tile.label,
                    value=tile.value,
                    severity=tile.severity,
                )
                for tile in build_kpi_tiles(current, thresholds=thresholds)
            ],
        )

    @router.get("/history", response_model=IntervalHistoryResponse)
    async def history() -> IntervalHistoryResponse:
        return IntervalHistoryResponse(
            items=[
                IntervalItem(
                    timestamp=record.timestamp,
                    offered=record.offered,
                    answered=record.answered,
                    abandoned=record.abandoned,
                    service_level_percent=record.service_level_percent,
                    mos=record.mos,
                    mos_severity=classify(KpiKind.MOS, record.mos, thresholds=thresholds),
                    average_handle_time_seconds=record.average_handle_time_seconds,
                    conversation_count=record.conversation_count,
                )
                for record in state.history
            ]
        )

    @router.get("/agents", response_model=AgentListResponse)
    async def agents() -> AgentListResponse:
        return AgentListResponse(
            items=[
                AgentItem(
                    agent_id=agent.agent_id,
                    name=agent.name,
                    answered=agent.answered,
                    average_handle_time_seconds=agent.average_handle_time_seconds,
                    mos=agent.mos,
                )
                for agent in state.agents
            ]
        )

    @router.get("/interactions", response_model=InteractionListResponse)
    async def interactions() -> InteractionListResponse:
        return InteractionListResponse(
            items=[
                InteractionItem(
                    conversation_id=item.conversation_id,
                    started_at=item.started_at,
                    ended_at=item.ended_at,
                    participants=list(item.participants),
                    recording_id=item.recording_id,
                    direction=item.direction,
                )
                for item in state.interactions
            ]
        )

    @router.post("/analysis", response_model=AnalysisPanelResponse)
    async def request_analysis() -> AnalysisPanelResponse:
        try:
            await analysis_service.analyze_history(state.history)
        except AnalysisInProgressError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except EmptyAnalysisSeriesError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except RemoteServiceError:
            # surfaced on the panel
            pass
        return _panel_response(analysis_service.panel)

    @router.get("/analysis", response_model=AnalysisPanelResponse)
    async def get_analysis() -> AnalysisPanelResponse:
        return _panel_response(analysis_service.panel)

    return router


def _remote_http_error(error: RemoteServiceError) -> HTTPException:
    if isinstance(error, NotFoundError):
        status_code = 404
    elif isinstance(error, RateLimitError):
        status_code = 429
    else:
        status_code = 502
    return HTTPException(status_code=status_code, detail=describe_remote_error(error))


def _require_session(controller: PollingController) -> DashboardSession:
    session = controller.session
    if session is None:
        raise HTTPException(status_code=409, detail="queue was disconnected during connect")
    return session


def _session_response(session: DashboardSession) -> SessionResponse:
    return SessionResponse(
        queue_name=session.queue_name,
        queue_id=session.queue_id,
        day=session.day,
    )


def _status_response(controller: PollingController) -> DashboardStatusResponse:
    session = controller.session
    snapshot = controller.state.snapshot
    error = controller.state.error
    return DashboardStatusResponse(
        connected=session is not None,
        polling=controller.is_polling,
        session=_session_response(session) if session is not None else None,
        last_updated_at=snapshot.fetched_at if snapshot is not None else None,
        error=error.message if error is not None else None,
        error_at=error.occurred_at if error is not None else None,
    )


def _panel_response(panel: AnalysisPanel) -> AnalysisPanelResponse:
    return AnalysisPanelResponse(
        status=panel.status,
        text=panel.text,
        error=panel.error,
        sample_count=panel.sample_count,
        requested_at=panel.requested_at,
        completed_at=panel.completed_at,
    )
