"""Active-queue session management and the recurring metrics poll schedule."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from datetime import UTC, date, datetime

from contact_center_dashboard.application.ports.interactions_client_port import (
    InteractionsClientPort,
)
from contact_center_dashboard.application.ports.metrics_client_port import (
    MetricsClientPort,
    QueueMetricsSnapshot,
)
from contact_center_dashboard.application.ports.remote_errors import describe_remote_error
from contact_center_dashboard.application.services.dashboard_state import (
    DashboardSession,
    DashboardSnapshot,
    DashboardState,
)
from contact_center_dashboard.domain.queue_metrics import QueueId

SleepCallable = Callable[[float], Awaitable[None]]
NowCallable = Callable[[], datetime]
TodayCallable = Callable[[], date]
logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _utc_today() -> date:
    return _utc_now().date()


class NoActiveSessionError(RuntimeError):
    """Raised when an operation needs a connected queue and none is active."""


class PollingHandle:
    """Cancellable recurring poll schedule bound to one dashboard session."""

    def __init__(self, *, session: DashboardSession) -> None:
        self._session = session
        self._cancelled = False
        self._task: asyncio.Task[None] | None = None

    @property
    def session(self) -> DashboardSession:
        return self._session

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def bind(self, task: asyncio.Task[None]) -> None:
        self._task = task

    def cancel(self) -> None:
        """Stop further ticks; results of this schedule are discarded from now on."""

        if self._cancelled:
            return
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait_stopped(self) -> None:
        """Wait until the underlying task has finished after cancellation."""

        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass


class PollingController:
    """Owns the active session and writes poll results into dashboard state."""

    def __init__(
        self,
        *,
        metrics_client: MetricsClientPort,
        interactions_client: InteractionsClientPort,
        state: DashboardState | None = None,
        poll_interval_seconds: float = 30.0,
        sleep: SleepCallable = asyncio.sleep,
        now: NowCallable = _utc_now,
        today: TodayCallable = _utc_today,
    ) -> None:
        if poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be positive")
        self._metrics_client = metrics_client
        self._interactions_client = interactions_client
        self._state = state or DashboardState()
        self._poll_interval_seconds = poll_interval_seconds
        self._sleep = sleep
        self._now = now
        self._today = today
        self._session: DashboardSession | None = None
        self._handle: PollingHandle | None = None
        self._in_flight: list[DashboardSession] = []
        self._cycle_counter = 0
        self._latest_outcome_cycle = 0

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def session(self) -> DashboardSession | None:
        return self._session

    @property
    def is_polling(self) -> bool:
        return self._handle is not None and not self._handle.cancelled

    async def connect(self, queue_name: str, *, day: date | None = None) -> QueueId:
        """Resolve the queue, make it active, fetch immediately and start polling.

        A failed lookup is surfaced as the current error and re-raised; the
        previously active session, if any, is left untouched.
        """

        name = queue_name.strip()
        if not name:
            raise ValueError("queue_name must be a non-empty string")

        try:
            queue_id = await self._metrics_client.resolve_queue(name)
        except Exception as error:
            self._state.record_error(
                message=describe_remote_error(error),
                occurred_at=self._now(),
            )
            logger.warning("queue_resolve_failed queue_name=%s error=%s", name, error)
            raise

        session = DashboardSession(
            queue_name=name,
            queue_id=queue_id,
            day=day or self._today(),
        )
        self._activate(session)
        self._state.clear()
        logger.info(
            "queue_connected queue_name=%s queue_id=%s day=%s",
            name,
            queue_id,
            session.day.isoformat(),
        )
        await self._run_cycle(session)
        if self._session is session:
            self.start_polling(session)
        return queue_id

    async def select_date(self, day: date) -> DashboardSession:
        """Switch the active session to another date and restart the schedule."""

        current = self._require_session()
        session = replace(current, day=day)
        self._activate(session)
        logger.info(
            "queue_date_selected queue_id=%s day=%s",
            session.queue_id,
            day.isoformat(),
        )
        await self._run_cycle(session)
        if self._session is session:
            self.start_polling(session)
        return session

    async def refresh(self) -> bool:
        """Run one poll cycle now against the active session."""

        return await self._run_cycle(self._require_session())

    def disconnect(self) -> None:
        """Stop polling, drop the session, and discard fetched data."""

        session = self._session
        self._stop_schedule()
        self._session = None
        self._state.clear()
        if session is not None:
            logger.info("queue_disconnected queue_id=%s", session.queue_id)

    async def poll(self, queue_id: QueueId, day: date) -> QueueMetricsSnapshot:
        """Fetch interval history and agents; safe to call repeatedly."""

        return await self._metrics_client.fetch_metrics(queue_id=queue_id, day=day)

    def start_polling(self, session: DashboardSession) -> PollingHandle:
        """Start the recurring schedule for the session, replacing any running one."""

        self._stop_schedule()
        handle = PollingHandle(session=session)
        task = asyncio.create_task(
            self._poll_loop(handle),
            name=f"poll-{session.queue_id}-{session.day.isoformat()}",
        )
        handle.bind(task)
        self._handle = handle
        return handle

    async def _poll_loop(self, handle: PollingHandle) -> None:
        while not handle.cancelled:
            await self._sleep(self._poll_interval_seconds)
            if handle.cancelled:
                return
            if handle.session in self._in_flight:
                logger.info("poll_tick_skipped queue_id=%s", handle.session.queue_id)
                continue
            await self._run_cycle(handle.session, handle=handle)

    async def _run_cycle(
        self,
        session: DashboardSession,
        *,
        handle: PollingHandle | None = None,
    ) -> bool:
        self._cycle_counter += 1
        cycle = self._cycle_counter
        self._in_flight.append(session)
        try:
            metrics, interactions = await asyncio.gather(
                self.poll(session.queue_id, session.day),
                self._interactions_client.fetch_recent(queue_id=session.queue_id),
            )
        except Exception as error:  # noqa: BLE001
            if not self._is_current(session, handle):
                logger.info(
                    "poll_error_discarded queue_id=%s day=%s error=%s",
                    session.queue_id,
                    session.day.isoformat(),
                    error,
                )
                return False
            if cycle < self._latest_outcome_cycle:
                logger.info(
                    "poll_error_superseded queue_id=%s day=%s error=%s",
                    session.queue_id,
                    session.day.isoformat(),
                    error,
                )
                return False
            self._latest_outcome_cycle = cycle
            self._state.record_error(
                message=describe_remote_error(error),
                occurred_at=self._now(),
            )
            logger.warning(
                "poll_cycle_failed queue_id=%s day=%s error=%s",
                session.queue_id,
                session.day.isoformat(),
                error,
            )
            return False
        finally:
            self._in_flight.remove(session)

        if not self._is_current(session, handle):
            logger.info(
                "poll_result_discarded queue_id=%s day=%s",
                session.queue_id,
                session.day.isoformat(),
            )
            return False

        # A newer cycle already produced an outcome for this session.
        if cycle < self._latest_outcome_cycle:
            logger.info(
                "poll_result_superseded queue_id=%s day=%s",
                session.queue_id,
                session.day.isoformat(),
            )
            return False

        self._latest_outcome_cycle = cycle
        self._state.apply_snapshot(
            DashboardSnapshot(
                session=session,
                history=metrics.history,
                agents=metrics.agents,
                interactions=tuple(interactions),
                fetched_at=self._now(),
            )
        )
        logger.info(
            "poll_cycle_applied queue_id=%s day=%s intervals=%s agents=%s interactions=%s",
            session.queue_id,
            session.day.isoformat(),
            len(metrics.history),
            len(metrics.agents),
            len(interactions),
        )
        return True

    def _is_current(self, session: DashboardSession, handle: PollingHandle | None) -> bool:
        if self._session is not session:
            return False
        return handle is None or not handle.cancelled

    def _activate(self, session: DashboardSession) -> None:
        self._stop_schedule()
        self._session = session

    def _stop_schedule(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _require_session(self) -> DashboardSession:
        if self._session is None:
            raise NoActiveSessionError("no queue is connected")
        return self._session
