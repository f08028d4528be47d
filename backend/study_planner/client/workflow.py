"""Plan generation as the user experiences it.

``run`` clears the calendar from today onwards, asks the server for a plan,
creates every planned session, and reconciles the local store with what the
server ended up holding.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import httpx

from study_planner.client.api import APIError, StudyPlannerAPI
from study_planner.client.notifications import Level, Notification, Notifier, error_hint
from study_planner.client.store import CalendarEvent, SessionStore
from study_planner.schemas.plan import GeneratedPlan, PlanPreferences, PlannedSession

logger = logging.getLogger(__name__)

_REQUEST_ERRORS = (APIError, httpx.HTTPError)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _describe(exc: Exception) -> str:
    if isinstance(exc, APIError):
        return exc.message
    return str(exc) or exc.__class__.__name__


@dataclass
class CleanupReport:
    deleted: int = 0
    failed: int = 0

    @property
    def summary(self) -> str:
        return f"{self.deleted} deleted, {self.failed} failed"


@dataclass
class MaterializationReport:
    saved: int = 0
    local_only: int = 0

    @property
    def degraded(self) -> bool:
        return self.local_only > 0


class PlanGenerationWorkflow:
    def __init__(
        self,
        api: StudyPlannerAPI,
        store: SessionStore,
        notifier: Notifier,
        clock: Callable[[], datetime] = _local_now,
    ):
        self.api = api
        self.store = store
        self.notifier = notifier
        self.clock = clock

    async def refresh(self) -> None:
        sessions = await self.api.list_sessions()
        result = self.store.reconcile(CalendarEvent.from_api(item) for item in sessions)
        logger.debug(
            "Reconciled %d server sessions, %d local-only", result.confirmed, result.local_only
        )

    async def clear_future_sessions(self) -> CleanupReport:
        """Delete every session from local midnight onwards, one at a time."""
        await self.refresh()
        report = CleanupReport()
        for event in self.store.future(self.clock()):
            if event.local_only or event.id is None:
                self.store.remove(event)
                continue
            try:
                await self.api.delete_session(event.id)
            except _REQUEST_ERRORS as exc:
                logger.warning("Could not delete session %s: %s", event.id, _describe(exc))
                report.failed += 1
                continue
            self.store.remove(event)
            report.deleted += 1

        if report.failed:
            notification = Notification(
                Level.WARNING, "Some existing sessions could not be removed", report.summary
            )
        else:
            notification = Notification(Level.INFO, "Existing sessions cleared", report.summary)
        self.notifier.notify(notification)
        return report

    async def request_plan(self, preferences: PlanPreferences) -> GeneratedPlan:
        return await self.api.generate_plan(preferences)

    async def _create(self, session: PlannedSession, generation_id: str) -> dict:
        payload = {
            "subject": session.subject,
            "startTime": session.start_time.isoformat(),
            "endTime": session.end_time.isoformat(),
            "description": session.description,
            "isAIGenerated": True,
            "generationId": generation_id,
        }
        return await self.api.create_session(payload)

    async def materialize(
        self, plan: GeneratedPlan, generation_id: str
    ) -> MaterializationReport:
        sessions = plan.flatten()
        results = await asyncio.gather(
            *(self._create(session, generation_id) for session in sessions),
            return_exceptions=True,
        )

        report = MaterializationReport()
        for session, result in zip(sessions, results):
            if isinstance(result, BaseException):
                if not isinstance(result, _REQUEST_ERRORS):
                    raise result
                logger.warning(
                    "Keeping %s at %s locally: %s",
                    session.subject,
                    session.start_time.isoformat(),
                    _describe(result),
                )
                self.store.add(
                    CalendarEvent(
                        subject=session.subject,
                        start_time=session.start_time,
                        end_time=session.end_time,
                        description=session.description,
                        is_ai_generated=True,
                        local_only=True,
                    )
                )
                report.local_only += 1
            else:
                report.saved += 1

        # the outcome of the creates stands even if the re-fetch below fails
        if report.degraded:
            self.notifier.notify(
                Notification(
                    Level.WARNING,
                    "Study plan partially saved",
                    f"{report.saved} saved to server, {report.local_only} local-only",
                )
            )
        else:
            self.notifier.notify(
                Notification(
                    Level.SUCCESS,
                    "Study plan created",
                    f"{report.saved} sessions saved to server",
                )
            )

        await self.refresh()
        return report

    def _report_failure(self, title: str, exc: Exception) -> None:
        message = _describe(exc)
        self.notifier.notify(
            Notification(Level.ERROR, title, f"{message}. {error_hint(message)}")
        )

    async def run(self, preferences: PlanPreferences) -> MaterializationReport:
        """Errors from any step are notified before they propagate."""
        generation_id = uuid.uuid4().hex
        try:
            await self.clear_future_sessions()
        except _REQUEST_ERRORS as exc:
            self._report_failure("Could not clear existing sessions", exc)
            raise

        try:
            plan = await self.request_plan(preferences)
        except _REQUEST_ERRORS as exc:
            self._report_failure("Failed to generate study plan", exc)
            raise

        try:
            return await self.materialize(plan, generation_id)
        except _REQUEST_ERRORS as exc:
            self._report_failure("Could not refresh your calendar", exc)
            raise
