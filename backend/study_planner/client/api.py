from __future__ import annotations

import logging
from typing import Any

import httpx

from study_planner.schemas.plan import GeneratedPlan, PlanPreferences

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 60.0


class APIError(Exception):
    """A non-2xx response from the study planner API."""

    def __init__(self, status_code: int, message: str, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details


def _error_message(response: httpx.Response) -> tuple[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase, None
    if isinstance(body, dict):
        message = body.get("error") or body.get("detail") or body.get("message")
        if message is not None and not isinstance(message, str):
            message = str(message)
        return message or response.reason_phrase, body.get("details")
    return str(body), None


class StudyPlannerAPI:
    """Async client for the study planner HTTP API."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: str | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url, headers=headers, timeout=timeout, transport=transport
        )

    async def __aenter__(self) -> "StudyPlannerAPI":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._client.request(method, path, **kwargs)
        if response.is_error:
            message, details = _error_message(response)
            logger.debug("%s %s failed with %s: %s", method, path, response.status_code, message)
            raise APIError(response.status_code, message, details)
        if not response.content:
            return None
        return response.json()

    async def list_sessions(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/api/study-sessions")

    async def create_session(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/api/study-sessions", json=payload)

    async def delete_session(self, session_id: int) -> None:
        await self._request("DELETE", f"/api/study-sessions/{session_id}")

    async def list_subjects(self) -> list[dict[str, Any]]:
        body = await self._request("GET", "/api/notes/subjects")
        return body.get("data", [])

    async def generate_plan(self, preferences: PlanPreferences) -> GeneratedPlan:
        body = await self._request(
            "POST",
            "/api/groq/studyplan",
            json=preferences.model_dump(mode="json", by_alias=True),
        )
        return GeneratedPlan.model_validate(body["plan"])
