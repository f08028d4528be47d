import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["STORAGE_BACKEND"] = "local"
os.environ.pop("GROQ_API_KEY", None)

import json
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

import study_planner.models  # noqa: F401
from study_planner.db.base import Base
from study_planner.db.session import get_db, make_engine, make_sessionmaker
from study_planner.llm.adapter import LLMAdapter
from study_planner.llm.factory import get_llm_adapter
from study_planner.main import create_app
from study_planner.storage.factory import get_file_storage
from study_planner.storage.local import LocalFileStorage


class FakeLLMAdapter(LLMAdapter):
    """Returns queued responses instead of calling a provider."""

    def __init__(self):
        self.responses: list[str] = []
        self.error: Exception | None = None
        self.calls: list[dict] = []

    def chat_completion(self, messages, **options):
        self.calls.append({"messages": messages, "options": options})
        if self.error is not None:
            raise self.error
        content = self.responses.pop(0) if self.responses else ""
        return {
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "model": "fake",
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": content},
                    "finish_reason": "stop",
                }
            ],
        }

    def complete(self, messages, *, temperature=0.3, max_tokens=None):
        body = self.chat_completion(messages, temperature=temperature, max_tokens=max_tokens)
        return body["choices"][0]["message"]["content"]


@pytest.fixture()
def engine(tmp_path):
    # a file so concurrent client requests each get their own connection
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine):
    TestingSession = make_sessionmaker(engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def llm():
    return FakeLLMAdapter()


@pytest.fixture()
def storage(tmp_path):
    return LocalFileStorage(tmp_path / "uploads", base_url="http://testserver")


@pytest.fixture()
def app(engine, llm, storage):
    app = create_app()
    TestingSession = make_sessionmaker(engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm_adapter] = lambda: llm
    app.dependency_overrides[get_file_storage] = lambda: storage
    return app


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def register(client):
    def _register(email="student@example.com", password="supersecure", display_name="Test Student"):
        response = client.post(
            "/auth/register",
            json={"email": email, "password": password, "displayName": display_name},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture()
def auth_headers(register):
    token = register()["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_plan():
    """Build a plan dict with ``sessions_per_week`` one-hour sessions per week."""

    def _make_plan(subjects=("Math", "Physics"), weeks=2, sessions_per_week=3, start=None):
        start = start or datetime(2026, 11, 2, 9, 0, tzinfo=timezone.utc)
        plan_weeks = []
        for week in range(weeks):
            sessions = []
            for index in range(sessions_per_week):
                begin = start + timedelta(weeks=week, days=index * 2)
                sessions.append(
                    {
                        "subject": subjects[(week * sessions_per_week + index) % len(subjects)],
                        "startTime": begin.isoformat().replace("+00:00", "Z"),
                        "endTime": (begin + timedelta(hours=1)).isoformat().replace("+00:00", "Z"),
                        "description": "Work through the chapter problems",
                        "learningStyle": "practice",
                    }
                )
            plan_weeks.append({"weekNumber": week + 1, "sessions": sessions})
        return {"weeks": plan_weeks}

    return _make_plan


@pytest.fixture()
def plan_json(make_plan):
    def _plan_json(**kwargs):
        return json.dumps(make_plan(**kwargs))

    return _plan_json
