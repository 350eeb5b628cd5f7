"""
Pytest fixtures for VeriSight tests. Each test gets its own temporary SQLite DB,
and the external detection API is replaced with httpx.MockTransport.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from sqlalchemy.orm import sessionmaker

import verisight.db.models  # noqa: F401
from verisight.db.base import Base
from verisight.db.models.analysis_result import AnalysisResult
from verisight.db.models.user import User
from verisight.db.models.user_settings import UserSettings
from verisight.db.session import get_db, make_engine
from verisight.schemas.detection import DetectionReport
from verisight.services.detection_client import DetectionClient, get_detection_client

DETECTION_BASE_URL = "http://detector.test"

SAMPLE_REPORT = {
    "analysis_summary": "The claim contradicts published figures.",
    "confidence_score": 27.5,
    "credibility_proof": [
        {
            "claim_verified": "Unemployment doubled in 2024",
            "matched_fact": "Unemployment rose 0.3 points in 2024",
            "source_proof_url": "https://stats.example.org/2024",
        }
    ],
    "evidence": [
        {
            "reputation_score": 0.92,
            "similarity_score": 0.81,
            "source_title": "Labour market overview",
            "source_url": "https://news.example.com/labour",
            "summary": "Official labour market statistics.",
        }
    ],
    "input_content": "Unemployment doubled in 2024",
    "input_type": "text",
    "verdict": "FAKE",
}


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'verisight_test.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def make_user(db):
    """Insert a user (plus default settings) directly and return it."""

    def _make(user_id: str, display_name: str | None = None, **fields) -> User:
        user = User(id=user_id, display_name=display_name or user_id.title(), badges=[], **fields)
        db.add(user)
        db.add(UserSettings(user_id=user_id))
        db.commit()
        return user

    return _make


@pytest.fixture
def add_analysis(db):
    """Insert an analysis row directly with explicit timestamps, bypassing the detection API."""
    base_time = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
    counter = {"n": 0}

    def _add(user_id: str, **fields) -> AnalysisResult:
        counter["n"] += 1
        created = fields.pop("created_at", base_time + timedelta(minutes=counter["n"]))
        row = AnalysisResult(
            user_id=user_id,
            type=fields.pop("type", "text"),
            content=fields.pop("content", f"claim number {counter['n']}"),
            verdict=fields.pop("verdict", "FAKE"),
            credibility_score=fields.pop("credibility_score", 50.0),
            summary=fields.pop("summary", ""),
            sources=fields.pop("sources", []),
            evidence=fields.pop("evidence", []),
            credibility_proof=fields.pop("credibility_proof", []),
            votes_up=fields.pop("votes_up", 0),
            votes_down=fields.pop("votes_down", 0),
            created_at=created,
            updated_at=fields.pop("updated_at", created),
        )
        db.add(row)
        db.commit()
        return row

    return _add


@pytest.fixture
def sample_report() -> DetectionReport:
    return DetectionReport.model_validate(SAMPLE_REPORT)


class FakeDetector:
    """Records requests and answers with a configurable handler."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: object = SAMPLE_REPORT
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.body, (bytes, str)):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, content=json.dumps(self.body).encode("utf-8"),
                              headers={"content-type": "application/json"})


@pytest.fixture
def detector():
    return FakeDetector()


@pytest.fixture
def detection_client(detector):
    client = DetectionClient(base_url=DETECTION_BASE_URL, timeout=5.0, transport=httpx.MockTransport(detector))
    yield client
    client.close()


@pytest.fixture
def client(session_factory, detection_client):
    """FastAPI TestClient with a per-request session on the temp DB and the fake detector."""
    from fastapi.testclient import TestClient

    from verisight.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_detection_client] = lambda: detection_client
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def report_body():
    """Build a detection API JSON body from the sample report with overrides."""

    def _body(**overrides) -> dict:
        return dict(SAMPLE_REPORT, **overrides)

    return _body
