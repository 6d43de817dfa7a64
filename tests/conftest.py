import json
import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["AUTO_CREATE_TABLES"] = "true"
os.environ["OPENAI_API_KEY"] = "test-key"
os.environ["OPENAI_MODEL"] = "gpt-4o-mini"
os.environ["ADMIN_PASSWORD"] = "site-engineer"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["RATE_LIMIT_PER_MINUTE"] = "10000"

from cubequality.db.base import Base
from cubequality.db.session import SessionLocal, engine
from cubequality.main import create_app
from cubequality.schemas.report import ConcreteReport
from cubequality.services.store import ReportStore

CANNED_ANALYSIS = {
    "summary": "Both test ages meet the requirements for grade M25.",
    "qualityScore": 88,
    "sevenDaysResults": {"strengths": [20.0, 20.44, 20.22], "averageStrength": 20.22, "status": "pass"},
    "twentyEightDaysResults": {"strengths": [30.22, 30.67, 30.0], "averageStrength": 30.3, "status": "Pass"},
    "issues": [],
    "recommendations": ["Continue current curing practice."],
}


@pytest.fixture(autouse=True)
def mock_llm(monkeypatch):
    calls = []

    def _fake_generate_quality_report(form):
        calls.append(form)
        return json.dumps(CANNED_ANALYSIS)

    monkeypatch.setattr("cubequality.services.workflow.generate_quality_report", _fake_generate_quality_report)
    return calls


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    path = Path("test.db")
    if path.exists():
        path.unlink()


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def store(db):
    return ReportStore(db)


@pytest.fixture()
def client():
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def auth_headers(client):
    login = client.post("/auth/login", json={"password": "site-engineer"})
    assert login.status_code == 200, login.text
    return {"Authorization": f"Bearer {login.json()['access_token']}"}


@pytest.fixture()
def make_report():
    def _make_report(ref: str, **fields) -> ConcreteReport:
        defaults = {
            "client_name": "Future Homes LLC",
            "site_or_plant": "Site",
            "date_of_casting": "2024-07-28",
            "grade": "M25",
            "mix_code": "MIX-B-45",
            "mix_type": "Standard",
            "cube_size": "150",
            "seven_days_load1": "450",
            "seven_days_load2": "460",
            "seven_days_load3": "455",
        }
        defaults.update(fields)
        return ConcreteReport(unique_ref_no=ref, **defaults)

    return _make_report
