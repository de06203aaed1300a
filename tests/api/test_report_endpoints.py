"""Tests for report, review and audit endpoints.

Exercise the full request path: gateway headers -> principal, routers,
services and the domain-error handlers.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from headcount.database import Base, get_db
from headcount.domain.months import current_month, previous_month
from headcount.main import app
from headcount.models.company import CompanyModel
from headcount.models.monthly_report import MonthlyReportModel

SUPER = {"X-Principal-Role": "SUPER_ADMIN", "X-Principal-Id": "1"}


@pytest.fixture(scope="function")
def test_db():
    """Isolated in-memory database shared by the app and the test via StaticPool."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSessionLocal = sessionmaker(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    db_session = TestingSessionLocal()
    yield db_session
    db_session.close()

    app.dependency_overrides.clear()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def company(test_db) -> CompanyModel:
    c = CompanyModel(name="汉川纺织有限公司", town="岳口", industry="纺织服装",
                     contact_phone="13800000001", manager_id=7)
    test_db.add(c)
    test_db.commit()
    test_db.refresh(c)
    return c


@pytest.fixture
def month() -> str:
    return current_month()


@pytest.fixture
def with_baseline(test_db, company, month):
    test_db.add(MonthlyReportModel(
        company_id=company.id, report_month=previous_month(month),
        status="APPROVED", employees_total=100,
    ))
    test_db.commit()


def enterprise_headers(company_id: int) -> dict:
    return {"X-Principal-Role": "ENTERPRISE", "X-Principal-Id": "50", "X-Company-Id": str(company_id)}


SUBMISSION = {
    "recruited_new": 10,
    "resigned_total": 5,
    "shortage": {"general": 2, "tech": 3, "management": 1},
    "planned_recruitment": 4,
}


class TestSubmitEndpoint:
    def test_submit_current_month(self, client, company, month, with_baseline):
        response = client.post(
            f"/api/v1/reports/{month}", json=SUBMISSION, headers=enterprise_headers(company.id)
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "SUBMITTED"
        assert data["employees_total"] == 105
        assert data["shortage_total"] == 6

    def test_past_month_is_422(self, client, company, month):
        response = client.post(
            f"/api/v1/reports/{previous_month(month)}",
            json=SUBMISSION,
            headers=enterprise_headers(company.id),
        )
        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "validation_error"
        assert error["field"] == "report_month"

    def test_negative_is_422_with_field(self, client, company, month):
        response = client.post(
            f"/api/v1/reports/{month}",
            json={**SUBMISSION, "resigned_total": -1},
            headers=enterprise_headers(company.id),
        )
        assert response.status_code == 422
        assert response.json()["error"]["field"] == "resigned_total"

    def test_duplicate_different_payload_is_409(self, client, company, month):
        headers = enterprise_headers(company.id)
        assert client.post(f"/api/v1/reports/{month}", json=SUBMISSION, headers=headers).status_code == 200
        response = client.post(
            f"/api/v1/reports/{month}", json={**SUBMISSION, "recruited_new": 1}, headers=headers
        )
        assert response.status_code == 409
        assert response.json()["error"]["details"]["status"] == "SUBMITTED"

    def test_reviewer_cannot_submit(self, client, company, month):
        response = client.post(f"/api/v1/reports/{month}", json=SUBMISSION, headers=SUPER)
        assert response.status_code == 403

    def test_missing_role_is_403(self, client, company, month):
        response = client.post(f"/api/v1/reports/{month}", json=SUBMISSION)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "authorization_error"


class TestReviewerEndpoints:
    def test_approve_with_correction_then_audit(self, client, company, month, with_baseline):
        client.post(f"/api/v1/reports/{month}", json=SUBMISSION, headers=enterprise_headers(company.id))

        response = client.post(
            f"/api/v1/reports/{company.id}/{month}/approve",
            json={"employees_total": 103},
            headers=SUPER,
        )
        assert response.status_code == 200
        assert response.json()["employees_total"] == 103
        assert response.json()["status"] == "APPROVED"

        state = client.get(f"/api/v1/reports/{company.id}/{month}", headers=SUPER).json()
        assert state["report"]["employees_total"] == 103

        logs = client.get("/api/v1/audit-logs/", headers=SUPER).json()
        assert logs[0]["action"] == "EDIT_REPORT_DATA"
        assert logs[0]["target_company_id"] == company.id
        assert logs[0]["details"]["employees_total"] == 103

    def test_approve_without_body(self, client, company, month):
        client.post(f"/api/v1/reports/{month}", json=SUBMISSION, headers=enterprise_headers(company.id))
        response = client.post(f"/api/v1/reports/{company.id}/{month}/approve", headers=SUPER)
        assert response.status_code == 200
        assert response.json()["corrected"] is False

    def test_approve_missing_is_404(self, client, company, month):
        response = client.post(f"/api/v1/reports/{company.id}/{month}/approve", headers=SUPER)
        assert response.status_code == 404
        assert response.json()["error"]["key"]["company_id"] == company.id

    def test_reject_round_trip(self, client, company, month):
        headers = enterprise_headers(company.id)
        client.post(f"/api/v1/reports/{month}", json=SUBMISSION, headers=headers)

        response = client.post(
            f"/api/v1/reports/{company.id}/{month}/reject", json={"reason": "bad data"}, headers=SUPER
        )
        assert response.status_code == 200
        assert response.json()["reject_reason"] == "bad data"

        again = client.post(f"/api/v1/reports/{month}", json=SUBMISSION, headers=headers).json()
        assert again["status"] == "SUBMITTED"
        assert again["reject_reason"] is None

    def test_reject_without_reason_is_422(self, client, company, month):
        client.post(f"/api/v1/reports/{month}", json=SUBMISSION, headers=enterprise_headers(company.id))
        response = client.post(
            f"/api/v1/reports/{company.id}/{month}/reject", json={"reason": ""}, headers=SUPER
        )
        assert response.status_code == 422
        assert response.json()["error"]["field"] == "reason"

    def test_town_admin_scoped_by_town(self, client, company, month):
        client.post(f"/api/v1/reports/{month}", json=SUBMISSION, headers=enterprise_headers(company.id))
        other_town = {"X-Principal-Role": "TOWN_ADMIN", "X-Principal-Id": "8", "X-Town": "多祥"}
        same_town = {"X-Principal-Role": "TOWN_ADMIN", "X-Principal-Id": "8", "X-Town": "岳口"}

        url = f"/api/v1/reports/{company.id}/{month}/approve"
        assert client.post(url, headers=other_town).status_code == 403
        assert client.post(url, headers=same_town).status_code == 200

    def test_enterprise_cannot_read_audit_log(self, client, company):
        response = client.get("/api/v1/audit-logs/", headers=enterprise_headers(company.id))
        assert response.status_code == 403


class TestReadEndpoints:
    def test_not_filed_state(self, client, company, month):
        response = client.get(f"/api/v1/reports/{company.id}/{month}", headers=enterprise_headers(company.id))
        assert response.status_code == 200
        assert response.json()["status"] == "NOT_FILED"
        assert response.json()["report"] is None

    def test_malformed_month_is_422(self, client, company):
        response = client.get(f"/api/v1/reports/{company.id}/2026-13-01", headers=SUPER)
        assert response.status_code == 422

    def test_history(self, client, company, month, with_baseline):
        response = client.get(f"/api/v1/reports/{company.id}", headers=SUPER)
        assert response.status_code == 200
        assert [r["report_month"] for r in response.json()] == [previous_month(month)]

    def test_review_board(self, client, company, month, with_baseline):
        client.post(
            f"/api/v1/reports/{month}",
            json={**SUBMISSION, "recruited_new": 60},
            headers=enterprise_headers(company.id),
        )
        board = client.get(f"/api/v1/review/{month}", headers=SUPER).json()

        assert board["metrics"]["awaiting_review"] == 1
        assert board["metrics"]["warnings"] == 1
        item = board["items"][0]
        assert item["employees_total"] == 155
        assert item["surfaced"] is True
        assert "55%" in item["warning"]["detail"]
