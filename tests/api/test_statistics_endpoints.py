"""Tests for statistics and company administration endpoints."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from headcount.database import Base, get_db
from headcount.main import app
from headcount.models.company import CompanyModel
from headcount.models.monthly_report import MonthlyReportModel

SUPER = {"X-Principal-Role": "SUPER_ADMIN", "X-Principal-Id": "1"}
MONTH = "2026-09-01"


@pytest.fixture(scope="function")
def test_db():
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
    return TestClient(app)


@pytest.fixture
def textile_pair(test_db):
    """Two textile companies: 100 employees short 10, and 200 employees."""
    a = CompanyModel(name="纺织一厂", town="岳口", industry="纺织服装", contact_phone="13800000011")
    b = CompanyModel(name="纺织二厂", town="多祥", industry="纺织服装", contact_phone="13800000012")
    test_db.add_all([a, b])
    test_db.commit()
    test_db.add_all([
        MonthlyReportModel(company_id=a.id, report_month=MONTH, status="APPROVED",
                           employees_total=100, shortage_general=10, shortage_total=10,
                           recruited_new=4),
        MonthlyReportModel(company_id=b.id, report_month=MONTH, status="SUBMITTED",
                           employees_total=200, resigned_total=6),
    ])
    test_db.commit()
    return a, b


class TestStatisticsEndpoints:
    def test_industry_rollup(self, client, textile_pair):
        response = client.get("/api/v1/statistics/industries", headers=SUPER)
        assert response.status_code == 200
        (stat,) = response.json()
        assert stat["name"] == "纺织服装"
        assert stat["company_count"] == 2
        assert stat["total_employees"] == 300
        assert stat["shortage_count"] == 10
        assert round(stat["shortage_rate"] * 100, 2) == 3.23

    def test_summary(self, client, textile_pair):
        data = client.get("/api/v1/statistics/summary", headers=SUPER).json()
        assert data["reference_month"] == MONTH
        assert data["current_employees"] == 300
        assert data["cumulative_recruited"] == 4
        assert data["turnover_rate"] == pytest.approx(6 / 300)

    def test_summary_no_match(self, client, textile_pair):
        response = client.get(
            "/api/v1/statistics/summary", params={"industry": "电子信息"}, headers=SUPER
        )
        assert response.status_code == 200
        data = response.json()
        assert data["has_data"] is False
        assert data["shortage_rate"] is None
        assert data["turnover_rate"] is None

    def test_all_filter_value(self, client, textile_pair):
        data = client.get(
            "/api/v1/statistics/summary", params={"industry": "全部", "town": "全部"}, headers=SUPER
        ).json()
        assert data["current_employees"] == 300

    def test_bad_month_filter_is_422(self, client, textile_pair):
        response = client.get("/api/v1/statistics/trend", params={"month": "soon"}, headers=SUPER)
        assert response.status_code == 422
        assert response.json()["error"]["field"] == "month"

    def test_top_shortage(self, client, textile_pair):
        a, _ = textile_pair
        ranking = client.get(
            "/api/v1/statistics/top", params={"metric": "shortage", "n": 1}, headers=SUPER
        ).json()
        assert [r["company_id"] for r in ranking] == [a.id]
        assert ranking[0]["rank"] == 1

    def test_other_views(self, client, textile_pair):
        for path in ("towns", "trend", "year-over-year", "quarterly", "seasonal", "skill-gap",
                     "target-enterprises"):
            response = client.get(f"/api/v1/statistics/{path}", headers=SUPER)
            assert response.status_code == 200, path

        options = client.get("/api/v1/statistics/filter-options", headers=SUPER).json()
        assert options == {"industries": ["纺织服装"], "towns": ["多祥", "岳口"]}

        page = client.get(
            "/api/v1/statistics/enterprises", params={"page_size": 1}, headers=SUPER
        ).json()
        assert page["total"] == 2
        assert page["items"][0]["employees"] == 200

    def test_enterprise_principal_forbidden(self, client, textile_pair):
        a, _ = textile_pair
        headers = {"X-Principal-Role": "ENTERPRISE", "X-Company-Id": str(a.id)}
        assert client.get("/api/v1/statistics/summary", headers=headers).status_code == 403


class TestCompanyEndpoints:
    def test_create_list_update(self, client, test_db):
        payload = {"name": "侯口新材料", "town": "侯口", "industry": "新能源新材料",
                   "contact_phone": "13900000009"}
        created = client.post("/api/v1/companies/", json=payload, headers=SUPER)
        assert created.status_code == 201
        company_id = created.json()["id"]

        listing = client.get("/api/v1/companies/", params={"search": "侯口"}, headers=SUPER).json()
        assert listing["total"] == 1

        updated = client.put(
            f"/api/v1/companies/{company_id}", json={"town": "小板"}, headers=SUPER
        )
        assert updated.status_code == 200
        assert updated.json()["town"] == "小板"

        actions = [e["action"] for e in client.get("/api/v1/audit-logs/", headers=SUPER).json()]
        assert actions == ["UPDATE_ENTERPRISE", "CREATE_ENTERPRISE"]

    def test_duplicate_phone_is_409(self, client, textile_pair):
        payload = {"name": "重复", "town": "岳口", "industry": "其他", "contact_phone": "13800000011"}
        response = client.post("/api/v1/companies/", json=payload, headers=SUPER)
        assert response.status_code == 409
        assert response.json()["error"]["field"] == "contact_phone"

    def test_unknown_town_is_422(self, client, test_db):
        payload = {"name": "外地企业", "town": "武汉", "industry": "其他"}
        response = client.post("/api/v1/companies/", json=payload, headers=SUPER)
        assert response.status_code == 422

    def test_town_admin_cannot_create(self, client, test_db):
        headers = {"X-Principal-Role": "TOWN_ADMIN", "X-Principal-Id": "7", "X-Town": "岳口"}
        payload = {"name": "x", "town": "岳口", "industry": "其他"}
        assert client.post("/api/v1/companies/", json=payload, headers=headers).status_code == 403

    def test_get_missing_company_is_404(self, client, test_db):
        assert client.get("/api/v1/companies/999", headers=SUPER).status_code == 404


class TestTargetEnterprisesEndpoint:
    def test_lists_companies_with_large_shortage(self, client, test_db, textile_pair):
        a, _ = textile_pair
        report = test_db.query(MonthlyReportModel).filter_by(company_id=a.id).one()
        report.shortage_tech = 35
        report.shortage_total = 45
        test_db.commit()

        response = client.get("/api/v1/statistics/target-enterprises", headers=SUPER)
        assert response.status_code == 200
        (target,) = response.json()
        assert target["company_id"] == a.id
        assert target["tags"] == ["急需技工", "技术密集需求"]

    def test_limit_is_bounded(self, client, textile_pair):
        response = client.get(
            "/api/v1/statistics/target-enterprises", params={"limit": 0}, headers=SUPER
        )
        assert response.status_code == 422
