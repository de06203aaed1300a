"""Tests for health check endpoints.

Verifies basic, detailed, readiness, and liveness probes.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from headcount.database import Base, get_db
from headcount.main import app


@pytest.fixture
def test_db():
    """Create test database."""
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
    yield engine
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def client(test_db):
    """FastAPI test client."""
    return TestClient(app)


class TestBasicHealthCheck:
    def test_health_endpoint(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "headcount-monitor"
        assert data["version"] == "1.0.0"


class TestDetailedHealthCheck:
    def test_database_check_success(self, client):
        data = client.get("/health/detailed").json()

        assert data["status"] == "healthy"
        assert data["checks"]["database"]["healthy"] is True
        assert "Database connected" in data["checks"]["database"]["message"]
        assert data["thresholds"]["anomaly"] == 0.30

    @patch("headcount.health.check_database")
    def test_degraded_when_database_fails(self, mock_check, client):
        mock_check.return_value = {"healthy": False, "message": "Database error: locked"}

        data = client.get("/health/detailed").json()
        assert data["status"] == "degraded"


class TestProbes:
    def test_readiness(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["ready"] is True

    @patch("sqlalchemy.orm.Session.execute")
    def test_readiness_503_when_db_down(self, mock_execute, client):
        mock_execute.side_effect = Exception("Database connection failed")
        response = client.get("/health/ready")
        assert response.status_code == 503

    def test_liveness(self, client):
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json() == {"alive": True}

    def test_root_lists_endpoints(self, client):
        data = client.get("/").json()
        assert data["endpoints"]["reports"] == "/api/v1/reports/"
