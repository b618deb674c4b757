import json

import pytest
from fastapi.testclient import TestClient

from conftest import FakeReportsService
from login_activity.api import deps
from login_activity.main import app
from login_activity.services.google_reports import ReportsServiceError


client = TestClient(app)


@pytest.fixture
def service(records):
    fake = FakeReportsService(records, page_limit=100)
    app.dependency_overrides[deps.get_reports_service] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_list_with_time_range(service):
    resp = client.get(
        "/login-activity",
        params={"time": [">=2024-06-01T00:00:00Z", "<=2024-06-02T00:00:00Z"]},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 500
    assert len(body["rows"]) == 500
    row = body["rows"][0]
    assert row["time"] == "2024-06-01T00:00:00.000Z"
    assert row["actor_email"] == "user@example.com"
    assert row["event_name"] == "login_success"
    assert row["title"] == "2024-06-01T00:00:00.000Z - user@example.com"
    assert row["tags"] == ["login_success"]
    assert row["location"] == "global"
    assert row["project"] == "global"
    assert service.calls[0]["startTime"] == "2024-06-01T00:00:00.000Z"
    assert service.calls[0]["endTime"] == "2024-06-02T00:00:00.000Z"


def test_list_with_limit_and_filters(service):
    resp = client.get(
        "/login-activity",
        params={"actor_email": "x@y.com", "event_names": "login_failure", "limit": 5},
    )

    assert resp.status_code == 200
    assert resp.json()["count"] == 5
    assert service.calls[0]["maxResults"] == 5
    assert service.calls[0]["filters"] == (
        'actor.email=="x@y.com",events.name=="login_failure"'
    )


def test_list_with_inverted_window_is_empty(service):
    resp = client.get(
        "/login-activity",
        params={"time": [">2024-06-02T00:00:00Z", "<2024-06-01T00:00:00Z"]},
    )

    assert resp.status_code == 200
    assert resp.json() == {"rows": [], "count": 0}
    assert service.calls == []


def test_list_rejects_bad_time_qualifier(service):
    resp = client.get("/login-activity", params={"time": "~2024-06-01"})

    assert resp.status_code == 400
    assert service.calls == []


def test_list_rejects_negative_limit(service):
    resp = client.get("/login-activity", params={"limit": -1})
    assert resp.status_code == 422


def test_list_api_error_maps_to_bad_gateway(records):
    fake = FakeReportsService(records, page_limit=100, fail_on_call=1)
    app.dependency_overrides[deps.get_reports_service] = lambda: fake
    try:
        resp = client.get("/login-activity")
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 502
    assert "500" in resp.json()["detail"]


def test_service_construction_failure(monkeypatch):
    def _fail():
        raise ReportsServiceError("No Google credentials configured.")

    monkeypatch.setattr(deps, "build_reports_service", _fail)

    resp = client.get("/login-activity")

    assert resp.status_code == 503
    assert "credentials" in resp.json()["detail"]


def test_stream_emits_ndjson_rows(service):
    resp = client.get("/login-activity/stream", params={"limit": 3})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/x-ndjson")
    lines = [json.loads(line) for line in resp.text.splitlines() if line]
    assert [line["unique_qualifier"] for line in lines] == ["1000", "1001", "1002"]


def test_describe_table():
    resp = client.get("/login-activity/table")

    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "gcp_admin_reports_login_activity"
    assert len(body["columns"]) == 13


def test_point_lookup_not_implemented(service):
    resp = client.get(
        "/login-activity/1000",
        params={"time": "2024-06-01T00:00:00Z", "actor_email": "user@example.com"},
    )

    assert resp.status_code == 501
    assert service.calls == []


def test_token_required_when_configured(monkeypatch, service):
    monkeypatch.setattr(deps, "BACKEND_TOKEN", "secret")

    assert client.get("/login-activity/table").status_code == 401
    resp = client.get("/login-activity/table", headers={"X-Backend-Token": "secret"})
    assert resp.status_code == 200


def test_point_lookup_without_credentials_is_not_implemented(monkeypatch):
    def _fail():
        raise ReportsServiceError("No Google credentials configured.")

    monkeypatch.setattr(deps, "build_reports_service", _fail)

    resp = client.get(
        "/login-activity/1000",
        params={"time": "2024-06-01T00:00:00Z", "actor_email": "user@example.com"},
    )

    assert resp.status_code == 501


def test_list_transport_error_maps_to_bad_gateway():
    class TimingOutService(FakeReportsService):
        def serve(self, params):
            self.calls.append(params)
            raise TimeoutError("timed out")

    fake = TimingOutService([])
    app.dependency_overrides[deps.get_reports_service] = lambda: fake
    try:
        resp = client.get("/login-activity")
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 502
    assert "timed out" in resp.json()["detail"]


@pytest.mark.parametrize("field", ["actor_email", "ip_address", "event_name"])
def test_list_rejects_filter_delimiters(service, field):
    resp = client.get(
        "/login-activity", params={field: 'a@b.com",ipAddress=="1.2.3.4'}
    )

    assert resp.status_code == 400
    assert service.calls == []


def test_list_rejects_conflicting_event_name_aliases(service):
    resp = client.get(
        "/login-activity",
        params={"event_name": "login_success", "event_names": "login_failure"},
    )

    assert resp.status_code == 400
    assert service.calls == []


def test_list_accepts_matching_event_name_aliases(service):
    resp = client.get(
        "/login-activity",
        params={"event_name": "login_failure", "event_names": "login_failure", "limit": 1},
    )

    assert resp.status_code == 200
    assert service.calls[0]["filters"] == 'events.name=="login_failure"'


def test_stream_ends_with_error_line_on_api_failure(records):
    fake = FakeReportsService(records[:100], page_limit=50, fail_on_call=2)
    app.dependency_overrides[deps.get_reports_service] = lambda: fake
    try:
        resp = client.get("/login-activity/stream")
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 200
    lines = [json.loads(line) for line in resp.text.splitlines() if line]
    assert len(lines) == 51
    assert all("unique_qualifier" in line for line in lines[:50])
    assert lines[-1]["rows_sent"] == 50
    assert "500" in lines[-1]["error"]
