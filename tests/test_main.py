from datetime import date
from datetime import timedelta

import httpx
import pytest
from fastapi.testclient import TestClient

from contribgraph.main import create_app


@pytest.fixture
def client() -> TestClient:
    with TestClient(create_app()) as test_client:
        yield test_client


def fake_upstream(monkeypatch: pytest.MonkeyPatch, payload) -> list[str]:
    calls: list[str] = []

    def fake_fetch(**kwargs):
        calls.append(kwargs["identity"])
        return payload

    monkeypatch.setattr(
        "contribgraph.services.contribution_service.fetch_contribution_payload",
        fake_fetch,
    )
    return calls


def test_health_live_returns_ok(client: TestClient) -> None:
    response = client.get("/health/live")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_get_contributions_returns_normalized_payload(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    fake_upstream(
        monkeypatch,
        {
            "contributions": {
                "contributions": [
                    {"date": "2024-01-02", "contributionCount": "4"},
                    {"date": "2024-01-01", "contributionCount": 3},
                    {"date": "bad", "contributionCount": 8},
                ]
            }
        },
    )

    response = client.get("/contributions/octocat")

    assert response.status_code == 200
    assert response.json() == {
        "identity": "octocat",
        "total": 7,
        "contributions": [
            {"date": "2024-01-01", "count": 3},
            {"date": "2024-01-02", "count": 4},
        ],
    }
    assert response.headers["Cache-Control"] == "public, max-age=1800"


def test_get_contributions_rejects_blank_identity(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    calls = fake_upstream(monkeypatch, {})

    response = client.get("/contributions/%20%20")

    assert response.status_code == 400
    assert response.json() == {"detail": "identity cannot be empty"}
    assert calls == []


def test_get_contributions_returns_502_when_upstream_fails(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    def fake_get(url, **kwargs):
        return httpx.Response(500, request=httpx.Request("GET", url))

    monkeypatch.setattr("contribgraph.clients.contributions_client.httpx.get", fake_get)

    response = client.get("/contributions/octocat")

    assert response.status_code == 502
    assert response.json() == {"detail": "Upstream request failed"}


def test_get_contributions_caches_per_identity(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    calls = fake_upstream(
        monkeypatch, {"contributions": [{"date": "2024-01-01", "count": 1}]}
    )

    first = client.get("/contributions/octocat")
    second = client.get("/contributions/octocat")
    other = client.get("/contributions/hubot")

    assert first.json() == second.json()
    assert other.json()["identity"] == "hubot"
    assert calls == ["octocat", "hubot"]


def test_failed_fetch_is_not_cached(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    def fake_get(url, **kwargs):
        return httpx.Response(503, request=httpx.Request("GET", url))

    monkeypatch.setattr("contribgraph.clients.contributions_client.httpx.get", fake_get)
    assert client.get("/contributions/octocat").status_code == 502

    fake_upstream(monkeypatch, {"contributions": []})
    assert client.get("/contributions/octocat").status_code == 200


def test_get_calendar_returns_placeholder_for_empty_payload(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    fake_upstream(monkeypatch, {})

    response = client.get("/contributions/octocat/calendar")

    assert response.status_code == 200
    assert response.json() == {
        "identity": "octocat",
        "total": 0,
        "maxCount": 0,
        "weeks": [],
        "monthLabels": [],
    }


def test_get_calendar_returns_week_columns(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    yesterday = date.today() - timedelta(days=1)
    fake_upstream(
        monkeypatch,
        {"contributions": [{"date": yesterday.isoformat(), "count": 6}]},
    )

    response = client.get("/contributions/octocat/calendar")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 6
    assert body["maxCount"] == 6
    assert all(len(week) == 7 for week in body["weeks"])
    assert date.fromisoformat(body["weeks"][0][0]["date"]).weekday() == 6
    assert sum(span["columnSpan"] for span in body["monthLabels"]) == len(
        body["weeks"]
    )

    days = {day["date"]: day for week in body["weeks"] for day in week}
    assert days[yesterday.isoformat()] == {
        "date": yesterday.isoformat(),
        "count": 6,
        "isFuture": False,
        "level": 4,
    }


def test_get_calendar_returns_502_when_upstream_fails(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    def failing_get(*args, **kwargs):
        raise httpx.ReadTimeout("timed out")

    monkeypatch.setattr(
        "contribgraph.clients.contributions_client.httpx.get", failing_get
    )

    response = client.get("/contributions/octocat/calendar")

    assert response.status_code == 502


def test_get_contributions_without_identity_returns_400(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    calls = fake_upstream(monkeypatch, {})

    response = client.get("/contributions/")

    assert response.status_code == 400
    assert response.json() == {"detail": "identity cannot be empty"}
    assert calls == []


def test_shutdown_clears_contributions_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_upstream(monkeypatch, {"contributions": [{"date": "2024-01-01", "count": 1}]})
    app = create_app()

    with TestClient(app) as test_client:
        test_client.get("/contributions/octocat")
        assert len(app.state.contributions_cache) == 1

    assert len(app.state.contributions_cache) == 0
