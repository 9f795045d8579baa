"""Timetable and AI planner endpoints."""

import json
from types import SimpleNamespace

import pytest

from app.api.dependencies.services import get_planner_service
from app.main import app
from app.services.planner import PlannerService
from app.services.planner.llm_schema import SUGGEST_SCREENINGS_TOOL

JIFF = "edition_jiff_2025"
PLANNER = "/api/v1/planner"


class ScriptedCompletions:
    """Answers ``chat.completions.create`` from a fixed list of responses."""

    def __init__(self, responses):
        self.responses = list(responses)

    async def create(self, **kwargs):
        return self.responses.pop(0)


def _completion(content=None, tool_calls=None):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def planner_responses(db, catalog):
    """Route planner calls through a scripted OpenAI client."""
    responses = []
    client = SimpleNamespace(chat=SimpleNamespace(completions=ScriptedCompletions(responses)))
    app.dependency_overrides[get_planner_service] = lambda: PlannerService(db, store=catalog, client=client)
    yield client.chat.completions.responses
    app.dependency_overrides.pop(get_planner_service, None)


def test_timetable(client, auth_headers):
    client.put("/api/v1/favorite-screenings", json={"screening_id": "scr_a1"}, headers=auth_headers)
    client.put("/api/v1/favorite-screenings", json={"screening_id": "scr_b1"}, headers=auth_headers)

    body = client.get("/api/v1/timetable", params={"edition": JIFF}, headers=auth_headers).json()

    assert body["current_date"] == "2025-05-01"
    assert [row["id"] for row in body["rows"]] == ["scr_a1", "scr_b1"]
    assert body["groups"] == [{"size_index": 1, "start_min": 600, "screening_ids": ["scr_a1", "scr_b1"]}]


def test_empty_timetable(client, auth_headers):
    body = client.get("/api/v1/timetable", headers=auth_headers).json()
    assert body["rows"] == []
    assert body["current_edition"] is None


def test_planner_needs_edition_and_dates(client, auth_headers):
    resp = client.post(
        f"{PLANNER}/chat",
        json={"messages": [{"role": "user", "content": "추천해줘"}], "editionId": JIFF},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "MISSING_PLANNER_CONTEXT"


def test_planner_rejects_unknown_roles(client, auth_headers):
    resp = client.post(
        f"{PLANNER}/chat",
        json={"messages": [{"role": "tool", "content": "x"}], "editionId": JIFF, "dates": ["2025-05-01"]},
        headers=auth_headers,
    )
    assert resp.status_code == 422


def test_planner_chat(client, auth_headers, planner_responses):
    call = SimpleNamespace(
        id="call_1",
        function=SimpleNamespace(
            name=SUGGEST_SCREENINGS_TOOL,
            arguments=json.dumps(
                {"recommendations": [{"screeningId": "scr_b1", "reason": "밤의 수영"}]}
            ),
        ),
    )
    planner_responses.extend([_completion(tool_calls=[call]), _completion(content="좋은 관람 되세요.")])

    resp = client.post(
        f"{PLANNER}/chat",
        json={
            "messages": [{"role": "user", "content": "5월 1일 일정 짜줘"}],
            "editionId": JIFF,
            "dates": ["2025-05-01"],
        },
        headers=auth_headers,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "좋은 관람 되세요."
    assert [rec["screening_id"] for rec in body["recommendations"]] == ["scr_b1"]
    assert body["recommendations"][0]["reason"] == "밤의 수영"


def test_planner_requires_authentication(client):
    resp = client.post(f"{PLANNER}/chat", json={"editionId": JIFF, "dates": ["2025-05-01"]})
    assert resp.status_code == 401
