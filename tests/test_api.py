"""Tests for API routes."""
import pytest
from fastapi.testclient import TestClient

from draftdesk.agents.orchestrator import PipelineOrchestrator
from draftdesk.api.deps import get_orchestrator, get_registry
from draftdesk.main import app
from draftdesk.models.schemas import ResearchRequest


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def use_registry():
    def install(registry):
        app.dependency_overrides[get_registry] = lambda: registry
        app.dependency_overrides[get_orchestrator] = lambda: PipelineOrchestrator(registry)
        return registry

    return install


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "draftdesk"}


def test_describe_orchestrate(client):
    response = client.get("/api/orchestrate")
    assert response.status_code == 200
    data = response.json()
    assert data["method"] == "POST"
    assert data["pipeline"] == ["research", "writer", "editor"]


def test_orchestrate_completed(client, use_registry, registry_factory):
    use_registry(registry_factory())

    response = client.post("/api/orchestrate", json={"topic": "renewable energy", "tone": "academic"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["tone"] == "academic"
    assert [s["status"] for s in data["steps"]] == ["completed", "completed", "completed"]
    assert data["edited"]["editedTitle"]
    assert "totalDurationMs" in data


def test_orchestrate_partial_is_200(client, use_registry, registry_factory, stub_agent, research_result_factory):
    research = stub_agent("research", ResearchRequest, result=research_result_factory(fact_count=0))
    use_registry(registry_factory(research=research))

    response = client.post("/api/orchestrate", json={"topic": "renewable energy"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "partial"
    assert data["article"] is None
    assert data["steps"][1]["error"] == "No facts available from research to write about"


def test_orchestrate_failed_is_502(client, use_registry, registry_factory, stub_agent):
    research = stub_agent("research", ResearchRequest, error=RuntimeError("search unavailable"))
    use_registry(registry_factory(research=research))

    response = client.post("/api/orchestrate", json={"topic": "renewable energy"})

    assert response.status_code == 502
    data = response.json()
    assert data["status"] == "failed"
    assert data["research"] is None
    assert data["steps"][0]["error"] == "search unavailable"


@pytest.mark.parametrize(
    "body, fragment",
    [
        ({"topic": ""}, "non-empty 'topic'"),
        ({"topic": "   "}, "non-empty 'topic'"),
        ({}, "topic"),
        ({"topic": "solar", "tone": "poetic"}, "tone"),
    ],
)
def test_orchestrate_rejects_invalid_input(client, use_registry, registry_factory, stub_agent, body, fragment):
    research = stub_agent("research", ResearchRequest, error=AssertionError("should not run"))
    use_registry(registry_factory(research=research))

    response = client.post("/api/orchestrate", json=body)

    assert response.status_code == 400
    assert fragment in response.json()["error"]
    assert research.payloads == []


def test_orchestrate_rejects_malformed_json(client):
    response = client.post(
        "/api/orchestrate",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Request body must be valid JSON"}


def test_list_agents(client):
    response = client.get("/api/agents")

    assert response.status_code == 200
    agents = response.json()["agents"]
    assert [a["name"] for a in agents] == ["research", "writer", "editor"]
    assert all(a["state"] == "idle" for a in agents)


def test_research_route_error_is_500(client, use_registry, registry_factory, stub_agent):
    research = stub_agent("research", ResearchRequest, error=RuntimeError("provider chain broke"))
    use_registry(registry_factory(research=research))

    response = client.post("/api/agents/research", json={"topic": "solar"})

    assert response.status_code == 500
    assert response.json() == {"error": "provider chain broke"}


def test_research_route_returns_result(client, use_registry, registry_factory):
    use_registry(registry_factory())

    response = client.post("/api/agents/research", json={"topic": "solar"})

    assert response.status_code == 200
    data = response.json()
    assert len(data["facts"]) == 7
    assert "searchQueries" in data


def test_writer_route_requires_facts(client):
    response = client.post("/api/agents/writer", json={"topic": "solar", "facts": []})

    assert response.status_code == 400
    assert "facts" in response.json()["error"]


def test_writer_then_editor_routes(client, research_result_factory):
    research = research_result_factory(fact_count=3).model_dump(mode="json", by_alias=True)

    written = client.post(
        "/api/agents/writer",
        json={"topic": "solar", "facts": research["facts"], "sources": research["sources"], "tone": "casual"},
    )
    assert written.status_code == 200
    article = written.json()
    assert article["citations"][0]["index"] == 1

    edited = client.post(
        "/api/agents/editor",
        json={
            "title": article["title"],
            "article": article["article"],
            "topic": "solar",
            "tone": "casual",
            "citations": article["citations"],
        },
    )
    assert edited.status_code == 200
    data = edited.json()
    assert data["originalArticle"] == article["article"]
    assert data["headlineSuggestions"]
    assert set(data["qualityScore"]) == {"overall", "grammar", "clarity", "structure", "engagement"}


def test_editor_route_rejects_blank_article(client):
    response = client.post("/api/agents/editor", json={"title": "T", "article": "  ", "topic": "solar"})

    assert response.status_code == 400
    assert "non-empty 'article'" in response.json()["error"]
