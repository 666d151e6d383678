"""Tests for the orchestrator HTTP API."""

import pytest
from fastapi.testclient import TestClient

from novel_forge_providers import MockCompletionClient, NetworkError
from novel_forge_providers.config import PROVIDER_ENV_VAR

from services.orchestrator.app import flows, main


@pytest.fixture(autouse=True)
def mock_provider_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NOVEL_FORGE_PROVIDER", raising=False)
    monkeypatch.setenv(PROVIDER_ENV_VAR, "mock")


@pytest.fixture
def scripted(monkeypatch: pytest.MonkeyPatch):
    """Route stage requests through the flow body with a scripted client."""

    def install(responses):
        client = MockCompletionClient(responses)

        async def run_inline(stage, request):
            return await flows.run_stage.fn(stage, request, client=client)

        monkeypatch.setattr(main, "run_stage", run_inline)
        return client

    return install


@pytest.fixture
def api() -> TestClient:
    return TestClient(main.app)


def _project_payload(make_project, **overrides) -> dict:
    return make_project(**overrides).model_dump(mode="json", by_alias=True)


def test_health(api: TestClient) -> None:
    response = api.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_stages_lists_every_stage(api: TestClient) -> None:
    response = api.get("/stages")

    assert response.status_code == 200
    stages = {item["stage"]: item for item in response.json()}
    assert set(stages) == {
        "architecture",
        "blueprint",
        "draft",
        "finalize",
        "quality_check",
        "repair",
        "enrich",
    }
    assert stages["draft"]["requires_chapter"] is True
    assert stages["blueprint"]["requires_chapter"] is False


def test_models_for_mock_provider(api: TestClient) -> None:
    response = api.get("/models", params={"provider": "mock"})

    assert response.status_code == 200
    assert response.json() == {"provider": "mock", "models": ["mock"]}


def test_architecture_stage_round_trip(api: TestClient, scripted, make_project) -> None:
    scripted(["seed", "cast", "state", "world", "plot"])

    response = api.post("/stages/architecture", json={"project": _project_payload(make_project)})

    assert response.status_code == 200
    body = response.json()
    assert body["stage"] == "architecture"
    assert body["project"]["coreSeed"] == "seed"
    assert body["project"]["architectureGenerated"] is True


def test_missing_chapter_maps_to_404(api: TestClient, scripted, make_project, make_blueprint) -> None:
    scripted([])
    payload = {
        "project": _project_payload(make_project, chapter_blueprint=make_blueprint(1, 2)),
        "chapter_number": 5,
    }

    response = api.post("/stages/draft", json=payload)

    assert response.status_code == 404


def test_missing_input_maps_to_422(api: TestClient, scripted, make_project) -> None:
    scripted([])

    response = api.post("/stages/finalize", json={"project": _project_payload(make_project)})

    assert response.status_code == 422


def test_provider_failure_maps_to_502(api: TestClient, scripted, make_project) -> None:
    scripted([NetworkError("upstream unreachable")])

    response = api.post("/stages/architecture", json={"project": _project_payload(make_project)})

    assert response.status_code == 502
    assert "upstream unreachable" in response.json()["detail"]


def test_unknown_stage_is_rejected(api: TestClient, make_project) -> None:
    response = api.post("/stages/publish", json={"project": _project_payload(make_project)})

    assert response.status_code == 422


def test_export_endpoint(api: TestClient, make_project, make_blueprint) -> None:
    payload = _project_payload(
        make_project,
        chapter_blueprint=make_blueprint(1, 2),
        chapters={2: "Second.", 1: "First."},
    )

    response = api.post("/export", json=payload)

    assert response.status_code == 200
    assert response.text.index("Chapter 1 Title 1") < response.text.index("Chapter 2 Title 2")


def test_metrics_endpoint(api: TestClient) -> None:
    api.get("/health")

    response = api.get("/metrics")

    assert response.status_code == 200
    assert "novel_forge_http_requests_total" in response.text
