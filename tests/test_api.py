from __future__ import annotations

from fastapi.testclient import TestClient

from seminar_flow.schemas import Profile
from seminar_flow.steps.content import PROFILE_REQUIRED_MESSAGE
from seminar_flow.storage import MemoryStore

from conftest import FakeClient


def _create(api: TestClient, session_id: str = "demo-session") -> dict:
    response = api.post("/wizard/sessions", json={"session_id": session_id})
    assert response.status_code == 201
    return response.json()


def test_healthcheck(api: TestClient) -> None:
    response = api.get("/wizard/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_list_steps_exposes_all(api: TestClient) -> None:
    response = api.get("/wizard/steps")
    assert response.status_code == 200
    steps = response.json()
    assert [item["number"] for item in steps] == list(range(1, 16))
    assert steps[-1]["title"] == "Informe Final"


def test_banner_phrases(api: TestClient) -> None:
    assert len(api.get("/wizard/banner").json()["phrases"]) == 8


def test_create_session_starts_on_profile(api: TestClient) -> None:
    data = _create(api)

    assert data["session_id"] == "demo-session"
    assert data["current_step"] == 1
    assert data["total_steps"] == 15
    assert data["next_disabled"] is True
    assert data["prev_disabled"] is True
    assert data["timer"]["visible"] is False


def test_session_without_body_gets_generated_id(api: TestClient) -> None:
    response = api.post("/wizard/sessions")
    assert response.status_code == 201
    assert len(response.json()["session_id"]) == 32


def test_unknown_session_is_404(api: TestClient) -> None:
    response = api.get("/wizard/sessions/missing")
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_profile_flow_reveal_and_next(api: TestClient, fake_client: FakeClient, store: MemoryStore) -> None:
    _create(api)
    fake_client.queue("<p>¡Hola, Ana!</p>")

    response = api.post(
        "/wizard/sessions/demo-session/steps/1/profile", json={"name": "Ana", "pronoun": "Ella"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["accepted_steps"]["1"] is True
    assert data["profile"] == {"nombre": "Ana", "pronombres": "Ella", "preferencias": ""}
    assert data["step"]["is_animating"] is True
    assert data["next_disabled"] is True
    assert store.load_profile().nombre == "Ana"

    reveal = api.get("/wizard/sessions/demo-session/steps/1/reveal", params={"target": "welcome"})
    assert reveal.status_code == 200
    assert reveal.text == "<p>¡Hola, Ana!</p>"

    moved = api.post("/wizard/sessions/demo-session/next")
    assert moved.status_code == 200
    assert moved.json()["current_step"] == 2
    assert moved.json()["show_design_portals_popup"] is True
    assert moved.json()["timer"]["visible"] is True


def test_validation_errors_are_json(api: TestClient, fake_client: FakeClient) -> None:
    _create(api)

    response = api.post("/wizard/sessions/demo-session/steps/1/profile", json={"name": "", "pronoun": ""})

    assert response.status_code == 422
    assert response.json() == {"error": "validation", "detail": PROFILE_REQUIRED_MESSAGE, "step": 1}
    assert fake_client.calls == []


def test_next_is_refused_while_gate_unmet(api: TestClient) -> None:
    _create(api)

    response = api.post("/wizard/sessions/demo-session/next")

    assert response.status_code == 409
    assert response.json()["error"] == "invalid_transition"


def test_action_on_wrong_step_is_rejected(api: TestClient) -> None:
    _create(api)

    response = api.put("/wizard/sessions/demo-session/steps/7/draft", json={"text": "x"})

    assert response.status_code == 422
    assert response.json()["step"] == 7


def test_rate_limit_keeps_step_ready(api: TestClient, fake_client: FakeClient) -> None:
    _create(api)
    api.put("/wizard/sessions/demo-session/steps/2/draft", json={"text": "Diseño y agua"})
    fake_client.queue(RuntimeError("429 Too Many Requests"))

    response = api.post("/wizard/sessions/demo-session/steps/2/generate", json={"iteration": False})

    assert response.status_code == 429
    assert response.json()["error"] == "rate_limit"
    step = api.get("/wizard/sessions/demo-session/steps/2").json()
    assert step["phase"] == "ready"
    assert step["error"]["kind"] == "rate_limit"


def test_edit_round_trip_over_http(api: TestClient, fake_client: FakeClient) -> None:
    _create(api)
    api.put("/wizard/sessions/demo-session/steps/3/draft", json={"text": "Servicios"})
    fake_client.queue("<p>Línea uno<br>Línea dos</p>")
    api.post("/wizard/sessions/demo-session/steps/3/generate")
    api.post("/wizard/sessions/demo-session/steps/3/reveal/complete")

    started = api.post("/wizard/sessions/demo-session/steps/3/edit")
    assert started.json() == {"text": "Línea uno\nLínea dos"}
    api.post("/wizard/sessions/demo-session/steps/3/edit/save", json={"text": started.json()["text"]})
    accepted = api.post("/wizard/sessions/demo-session/steps/3/accept")

    assert accepted.json()["accepted_steps"]["3"] is True
    project = api.get("/wizard/sessions/demo-session/project").json()
    assert project["disciplinaryScopeAiResponse"] == "<p>Línea uno<br>Línea dos</p>"


def test_speech_returns_audio(api: TestClient, fake_client: FakeClient) -> None:
    _create(api)
    fake_client.queue("<p>¡Hola, <strong>Ana</strong>!</p>")
    api.post("/wizard/sessions/demo-session/steps/1/profile", json={"name": "Ana", "pronoun": "Ella"})

    response = api.post("/wizard/sessions/demo-session/steps/1/speech", params={"target": "welcome"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "audio/mpeg"
    assert response.content == fake_client.speech
    assert fake_client.calls[-1] == ("speech", "¡Hola, Ana!")


def test_report_pdf_download(api: TestClient, fake_client: FakeClient, store: MemoryStore) -> None:
    store.save_profile(Profile(nombre="Ana", pronombres="Ella"))
    _create(api)

    missing = api.get("/wizard/sessions/demo-session/report.pdf")
    assert missing.status_code == 422

    fake_client.queue("<h1>Informe</h1><p>Contenido del informe.</p>")
    generated = api.post("/wizard/sessions/demo-session/steps/15/report", json={"robustify": False})
    assert generated.json()["accepted_steps"]["15"] is True

    response = api.get("/wizard/sessions/demo-session/report.pdf")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")
    assert 'filename="Esto no es una Memoria_Ana_Mi Proyecto.pdf"' in response.headers["content-disposition"]


def test_delete_session(api: TestClient) -> None:
    _create(api)

    assert api.delete("/wizard/sessions/demo-session").json() == {"status": "deleted"}
    assert api.get("/wizard/sessions/demo-session").status_code == 404
