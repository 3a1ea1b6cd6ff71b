import pytest
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.main import app


@pytest.mark.asyncio
async def test_builder_applies_operations_in_order(client, login_as):
    res = await client.post("/api/v1/forms/builder", headers=login_as("master"), json={
        "fields": [],
        "operations": [
            {"op": "add_field", "type": "text-input"},
            {"op": "add_field", "type": "multiple-choice"},
            {"op": "update_field", "index": 1, "updates": {"label": "Level", "required": True}},
            {"op": "update_option", "index": 1, "option_index": 0, "value": "Beginner"},
            {"op": "add_option", "index": 1},
            {"op": "start_drag", "index": 1},
            {"op": "drop", "target_index": 0},
        ],
    })

    assert res.status_code == 200
    fields = res.json()["fields"]
    assert [f["type"] for f in fields] == ["multiple-choice", "text-input"]
    assert fields[0]["options"] == ["Beginner", ""]
    assert res.json()["publish_problems"] == {fields[1]["id"]: "Question 2 needs a label"}


@pytest.mark.asyncio
async def test_builder_type_switch_keeps_identity(client, login_as):
    field = {"id": "f1", "type": "multiple-choice", "label": "Level", "required": True, "options": ["A", "B"]}

    res = await client.post("/api/v1/forms/builder", headers=login_as("master"), json={
        "fields": [field],
        "operations": [{"op": "update_field", "index": 0, "updates": {"type": "textarea"}}],
    })

    assert res.json()["fields"] == [
        {"id": "f1", "type": "textarea", "label": "Level", "required": True, "placeholder": ""},
    ]


@pytest.mark.asyncio
async def test_builder_rejects_unknown_operation(client, login_as):
    res = await client.post("/api/v1/forms/builder", headers=login_as("master"), json={
        "fields": [], "operations": [{"op": "explode"}],
    })
    assert res.status_code == 422


@pytest.mark.asyncio
async def test_preview_unsaved_form(client, login_as):
    res = await client.post("/api/v1/forms/preview", headers=login_as("master"), json={
        "fields": [{"id": "f1", "type": "image-upload", "label": "Portfolio", "required": False}],
        "form_color": "#F59E0B",
    })

    body = res.json()
    assert body["accent_color"] == "#F59E0B"
    assert body["controls"][0]["accept"] == "image/*"
    assert body["controls"][0]["disabled"] is True


@pytest.mark.asyncio
async def test_form_tools_are_for_masters(client, login_as):
    res = await client.post("/api/v1/forms/preview", headers=login_as("student"), json={"fields": []})
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_health(client):
    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "healthy"}
    assert res.headers["X-Content-Type-Options"] == "nosniff"


@pytest.mark.asyncio
async def test_default_rate_limit_is_enforced(client, monkeypatch):
    tight = Limiter(key_func=get_remote_address, default_limits=["2/minute"])
    monkeypatch.setattr(app.state, "limiter", tight)

    codes = [(await client.get("/api/v1/workshops")).status_code for _ in range(3)]

    assert codes == [200, 200, 429]
