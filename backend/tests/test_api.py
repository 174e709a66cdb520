"""HTTP surface -- status codes and response bodies."""

OWNER = "a@x.com"
OTHER = "b@y.com"


def _create(client, title="Buy milk", owner=OWNER, **extra):
    return client.post("/tasks", json={"title": title, "owner": owner, **extra})


def _delete(client, task_id, body):
    return client.request("DELETE", f"/tasks/{task_id}", json=body)


def test_liveness(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == "Drop task server is running"


class TestUsers:
    def test_register_then_repeat(self, client):
        body = {"email": OWNER, "displayName": "Alice"}

        first = client.post("/users", json=body)
        assert first.status_code == 200
        assert first.json() == {"message": "User added successfully", "inserted": True}

        second = client.post("/users", json=body)
        assert second.status_code == 200
        assert second.json() == {"message": "User already exists", "inserted": False}

    def test_missing_display_name(self, client):
        response = client.post("/users", json={"email": OWNER})
        assert response.status_code == 400
        assert response.json()["message"] == "Email and display name are required."


class TestTasks:
    def test_create_and_list(self, client):
        response = _create(client)
        assert response.status_code == 201
        assert response.json()["message"] == "Task added successfully!"

        listed = client.get(f"/tasks/{OWNER}")
        assert listed.status_code == 200
        [task] = listed.json()
        assert task["title"] == "Buy milk"
        assert task["category"] == "To-Do"
        assert task["description"] == ""
        assert task["owner"] == OWNER
        assert task["id"] == response.json()["id"]

    def test_legacy_email_field_accepted(self, client):
        response = client.post("/tasks", json={"title": "Legacy", "email": OWNER})
        assert response.status_code == 201
        assert len(client.get(f"/tasks/{OWNER}").json()) == 1

    def test_create_validation(self, client):
        assert _create(client, title="x" * 51).status_code == 400
        assert _create(client, description="d" * 201).status_code == 400
        assert _create(client, owner=None).status_code == 400
        assert client.get(f"/tasks/{OWNER}").json() == []

    def test_lists_are_isolated(self, client):
        _create(client, owner=OWNER)
        assert client.get(f"/tasks/{OTHER}").json() == []

    def test_partial_update(self, client):
        task_id = _create(client, title="A", description="B").json()["id"]

        response = client.put(f"/tasks/{task_id}", json={"title": "C", "owner": OWNER})
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Task updated successfully"
        assert body["task"]["title"] == "C"
        assert body["task"]["description"] == "B"

    def test_update_invalid_category(self, client):
        task_id = _create(client).json()["id"]
        response = client.put(f"/tasks/{task_id}", json={"category": "Someday", "owner": OWNER})
        assert response.status_code == 400

    def test_update_by_other_owner(self, client):
        task_id = _create(client).json()["id"]
        response = client.put(f"/tasks/{task_id}", json={"title": "C", "owner": OTHER})
        assert response.status_code == 404
        assert response.json() == {"message": "Task not found or access denied."}

    def test_delete(self, client):
        task_id = _create(client).json()["id"]

        assert _delete(client, task_id, {"owner": OTHER}).status_code == 404

        response = _delete(client, task_id, {"owner": OWNER})
        assert response.status_code == 200
        assert response.json() == {"message": "Task deleted successfully"}

        assert _delete(client, task_id, {"owner": OWNER}).status_code == 404
        assert client.get(f"/tasks/{OWNER}").json() == []

    def test_delete_without_owner(self, client):
        task_id = _create(client).json()["id"]
        assert _delete(client, task_id, {}).status_code == 400


def test_entry_point_runs_uvicorn(monkeypatch):
    from app import __main__ as entry
    from app.core.config import settings

    calls = []
    levels = []
    monkeypatch.setattr(entry.uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))
    monkeypatch.setattr(entry, "setup_logging", levels.append)
    entry.main()

    assert levels == [settings.log_level]
    assert calls == [(("app.main:app",), {"host": settings.host, "port": settings.port})]


def test_factory_leaves_logging_alone():
    import logging

    from app.core.config import Settings
    from app.main import create_app

    root = logging.getLogger()
    before = list(root.handlers)
    create_app(Settings(database_url="sqlite+aiosqlite:///:memory:"))
    assert root.handlers == before


def test_store_failure_is_generic_500(client):
    client.portal.call(client.app.state.store.close)

    response = client.get(f"/tasks/{OWNER}")
    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error."}


class TestTaskEdgeCases:
    def test_position_out_of_range(self, client):
        task_id = _create(client).json()["id"]

        for position in (2**31, -(2**31) - 1, 2**63):
            response = client.put(f"/tasks/{task_id}", json={"position": position, "owner": OWNER})
            assert response.status_code == 400

        response = client.put(f"/tasks/{task_id}", json={"position": 2**31 - 1, "owner": OWNER})
        assert response.status_code == 200
        assert response.json()["task"]["position"] == 2**31 - 1

    def test_listed_timestamps_are_utc(self, client):
        task_id = _create(client).json()["id"]
        updated = client.put(f"/tasks/{task_id}", json={"owner": OWNER}).json()["task"]

        [listed] = client.get(f"/tasks/{OWNER}").json()
        assert listed["timestamp"].endswith("+00:00")
        assert listed["timestamp"] == updated["timestamp"]

    def test_long_owner_and_display_name(self, client):
        owner = "x" * 400 + "@example.com"
        body = {"email": owner, "displayName": "N" * 300}
        assert client.post("/users", json=body).json()["inserted"] is True

        assert _create(client, owner=owner).status_code == 201
        [task] = client.get(f"/tasks/{owner}").json()
        assert task["owner"] == owner
