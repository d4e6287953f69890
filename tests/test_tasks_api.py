import time
from datetime import datetime


def create_task_payload(title="Test Task", description="A task for testing"):
    return {"title": title, "description": description}


def assert_task_shape(task: dict):
    assert set(task) == {"id", "title", "description", "completed", "created_at", "updated_at"}
    assert isinstance(task["id"], int)
    assert isinstance(task["title"], str)
    assert isinstance(task["completed"], bool)
    # FastAPI/Pydantic returns ISO8601 strings for datetime fields
    datetime.fromisoformat(task["created_at"])
    datetime.fromisoformat(task["updated_at"])


def create(client, **kwargs) -> dict:
    res = client.post("/rpc/createTask", json=create_task_payload(**kwargs))
    assert res.status_code == 200
    return res.json()


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/")
        assert res.status_code == 200
        data = res.json()
        assert data["message"] == "Healthy"
        assert data["backend"] in ("memory", "sqlite")


class TestCreateTask:
    def test_create_task(self, client):
        task = create(client)
        assert_task_shape(task)
        assert task["title"] == "Test Task"
        assert task["description"] == "A task for testing"
        assert task["completed"] is False
        assert task["created_at"] == task["updated_at"]

    def test_create_with_null_description(self, client):
        task = create(client, title="Buy milk", description=None)
        assert task["description"] is None

    def test_title_is_trimmed(self, client):
        task = create(client, title="  Padded  ")
        assert task["title"] == "Padded"

    def test_blank_title_rejected(self, client):
        res = client.post("/rpc/createTask", json={"title": "   ", "description": "x"})
        assert res.status_code == 422
        body = res.json()
        assert body["error"] == "ValidationError"
        assert body["message"] == "Request validation failed"
        assert isinstance(body["detail"], list)
        assert client.get("/rpc/getTasks").json() == []

    def test_description_key_required(self, client):
        res = client.post("/rpc/createTask", json={"title": "No description key"})
        assert res.status_code == 422

    def test_unknown_field_rejected(self, client):
        res = client.post("/rpc/createTask", json={"title": "x", "description": None, "completed": True})
        assert res.status_code == 422


class TestGetTasks:
    def test_empty(self, client):
        res = client.get("/rpc/getTasks")
        assert res.status_code == 200
        assert res.json() == []

    def test_newest_first(self, client):
        create(client, title="Older Task")
        time.sleep(0.01)
        create(client, title="Newer Task")
        titles = [t["title"] for t in client.get("/rpc/getTasks").json()]
        assert titles == ["Newer Task", "Older Task"]


class TestGetTask:
    def test_found(self, client):
        task = create(client, title="Read book")
        res = client.get("/rpc/getTask", params={"id": task["id"]})
        assert res.status_code == 200
        assert res.json() == task

    def test_missing_returns_null(self, client):
        res = client.get("/rpc/getTask", params={"id": 999})
        assert res.status_code == 200
        assert res.json() is None

    def test_non_integer_id_rejected(self, client):
        res = client.get("/rpc/getTask", params={"id": "abc"})
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"


class TestUpdateTask:
    def test_toggle_completed(self, client):
        task = create(client)
        res = client.post("/rpc/updateTask", json={"id": task["id"], "completed": True})
        assert res.status_code == 200
        updated = res.json()
        assert updated["completed"] is True
        assert updated["title"] == task["title"]
        assert updated["description"] == task["description"]
        assert updated["created_at"] == task["created_at"]
        assert datetime.fromisoformat(updated["updated_at"]) > datetime.fromisoformat(task["updated_at"])

    def test_null_description_clears(self, client):
        task = create(client, description="Original description")
        updated = client.post("/rpc/updateTask", json={"id": task["id"], "description": None}).json()
        assert updated["description"] is None
        assert updated["title"] == task["title"]
        assert updated["completed"] is False

    def test_omitted_description_kept(self, client):
        task = create(client, description="Keep me")
        updated = client.post("/rpc/updateTask", json={"id": task["id"], "title": "Renamed"}).json()
        assert updated["title"] == "Renamed"
        assert updated["description"] == "Keep me"

    def test_not_found(self, client):
        res = client.post("/rpc/updateTask", json={"id": 424242, "title": "Nope"})
        assert res.status_code == 404
        body = res.json()
        assert body["error"] == "NotFoundError"
        assert "424242" in body["message"]

    def test_invalid_shapes_rejected_without_change(self, client):
        task = create(client)
        for payload in (
            {"id": task["id"], "title": ""},
            {"id": task["id"], "title": None},
            {"id": task["id"], "completed": None},
            {"id": task["id"], "completed": "yes"},
            {"id": str(task["id"]), "completed": True},
            {"title": "missing id"},
        ):
            res = client.post("/rpc/updateTask", json=payload)
            assert res.status_code == 422, payload
            assert res.json()["error"] == "ValidationError"
        fetched = client.get("/rpc/getTask", params={"id": task["id"]}).json()
        assert fetched == task


class TestDeleteTask:
    def test_delete(self, client):
        keep = create(client, title="Keep")
        gone = create(client, title="ToDelete")

        res = client.post("/rpc/deleteTask", json={"id": gone["id"]})
        assert res.status_code == 200
        assert res.json() == {"success": True}

        assert client.get("/rpc/getTask", params={"id": gone["id"]}).json() is None
        assert client.get("/rpc/getTasks").json() == [keep]

    def test_delete_missing(self, client):
        res = client.post("/rpc/deleteTask", json={"id": 999})
        assert res.status_code == 404
        body = res.json()
        assert body["error"] == "NotFoundError"
        assert body["message"] == "Task with id 999 not found"


class TestIdBounds:
    def test_ids_outside_64_bit_range_rejected(self, client):
        task = create(client)
        big = 2**63
        for path, payload in (
            ("/rpc/updateTask", {"id": big, "completed": True}),
            ("/rpc/deleteTask", {"id": big}),
            ("/rpc/deleteTask", {"id": -big - 1}),
        ):
            res = client.post(path, json=payload)
            assert res.status_code == 422, (path, payload)
            assert res.json()["error"] == "ValidationError"

        res = client.get("/rpc/getTask", params={"id": big})
        assert res.status_code == 422
        assert client.get("/rpc/getTasks").json() == [task]

    def test_largest_id_is_a_plain_miss(self, client):
        largest = 2**63 - 1
        assert client.get("/rpc/getTask", params={"id": largest}).json() is None
        res = client.post("/rpc/deleteTask", json={"id": largest})
        assert res.status_code == 404
        assert res.json()["error"] == "NotFoundError"
