"""
Task API Test Suite — HTTP Adapter
====================================
End-to-end checks of every route through FastAPI's TestClient, with the
slow endpoint made deterministic and instant.

Usage:
    python -m pytest tests/test_server.py -v
"""
import sys
import os
import importlib
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

import taskapi.server as server_module
from taskapi.config import ServerConfig
from taskapi.server import create_app, utc_timestamp
from taskapi.store import SEED_TASKS, TaskStore

ADMIN_KEY = "your_secret_admin_key_123"


class FixedRandom:
    def __init__(self, delay_ms, coin=0.5):
        self.delay_ms = delay_ms
        self.coin = coin

    def uniform(self, a, b):
        return self.delay_ms

    def random(self):
        return self.coin


async def no_sleep(seconds):
    return None


def _client(**kwargs):
    kwargs.setdefault("sleep", no_sleep)
    kwargs.setdefault("rng", FixedRandom(delay_ms=2000))
    return TestClient(create_app(**kwargs))


# ─────────────────────────────────────────────
#  Health & Listing
# ─────────────────────────────────────────────

class TestHealthAndList(unittest.TestCase):

    def setUp(self):
        self.client = _client()

    def test_health(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["status"], "UP")
        self.assertTrue(data["timestamp"].endswith("Z"))

    def test_timestamp_format(self):
        ts = utc_timestamp()
        self.assertRegex(ts, r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")

    def test_list_seed(self):
        resp = self.client.get("/tasks")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), [t.to_dict() for t in SEED_TASKS])


# ─────────────────────────────────────────────
#  Create
# ─────────────────────────────────────────────

class TestCreateTask(unittest.TestCase):

    def setUp(self):
        self.client = _client()

    def test_create_minimal(self):
        resp = self.client.post("/tasks", json={"title": "x"})
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json(), {"id": 4, "title": "x",
                                       "description": "No description",
                                       "completed": False})

    def test_create_full_then_get(self):
        resp = self.client.post("/tasks", json={"title": " Write tests ",
                                                "description": " all of them ",
                                                "completed": True})
        created = resp.json()
        self.assertEqual(created["title"], "Write tests")
        self.assertEqual(created["description"], "all of them")
        self.assertEqual(self.client.get(f"/tasks/{created['id']}").json(), created)

    def test_empty_title(self):
        resp = self.client.post("/tasks", json={"title": ""})
        self.assertEqual(resp.status_code, 400)
        data = resp.json()
        self.assertEqual(data["error"], "Bad Request")
        self.assertIn("non-empty", data["message"])

    def test_title_too_long(self):
        resp = self.client.post("/tasks", json={"title": "a" * 101})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("too long", resp.json()["message"])

    def test_completed_wrong_type(self):
        resp = self.client.post("/tasks", json={"title": "x", "completed": "yes"})
        self.assertEqual(resp.status_code, 400)

    def test_description_wrong_type(self):
        resp = self.client.post("/tasks", json={"title": "x", "description": 42})
        self.assertEqual(resp.status_code, 400)

    def test_fuzz_field(self):
        resp = self.client.post("/tasks", json={"title": "x", "unexpected_fuzz_field": "boom"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("unexpected_fuzz_field", resp.json()["message"])
        self.assertEqual(len(self.client.get("/tasks").json()), 3)

    def test_malformed_json(self):
        resp = self.client.post("/tasks", content=b"{not json",
                                headers={"Content-Type": "application/json"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Bad Request")

    def test_deeply_nested_body(self):
        resp = self.client.post("/tasks", content=b"[" * 100000,
                                headers={"Content-Type": "application/json"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Request body must be valid JSON.")
        self.assertEqual(len(self.client.get("/tasks").json()), 3)

    def test_array_body(self):
        resp = self.client.post("/tasks", json=[{"title": "x"}])
        self.assertEqual(resp.status_code, 400)

    def test_no_body(self):
        resp = self.client.post("/tasks")
        self.assertEqual(resp.status_code, 400)


# ─────────────────────────────────────────────
#  Get / Update / Delete
# ─────────────────────────────────────────────

class TestSingleTask(unittest.TestCase):

    def setUp(self):
        self.client = _client()

    def test_get(self):
        resp = self.client.get("/tasks/1")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["title"], "Learn API Testing Basics")

    def test_get_not_found(self):
        resp = self.client.get("/tasks/999")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "Not Found")

    def test_get_non_numeric(self):
        resp = self.client.get("/tasks/abc")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Task ID must be a valid number.")

    def test_update_completed_only(self):
        before = self.client.get("/tasks/2").json()
        resp = self.client.put("/tasks/2", json={"completed": False})
        self.assertEqual(resp.status_code, 200)
        after = resp.json()
        self.assertFalse(after["completed"])
        self.assertEqual({k: v for k, v in after.items() if k != "completed"},
                         {k: v for k, v in before.items() if k != "completed"})

    def test_update_to_completed(self):
        resp = self.client.put("/tasks/1", json={"completed": True})
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(self.client.get("/tasks/1").json()["completed"])

    def test_update_no_fields(self):
        before = self.client.get("/tasks/1").json()
        resp = self.client.put("/tasks/1", json={})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("No updateable fields", resp.json()["message"])
        self.assertEqual(self.client.get("/tasks/1").json(), before)

    def test_update_invalid_field_changes_nothing(self):
        before = self.client.get("/tasks/3").json()
        resp = self.client.put("/tasks/3", json={"title": "new", "completed": "nope"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.client.get("/tasks/3").json(), before)

    def test_update_not_found(self):
        resp = self.client.put("/tasks/999", json={"title": "x"})
        self.assertEqual(resp.status_code, 404)

    def test_update_non_numeric(self):
        resp = self.client.put("/tasks/abc", json={"title": "x"})
        self.assertEqual(resp.status_code, 400)

    def test_delete(self):
        resp = self.client.delete("/tasks/1")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["message"], "Task deleted successfully")
        self.assertEqual(data["task"]["id"], 1)
        self.assertEqual(self.client.get("/tasks/1").status_code, 404)
        self.assertNotIn(1, [t["id"] for t in self.client.get("/tasks").json()])

    def test_delete_twice(self):
        self.client.delete("/tasks/1")
        self.assertEqual(self.client.delete("/tasks/1").status_code, 404)

    def test_delete_non_numeric(self):
        self.assertEqual(self.client.delete("/tasks/x1").status_code, 400)

    def test_python_only_integer_forms_rejected(self):
        for raw in ("0_1", "1_0"):
            resp = self.client.get(f"/tasks/{raw}")
            self.assertEqual(resp.status_code, 400)
            self.assertEqual(resp.json()["message"], "Task ID must be a valid number.")

    def test_deleted_id_not_reused(self):
        created = self.client.post("/tasks", json={"title": "temp"}).json()
        self.client.delete(f"/tasks/{created['id']}")
        again = self.client.post("/tasks", json={"title": "next"}).json()
        self.assertEqual(again["id"], created["id"] + 1)


# ─────────────────────────────────────────────
#  Slow Endpoint
# ─────────────────────────────────────────────

class TestSlowEndpoint(unittest.TestCase):

    def test_success(self):
        client = _client(rng=FixedRandom(delay_ms=2500))
        resp = client.get("/tasks/slow")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([t["id"] for t in resp.json()], [1, 2])

    def test_simulated_failure(self):
        client = _client(rng=FixedRandom(delay_ms=3200, coin=0.05))
        resp = client.get("/tasks/slow")
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json()["error"], "Service Unavailable")

    def test_slow_is_not_an_id(self):
        resp = _client().get("/tasks/slow")
        self.assertNotEqual(resp.status_code, 400)

    def test_custom_bounds_from_config(self):
        rng = FixedRandom(delay_ms=100)
        calls = []
        rng.uniform = lambda a, b: calls.append((a, b)) or 100
        config = ServerConfig(slow_min_ms=50, slow_max_ms=150)
        _client(config=config, rng=rng).get("/tasks/slow")
        self.assertEqual(calls, [(50, 150)])


# ─────────────────────────────────────────────
#  Admin Reset
# ─────────────────────────────────────────────

class TestAdminReset(unittest.TestCase):

    def setUp(self):
        self.client = _client()

    def test_missing_key(self):
        resp = self.client.post("/admin/reset-all-tasks")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "Unauthorized")

    def test_wrong_key(self):
        resp = self.client.post("/admin/reset-all-tasks", headers={"X-API-KEY": "nope"})
        self.assertEqual(resp.status_code, 401)

    def test_unauthorized_does_not_reset(self):
        self.client.post("/tasks", json={"title": "keep me"})
        self.client.post("/admin/reset-all-tasks")
        self.assertEqual(len(self.client.get("/tasks").json()), 4)

    def test_reset(self):
        self.client.post("/tasks", json={"title": "x"})
        self.client.delete("/tasks/1")
        resp = self.client.post("/admin/reset-all-tasks", headers={"X-API-KEY": ADMIN_KEY})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "All tasks have been reset successfully."})
        self.assertEqual(self.client.get("/tasks").json(), [t.to_dict() for t in SEED_TASKS])
        self.assertEqual(self.client.post("/tasks", json={"title": "y"}).json()["id"], 4)

    def test_header_name_case_insensitive(self):
        resp = self.client.post("/admin/reset-all-tasks", headers={"x-api-key": ADMIN_KEY})
        self.assertEqual(resp.status_code, 200)

    def test_configured_key(self):
        client = _client(config=ServerConfig(admin_api_key="s3cret"))
        self.assertEqual(client.post("/admin/reset-all-tasks",
                                     headers={"X-API-KEY": ADMIN_KEY}).status_code, 401)
        self.assertEqual(client.post("/admin/reset-all-tasks",
                                     headers={"X-API-KEY": "s3cret"}).status_code, 200)


# ─────────────────────────────────────────────
#  Fallbacks
# ─────────────────────────────────────────────

class BrokenStore(TaskStore):
    def list(self):
        raise RuntimeError("disk on fire")


class TestFallbacks(unittest.TestCase):

    def test_unknown_route(self):
        resp = _client().get("/nope")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {
            "error": "Not Found",
            "message": "The requested URL /nope was not found on this server.",
        })

    def test_unsupported_method_is_not_found(self):
        resp = _client().patch("/tasks")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "Not Found")

    def test_uncaught_fault(self):
        app = create_app(store=BrokenStore())
        client = TestClient(app, raise_server_exceptions=False)
        resp = client.get("/tasks")
        self.assertEqual(resp.status_code, 500)
        data = resp.json()
        self.assertEqual(data["error"], "Internal Server Error")
        self.assertNotIn("disk on fire", data["message"])

    def test_shared_store_reference(self):
        store = TaskStore()
        client = _client(store=store)
        client.post("/tasks", json={"title": "through http"})
        self.assertEqual(store.get(4).title, "through http")


# ─────────────────────────────────────────────
#  Module-level App
# ─────────────────────────────────────────────

class TestModuleApp(unittest.TestCase):
    """``uvicorn taskapi.server:app`` must honour TASKAPI_* settings."""

    def tearDown(self):
        importlib.reload(server_module)

    def test_reads_environment(self):
        with patch.dict(os.environ, {"TASKAPI_ADMIN_KEY": "s3cret",
                                     "TASKAPI_SLOW_MAX_MS": "2000",
                                     "TASKAPI_SLOW_MIN_MS": "1000"}):
            module = importlib.reload(server_module)
        config = module.app.state.config
        self.assertEqual(config.admin_api_key, "s3cret")
        self.assertEqual((config.slow_min_ms, config.slow_max_ms), (1000.0, 2000.0))

        client = TestClient(module.app)
        self.assertEqual(client.post("/admin/reset-all-tasks",
                                     headers={"X-API-KEY": ADMIN_KEY}).status_code, 401)
        self.assertEqual(client.post("/admin/reset-all-tasks",
                                     headers={"X-API-KEY": "s3cret"}).status_code, 200)


if __name__ == "__main__":
    unittest.main()
