import pytest
from fastapi.testclient import TestClient

from oee_engine.api import create_app
from oee_engine.runners.oee_runner import OEECalculatorSession


@pytest.fixture
def session(store, root, engine_config):
    s = OEECalculatorSession(store, "press-1", engine_config)
    yield s
    s.close()


@pytest.fixture
def client(session):
    return TestClient(create_app(session))


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


class TestStatus:
    def test_unbound_session(self, client):
        body = client.get("/oee/status").json()

        assert body["state"] == "Idle"
        assert body["data_source"] == "<unresolved>"
        assert body["ticks"] == 0
        assert body["last_result"] is None

    def test_after_recalculate(self, client, session):
        session.set_data_source("press-1")
        client.post("/oee/recalculate")

        body = client.get("/oee/status").json()
        assert body["ticks"] == 1
        assert body["data_source"] == "Plant/Line1/Press (press-1)"
        assert body["writer"]["writes"] > 0
        assert body["last_result"]["metrics"]["total_count"] == 100


class TestRecalculate:
    def test_without_data_source(self, client):
        r = client.post("/oee/recalculate")
        assert r.status_code == 409

    def test_returns_metrics(self, client, session):
        session.set_data_source("press-1")

        r = client.post("/oee/recalculate")

        assert r.status_code == 200
        body = r.json()
        assert body["quality"] == pytest.approx(80.0)
        assert body["availability"] == pytest.approx(12.5)
        assert body["status"] == "Stopped"
        assert body["result"]["shift"]["shift_number"] in (1, 2, 3)

    def test_tick_failure(self, client, session, monkeypatch):
        session.set_data_source("press-1")

        def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("oee_engine.runners.oee_runner.compute", boom)

        r = client.post("/oee/recalculate")
        assert r.status_code == 500


class TestDataSource:
    @pytest.mark.parametrize("payload", [{}, {"reference": ""}, {"reference": "   "}, {"reference": "press-1", "namespace": -1}])
    def test_invalid_payload(self, client, payload):
        r = client.put("/oee/data-source", json=payload)
        assert r.status_code == 422

    def test_unknown_reference(self, client, session):
        r = client.put("/oee/data-source", json={"reference": "Plant/Nowhere"})

        assert r.status_code == 409
        assert session.root is None

    def test_by_path(self, client, session, root):
        r = client.put("/oee/data-source", json={"reference": "Plant/Line1/Press"})

        assert r.status_code == 200
        assert r.json() == {"data_source": "Plant/Line1/Press (press-1)", "state": "Idle"}
        assert session.root is root

    def test_reference_is_stripped(self, client, session):
        r = client.put("/oee/data-source", json={"reference": "  press-1  "})

        assert r.status_code == 200
        assert session.reference == "press-1"

    def test_by_node_id(self, client, session, root):
        r = client.put("/oee/data-source", json={"reference": "press-1", "namespace": 2})

        assert r.status_code == 200
        assert session.root is root

    def test_failed_start_is_recovered(self, store, engine_config, scenario_a):
        late = OEECalculatorSession(store, "Plant/Late", engine_config)
        client = TestClient(create_app(late))
        assert late.start() is False

        store.add_metrics_root("Plant/Late", scenario_a)
        r = client.put("/oee/data-source", json={"reference": "Plant/Late"})

        assert r.status_code == 200
        assert r.json()["state"] == "Running"
        late.close()
