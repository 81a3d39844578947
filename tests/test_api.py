"""
Tests for the read-only inspector app.
"""
from enum import IntEnum

import pytest
from fastapi.testclient import TestClient

from behavior_engine import (
    ActivationGraph,
    Consideration,
    DecisionEngine,
    EngineConfig,
    UtilityScore,
)
from behavior_engine.api import create_inspector_app


class Event(IntEnum):
    ALWAYS = 0
    PENALIZED = 1


@pytest.fixture
def engine():
    engine = DecisionEngine(EngineConfig(engine_id="guard-7", record_activation=True))
    engine.add_decision("Patrol", "Walk the walls", UtilityScore.USEFUL,
                        [Event.ALWAYS], [Consideration("boredom", lambda: 0.75)])
    engine.add_decision("Rest", "Sit down", UtilityScore.SLIGHTLY_USEFUL,
                        [Event.ALWAYS, Event.PENALIZED])
    engine.raise_event(Event.ALWAYS)
    return engine


class TestInspector:
    """Test the inspector routes."""

    def test_health(self, engine):
        client = TestClient(create_inspector_app(engine))
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "engine_id": "guard-7", "tick": 0}

    def test_events_use_enum_names(self, engine):
        engine.raise_event(Event.PENALIZED)
        client = TestClient(create_inspector_app(engine))
        assert client.get("/events").json() == ["ALWAYS", "PENALIZED"]

    def test_decisions_in_tier_order(self, engine):
        client = TestClient(create_inspector_app(engine))
        data = client.get("/decisions").json()

        assert [d["name"] for d in data] == ["Patrol", "Rest"]
        assert data[0]["utility"] == "USEFUL"
        assert data[0]["utility_value"] == 2
        assert data[0]["never_executed"] is True
        assert data[0]["seconds_since_execution"] is None

    def test_decisions_after_execution(self, engine):
        engine.execute_best_decision()
        client = TestClient(create_inspector_app(engine))
        patrol = client.get("/decisions").json()[0]

        assert patrol["never_executed"] is False
        assert patrol["seconds_since_execution"] >= 0.0

    def test_activation_graph(self, engine):
        engine.get_best_decision()
        client = TestClient(create_inspector_app(engine))
        data = client.get("/activation").json()

        assert data["searches"] == 1
        assert data["best_index"] == 0
        assert data["entries"][0] == {"name": "Patrol", "score": 1.5}
        # Rest (tier 1) cannot beat 1.5 and is never scored
        assert data["entries"][1]["score"] == -1.0

    def test_reads_do_not_change_engine(self, engine):
        """Listing decisions with a pending sort must not reset the graph."""
        engine.get_best_decision()
        engine.add_decision("Alarm", "Ring the bell", UtilityScore.MOST_USEFUL,
                            [Event.ALWAYS])
        client = TestClient(create_inspector_app(engine))
        before = client.get("/activation").json()

        listed = client.get("/decisions").json()
        assert [d["name"] for d in listed] == ["Alarm", "Patrol", "Rest"]
        assert client.get("/activation").json() == before
        assert before["best_index"] == 0

        # the pending sort is still applied by the next search
        assert engine.get_best_decision().name == "Alarm"

    def test_explicit_graph(self):
        graph = ActivationGraph()
        client = TestClient(create_inspector_app(DecisionEngine(), graph=graph))
        assert client.get("/activation").json() == {
            "entries": [], "best_index": None, "searches": 0,
        }

    def test_no_activation_graph(self):
        client = TestClient(create_inspector_app(DecisionEngine()))
        response = client.get("/activation")
        assert response.status_code == 404

    def test_string_events(self):
        engine = DecisionEngine()
        engine.add_decision("Idle", "", UtilityScore.USEFUL, "idle")
        engine.raise_event("idle")
        client = TestClient(create_inspector_app(engine))
        assert client.get("/events").json() == ["idle"]
