"""
PostgresStore Tests (no database required)

psycopg2.connect is replaced with a recording fake so these tests check
the SQL the store sends and how it maps returned rows:
- Non-UUID ids resolve to "not found" without touching the database
- ON CONFLICT insert with no returned row -> DuplicateMatch
- Compare-and-set UPDATE: column order, parameter order, enum unwrapping
- Lost compare-and-set (no row) -> None
"""

from typing import Any, List, Optional

import pytest
from fastapi.testclient import TestClient

from bagshare.api_server import create_app
from bagshare.shared.auth import issue_token
from bagshare.shared.errors import DuplicateMatch
from bagshare.store import Match, MatchStatus
from bagshare.store import postgres as postgres_module
from bagshare.store.models import new_id
from bagshare.store.postgres import PostgresStore


# ============================================================================
# FAKE CONNECTION
# ============================================================================

class FakeCursor:
    def __init__(self, connection: "FakeConnection"):
        self.connection = connection

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql: str, params: Optional[tuple] = None) -> None:
        self.connection.executed.append((" ".join(sql.split()), params))

    def fetchone(self) -> Optional[dict]:
        rows = self.connection.rows
        return rows.pop(0) if rows else None

    def fetchall(self) -> List[dict]:
        rows, self.connection.rows = self.connection.rows, []
        return rows


class FakeConnection:
    def __init__(self, rows: List[Any]):
        self.rows = list(rows)
        self.executed: List[tuple] = []
        self.committed = False
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.committed = True

    def rollback(self):
        pass

    def close(self):
        self.closed = True


@pytest.fixture
def connections(monkeypatch):
    """Connections opened by the store; queue rows with ``connections.rows``."""

    class Recorder(list):
        rows: List[Any] = []

    opened = Recorder()

    def connect(dsn, **kwargs):
        conn = FakeConnection(opened.rows)
        opened.rows = []
        opened.append(conn)
        return conn

    monkeypatch.setattr(postgres_module.psycopg2, "connect", connect)
    return opened


@pytest.fixture
def pg_store() -> PostgresStore:
    return PostgresStore("postgresql://bagshare@localhost/bagshare")


def make_match(**overrides) -> Match:
    fields = dict(
        traveler_listing_id=new_id(),
        sender_listing_id=new_id(),
        traveler_id=new_id(),
        sender_id=new_id(),
        receiver_id=new_id(),
    )
    fields.update(overrides)
    return Match(**fields)


# ============================================================================
# MALFORMED IDS
# ============================================================================

class TestMalformedIds:
    """Ids that are not UUIDs can never exist, so no query is sent."""

    @pytest.mark.parametrize("getter", [
        "get_match", "get_user", "get_traveler_listing", "get_sender_listing",
    ])
    def test_getters_return_none(self, pg_store, connections, getter):
        assert getattr(pg_store, getter)("abc") is None
        assert connections == []

    def test_update_returns_none(self, pg_store, connections):
        result = pg_store.update_match_if(
            "abc", {"status": MatchStatus.PENDING}, {"status": MatchStatus.ACCEPTED}
        )
        assert result is None
        assert connections == []

    def test_lists_empty(self, pg_store, connections):
        assert pg_store.list_issue_reports("abc") == []
        assert pg_store.list_matches_for_user("abc") == []
        assert pg_store.list_traveler_listings_for_user("abc") == []
        assert connections == []

    def test_valid_id_queries(self, pg_store, connections):
        match = make_match()
        connections.rows = [match.model_dump()]

        found = pg_store.get_match(match.id)

        assert found.id == match.id
        sql, params = connections[0].executed[0]
        assert sql == "SELECT * FROM matches WHERE id = %s"
        assert params == (match.id,)
        assert connections[0].committed and connections[0].closed


# ============================================================================
# MATCH INSERT
# ============================================================================

class TestInsertMatch:

    def test_inserted_row_returned(self, pg_store, connections):
        match = make_match()
        connections.rows = [match.model_dump()]

        stored = pg_store.insert_match(match)

        sql, params = connections[0].executed[0]
        assert "ON CONFLICT ON CONSTRAINT uq_matches_listing_pair DO NOTHING" in sql
        assert sql.endswith("RETURNING *")
        assert params[6] == "pending"
        assert stored.id == match.id

    def test_conflict_raises_duplicate(self, pg_store, connections):
        with pytest.raises(DuplicateMatch):
            pg_store.insert_match(make_match())


# ============================================================================
# COMPARE-AND-SET UPDATE
# ============================================================================

class TestUpdateMatchIf:

    def test_sql_and_parameter_order(self, pg_store, connections):
        match = make_match(status=MatchStatus.COMPLETED, destination_pick_up_completed=True)
        connections.rows = [match.model_dump()]

        updated = pg_store.update_match_if(
            match.id,
            {"status": MatchStatus.ACCEPTED, "destination_pick_up_completed": False},
            {"destination_pick_up_completed": True, "status": MatchStatus.COMPLETED},
        )

        sql, params = connections[0].executed[0]
        assert sql == (
            "UPDATE matches SET destination_pick_up_completed = %s, status = %s, "
            "updated_at = NOW() WHERE id = %s AND status = %s "
            "AND destination_pick_up_completed = %s RETURNING *"
        )
        assert params == (True, "completed", match.id, "accepted", False)
        assert updated.status == MatchStatus.COMPLETED

    def test_lost_race_returns_none(self, pg_store, connections):
        result = pg_store.update_match_if(
            new_id(), {"status": MatchStatus.PENDING}, {"status": MatchStatus.ACCEPTED}
        )
        assert result is None
        assert len(connections) == 1

    def test_unknown_column_refused(self, pg_store, connections):
        with pytest.raises(ValueError):
            pg_store.update_match_if(new_id(), {"receiver_id": "x"}, {"status": "accepted"})
        assert connections == []


# ============================================================================
# API OVER POSTGRES
# ============================================================================

class TestApiNotFound:
    """Malformed path ids surface as NOT_FOUND, never as a database error."""

    @pytest.fixture
    def pg_client(self, pg_store, connections, channel, dispatcher):
        return TestClient(create_app(store=pg_store, channel=channel, dispatcher=dispatcher))

    @pytest.fixture
    def headers(self):
        return {"Authorization": f"Bearer {issue_token(new_id(), 'tina@example.com')}"}

    def test_get_match(self, pg_client, headers, connections):
        resp = pg_client.get("/api/v1/matches/abc", headers=headers)
        assert resp.status_code == 404
        assert resp.json()["error"] == "NOT_FOUND"
        assert connections == []

    @pytest.mark.parametrize("path", ["accept", "dropoff-complete", "issues"])
    def test_match_actions(self, pg_client, headers, path):
        method = pg_client.get if path == "issues" else pg_client.patch
        resp = method(f"/api/v1/matches/abc/{path}", headers=headers)
        assert resp.status_code == 404
