"""
Tests for the Neo4j store against a scripted session: query routing,
parameter passing and row mapping. No database is needed.
"""
import json
from contextlib import contextmanager

import pytest

from talent_trust.db.repositories import Neo4jAuditSink, Neo4jTalentStore
from talent_trust.trust.engine import TrustFactors
from talent_trust.trust.store import AuditEntry, TrustScoreRecord


class FakeRecord:

    def __init__(self, row):
        self._row = row

    def data(self):
        return dict(self._row)

    def __getitem__(self, key):
        return self._row[key]


class FakeResult:

    def __init__(self, rows):
        self._rows = rows

    def single(self):
        return FakeRecord(self._rows[0]) if self._rows else None

    def __iter__(self):
        return iter(FakeRecord(r) for r in self._rows)


class FakeSession:
    """Answers each query with the rows queued for the first matching marker."""

    def __init__(self, answers):
        self.answers = answers
        self.queries = []

    def run(self, query, **params):
        self.queries.append((query, params))
        for marker, rows in self.answers.items():
            if marker in query:
                return FakeResult(rows)
        return FakeResult([])


@pytest.fixture
def session():
    return FakeSession({})


@pytest.fixture
def factory(session):
    @contextmanager
    def _factory():
        yield session
    return _factory


class TestNeo4jTalentStore:

    def test_talent_exists(self, session, factory):
        session.answers["MATCH (t:Talent {id: $talent_id}) RETURN count(t)"] = [{"n": 1}]
        assert Neo4jTalentStore(factory).talent_exists("talent-1") is True
        assert session.queries[0][1] == {"talent_id": "talent-1"}

    def test_list_talent_ids(self, session, factory):
        session.answers["RETURN t.id AS id ORDER BY"] = [{"id": "a"}, {"id": "b"}]
        assert Neo4jTalentStore(factory).list_talent_ids() == ["a", "b"]

    def test_unscored_talent_has_no_record(self, session, factory):
        session.answers["t.trust_score AS score"] = [
            {"score": None, "factors": None, "updated_at": None}
        ]
        assert Neo4jTalentStore(factory).get_trust_score("talent-1") is None

    def test_reads_persisted_record(self, session, factory):
        factors = TrustFactors(completed_projects=4, response_time=1.5, client_retention=2)
        session.answers["t.trust_score AS score"] = [{
            "score": 80,
            "factors": json.dumps(factors.to_dict()),
            "updated_at": "2026-01-01T00:00:00+00:00",
        }]
        record = Neo4jTalentStore(factory).get_trust_score("talent-1")
        assert record.score == 80.0
        assert record.factors == factors
        assert record.updated_at == "2026-01-01T00:00:00+00:00"

    def test_save_writes_all_three_fields(self, session, factory):
        session.answers["SET t.trust_score"] = [{"id": "talent-1"}]
        factors = TrustFactors(positive_ratings=2, defaulted=["response_time"])
        Neo4jTalentStore(factory).save_trust_score(
            TrustScoreRecord("talent-1", 56.0, factors, "2026-01-01T00:00:00+00:00")
        )
        params = session.queries[0][1]
        assert params["score"] == 56.0
        assert params["updated_at"] == "2026-01-01T00:00:00+00:00"
        assert json.loads(params["factors"])["defaulted"] == ["responseTime"]

    def test_save_for_missing_talent_raises(self, factory):
        with pytest.raises(LookupError):
            Neo4jTalentStore(factory).save_trust_score(
                TrustScoreRecord("ghost", 50.0, TrustFactors(), "2026-01-01T00:00:00+00:00")
            )

    def test_complaints_count_flag_actions(self, session, factory):
        session.answers["MATCH (a:AuditLog"] = [{"n": 3}]
        assert Neo4jTalentStore(factory).count_admin_complaints("talent-1") == 3
        assert session.queries[0][1]["action"] == "flag_talent"

    def test_positive_ratings_use_four_star_minimum(self, session, factory):
        session.answers["MATCH (r:Review"] = [{"n": 5}]
        assert Neo4jTalentStore(factory).count_positive_ratings("talent-1") == 5
        assert session.queries[0][1]["min_rating"] == 4

    def test_missing_response_time_is_none(self, session, factory):
        session.answers["first_response_at"] = [{"value": None}]
        assert Neo4jTalentStore(factory).avg_response_time_hours("talent-1") is None

    def test_response_time_is_float(self, session, factory):
        session.answers["first_response_at"] = [{"value": 3}]
        assert Neo4jTalentStore(factory).avg_response_time_hours("talent-1") == 3.0

    def test_repeat_clients(self, session, factory):
        session.answers["engagements > 1"] = [{"value": 2}]
        assert Neo4jTalentStore(factory).repeat_client_count("talent-1") == 2

    def test_user_role(self, session, factory):
        session.answers["u.user_role AS role"] = [{"role": "admin"}]
        store = Neo4jTalentStore(factory)
        assert store.get_user_role("admin-1") == "admin"
        session.answers.clear()
        assert store.get_user_role("nobody") is None

    def test_count_scores_below(self, session, factory):
        session.answers["t.trust_score < $threshold"] = [{"n": 7}]
        assert Neo4jTalentStore(factory).count_scores_below(40) == 7
        assert session.queries[0][1]["threshold"] == 40


class TestNeo4jAuditSink:

    def test_append_serializes_details(self, session, factory):
        Neo4jAuditSink(factory).append(AuditEntry(
            admin_id="admin-1",
            action="update_trust_score",
            entity_type="talent_profiles",
            entity_id="talent-1",
            details={"trust_score": 94.0},
        ))
        query, params = session.queries[0]
        assert "CREATE (a:AuditLog" in query
        assert params["entity_id"] == "talent-1"
        assert json.loads(params["details"]) == {"trust_score": 94.0}
