"""
Shared fixtures: in-memory store and audit sink, a service over them, and
an API client wired to the same fakes through dependency overrides.
"""
import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_FORMAT", "console")

from typing import Dict, List, Optional

import pytest

from talent_trust.trust.store import AuditEntry, AuditSink, TalentStore, TrustScoreRecord


class StoreError(Exception):
    pass


class FakeTalentStore(TalentStore):
    """
    Dict-backed TalentStore.

    `calls` records every talent/score/signal method invoked (role lookups
    are kept apart in `role_lookups`). Any method named in `failing` raises.
    """

    def __init__(self):
        self.signals: Dict[str, dict] = {}
        self.scores: Dict[str, TrustScoreRecord] = {}
        self.roles: Dict[str, str] = {}
        self.calls: List[str] = []
        self.role_lookups: List[str] = []
        self.failing = set()

    def add_talent(self, talent_id: str, **signals):
        self.signals[talent_id] = signals

    def _call(self, name: str):
        self.calls.append(name)
        if name in self.failing:
            raise StoreError(f"{name} unavailable")

    def _signal(self, name: str, talent_id: str, key: str):
        self._call(name)
        return self.signals.get(talent_id, {}).get(key)

    def talent_exists(self, talent_id):
        self._call("talent_exists")
        return talent_id in self.signals

    def list_talent_ids(self):
        self._call("list_talent_ids")
        return sorted(self.signals)

    def get_trust_score(self, talent_id) -> Optional[TrustScoreRecord]:
        self._call("get_trust_score")
        return self.scores.get(talent_id)

    def save_trust_score(self, record):
        self._call("save_trust_score")
        self.scores[record.talent_id] = record

    def count_scores_below(self, threshold):
        self._call("count_scores_below")
        return sum(1 for r in self.scores.values() if r.score < threshold)

    def count_completed_projects(self, talent_id):
        return self._signal("count_completed_projects", talent_id, "completed")

    def count_admin_complaints(self, talent_id):
        return self._signal("count_admin_complaints", talent_id, "complaints")

    def count_missed_deadlines(self, talent_id):
        return self._signal("count_missed_deadlines", talent_id, "missed")

    def count_positive_ratings(self, talent_id):
        return self._signal("count_positive_ratings", talent_id, "positive")

    def avg_response_time_hours(self, talent_id):
        return self._signal("avg_response_time_hours", talent_id, "response_time")

    def repeat_client_count(self, talent_id):
        return self._signal("repeat_client_count", talent_id, "repeat")

    def get_user_role(self, user_id):
        self.role_lookups.append(user_id)
        return self.roles.get(user_id)


class FakeAuditSink(AuditSink):

    def __init__(self):
        self.entries: List[AuditEntry] = []
        self.fail = False

    def append(self, entry):
        if self.fail:
            raise StoreError("audit log unavailable")
        self.entries.append(entry)


@pytest.fixture
def store():
    s = FakeTalentStore()
    s.add_talent("talent-1", completed=4, complaints=1, missed=0, positive=3,
                 response_time=1.5, repeat=2)
    s.add_talent("talent-2", completed=0, complaints=3, missed=2, positive=0,
                 response_time=30.0, repeat=0)
    s.roles["admin-1"] = "admin"
    s.roles["client-1"] = "client"
    return s


@pytest.fixture
def audit():
    return FakeAuditSink()


@pytest.fixture
def service(store, audit):
    from talent_trust.trust.service import TrustScoreService
    return TrustScoreService(store, audit)


@pytest.fixture
def app(store, service):
    from talent_trust.dependencies import get_talent_store, get_trust_service
    from talent_trust.main import app

    app.dependency_overrides[get_talent_store] = lambda: store
    app.dependency_overrides[get_trust_service] = lambda: service
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient
    return TestClient(app)


def bearer(user_id: str) -> dict:
    from talent_trust.auth import create_access_token
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def admin_headers():
    return bearer("admin-1")


@pytest.fixture
def client_headers():
    return bearer("client-1")


@pytest.fixture
def headers_for():
    return bearer
