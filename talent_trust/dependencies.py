"""
Talent Trust - Shared collaborators

Singleton store, audit sink and service (initialized on first use). FastAPI
routes receive them through Depends so tests can swap in fakes with
app.dependency_overrides.
"""
from typing import Optional

from talent_trust.db.repositories import Neo4jAuditSink, Neo4jTalentStore
from talent_trust.trust.service import TrustScoreService
from talent_trust.trust.store import AuditSink, TalentStore

_store: Optional[TalentStore] = None
_audit: Optional[AuditSink] = None


def get_talent_store() -> TalentStore:
    global _store
    if _store is None:
        _store = Neo4jTalentStore()
    return _store


def get_audit_sink() -> AuditSink:
    global _audit
    if _audit is None:
        _audit = Neo4jAuditSink()
    return _audit


def build_trust_service(store: TalentStore = None, audit: AuditSink = None) -> TrustScoreService:
    return TrustScoreService(store or get_talent_store(), audit or get_audit_sink())


def get_trust_service() -> TrustScoreService:
    return build_trust_service()
