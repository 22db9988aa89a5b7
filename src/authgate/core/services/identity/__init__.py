from .audit_guid import AuditGuidIssuer
from .record_store import IdentityRecordStore

__all__ = ["AuditGuidIssuer", "IdentityRecordStore"]
