from dataclasses import dataclass

from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.core.services.auth.audit_sink import AuditSink
from src.authgate.core.services.auth.authorization import AuthorizationGate
from src.authgate.core.services.auth.identity_resolver import IdentityResolver
from src.authgate.core.services.database.db_session import DbSessionService
from src.authgate.core.services.identity.record_store import IdentityRecordStore
from src.authgate.runtime.config.config_data import ConfigData
from src.authgate.tools.dispatcher import ToolDispatcher
from src.authgate.tools.registry import ToolRegistry


@dataclass
class ApplicationDependencies:
    config: ConfigData
    mode: AuthenticationMode
    database_service: DbSessionService
    identity_store: IdentityRecordStore
    resolver: IdentityResolver
    audit_sink: AuditSink
    gate: AuthorizationGate
    registry: ToolRegistry
    dispatcher: ToolDispatcher
