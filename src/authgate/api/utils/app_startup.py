import logging
import sys
from pathlib import Path

from loguru import logger
from sqlalchemy import Engine

from src.authgate.api.http.app_data import ApplicationDependencies
from src.authgate.core.services.auth.audit_sink import AuditSink, LoguruAuditSink
from src.authgate.core.services.auth.authorization import AuthorizationGate
from src.authgate.core.services.auth.identity_resolver import IdentityResolver
from src.authgate.core.services.auth.mode_resolver import resolve_mode
from src.authgate.core.services.auth.provider import TokenVerifier
from src.authgate.core.services.auth.validators import build_validator
from src.authgate.core.services.database.db_session import DbSessionService
from src.authgate.core.services.identity.audit_guid import AuditGuidIssuer
from src.authgate.core.services.identity.record_store import IdentityRecordStore
from src.authgate.runtime.config.config_data import ConfigData
from src.authgate.tools.builtin import register_builtin_tools
from src.authgate.tools.dispatcher import ToolDispatcher
from src.authgate.tools.registry import ToolRegistry


def _is_audit(record) -> bool:
    return bool(record["extra"].get("audit"))


def configure_logging(config: ConfigData, level: str | None = None) -> None:
    cfg = config.logging
    env = config.app.environment
    level = level or cfg.level

    logger.remove()
    logger.configure(extra={"request_id": "-"})

    def _ensure_request_id(record):
        record["extra"].setdefault("request_id", "-")

    log = logger.patch(_ensure_request_id)

    fmt_plain = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "[<cyan>{extra[request_id]}</cyan>] | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )
    is_json_file = cfg.format == "json"
    debug_tracebacks = env != "production"

    # Console: always colorized, human-readable
    log.add(
        sys.stderr,
        level=level,
        format=fmt_plain,
        colorize=True,
        filter=lambda record: not _is_audit(record),
        backtrace=debug_tracebacks,
        diagnose=debug_tracebacks,
    )

    # Audit: written synchronously, and a failed write raises into the gate
    log.add(
        sys.stderr,
        level="INFO",
        format="{message}" if is_json_file else fmt_plain,
        serialize=is_json_file,
        filter=_is_audit,
        catch=False,
    )

    # File: JSON or plain; audit events keep their structured fields in JSON
    if cfg.file:
        path = Path(cfg.file)
        path.parent.mkdir(parents=True, exist_ok=True)
        log.add(
            str(path),
            level=level,
            format="{message}" if is_json_file else fmt_plain,
            serialize=is_json_file,
            rotation=f"{cfg.max_size_mb} MB",
            retention=cfg.backup_count,
            compression="zip",
            enqueue=True,
            backtrace=debug_tracebacks,
            diagnose=debug_tracebacks,
        )

    class InterceptHandler(logging.Handler):
        """Redirect standard 'logging' records to Loguru."""

        def emit(self, record: logging.LogRecord) -> None:
            if record.name == "uvicorn.access":
                return
            try:
                lvl: str | int = logger.level(record.levelname).name
            except ValueError:
                lvl = record.levelno
            logger.opt(depth=2, exception=record.exc_info).bind(
                logger_name=record.name
            ).log(lvl, record.getMessage())

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in list(logging.root.manager.loggerDict.keys()):
        stdlog = logging.getLogger(name)
        stdlog.handlers = []
        stdlog.propagate = True

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.CRITICAL)

    log.info(
        "Logging configured",
        app_level=level,
        app_format=cfg.format,
        app_file=cfg.file,
        environment=env,
    )


def build_application_dependencies(
    config: ConfigData,
    *,
    engine: Engine | None = None,
    audit_sink: AuditSink | None = None,
    verifier: TokenVerifier | None = None,
    issuer: AuditGuidIssuer | None = None,
) -> ApplicationDependencies:
    """Wire the authentication pipeline for the configured mode.

    Raises:
        ConfigurationError: If the auth configuration is unusable.
    """
    mode = resolve_mode(config.auth)

    database_service = DbSessionService(config, engine=engine)
    database_service.create_all()

    identity_store = IdentityRecordStore(
        database_service,
        mode,
        issuer or AuditGuidIssuer(max_attempts=config.auth.audit_id_max_attempts),
    )
    validator = build_validator(mode, config.auth, identity_store, verifier=verifier)
    resolver = IdentityResolver(mode, validator)
    sink = audit_sink or LoguruAuditSink(enabled=config.auth.audit_log_enabled)
    gate = AuthorizationGate(sink)

    registry = register_builtin_tools(ToolRegistry(), identity_store)
    dispatcher = ToolDispatcher(registry, resolver, gate)

    logger.info(
        "Authentication pipeline ready: mode={}, tools={}", mode.value, len(registry)
    )
    return ApplicationDependencies(
        config=config,
        mode=mode,
        database_service=database_service,
        identity_store=identity_store,
        resolver=resolver,
        audit_sink=sink,
        gate=gate,
        registry=registry,
        dispatcher=dispatcher,
    )
