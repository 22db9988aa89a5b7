"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from src.authgate.runtime.config.config_data import ConfigData


class DbSessionService:
    def __init__(self, config: ConfigData, engine: Engine | None = None):
        """Initialize the shared database engine and session factory.

        An existing engine may be supplied (tests use in-memory SQLite).
        """
        self._config = config
        if engine is not None:
            self._engine = engine
            return

        db_config = config.database
        logger.info("Configuring database engine for environment: {}", config.app.environment)
        engine_kwargs: dict[str, Any] = {
            "pool_pre_ping": True,  # Validate connections before use
            "echo": db_config.echo,
            "echo_pool": False,
            "connect_args": self._get_connect_args(config),
        }
        if not db_config.is_sqlite:
            engine_kwargs.update(
                {
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_recycle": db_config.pool_recycle,
                }
            )

        self._engine = create_engine(db_config.url, **engine_kwargs)

        if config.app.environment == "production":
            logger.info(
                "Database engine initialized",
                extra={
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_recycle": db_config.pool_recycle,
                },
            )

    @property
    def engine(self) -> Engine:
        return self._engine

    def _get_connect_args(self, config: ConfigData) -> dict:
        """Get database-specific connection arguments."""
        connect_args: dict[str, Any] = {}

        if config.database.url.startswith("postgresql"):
            connect_args.update(
                {
                    # Application name for connection tracking
                    "application_name": f"{config.app.name}_{config.app.environment}",
                    "connect_timeout": 30,
                }
            )

        elif config.database.is_sqlite:
            connect_args.update(
                {
                    "check_same_thread": False,
                    "timeout": 20,  # Lock timeout
                }
            )

            if config.app.environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for concurrent identity writes."
                )

        return connect_args

    def create_all(self) -> None:
        """Create the identity tables if they do not exist."""
        # Table models register themselves with the metadata on import
        import src.authgate.entities  # noqa: F401

        logger.info("Creating identity tables")
        SQLModel.metadata.create_all(self._engine)

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,  # Records are read after commit
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """One transaction: commit on success, roll back on any error."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.debug(
                "Database transaction rolled back: {}: {}", type(e).__name__, e
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except SQLAlchemyError as e:
            logger.error(
                "Database health check failed",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            return False

    def dispose(self) -> None:
        self._engine.dispose()
