"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, create_engine

from catalog_grader.runtime.config.config_data import ConfigData
from catalog_grader.runtime.context import get_config


class DbSessionService:
    def __init__(self, engine: Engine | None = None):
        """Initialize the shared database engine and session factory.

        An already built engine may be passed in (tests, CLI); otherwise one is
        created from the active configuration.
        """
        if engine is not None:
            self._engine = engine
            return

        logger.info("Setting up database engine and session factory")
        main_config = get_config()
        db_config = main_config.database

        logger.info("Configuring database engine for environment: {}", main_config.app.environment)
        engine_kwargs: dict = {
            "pool_pre_ping": True,
            "echo": False,
            "connect_args": self._get_connect_args(main_config),
        }
        # SQLite uses a singleton/null pool that rejects the sizing arguments
        if not db_config.is_sqlite:
            engine_kwargs.update(
                {
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_recycle": db_config.pool_recycle,
                }
            )

        logger.info("Initializing database engine for {}", db_config.url.split("@")[-1])
        self._engine = create_engine(db_config.connection_string, **engine_kwargs)

        if main_config.app.environment == "production":
            logger.bind(
                pool_size=db_config.pool_size,
                max_overflow=db_config.max_overflow,
                pool_timeout=db_config.pool_timeout,
                pool_recycle=db_config.pool_recycle,
            ).info("Database engine initialized")

    @property
    def engine(self) -> Engine:
        return self._engine

    def _get_connect_args(self, config: ConfigData) -> dict:
        """Get database-specific connection arguments."""
        connect_args: dict = {}

        if "postgresql" in config.database.url:
            connect_args.update(
                {
                    "application_name": f"catalog_grader_{config.app.environment}",
                    "connect_timeout": 30,
                }
            )

        elif config.database.is_sqlite:
            connect_args.update(
                {
                    "check_same_thread": False,  # sync handlers run in a threadpool
                    "timeout": 20,  # lock timeout
                }
            )

            if config.app.environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for concurrent graders."
                )

        return connect_args

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session that commits on success and rolls back on any error."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.bind(error_type=type(e).__name__, error_message=str(e)).error(
                "Database transaction failed"
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
            logger.bind(error_type=type(e).__name__, error_message=str(e)).error(
                "Database health check failed"
            )
            return False
