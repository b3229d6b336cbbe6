"""Schema management."""

from loguru import logger
from sqlalchemy import Engine
from sqlmodel import SQLModel


class DbManageService:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_all(self) -> None:
        """Create all database tables that do not exist yet."""
        import catalog_grader.entities  # noqa: F401  registers every table

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def drop_all(self) -> None:
        import catalog_grader.entities  # noqa: F401

        SQLModel.metadata.drop_all(self._engine)
        logger.warning("All database tables dropped.")
