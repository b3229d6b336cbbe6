"""Shared CLI helpers."""

from rich.console import Console

from catalog_grader.core.services.database import DbSessionService

console = Console()


def get_database_service() -> DbSessionService:
    return DbSessionService()
