"""Database services."""

from .db_manage import DbManageService
from .db_session import DbSessionService
from .db_utils import transaction

__all__ = ["DbManageService", "DbSessionService", "transaction"]
