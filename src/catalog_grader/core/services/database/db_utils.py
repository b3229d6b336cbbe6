"""Unit-of-work helper shared by services that write several rows."""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlmodel import Session


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """Commit everything done in the block, or nothing.

    Any exception rolls the session back and propagates unchanged.
    """
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.bind(error_type=type(e).__name__).warning("Transaction rolled back: {}", e)
        raise
