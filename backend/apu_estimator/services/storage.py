"""Durable key -> JSON text storage behind the project store."""
from typing import Callable, Protocol

from sqlalchemy.orm import Session

from apu_estimator.crud.documents import get_document, put_document


class DocumentStorage(Protocol):
    """Storage backend protocol."""

    def load(self, key: str) -> str | None:
        """Return the stored text, or None when the key was never written."""
        ...

    def save(self, key: str, payload: str) -> None:
        """Replace the whole document under key in one write."""
        ...


class SqlDocumentStorage:
    """Documents in the ``stored_document`` table, one row per key."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def load(self, key: str) -> str | None:
        db = self._session_factory()
        try:
            doc = get_document(db, key)
            return doc.payload if doc else None
        finally:
            db.close()

    def save(self, key: str, payload: str) -> None:
        db = self._session_factory()
        try:
            put_document(db, key, payload)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
