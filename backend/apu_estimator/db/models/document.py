from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from apu_estimator.db.base import Base
from apu_estimator.db.models._mixins import TimestampMixin

class StoredDocument(Base, TimestampMixin):
    """One JSON document per key, rewritten in full on every save."""
    __tablename__ = "stored_document"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    payload: Mapped[str] = mapped_column(Text)
