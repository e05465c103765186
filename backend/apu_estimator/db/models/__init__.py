# import all models for Alembic
from apu_estimator.db.models.document import StoredDocument
