from pathlib import Path
from sqlalchemy.engine import make_url
from apu_estimator.core.config import settings

def ensure_dirs():
    Path(settings.EXPORT_DIR).mkdir(parents=True, exist_ok=True)
    # sqlite won't create the directory of its database file
    url = make_url(settings.DATABASE_URL)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
