from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from apu_estimator.core.config import settings
from apu_estimator.core.logging import configure_logging, logger
from apu_estimator.api.router import api_router
from apu_estimator.db.session import engine, SessionLocal
from apu_estimator.db.base import Base
from apu_estimator.db import models  # noqa: F401  (registers tables on Base.metadata)
from apu_estimator.services.files import ensure_dirs
from apu_estimator.services.seed import seed_demo
from apu_estimator.services.storage import DocumentStorage, SqlDocumentStorage
from apu_estimator.services.store import init_store, reset_store

def create_app(storage: DocumentStorage | None = None) -> FastAPI:
    configure_logging(settings.ENV, settings.LOG_LEVEL)
    app = FastAPI(title="APU Estimator", version="0.1.0")

    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.on_event("startup")
    def _startup():
        ensure_dirs()
        doc_storage = storage
        if doc_storage is None:
            # outside dev/sqlite the schema comes from alembic
            if settings.ENV == "dev" or engine.dialect.name == "sqlite":
                Base.metadata.create_all(bind=engine)
            doc_storage = SqlDocumentStorage(SessionLocal)
        store = init_store(doc_storage)
        if settings.SEED_DEMO and settings.ENV == "dev":
            seed_demo(store)

    @app.on_event("shutdown")
    def _shutdown():
        reset_store()

    app.include_router(api_router)
    logger.info("app_started", env=settings.ENV)
    return app

app = create_app()
