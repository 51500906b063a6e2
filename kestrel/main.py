import os
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import structlog

from .config import settings
from .db import Base, engine
from .errors import install_error_handlers
from .logging import setup_logging, RequestIdMiddleware
from .routes.workers import router as workers_router
from .routes.documents import router as documents_router
from .routes.scanner import router as scanner_router
from .routes.contractors import router as contractors_router
from .routes.equipment import router as equipment_router
from .routes.skills import router as skills_router
from .routes.training import router as training_router
from .routes.health import router as health_router


def create_app(create_tables: Optional[bool] = None) -> FastAPI:
    setup_logging()
    logger = structlog.get_logger("kestrel.startup")
    app = FastAPI(title=settings.app_name)

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    install_error_handlers(app)

    # Routers
    app.include_router(health_router)
    app.include_router(workers_router)
    app.include_router(documents_router)
    app.include_router(scanner_router)
    app.include_router(contractors_router)
    app.include_router(equipment_router)
    app.include_router(skills_router)
    app.include_router(training_router)

    # Metrics
    Instrumentator().instrument(app).expose(app)

    if create_tables is None:
        create_tables = settings.auto_create_db

    @app.on_event("startup")
    def _startup():
        if not create_tables:
            return
        # Ensure local SQLite directory exists
        if settings.database_url.startswith("sqlite:///./"):
            os.makedirs("var", exist_ok=True)
        # Import models so their tables are registered on Base.metadata
        from .models import models  # noqa: F401
        Base.metadata.create_all(bind=engine)
        logger.info("tables_verified", tables=len(Base.metadata.tables))

    return app


app = create_app()
