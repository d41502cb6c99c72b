# identity_service/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from identity_service.core.config import settings
from identity_service.core.logging import configure_logging
from identity_service.db.base import Base
from identity_service.db.session import engine
from identity_service.auth import models  # noqa: F401  (registers tables on Base)
from identity_service.auth.routes.register_routes import router as register_router
from identity_service.auth.routes.login_routes import router as login_router
from identity_service.auth.routes.token_routes import router as token_router
from identity_service.auth.routes.password_routes import router as password_router
from identity_service.auth.routes.contact_routes import router as contact_router

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Database initialization
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    # For quick local development. In production, manage schema with Alembic.
    Base.metadata.create_all(bind=engine)
    logger.info(f"Service started in {settings.ENVIRONMENT} environment")
    yield


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Identity and credential lifecycle service",
        lifespan=lifespan,
    )

    # -----------------------------------------------------------------------
    # CORS middleware
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    app.include_router(register_router)
    app.include_router(login_router)
    app.include_router(token_router)
    app.include_router(password_router)
    app.include_router(contact_router)

    # -----------------------------------------------------------------------
    # Health check
    # -----------------------------------------------------------------------
    @app.get("/health", tags=["health"])
    def health_check():
        """
        Simple health check endpoint.
        Returns {"status": "ok"} when the service is running.
        """
        return {"status": "ok"}

    return app


app = create_app()
