import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import api_router
from app.core.config import Settings, get_settings
from app.core.exceptions import register_exception_handlers
from app.core.logging import setup_logging
from app.middleware.request_context import RequestContextMiddleware
from app.services.auth_service import ensure_admin_user
from app.store import EntityStore, build_store

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, store: EntityStore | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(logging.DEBUG if settings.DEBUG else logging.INFO)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store = store or build_store(settings)
        app.state.store.create_schema()
        ensure_admin_user(app.state.store, settings)
        try:
            yield
        finally:
            app.state.store.close()
            logger.info("Entity store closed")

    fastapi_app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)
    fastapi_app.state.settings = settings
    fastapi_app.include_router(api_router, prefix=settings.API_V1_PREFIX)
    fastapi_app.add_middleware(RequestContextMiddleware)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(fastapi_app)
    return fastapi_app


app = create_app()
