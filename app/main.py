from contextlib import asynccontextmanager
from inspect import isawaitable
from typing import Optional, cast

import httpx
from fastapi import FastAPI, APIRouter, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, RedirectResponse

from app.core.settings import settings
from app.core.logger import logger
from app.v1_0.v1_router import v1_router
from app.app_containers import ApplicationContainer
API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = cast(ApplicationContainer, app.state.container)
    ret = container.init_resources()
    if isawaitable(ret):
        await ret
    logger.info(f"{settings.APP_NAME} starting in {settings.APP_ENV} backend={settings.BACKEND_API_URL}")
    try:
        yield
    finally:
        logger.info(f"{settings.APP_NAME} shutdown")
        shut = getattr(container, "shutdown_resources", None)
        if callable(shut):
            r = shut()
            if isawaitable(r):
                await r


def create_app(container: Optional[ApplicationContainer] = None) -> FastAPI:
    container = container or ApplicationContainer()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        openapi_url=f"{API_PREFIX}/openapi.json",
        docs_url=f"{API_PREFIX}/docs",
        redoc_url=f"{API_PREFIX}/redoc",
        lifespan=lifespan,
    )

    app.state.container = container

    origins = settings.CORS_ORIGINS_LIST
    allow_credentials = True

    if "*" in origins:
        # wildcard + credenciales no legal en CORS
        allow_credentials = False

    logger.info("CORS origins=%s allow_credentials=%s", origins, allow_credentials)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    async def render_error(request: Request, exc: Exception) -> HTMLResponse:
        logger.error("[App] %s %s failed: %s", request.method, request.url.path, exc, exc_info=True)
        renderer = container.api_container.console_renderer()
        status = 422 if isinstance(exc, RequestValidationError) else 500
        return HTMLResponse(renderer.error_page(str(exc) or "Unexpected error"), status_code=status)

    for exc_type in (RequestValidationError, ValueError, RuntimeError, httpx.HTTPError, Exception):
        app.add_exception_handler(exc_type, render_error)

    base_router = APIRouter(prefix=API_PREFIX)

    @base_router.get("/", tags=["health"])
    @base_router.get("/ready", tags=["health"])
    async def ready():
        return {
            "message": "ready",
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "env": settings.APP_ENV,
            "backend": settings.BACKEND_API_URL,
        }

    @app.get("/", include_in_schema=False)
    async def index():
        return RedirectResponse("/users?page=0")

    app.include_router(base_router)
    app.include_router(v1_router)

    return app


app = create_app()
