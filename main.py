import os
import sys
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Ensure local imports resolve
sys.path.append(os.path.dirname(__file__))

# Core
from core.config import settings
from core.config_validator import validate_config_on_startup, validate_required_config
from core.errors import CascadeStepFailed, MenuApiError, RateLimited
from core.logging_config import logger
from core.permissions import build_default_matrix

# -------------------------------------------------
# Routers
# -------------------------------------------------
from routers.auth import router as auth_router
from routers.businesses import router as businesses_router
from routers.categories import router as categories_router
from routers.items import router as items_router
from routers.food_types import router as food_types_router
from routers.public import router as public_router
from routers.admin import router as admin_router
from routers.health import router as health_router


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="MenuX API - Supabase-powered multi-tenant digital menus",
    )

    # Built once; handlers receive it through dependencies.services
    app.state.permission_matrix = build_default_matrix()

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Startup
    # -------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info(f"🚀 Starting {settings.PROJECT_NAME} ({settings.ENV})")

        if settings.ENV == "production":
            validate_config_on_startup()
        else:
            for name in validate_required_config():
                logger.warning(f"{name} is not set, Supabase-backed routes will fail")

        logger.info(f"CORS origins: {settings.BACKEND_CORS_ORIGINS}")
        for route in app.routes:
            # Mounts and included-router wrappers may carry no path
            path = getattr(route, "path", None)
            if path is None:
                continue
            methods = ",".join(sorted(getattr(route, "methods", None) or []))
            logger.debug(f"{methods:10s} {path}")

    # -------------------------------------------------
    # Error handling
    # -------------------------------------------------
    @app.exception_handler(CascadeStepFailed)
    async def handle_cascade(request: Request, exc: CascadeStepFailed):
        # Step and resource stay in the log; the client gets the generic detail
        logger.error(f"User deletion aborted at {request.url}: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "detail": exc.detail},
        )

    @app.exception_handler(MenuApiError)
    async def handle_domain(request: Request, exc: MenuApiError):
        if exc.status_code in (401, 403) or exc.status_code >= 500:
            logger.warning(f"HTTP {exc.status_code} at {request.url} - {exc.detail}")
        headers = exc.headers if isinstance(exc, RateLimited) else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "detail": exc.detail},
            headers=headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 500):
            logger.warning(
                f"HTTP {exc.status_code} at {request.url} - {exc.detail}"
            )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------

    # Auth
    app.include_router(auth_router)

    # Menu data
    app.include_router(businesses_router)
    app.include_router(categories_router)
    app.include_router(items_router)
    app.include_router(food_types_router)

    # Public menu (no auth)
    app.include_router(public_router)

    # Admin
    app.include_router(admin_router)

    # Health
    app.include_router(health_router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {"service": settings.PROJECT_NAME, "docs": "/docs"}

    return app


# Create the global FastAPI instance
app = create_app()
