from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hub import __version__
from hub.common.logger import get_logger, setup_logger
from hub.core.config import get_settings
from hub.core.errors import HubError, error_payload
from hub.api.routers import content, menus, permissions, roles, user_roles

logger = get_logger("api")


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logger(
        log_dir=settings.log_dir,
        level=settings.log_level,
        file_logging=settings.log_to_file,
    )

    app = FastAPI(
        title=settings.app_name,
        description="Role-based access control for the analytics dashboard",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HubError)
    async def hub_error_handler(request: Request, exc: HubError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.debug(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_payload(exc.code, exc.message, exc.details),
        )

    # Include routers
    app.include_router(roles.router, prefix="/api")
    app.include_router(permissions.router, prefix="/api")
    app.include_router(user_roles.router, prefix="/api")
    app.include_router(menus.router, prefix="/api")
    app.include_router(content.router, prefix="/api")

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()
