import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Receive, Scope, Send

from webar import __version__
from webar.api import create_api_router, create_public_router
from webar.core.config import Settings, get_settings, resolve_path
from webar.core.container import ApplicationContainer
from webar.core.logging import configure_logging

logger = logging.getLogger(__name__)


class UploadSizeLimitMiddleware:
    """Rejects uploads whose declared Content-Length exceeds the ceiling before the body is read."""

    def __init__(self, app: ASGIApp, *, path: str, max_size: int) -> None:
        self.app = app
        self.path = path
        self.max_size = max_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] == "POST" and scope["path"] == self.path:
            for key, value in scope["headers"]:
                if key == b"content-length" and value.isdigit() and int(value) > self.max_size:
                    response = JSONResponse(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        content={"error": "Upload exceeds the allowed size"},
                    )
                    await response(scope, receive, send)
                    return
        await self.app(scope, receive, send)


def _error(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        location = ".".join(str(part) for part in errors[0]["loc"]) if errors else "request"
        return _error(status.HTTP_400_BAD_REQUEST, f"Invalid {location}")

    @app.exception_handler(Exception)
    async def unhandled_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = "Upload failed" if request.url.path == "/upload" else "Internal server error"
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    container = ApplicationContainer.from_settings(settings)
    static_dir = resolve_path(settings.static_dir)
    templates = Jinja2Templates(directory=str(resolve_path(settings.template_dir)))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        container.init_infrastructure()
        logger.info("Serving uploads from %s", settings.upload_root)
        yield
        await container.shutdown()

    app = FastAPI(
        title=settings.project_name,
        description="Upload 3D models and share them through a viewer link",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container
    app.state.static_version = __version__

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Range", "Content-Length", "Accept-Ranges", "X-Optimized"],
    )
    app.add_middleware(UploadSizeLimitMiddleware, path="/upload", max_size=settings.upload.max_request_size)
    register_exception_handlers(app)

    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    app.include_router(create_public_router())
    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    async def homepage(request: Request):
        return templates.TemplateResponse(request, "index.html", {"max_props": settings.upload.max_props})

    @app.get("/view/{asset_id}", response_class=HTMLResponse, name="view_asset", include_in_schema=False)
    async def view_asset(request: Request, asset_id: str):
        return templates.TemplateResponse(
            request,
            "viewer.html",
            {"asset_id": asset_id, "api_prefix": settings.api_prefix},
        )

    return app


app = create_app()
