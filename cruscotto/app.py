import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware

from cruscotto.core.config import get_settings
from cruscotto.core.logs import configure_logging
from cruscotto.domain.parsing import format_currency, format_date, format_days
from cruscotto.repositories.json_storage import StorageError
from cruscotto.routers import api as api_router
from cruscotto.routers import pages as pages_router

logger = logging.getLogger(__name__)

BASE = os.path.dirname(__file__)
WEB = os.path.join(BASE, "web")
TEMPLATES = os.path.join(BASE, "templates")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (CSP, anti clickjacking, referrer policy)."""

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; img-src 'self' data:; style-src 'self' 'unsafe-inline'",
        )
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        return response


class CachedStaticFiles(StaticFiles):
    def set_headers(self, scope, resp, path, stat_result):
        resp.headers["Cache-Control"] = "public, max-age=3600"


def build_templates() -> Jinja2Templates:
    templates = Jinja2Templates(directory=TEMPLATES)
    templates.env.filters["currency"] = format_currency
    templates.env.filters["days"] = format_days
    templates.env.filters["date_it"] = format_date
    return templates


def _storage_error(request: Request, exc: StorageError):
    logger.error("Data file error on %s: %s", request.url.path, exc)
    if request.url.path.startswith("/api/"):
        return JSONResponse({"detail": str(exc)}, status_code=500)
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "error.html",
        {"message": str(exc), "sections": pages_router.SECTIONS, "active": ""},
        status_code=500,
    )


def create_app() -> FastAPI:
    """Factory compatible with uvicorn --factory; reads settings at call time."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Cruscotto Progetti")
    app.mount("/static", CachedStaticFiles(directory=WEB), name="static")
    app.state.templates = build_templates()

    if settings.app_env != "prod":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[
                "http://localhost:8000",
                "http://127.0.0.1:8000",
                "http://localhost:5173",
                "http://127.0.0.1:5173",
            ],
            allow_methods=["GET"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_exception_handler(StorageError, _storage_error)

    app.include_router(api_router.router)
    app.include_router(pages_router.router)
    logger.info("Dashboard ready (data dir: %s)", settings.data_dir)
    return app


app = create_app()
