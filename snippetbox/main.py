"""
Snippetbox: Application Entry Point
===================================

What:  Parses arguments, configures logging, opens the connection pool,
       builds the template cache, assembles the ``Application`` context and
       runs the HTTP server.
Who:   ``snippetbox`` console script and ``python -m snippetbox``.

Startup sequence:
    1. Parse command line into ``Settings`` (bad flags exit 2)
    2. Configure JSON logging on stdout
    3. Open the database pool and ping it (failure: log, exit 1)
    4. Build the template cache (failure: log, exit 1)
    5. Create the FastAPI app and serve it with uvicorn

The listener is only opened in step 5, so a startup failure never leaves a
half-working server behind. The pool is disposed however serving ends.

Exception Handlers:
    ValidationError     → 400 Bad Request
    NotFoundError       → 404 Not Found
    SnippetboxError     → 500 Internal Server Error (DatabaseError and friends)
    Exception           → 500 Internal Server Error (converted by the access
                          log middleware; the handler here covers failures
                          outside it)
Bodies are plain-text status phrases. Details go to the log; in debug mode
the 500 body also carries the error and its traceback.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from pythonjsonlogger.json import JsonFormatter
from starlette.exceptions import HTTPException as StarletteHTTPException

from snippetbox import __version__
from snippetbox.application import Application, server_error_response
from snippetbox.config import PACKAGE_ROOT, Settings, parse_args
from snippetbox.database import open_db
from snippetbox.exceptions import (
    DatabaseConnectionError,
    NotFoundError,
    SnippetboxError,
    TemplateCacheError,
    ValidationError,
)
from snippetbox.middleware.logging import RequestLoggingMiddleware
from snippetbox.middleware.secure_headers import SecureHeadersMiddleware
from snippetbox.routes import health, snippets
from snippetbox.services.snippet_service import SnippetService
from snippetbox.templating import new_template_cache

logger = logging.getLogger("snippetbox")

DEFAULT_STATIC_DIR = PACKAGE_ROOT / "ui" / "static"


# ══════════════════════════════════════════════════════════════════════════
# Structured Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(debug: bool = False) -> None:
    """
    Configure JSON logging on stdout for the whole process.

    Each record becomes one JSON object with ``time``, ``level``, ``name``
    and ``msg`` plus whatever was passed in ``extra=``. Debug mode lowers
    the level to DEBUG and adds the source location of every record.
    """
    log_format = "%(asctime)s %(levelname)s %(name)s %(message)s"
    if debug:
        log_format += " %(pathname)s %(lineno)d %(funcName)s"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        JsonFormatter(
            log_format,
            rename_fields={"asctime": "time", "levelname": "level", "message": "msg"},
        )
    )

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        handlers=[handler],
        force=True,
    )

    # Our own access log replaces uvicorn's.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    # SQL statements are logged at INFO; only show them when debugging.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if debug else logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """Map exception types to plain-text responses with the right status code."""

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Unknown routes (404) and wrong methods (405, keeps the Allow header).
        return PlainTextResponse(
            str(exc.detail),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return PlainTextResponse("Bad Request", status_code=400)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        request.app.state.application.logger.warning(
            "Validation error: %s", exc.message, extra={"context": exc.context}
        )
        return PlainTextResponse("Bad Request", status_code=400)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return PlainTextResponse("Not Found", status_code=404)

    @app.exception_handler(SnippetboxError)
    async def handle_app_error(request: Request, exc: SnippetboxError):
        return server_error_response(request, exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        return server_error_response(request, exc)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(application: Application, static_dir: Optional[Path] = DEFAULT_STATIC_DIR) -> FastAPI:
    """
    Assemble the FastAPI app around an already-built ``Application``.

    The context is attached to ``app.state`` and reaches handlers through
    ``Depends(get_application)``; nothing here reads global state, so tests
    can build as many apps as they like.
    """
    app = FastAPI(
        title="Snippetbox",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.application = application

    # Last added runs first. Secure headers wrap the access log, which turns
    # unexpected exceptions into 500s, so those responses get headers too.
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecureHeadersMiddleware)

    register_exception_handlers(app)

    app.include_router(snippets.router)
    app.include_router(health.router)
    if static_dir is not None:
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    return app


# ══════════════════════════════════════════════════════════════════════════
# Server
# ══════════════════════════════════════════════════════════════════════════

async def serve(settings: Settings) -> int:
    """
    Open resources, run the server until it stops, and return the exit status.

    The pool is created on the same event loop uvicorn runs on; async
    drivers bind their connections to the loop that opened them.
    """
    try:
        engine = await open_db(settings.dsn, **settings.engine_options())
    except DatabaseConnectionError as e:
        logger.error("unable to connect to database", extra=e.context)
        return 1
    logger.info("database connection pool established")

    snippet_service = SnippetService(engine)
    try:
        try:
            templates = new_template_cache(settings.template_dir)
        except TemplateCacheError as e:
            logger.error("unable to create template cache", extra={"error": e.message, **e.context})
            return 1

        application = Application(
            logger=logger,
            debug=settings.debug,
            snippets=snippet_service,
            templates=templates,
        )
        app = create_app(application, static_dir=settings.static_dir)

        config = uvicorn.Config(
            app,
            host=settings.host,
            port=settings.port,
            log_config=None,
            access_log=False,
        )
        server = uvicorn.Server(config)

        logger.info("starting server", extra={"addr": settings.addr})
        await server.serve()
        if not server.started:
            logger.error("server failed to start", extra={"addr": settings.addr})
            return 1
        return 0
    finally:
        await snippet_service.close()
        logger.info("database connection pool closed")


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = parse_args(argv)
    setup_logging(settings.debug)
    try:
        return asyncio.run(serve(settings))
    except KeyboardInterrupt:
        return 0
