"""
Snippetbox: Application Context
===============================

The read-only bundle of shared dependencies (logger, debug flag, snippet
service, template cache). Built once in ``main`` and stored on
``app.state``; handlers receive it through ``Depends(get_application)``.
"""

import logging
import traceback
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from fastapi import Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from jinja2 import Template

from snippetbox.exceptions import SnippetboxError, TemplateCacheError
from snippetbox.services.snippet_service import SnippetService


@dataclass(frozen=True)
class Application:
    logger: logging.Logger
    debug: bool
    snippets: SnippetService
    templates: Mapping[str, Template]

    def template_data(self, **data: Any) -> dict:
        """Defaults every page can rely on, overlaid with ``data``."""
        context = {
            "current_year": datetime.now(timezone.utc).year,
            "form": None,
            "field_errors": {},
            "snippet": None,
            "snippets": [],
        }
        context.update(data)
        return context

    def render(
        self,
        page: str,
        status_code: int = 200,
        data: Optional[dict] = None,
    ) -> HTMLResponse:
        """
        Render ``page`` from the cache.

        The page is rendered to a string before the response is built, so a
        template error surfaces as a 500 instead of a half-written 200.
        """
        template = self.templates.get(page)
        if template is None:
            raise TemplateCacheError(message=f"The template {page} does not exist", template=page)
        body = template.render(**self.template_data(**(data or {})))
        return HTMLResponse(content=body, status_code=status_code)

def get_application(request: Request) -> Application:
    """FastAPI dependency returning the context attached by ``create_app``."""
    return request.app.state.application


def server_error_response(request: Request, exc: Exception) -> PlainTextResponse:
    """
    Log ``exc`` and build the 500 response.

    Our own errors are logged with their context; anything else also gets
    its traceback. The body is the bare status phrase, plus the error and
    traceback when debug is on.
    """
    application: Application = request.app.state.application
    context = exc.context if isinstance(exc, SnippetboxError) else {}
    application.logger.error(
        str(exc),
        exc_info=not isinstance(exc, SnippetboxError),
        extra={
            "method": request.method,
            "uri": str(request.url.path),
            "error_type": type(exc).__name__,
            "context": context,
        },
    )

    body = "Internal Server Error"
    if application.debug:
        trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        body = f"{body}\n\n{exc}\n\n{trace}"
    return PlainTextResponse(body, status_code=500)
