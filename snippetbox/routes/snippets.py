"""
Snippetbox: Snippet Route Handlers
==================================

What:  Home page (latest snippets), snippet view, and the create form.
How:   Handlers stay thin. They pull the ``Application`` context from
       ``Depends``, call ``SnippetService``, and render through the template
       cache. Errors from the service propagate to the global handlers in
       ``main`` (``NotFoundError`` → 404, ``DatabaseError`` → 500).

Create flow:
    GET  /snippet/create  → empty form
    POST /snippet/create  → invalid: same form, field errors, 400, nothing stored
                            valid:   insert, 303 to /snippet/view/{id}
"""

import logging

from fastapi import APIRouter, Depends, Form
from fastapi.responses import HTMLResponse, RedirectResponse

from snippetbox.application import Application, get_application
from snippetbox.exceptions import NotFoundError, ValidationError
from snippetbox.models.snippet import MAX_SNIPPET_ID
from snippetbox.schemas.snippet import SnippetCreateForm, validate_create_form

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Snippets"])


@router.get("/", response_class=HTMLResponse, summary="Latest snippets")
async def home(application: Application = Depends(get_application)) -> HTMLResponse:
    snippets = await application.snippets.latest()
    return application.render("home.html", data={"snippets": snippets})


@router.get("/snippet/view/{snippet_id}", response_class=HTMLResponse, summary="View a snippet")
async def snippet_view(
    snippet_id: str,
    application: Application = Depends(get_application),
) -> HTMLResponse:
    """
    Show one snippet.

    ``snippet_id`` is taken as a string and parsed here so that anything
    that isn't a valid snippet id (a positive integer within the column
    range) is a plain 404, not a 422.
    """
    try:
        parsed_id = int(snippet_id)
    except ValueError:
        parsed_id = 0
    if not 1 <= parsed_id <= MAX_SNIPPET_ID:
        raise NotFoundError(resource="snippet", resource_id=snippet_id)

    snippet = await application.snippets.get(parsed_id)
    return application.render("view.html", data={"snippet": snippet})


@router.get("/snippet/create", response_class=HTMLResponse, summary="New snippet form")
async def snippet_create(application: Application = Depends(get_application)) -> HTMLResponse:
    form = SnippetCreateForm.model_construct()
    return application.render("create.html", data={"form": form})


@router.post("/snippet/create", summary="Create a snippet")
async def snippet_create_post(
    title: str = Form(default=""),
    content: str = Form(default=""),
    expires: str = Form(default=""),
    application: Application = Depends(get_application),
):
    values = {"title": title, "content": content, "expires": expires}
    try:
        form = validate_create_form(values)
    except ValidationError as e:
        logger.debug("Create form rejected", extra={"fields": sorted(e.field_errors)})
        return application.render(
            "create.html",
            status_code=400,
            data={
                "form": SnippetCreateForm.model_construct(**values),
                "field_errors": e.field_errors,
            },
        )

    snippet_id = await application.snippets.insert(form.title, form.content, form.expires_delta)
    logger.info("Snippet created", extra={"snippet_id": snippet_id})
    return RedirectResponse(url=f"/snippet/view/{snippet_id}", status_code=303)
