"""
Snippetbox: Exception Hierarchy
===============================

What:  Application-specific exceptions for each failure class.
Why:   Handlers classify errors by type (not-found vs. validation vs. store
       failure) before choosing the client-visible response.
How:   Each exception carries a message and an optional context dict.
       ``context`` is for server-side logs only and never reaches a client.

Exception Hierarchy:
    SnippetboxError (base)
    ├── ValidationError             → 400 Bad Request (form re-rendered)
    ├── NotFoundError               → 404 Not Found
    ├── DatabaseError               → 500 Internal Server Error
    │   └── DatabaseConnectionError → startup-fatal (exit 1)
    └── TemplateCacheError          → startup-fatal (exit 1)
"""

from typing import Any, Dict, Optional


class SnippetboxError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Human-readable description.
        context:  Additional debug info, logged but not returned to clients.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SnippetboxError):
    """
    Raised when submitted form input fails validation.

    ``field_errors`` maps a form field name to the message shown next to
    that field when the form is re-rendered.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.field_errors = dict(field_errors or {})
        ctx = context or {}
        if self.field_errors:
            ctx["fields"] = sorted(self.field_errors)
        super().__init__(message=message, context=ctx)


class NotFoundError(SnippetboxError):
    """
    Raised when a requested record does not exist or has expired.

    SQLAlchemy returns None for a missing row; the service layer converts
    that into this exception so handlers can answer 404 instead of 500.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class DatabaseError(SnippetboxError):
    """
    Raised when a database operation fails unexpectedly.

    The client only ever sees a generic 500. Driver messages, SQL and
    constraint names stay in the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseConnectionError(DatabaseError):
    """Raised by ``open_db`` when the pool cannot be opened or pinged."""

    def __init__(
        self,
        message: str = "Unable to connect to database",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TemplateCacheError(SnippetboxError):
    """Raised when a template file is missing or fails to parse."""

    def __init__(
        self,
        message: str = "Unable to create template cache",
        template: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if template:
            ctx["template"] = template
        super().__init__(message=message, context=ctx)
        self.template = template
