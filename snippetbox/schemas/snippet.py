"""
Snippetbox: Pydantic Schemas
============================

What:  The read model handed from the data layer to templates, the
       create-form contract, and the health payload.
Why:   Keeps ORM rows out of templates and keeps validation rules in one
       place instead of scattered through route handlers.

Create form rules:
    title    not blank, at most 100 characters
    content  not blank
    expires  one of EXPIRY_CHOICES (days)

Form fields are kept as submitted strings so an invalid submission can be
re-rendered exactly as the user typed it.
"""

from datetime import datetime, timedelta
from typing import Dict, Mapping

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from snippetbox.exceptions import ValidationError
from snippetbox.models.snippet import TITLE_MAX_LENGTH

# Allowed snippet lifetimes, in days.
EXPIRY_CHOICES = (1, 7, 365)
DEFAULT_EXPIRY_DAYS = 365

BLANK_MESSAGE = "This field cannot be blank"


def _blank_error() -> PydanticCustomError:
    return PydanticCustomError("blank", BLANK_MESSAGE)


class SnippetRecord(BaseModel):
    """A stored, unexpired snippet as returned by ``SnippetService``."""

    id: int
    title: str
    content: str
    created: datetime
    expires: datetime

    model_config = {"from_attributes": True}


class SnippetCreateForm(BaseModel):
    title: str = ""
    content: str = ""
    expires: str = str(DEFAULT_EXPIRY_DAYS)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise _blank_error()
        if len(v) > TITLE_MAX_LENGTH:
            raise PydanticCustomError(
                "too_long",
                f"This field cannot be more than {TITLE_MAX_LENGTH} characters long",
            )
        return v

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v.strip():
            raise _blank_error()
        return v

    @field_validator("expires")
    @classmethod
    def validate_expires(cls, v: str) -> str:
        try:
            days = int(v)
        except ValueError:
            days = None
        if days not in EXPIRY_CHOICES:
            allowed = ", ".join(str(c) for c in EXPIRY_CHOICES[:-1])
            raise PydanticCustomError(
                "expiry_choice",
                f"This field must equal {allowed} or {EXPIRY_CHOICES[-1]}",
            )
        return v

    @property
    def expires_delta(self) -> timedelta:
        return timedelta(days=int(self.expires))


def validate_create_form(values: Mapping[str, str]) -> SnippetCreateForm:
    """
    Validate raw form values.

    Raises:
        ValidationError: with one message per failing field (the first
        rule that field broke).
    """
    try:
        return SnippetCreateForm.model_validate(dict(values))
    except PydanticValidationError as e:
        field_errors: Dict[str, str] = {}
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else "form"
            field_errors.setdefault(field, error["msg"])
        raise ValidationError(field_errors=field_errors) from e


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected or disconnected")
