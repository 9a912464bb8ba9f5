"""
Snippetbox: Template Cache
==========================

What:  Builds a read-only mapping from page name (``home.html``) to a
       compiled Jinja2 template.
When:  Once at startup, before the listener opens. Nothing writes to it
       afterwards, so request handlers read it without locking.

Directory layout:
    base.html           shared layout every page extends
    partials/*.html     fragments included by the layout
    pages/*.html        one file per page; the file name is the cache key

Every file is read and parsed up front, so a typo or a file that is not
UTF-8 fails startup instead of the first request that renders it.
"""

from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    select_autoescape,
)

from snippetbox.exceptions import TemplateCacheError

BASE_TEMPLATE = "base.html"
REQUIRED_PAGES = ("home.html", "view.html", "create.html")


def human_date(value: Optional[datetime]) -> str:
    """Format a timestamp like ``02 Jan 2006 at 15:04`` (UTC)."""
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%d %b %Y at %H:%M")


def _environment(root: Path) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(root)),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
        auto_reload=False,
    )
    env.filters["human_date"] = human_date
    return env


def _parse(env: Environment, name: str) -> Template:
    try:
        return env.get_template(name)
    except (TemplateError, UnicodeDecodeError, OSError) as e:
        raise TemplateCacheError(
            message=f"Unable to parse template {name}",
            template=name,
            context={"error": str(e), "error_type": type(e).__name__},
        ) from e


def new_template_cache(directory: Union[str, Path]) -> Mapping[str, Template]:
    """
    Parse the layout, partials and pages under ``directory``.

    Raises:
        TemplateCacheError: the directory, the layout or a required page is
        missing, or any file fails to parse.
    """
    root = Path(directory)
    if not root.is_dir():
        raise TemplateCacheError(
            message=f"Template directory {root} does not exist",
            context={"directory": str(root)},
        )

    env = _environment(root)

    if not (root / BASE_TEMPLATE).is_file():
        raise TemplateCacheError(message="Base layout is missing", template=BASE_TEMPLATE)
    _parse(env, BASE_TEMPLATE)

    for partial in sorted((root / "partials").glob("*.html")):
        _parse(env, f"partials/{partial.name}")

    pages = {path.name: path for path in sorted((root / "pages").glob("*.html"))}
    missing = [name for name in REQUIRED_PAGES if name not in pages]
    if missing:
        raise TemplateCacheError(
            message=f"Missing page templates: {', '.join(missing)}",
            context={"missing": missing},
        )

    cache: Dict[str, Template] = {}
    for name in pages:
        cache[name] = _parse(env, f"pages/{name}")

    return MappingProxyType(cache)
