"""
Snippetbox: Application Package
===============================

A small web application for storing and sharing text snippets.

Layers:
    routes/      HTTP concerns only (parse request, pick status, render)
    services/    data access and domain rules
    models/      SQLAlchemy ORM mapping
    schemas/     pydantic read model and form validation
    templating   Jinja2 template cache built once at startup
"""

__version__ = "1.0.0"
