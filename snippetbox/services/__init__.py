"""
Snippetbox: Services Layer
==========================

Business logic between the routes (HTTP) and the database (persistence).

Service Inventory:
    - SnippetService: insert / get / latest over the ``snippets`` table
"""
