"""
Snippetbox: Routes Package
==========================

Route Inventory:
    - snippets.py:  GET  /                       (latest snippets)
                    GET  /snippet/view/{id}      (one snippet)
                    GET  /snippet/create         (form)
                    POST /snippet/create         (submit form)
    - health.py:    GET  /health                 (database probe)

Static assets are mounted at /static by ``main.create_app``.
"""
