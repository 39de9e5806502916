"""
Request-scoped access to the injected collaborators.

create_app() stores a store factory and a recalculation queue on the app;
handlers reach them through these helpers instead of module globals.
"""
from flask import current_app, g


def get_config():
    return current_app.extensions["fairgrade"]["config"]


def get_store():
    """Return this request's store, creating it on first use."""
    if "store" not in g:
        g.store = current_app.extensions["fairgrade"]["store_factory"]()
    return g.store


def get_recalculation():
    return current_app.extensions["fairgrade"]["recalculation"]
