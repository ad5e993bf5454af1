"""
=============================================================================
HANDLERS MODULE
=============================================================================

Request handlers behind the fixed routing table.

    echo / user_agent / index   - small text handlers (routes.py)
    FileHandler                 - GET and POST /files/{name} (files.py)
    build_router(config)        - the table, in match order

=============================================================================
"""

from .files import FileHandler
from .routes import build_router, dispatch, echo, index, user_agent

__all__ = [
    "FileHandler",
    "build_router",
    "dispatch",
    "echo",
    "index",
    "user_agent",
]
