"""
Identity Interfaces Layer
==========================

Auth and user routes plus the request dependencies other contexts use to
obtain the caller's verified identity.
"""

from supportdesk.identity.interfaces.controllers import auth_router, users_router

__all__ = ["auth_router", "users_router"]
