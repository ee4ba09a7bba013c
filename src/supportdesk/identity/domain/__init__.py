"""
Identity Domain Layer
=====================

Accounts (User) and the verified identity handed to every other context
(AuthenticatedUser). No infrastructure dependencies.
"""

from supportdesk.identity.domain.entities import User, AuthenticatedUser

__all__ = ["User", "AuthenticatedUser"]
