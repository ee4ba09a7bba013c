"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries. Each one carries a stable
``error`` code so API clients can render a specific message.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    error_code = "application_error"

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""

    error_code = "domain_error"


class ValidationException(DomainException):
    """Malformed priority/status value or empty required text."""

    error_code = "invalid_argument"


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    error_code = "not_found"

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[object] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id is not None:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class ConflictException(ApplicationException):
    """A uniqueness constraint could not be satisfied."""

    error_code = "conflict"


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""

    error_code = "repository_error"


class StoreUnavailableException(RepositoryException):
    """The persistent store could not be reached or a commit failed."""

    error_code = "store_unavailable"


class AuditTrailException(RepositoryException):
    """
    A ticket mutation could not be paired with its audit record.

    Always fatal for the operation that raised it.
    """

    error_code = "audit_trail_failure"

    def __init__(self, ticket_id: Optional[int], action: str, details: Optional[dict] = None):
        self.ticket_id = ticket_id
        self.action = action
        super().__init__(
            f"Failed to record '{action}' activity for ticket {ticket_id}",
            details or {"ticket_id": ticket_id, "action": action}
        )


class AuthenticationException(ApplicationException):
    """Credentials or access token were rejected."""

    error_code = "not_authenticated"


class AuthorizationException(ApplicationException):
    """The authenticated user may not perform the operation."""

    error_code = "forbidden"


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""

    error_code = "configuration_error"
