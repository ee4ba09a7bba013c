"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system.
"""

from supportdesk.core.exceptions import (
    ApplicationException,
    DomainException,
    ValidationException,
    ResourceNotFoundException,
    ConflictException,
    RepositoryException,
    StoreUnavailableException,
    AuditTrailException,
    AuthenticationException,
    AuthorizationException,
    ConfigurationException,
)

__all__ = [
    "ApplicationException",
    "DomainException",
    "ValidationException",
    "ResourceNotFoundException",
    "ConflictException",
    "RepositoryException",
    "StoreUnavailableException",
    "AuditTrailException",
    "AuthenticationException",
    "AuthorizationException",
    "ConfigurationException",
]
