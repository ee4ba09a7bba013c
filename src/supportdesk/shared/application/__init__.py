"""Application-level abstractions shared by every bounded context."""

from supportdesk.shared.application.unit_of_work import IUnitOfWork

__all__ = ["IUnitOfWork"]
