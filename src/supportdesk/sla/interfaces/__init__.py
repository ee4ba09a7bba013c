"""SLA status and performance reporting routes."""

from supportdesk.sla.interfaces.controllers import performance_router, sla_router

__all__ = ["performance_router", "sla_router"]
