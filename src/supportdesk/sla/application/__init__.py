"""
SLA Application Layer
======================

Contains:
- Services: SLAService (live evaluation), PerformanceAggregator (compliance stats)
- DTOs: response models for the SLA and performance endpoints
"""

from supportdesk.sla.application.services import (
    AgentPerformance,
    PerformanceAggregator,
    PriorityPerformance,
    SLAService,
    PRIORITY_ORDER,
)
from supportdesk.sla.application.dto import (
    AgentPerformanceResponse,
    PriorityPerformanceResponse,
    SLAStatusResponse,
    TicketSLAResponse,
)

__all__ = [
    "AgentPerformance",
    "PerformanceAggregator",
    "PriorityPerformance",
    "SLAService",
    "PRIORITY_ORDER",
    "AgentPerformanceResponse",
    "PriorityPerformanceResponse",
    "SLAStatusResponse",
    "TicketSLAResponse",
]
