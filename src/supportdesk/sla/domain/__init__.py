"""
SLA Domain Layer
================

Domain layer for SLA tracking.

Contains:
- Value Objects: SLAStatus
- Domain Services: SLACalculator (stateless)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from supportdesk.sla.domain.value_objects import (
    SLACalculator,
    SLAStatus,
    SLA_DURATIONS,
    format_remaining,
    round_half_up,
)

__all__ = [
    "SLACalculator",
    "SLAStatus",
    "SLA_DURATIONS",
    "format_remaining",
    "round_half_up",
]
