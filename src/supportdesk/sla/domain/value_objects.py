"""
SLA Value Objects
==================

Immutable value objects and pure calculations for the SLA domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Mapping, Optional

from supportdesk.config import SLAState, TicketPriority, TicketStatus


# Allotted resolution time per priority. Process-wide and read-only.
SLA_DURATIONS: Mapping[TicketPriority, timedelta] = MappingProxyType({
    TicketPriority.CRITICAL: timedelta(hours=4),
    TicketPriority.HIGH: timedelta(hours=8),
    TicketPriority.MEDIUM: timedelta(hours=24),
    TicketPriority.LOW: timedelta(hours=72),
})

DEFAULT_WARNING_THRESHOLD_PERCENT = 25


def round_half_up(value: float) -> int:
    """Round a non-negative percentage to the nearest int, halves going up."""
    return int(math.floor(value + 0.5))


def format_remaining(minutes: int) -> str:
    """
    Render a remaining duration.

    Examples:
        45    -> "45m remaining"
        135   -> "2h 15m remaining"
        3000  -> "2d 2h remaining"
    """
    if minutes < 60:
        return f"{minutes}m remaining"
    hours, mins = divmod(minutes, 60)
    if hours < 24:
        return f"{hours}h {mins}m remaining"
    days, hours = divmod(hours, 24)
    return f"{days}d {hours}h remaining"


@dataclass(frozen=True)
class SLAStatus:
    """
    Point-in-time SLA evaluation of one ticket.

    For open tickets ``percentage_remaining`` is the share of the priority's
    allotted time still left. A closed ticket reports ``completed`` with a
    full bar (100) whatever its actual timing was.
    """

    state: SLAState
    deadline: Optional[datetime]
    total_minutes: int
    remaining_minutes: int
    percentage_remaining: int
    is_expired: bool
    display: str

    @property
    def is_completed(self) -> bool:
        return self.state == SLAState.COMPLETED


class SLACalculator:
    """
    Pure functions for SLA calculations.

    Stateless utility class - all SLA calculation logic in one place.
    """

    @staticmethod
    def allotted(priority: TicketPriority) -> timedelta:
        """Total resolution time allotted to a priority."""
        return SLA_DURATIONS[TicketPriority(priority)]

    @staticmethod
    def deadline_for(priority: TicketPriority, created_at: datetime) -> datetime:
        """``created_at`` plus the priority's allotted duration."""
        return created_at + SLACalculator.allotted(priority)

    @staticmethod
    def evaluate(
        ticket,
        now: datetime,
        warning_threshold_percent: int = DEFAULT_WARNING_THRESHOLD_PERCENT
    ) -> SLAStatus:
        """
        Evaluate a ticket's SLA at ``now``.

        Args:
            ticket: Anything with ``status``, ``priority``, ``created_at``
                and ``sla_deadline`` attributes
            now: Evaluation instant (timezone-aware)
            warning_threshold_percent: Percentage at or below which an open
                ticket is reported ``at_risk``

        Returns:
            SLAStatus
        """
        total_minutes = int(SLACalculator.allotted(ticket.priority).total_seconds() // 60)
        deadline = ticket.sla_deadline
        if deadline is None:
            deadline = SLACalculator.deadline_for(ticket.priority, ticket.created_at)

        if ticket.status == TicketStatus.CLOSED:
            return SLAStatus(
                state=SLAState.COMPLETED,
                deadline=deadline,
                total_minutes=total_minutes,
                remaining_minutes=0,
                percentage_remaining=100,
                is_expired=False,
                display="Completed",
            )

        remaining = deadline - now
        if remaining <= timedelta(0):
            return SLAStatus(
                state=SLAState.EXPIRED,
                deadline=deadline,
                total_minutes=total_minutes,
                remaining_minutes=0,
                percentage_remaining=0,
                is_expired=True,
                display="Expired",
            )

        remaining_minutes = int(remaining.total_seconds() // 60)
        if total_minutes <= 0:
            percentage = 0
        else:
            percentage = round_half_up(remaining_minutes / total_minutes * 100)
        percentage = max(0, min(100, percentage))

        if percentage <= warning_threshold_percent:
            state = SLAState.AT_RISK
        else:
            state = SLAState.ON_TRACK

        return SLAStatus(
            state=state,
            deadline=deadline,
            total_minutes=total_minutes,
            remaining_minutes=remaining_minutes,
            percentage_remaining=percentage,
            is_expired=False,
            display=format_remaining(remaining_minutes),
        )

    @staticmethod
    def is_within_sla(ticket) -> bool:
        """
        Whether a closed ticket was resolved by its deadline.

        ``updated_at`` stands in for the resolution instant, so this is only
        meaningful for closed tickets.
        """
        if ticket.sla_deadline is None:
            return False
        return ticket.updated_at <= ticket.sla_deadline
