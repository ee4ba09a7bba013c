from datetime import timedelta

import pytest

from supportdesk.config import SLAState, TicketPriority, TicketStatus
from supportdesk.sla.domain import SLACalculator, SLA_DURATIONS, format_remaining
from supportdesk.tickets.domain import Ticket

from conftest import T0


def build_ticket(priority, status=TicketStatus.OPEN, updated_at=None, with_deadline=True):
    return Ticket(
        id=1,
        ticket_number="TK-TEST",
        title="Printer on fire",
        description="Third floor printer is smoking",
        status=status,
        priority=priority,
        created_by_id=1,
        created_at=T0,
        updated_at=updated_at or T0,
        sla_deadline=SLACalculator.deadline_for(priority, T0) if with_deadline else None,
    )


@pytest.mark.parametrize("priority,hours", [
    (TicketPriority.CRITICAL, 4),
    (TicketPriority.HIGH, 8),
    (TicketPriority.MEDIUM, 24),
    (TicketPriority.LOW, 72),
])
def test_deadline_is_creation_plus_allotted_time(priority, hours):
    assert SLACalculator.deadline_for(priority, T0) == T0 + timedelta(hours=hours)


def test_durations_are_read_only():
    with pytest.raises(TypeError):
        SLA_DURATIONS[TicketPriority.LOW] = timedelta(hours=1)


def test_critical_ticket_is_at_risk_with_a_quarter_left():
    status = SLACalculator.evaluate(build_ticket(TicketPriority.CRITICAL), T0 + timedelta(hours=3))

    assert status.state == SLAState.AT_RISK
    assert status.percentage_remaining == 25
    assert status.remaining_minutes == 60
    assert status.display == "1h 0m remaining"
    assert not status.is_expired


def test_critical_ticket_past_deadline_is_expired():
    status = SLACalculator.evaluate(build_ticket(TicketPriority.CRITICAL), T0 + timedelta(hours=5))

    assert status.state == SLAState.EXPIRED
    assert status.is_expired
    assert status.percentage_remaining == 0
    assert status.display == "Expired"


def test_exactly_at_deadline_counts_as_expired():
    status = SLACalculator.evaluate(build_ticket(TicketPriority.HIGH), T0 + timedelta(hours=8))
    assert status.is_expired


def test_percentage_rounds_half_up():
    # 150 of 240 minutes left = 62.5%
    status = SLACalculator.evaluate(build_ticket(TicketPriority.CRITICAL), T0 + timedelta(minutes=90))
    assert status.percentage_remaining == 63
    assert status.state == SLAState.ON_TRACK


def test_fresh_low_priority_ticket_is_full_and_shows_days():
    status = SLACalculator.evaluate(build_ticket(TicketPriority.LOW), T0)

    assert status.percentage_remaining == 100
    assert status.total_minutes == 72 * 60
    assert status.display == "3d 0h remaining"


def test_closed_ticket_is_completed_regardless_of_time():
    ticket = build_ticket(TicketPriority.CRITICAL, TicketStatus.CLOSED, updated_at=T0 + timedelta(hours=9))
    status = SLACalculator.evaluate(ticket, T0 + timedelta(days=30))

    assert status.state == SLAState.COMPLETED
    assert status.is_completed
    assert status.percentage_remaining == 100
    assert status.display == "Completed"
    assert not status.is_expired


def test_warning_threshold_is_configurable():
    ticket = build_ticket(TicketPriority.MEDIUM)
    # 12 of 24 hours left
    now = T0 + timedelta(hours=12)

    assert SLACalculator.evaluate(ticket, now).state == SLAState.ON_TRACK
    assert SLACalculator.evaluate(ticket, now, warning_threshold_percent=50).state == SLAState.AT_RISK


def test_missing_deadline_falls_back_to_priority():
    ticket = build_ticket(TicketPriority.HIGH, with_deadline=False)
    status = SLACalculator.evaluate(ticket, T0)
    assert status.deadline == T0 + timedelta(hours=8)


@pytest.mark.parametrize("minutes,expected", [
    (45, "45m remaining"),
    (60, "1h 0m remaining"),
    (135, "2h 15m remaining"),
    (3000, "2d 2h remaining"),
])
def test_format_remaining(minutes, expected):
    assert format_remaining(minutes) == expected


def test_is_within_sla():
    on_time = build_ticket(TicketPriority.HIGH, TicketStatus.CLOSED, updated_at=T0 + timedelta(hours=8))
    late = build_ticket(TicketPriority.HIGH, TicketStatus.CLOSED, updated_at=T0 + timedelta(hours=8, seconds=1))
    no_deadline = build_ticket(TicketPriority.HIGH, TicketStatus.CLOSED, with_deadline=False)

    assert SLACalculator.is_within_sla(on_time)
    assert not SLACalculator.is_within_sla(late)
    assert not SLACalculator.is_within_sla(no_deadline)
