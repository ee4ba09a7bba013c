"""
supportdesk
===========

Helpdesk ticketing service: ticket lifecycle with an audit trail,
priority-based SLA tracking and agent performance reporting.
"""

__version__ = "1.0.0"
