"""
Tickets Bounded Context
========================

Ticket lifecycle (create, status, assignment, comments) with an append-only
activity trail.
"""
