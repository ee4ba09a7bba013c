"""Ticket infrastructure: ORM models and repositories."""
