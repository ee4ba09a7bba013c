"""
Shared Kernel Module
====================

Shared infrastructure used across all bounded contexts (identity, tickets,
SLA).

Architecture Pattern: Modular Monolith
- Each module (identity, tickets, sla) is a bounded context
- Shared kernel contains only generic infrastructure and the unit of work

DO NOT add ticket or SLA business logic to the shared kernel.
"""
