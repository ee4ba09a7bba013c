"""
SLA Bounded Context
====================

Priority-based resolution targets, live evaluation and compliance reporting.
"""
