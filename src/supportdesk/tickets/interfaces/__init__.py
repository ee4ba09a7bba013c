"""
Ticket Interfaces Layer
========================

This is the outermost layer - handles HTTP requests/responses and
delegates to application services.
"""

from supportdesk.tickets.interfaces.controllers import tickets_router

__all__ = ["tickets_router"]
