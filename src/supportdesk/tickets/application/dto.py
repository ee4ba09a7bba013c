"""
Ticket Application DTOs
========================

Data Transfer Objects for the ticket API layer.

These Pydantic models handle serialization/deserialization and validation
for API requests and responses.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from supportdesk.config import ActivityAction, TicketPriority, TicketStatus


# ========== Type Aliases for Literals ==========
PriorityStr = Literal["critical", "high", "medium", "low"]
TicketStatusStr = Literal["open", "in-progress", "on-hold", "closed"]


# ========== Request DTOs ==========

class TicketCreateRequest(BaseModel):
    """Request model for opening a ticket."""
    title: str = Field(..., min_length=1, max_length=255, description="Short summary")
    description: str = Field(..., min_length=1, description="Full problem description")
    priority: PriorityStr = Field(default="medium", description="Ticket priority")
    assigned_to_id: Optional[int] = Field(None, description="Initial assignee")


class TicketStatusUpdateRequest(BaseModel):
    status: TicketStatusStr


class TicketAssignRequest(BaseModel):
    assigned_to_id: Optional[int] = Field(None, description="New assignee, null to unassign")


class CommentCreateRequest(BaseModel):
    content: str = Field(..., min_length=1)


# ========== Response DTOs ==========

class TicketResponse(BaseModel):
    """Response model for a ticket."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_number: str
    title: str
    description: str
    status: TicketStatus
    priority: TicketPriority
    created_by_id: int
    assigned_to_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    sla_deadline: Optional[datetime] = None


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content: str
    ticket_id: int
    user_id: int
    created_at: datetime


class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: ActivityAction
    details: Optional[str] = None
    ticket_id: int
    user_id: int
    created_at: datetime


class TicketStatsResponse(BaseModel):
    """Ticket counts per status."""
    open: int
    in_progress: int
    on_hold: int
    closed: int
