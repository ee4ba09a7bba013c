"""
SLA Application DTOs
=====================

Response models for the SLA and performance endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from supportdesk.config import SLAState, TicketPriority, TicketStatus


class SLAStatusResponse(BaseModel):
    """Point-in-time SLA evaluation."""
    model_config = ConfigDict(from_attributes=True)

    state: SLAState
    deadline: Optional[datetime] = None
    total_minutes: int
    remaining_minutes: int
    percentage_remaining: int = Field(..., ge=0, le=100)
    is_expired: bool
    display: str


class TicketSLAResponse(BaseModel):
    ticket_id: int
    ticket_number: str
    priority: TicketPriority
    status: TicketStatus
    sla: SLAStatusResponse


class AgentPerformanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    agent_id: int
    username: str
    name: str
    tickets_resolved: int
    average_resolution_hours: float
    sla_compliance_rate: int = Field(..., ge=0, le=100)


class PriorityPerformanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    priority: TicketPriority
    tickets_resolved: int
    sla_compliance_rate: int = Field(..., ge=0, le=100)
