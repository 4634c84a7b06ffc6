"""
Complaint Application DTOs
===========================

Data Transfer Objects for the complaints API layer.

These Pydantic models handle serialization/deserialization for API
requests and responses. Field names are snake_case in Python and
camelCase on the wire. Business validation (allowed categories, image
cap, blank text) lives in the domain validators, not here, so that every
caller gets the same error contract.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.complaints.domain import (
    AnalyticsSummary, Complaint, EscalationEvaluator, SLAPolicy, Technician
)


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases while accepting both forms."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ========== Request DTOs ==========

class ComplaintCreateDTO(CamelModel):
    """DTO for filing a complaint."""
    title: Optional[str] = Field(None, description="Short summary")
    description: Optional[str] = Field(None, description="What is wrong")
    category: Optional[str] = Field(None, description="electricity, water, wifi or cleaning")
    priority: Optional[str] = Field(None, description="low, medium or high (default medium)")
    room_number: Optional[str] = Field(None, description="Where the problem is")
    images: List[str] = Field(
        default_factory=list,
        description="Already stored attachment references"
    )


class AssignTechnicianDTO(CamelModel):
    """DTO for assigning a technician to a complaint."""
    technician_id: str = Field(..., min_length=1, description="Technician ID")


class StatusUpdateDTO(CamelModel):
    """DTO for posting a status update."""
    status: str = Field(..., description="in-progress or resolved")
    message: Optional[str] = Field(None, description="Update note")


class TechnicianCreateDTO(CamelModel):
    """DTO for provisioning a technician."""
    name: Optional[str] = None
    email: Optional[str] = None
    specialization: Optional[str] = None


# ========== Response DTOs ==========

class UpdateRecordResponse(CamelModel):
    time: datetime
    message: str
    by: str


class TechnicianSnapshotResponse(CamelModel):
    id: str
    name: str


class ComplaintResponse(CamelModel):
    """Response model for a complaint, with derived SLA fields."""
    id: str
    title: str
    description: str
    category: str
    status: str
    priority: str
    resident: str
    room_number: str
    images: List[str] = Field(default_factory=list)
    technician: Optional[TechnicianSnapshotResponse] = None
    updates: List[UpdateRecordResponse] = Field(
        default_factory=list,
        description="Chronological, oldest first"
    )
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None

    # Derived on read
    escalated: bool = False
    sla_deadline: Optional[datetime] = None

    @classmethod
    def from_domain(
        cls,
        complaint: Complaint,
        now: datetime,
        policy: Optional[SLAPolicy] = None
    ) -> "ComplaintResponse":
        """Create from domain entity, evaluating escalation at `now`."""
        technician = None
        if complaint.technician is not None:
            technician = TechnicianSnapshotResponse(
                id=complaint.technician.id,
                name=complaint.technician.name
            )

        return cls(
            id=complaint.id,
            title=complaint.title,
            description=complaint.description,
            category=complaint.category,
            status=complaint.status,
            priority=complaint.priority,
            resident=complaint.resident,
            room_number=complaint.room_number,
            images=list(complaint.images),
            technician=technician,
            updates=[
                UpdateRecordResponse(time=u.time, message=u.message, by=u.by)
                for u in complaint.updates
            ],
            created_at=complaint.created_at,
            updated_at=complaint.updated_at,
            resolved_at=complaint.resolved_at,
            escalated=EscalationEvaluator.is_escalated(complaint, now, policy),
            sla_deadline=EscalationEvaluator.sla_deadline(complaint, policy),
        )


class TechnicianResponse(CamelModel):
    id: str
    name: str
    email: str
    specialization: str

    @classmethod
    def from_domain(cls, technician: Technician) -> "TechnicianResponse":
        return cls(
            id=technician.id,
            name=technician.name,
            email=technician.email,
            specialization=technician.specialization,
        )


class TechnicianOptionsResponse(CamelModel):
    """Technicians split by whether they match a complaint's category."""
    matching: List[TechnicianResponse] = Field(default_factory=list)
    others: List[TechnicianResponse] = Field(default_factory=list)


class AnalyticsResponse(CamelModel):
    """Response model for dashboard analytics."""
    total: int
    open: int
    in_progress: int
    resolved: int
    escalated: int
    category_count: Dict[str, int]
    avg_response_time: float = Field(..., description="Mean hours from creation to resolution")
    resolution_rate: float = Field(..., description="Percentage of complaints resolved")

    @classmethod
    def from_domain(cls, summary: AnalyticsSummary) -> "AnalyticsResponse":
        return cls(
            total=summary.total,
            open=summary.open,
            in_progress=summary.in_progress,
            resolved=summary.resolved,
            escalated=summary.escalated,
            category_count=dict(summary.category_count),
            avg_response_time=summary.avg_response_time,
            resolution_rate=summary.resolution_rate,
        )
