"""
Complaint Domain Layer
======================

Domain layer for the maintenance logbook.

Contains:
- Entities: Core business objects with identity (Complaint, Technician)
- Value Objects: SLAPolicy, UpdateRecord, TechnicianSnapshot, Principal
- Domain Services: EscalationEvaluator, analytics, validators

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from src.complaints.domain.entities import (
    Complaint,
    Technician,
    TechnicianSnapshot,
    UpdateRecord,
    Principal,
)
from src.complaints.domain.value_objects import (
    SLAPolicy,
    EscalationEvaluator,
    is_escalated,
)
from src.complaints.domain.analytics import (
    AnalyticsSummary,
    compute_analytics,
    filter_complaints,
)

__all__ = [
    # Entities
    "Complaint",
    "Technician",
    "TechnicianSnapshot",
    "UpdateRecord",
    "Principal",
    # Value Objects & Services
    "SLAPolicy",
    "EscalationEvaluator",
    "is_escalated",
    "AnalyticsSummary",
    "compute_analytics",
    "filter_complaints",
]
