"""
Complaint Application Layer
============================

Application layer for the maintenance logbook.

Contains:
- Services: Orchestrate business logic and coordinate with repositories
- DTOs: Data transfer objects for API serialization

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from src.complaints.application.dto import (
    ComplaintCreateDTO,
    AssignTechnicianDTO,
    StatusUpdateDTO,
    TechnicianCreateDTO,
    ComplaintResponse,
    TechnicianResponse,
    TechnicianOptionsResponse,
    AnalyticsResponse,
)
from src.complaints.application.services import (
    ComplaintService,
    TechnicianService,
    AnalyticsService,
    AuthorizationPolicy,
    ImageUpload,
    IComplaintRepository,
    ITechnicianRepository,
    ISLAConfigProvider,
    IAttachmentStore,
)

__all__ = [
    # DTOs
    "ComplaintCreateDTO",
    "AssignTechnicianDTO",
    "StatusUpdateDTO",
    "TechnicianCreateDTO",
    "ComplaintResponse",
    "TechnicianResponse",
    "TechnicianOptionsResponse",
    "AnalyticsResponse",
    # Services
    "ComplaintService",
    "TechnicianService",
    "AnalyticsService",
    "AuthorizationPolicy",
    "ImageUpload",
    # Repository Interfaces
    "IComplaintRepository",
    "ITechnicianRepository",
    "ISLAConfigProvider",
    "IAttachmentStore",
]
