"""
Complaint Infrastructure Layer
===============================

Infrastructure implementations for the complaints module:
- Models: SQLAlchemy ORM models
- Repositories: Data access layer and SLA config loading
- External: Attachment storage
"""

from src.complaints.infrastructure.models import ComplaintModel, TechnicianModel
from src.complaints.infrastructure.repositories import (
    SQLAlchemyComplaintRepository,
    SQLAlchemyTechnicianRepository,
    YAMLConfigProvider
)
from src.complaints.infrastructure.external import LocalAttachmentStore

__all__ = [
    "ComplaintModel",
    "TechnicianModel",
    "SQLAlchemyComplaintRepository",
    "SQLAlchemyTechnicianRepository",
    "YAMLConfigProvider",
    "LocalAttachmentStore",
]
