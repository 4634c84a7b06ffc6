"""
Complaint API Dependencies
===========================

FastAPI dependency providers wiring repositories, services and the
calling principal into route handlers.
"""

from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.complaints.application import (
    AnalyticsService, ComplaintService, TechnicianService,
    IAttachmentStore, IComplaintRepository, ISLAConfigProvider, ITechnicianRepository,
)
from src.complaints.domain import Principal
from src.complaints.infrastructure import (
    LocalAttachmentStore,
    SQLAlchemyComplaintRepository,
    SQLAlchemyTechnicianRepository,
    YAMLConfigProvider,
)
from src.config import VALID_ROLES, settings
from src.core import AuthenticationException
from src.infrastructure.database import get_session

# Headers set by the gateway after it has verified the bearer token
PRINCIPAL_HEADERS = {
    "id": "X-Principal-Id",
    "name": "X-Principal-Name",
    "email": "X-Principal-Email",
    "role": "X-Principal-Role",
}


def get_current_principal(request: Request) -> Principal:
    """
    Build the calling principal from gateway headers.

    Token verification happens upstream; requests that reach the
    service without a complete identity are rejected.
    """
    values = {
        key: (request.headers.get(header) or "").strip()
        for key, header in PRINCIPAL_HEADERS.items()
    }

    missing = [PRINCIPAL_HEADERS[key] for key, value in values.items() if not value]
    if missing:
        raise AuthenticationException("Not authenticated", {"missing_headers": missing})

    if values["role"] not in VALID_ROLES:
        raise AuthenticationException(f"Unknown role '{values['role']}'")

    return Principal(**values)


@lru_cache()
def get_config_provider() -> ISLAConfigProvider:
    """SLA config provider, loaded once per process."""
    return YAMLConfigProvider(settings.sla_config_path)


def get_attachment_store() -> IAttachmentStore:
    return LocalAttachmentStore(settings.upload_dir)


async def get_complaint_repository(
    session: AsyncSession = Depends(get_session)
) -> IComplaintRepository:
    return SQLAlchemyComplaintRepository(session)


async def get_technician_repository(
    session: AsyncSession = Depends(get_session)
) -> ITechnicianRepository:
    return SQLAlchemyTechnicianRepository(session)


async def get_complaint_service(
    complaint_repo: IComplaintRepository = Depends(get_complaint_repository),
    technician_repo: ITechnicianRepository = Depends(get_technician_repository),
    attachment_store: IAttachmentStore = Depends(get_attachment_store),
) -> ComplaintService:
    """Get complaint lifecycle service instance."""
    return ComplaintService(
        complaint_repo,
        technician_repo,
        attachment_store=attachment_store,
        max_images=settings.max_images_per_complaint,
    )


async def get_technician_service(
    technician_repo: ITechnicianRepository = Depends(get_technician_repository),
) -> TechnicianService:
    """Get technician service instance."""
    return TechnicianService(technician_repo)


async def get_analytics_service(
    complaint_repo: IComplaintRepository = Depends(get_complaint_repository),
    config_provider: ISLAConfigProvider = Depends(get_config_provider),
) -> AnalyticsService:
    """Get analytics service instance."""
    return AnalyticsService(complaint_repo, config_provider)
