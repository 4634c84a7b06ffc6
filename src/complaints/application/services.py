"""
Complaint Application Services
===============================

Application services orchestrate business logic and coordinate between
domain entities and repositories.

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions (repositories), not concrete implementations

The acting principal is always passed in explicitly; there is no
ambient "current user".
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple
from uuid import uuid4

from src.complaints.domain import (
    Complaint, Technician, Principal, SLAPolicy,
    AnalyticsSummary, compute_analytics, filter_complaints,
)
from src.complaints.domain.analytics import ALL_FILTER, ESCALATED_FILTER
from src.complaints.domain.validators import (
    MAX_IMAGES, require_text, validate_category, validate_new_complaint,
)
from src.complaints.application.dto import ComplaintCreateDTO, TechnicianCreateDTO
from src.config import ComplaintStatus, VALID_CATEGORIES, VALID_STATUSES
from src.core import (
    AuthorizationException, RepositoryException, ResourceNotFoundException, ValidationException,
)
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ImageUpload:
    """An uploaded image not yet written to attachment storage."""
    filename: str
    content_type: str
    data: bytes


# ========== Repository Interfaces (Dependency Inversion) ==========

class IComplaintRepository(ABC):
    """Interface for complaint data access."""

    @abstractmethod
    async def create(self, complaint: Complaint) -> Complaint:
        """Persist a new complaint."""

    @abstractmethod
    async def get_by_id(self, complaint_id: str) -> Optional[Complaint]:
        """Get complaint by ID."""

    @abstractmethod
    async def list_all(self) -> List[Complaint]:
        """List all complaints, newest first."""

    @abstractmethod
    async def save(self, complaint: Complaint) -> Complaint:
        """Write back a mutated complaint."""


class ITechnicianRepository(ABC):
    """Interface for technician data access."""

    @abstractmethod
    async def create(self, technician: Technician) -> Technician:
        """Persist a new technician."""

    @abstractmethod
    async def get_by_id(self, technician_id: str) -> Optional[Technician]:
        """Get technician by ID."""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Technician]:
        """Get technician by email."""

    @abstractmethod
    async def list_all(self) -> List[Technician]:
        """List all technicians."""


class ISLAConfigProvider(ABC):
    """Interface for SLA configuration access."""

    @abstractmethod
    def get_policy(self) -> SLAPolicy:
        """Get current SLA thresholds."""


class IAttachmentStore(ABC):
    """Interface for complaint image storage."""

    @abstractmethod
    async def save(self, upload: ImageUpload) -> str:
        """Store an image and return its stable reference."""

    @abstractmethod
    async def delete(self, reference: str) -> None:
        """Remove a previously stored image."""


# ========== Authorization ==========

class AuthorizationPolicy:
    """
    Role checks for every lifecycle action.

    - Residents file complaints
    - Admins assign technicians and post updates on any complaint
    - Technicians post updates only on complaints assigned to them
    - Only admins provision technicians
    """

    @staticmethod
    def ensure_can_create(principal: Principal) -> None:
        if not principal.is_resident:
            raise AuthorizationException("file complaints", principal.id)

    @staticmethod
    def ensure_can_assign(principal: Principal) -> None:
        if not principal.is_admin:
            raise AuthorizationException("assign technicians", principal.id)

    @staticmethod
    def can_update(principal: Principal, complaint: Complaint) -> bool:
        if principal.is_admin:
            return True
        return principal.is_technician and complaint.is_assigned_to(principal.id)

    @staticmethod
    def ensure_can_update(principal: Principal, complaint: Complaint) -> None:
        if not AuthorizationPolicy.can_update(principal, complaint):
            raise AuthorizationException(f"update complaint {complaint.id}", principal.id)

    @staticmethod
    def ensure_can_manage_technicians(principal: Principal) -> None:
        if not principal.is_admin:
            raise AuthorizationException("manage technicians", principal.id)


# ========== Application Services ==========

class ComplaintService:
    """
    Service for the complaint lifecycle.

    Each mutation is one read-modify-write of a single complaint.
    """

    def __init__(
        self,
        complaint_repository: IComplaintRepository,
        technician_repository: ITechnicianRepository,
        attachment_store: Optional[IAttachmentStore] = None,
        clock: Optional[Clock] = None,
        max_images: int = MAX_IMAGES
    ):
        self._complaint_repo = complaint_repository
        self._technician_repo = technician_repository
        self._attachment_store = attachment_store
        self._clock = clock or utc_now
        self._max_images = max_images

    async def create_complaint(
        self,
        principal: Principal,
        data: ComplaintCreateDTO,
        uploads: Sequence[ImageUpload] = ()
    ) -> Complaint:
        """
        File a new complaint.

        All input, uploads included, is validated before anything is
        written, so a rejected request leaves no record and no files.
        """
        self._authorize(AuthorizationPolicy.ensure_can_create, principal)

        fields = validate_new_complaint(
            title=data.title,
            description=data.description,
            category=data.category,
            priority=data.priority,
            room_number=data.room_number,
            images=list(data.images) + list(uploads),
            max_images=self._max_images,
        )
        for upload in uploads:
            if not upload.content_type.startswith("image/"):
                raise ValidationException(
                    f"Invalid file type: {upload.content_type}. Only images are allowed.",
                    {"field": "images", "filename": upload.filename}
                )
        if uploads and self._attachment_store is None:
            raise ValidationException("Image uploads are not enabled", {"field": "images"})

        now = self._clock()
        stored = []
        try:
            for upload in uploads:
                stored.append(await self._attachment_store.save(upload))

            complaint = await self._complaint_repo.create(Complaint(
                id=str(uuid4()),
                resident=principal.email,
                status=ComplaintStatus.OPEN,
                images=list(data.images) + stored,
                created_at=now,
                updated_at=now,
                **fields,
            ))
        except Exception:
            await self._discard_attachments(stored)
            raise

        logger.info(
            "Complaint created",
            extra={
                "complaint_id": complaint.id,
                "actor_id": principal.id,
                "category": complaint.category,
                "image_count": len(complaint.images),
            }
        )
        return complaint

    async def get_complaint(self, complaint_id: str) -> Complaint:
        complaint = await self._complaint_repo.get_by_id(complaint_id)
        if complaint is None:
            raise ResourceNotFoundException("Complaint", complaint_id)
        return complaint

    async def assign_technician(
        self,
        principal: Principal,
        complaint_id: str,
        technician_id: str
    ) -> Complaint:
        """
        Assign a technician whose specialization matches the category.

        Moves the complaint to in-progress; reassignment of an
        in-progress complaint is allowed, resolved ones are rejected.
        """
        self._authorize(AuthorizationPolicy.ensure_can_assign, principal)

        complaint = await self.get_complaint(complaint_id)
        technician = await self._technician_repo.get_by_id(technician_id)
        if technician is None:
            raise ResourceNotFoundException("Technician", technician_id)

        if not technician.handles(complaint.category):
            raise ValidationException(
                f"Technician {technician.name} handles {technician.specialization}, "
                f"not {complaint.category}",
                {"technician_id": technician.id, "category": complaint.category}
            )

        complaint.assign(technician, self._clock())
        complaint = await self._complaint_repo.save(complaint)

        logger.info(
            "Technician assigned",
            extra={
                "complaint_id": complaint.id,
                "actor_id": principal.id,
                "technician_id": technician.id,
            }
        )
        return complaint

    async def record_status_update(
        self,
        principal: Principal,
        complaint_id: str,
        new_status: str,
        message: Optional[str]
    ) -> Complaint:
        """Append an update note and move the complaint forward."""
        complaint = await self.get_complaint(complaint_id)
        self._authorize(AuthorizationPolicy.ensure_can_update, principal, complaint)

        complaint.record_update(new_status, message or "", principal.display_name, self._clock())
        complaint = await self._complaint_repo.save(complaint)

        logger.info(
            "Complaint status updated",
            extra={
                "complaint_id": complaint.id,
                "actor_id": principal.id,
                "status": complaint.status,
            }
        )
        return complaint

    async def _discard_attachments(self, references: List[str]) -> None:
        """Remove images stored for a complaint that was never persisted."""
        if references:
            logger.warning("Discarding attachments of unsaved complaint", extra={"count": len(references)})
        for reference in references:
            try:
                await self._attachment_store.delete(reference)
            except RepositoryException as e:
                logger.error(
                    "Failed to remove orphaned attachment",
                    extra={"reference": reference, "error": str(e)}
                )

    def _authorize(self, check: Callable, principal: Principal, *args) -> None:
        try:
            check(principal, *args)
        except AuthorizationException as e:
            logger.warning(
                "Action rejected",
                extra={"actor_id": principal.id, "role": principal.role, "reason": e.message}
            )
            raise


class TechnicianService:
    """Service for provisioning and listing technicians."""

    def __init__(self, technician_repository: ITechnicianRepository, clock: Optional[Clock] = None):
        self._technician_repo = technician_repository
        self._clock = clock or utc_now

    async def add_technician(self, principal: Principal, data: TechnicianCreateDTO) -> Technician:
        """Provision a technician. Technicians cannot register themselves."""
        AuthorizationPolicy.ensure_can_manage_technicians(principal)

        name = require_text(data.name, "name")
        email = require_text(data.email, "email").lower()
        specialization = validate_category(data.specialization)

        if await self._technician_repo.get_by_email(email) is not None:
            raise ValidationException(
                "Technician with this email already exists",
                {"field": "email"}
            )

        technician = await self._technician_repo.create(Technician(
            id=str(uuid4()),
            name=name,
            email=email,
            specialization=specialization,
            created_at=self._clock(),
        ))

        logger.info(
            "Technician added",
            extra={
                "technician_id": technician.id,
                "actor_id": principal.id,
                "specialization": specialization,
            }
        )
        return technician

    async def get_technician(self, technician_id: str) -> Technician:
        technician = await self._technician_repo.get_by_id(technician_id)
        if technician is None:
            raise ResourceNotFoundException("Technician", technician_id)
        return technician

    async def list_technicians(self, principal: Principal) -> List[Technician]:
        AuthorizationPolicy.ensure_can_manage_technicians(principal)
        return await self._technician_repo.list_all()

    async def technicians_for(
        self,
        principal: Principal,
        complaint: Complaint
    ) -> Tuple[List[Technician], List[Technician]]:
        """Split technicians into (matching specialization, others)."""
        technicians = await self.list_technicians(principal)
        matching = [t for t in technicians if t.handles(complaint.category)]
        others = [t for t in technicians if not t.handles(complaint.category)]
        return matching, others


class AnalyticsService:
    """
    Read-only views over the complaint set.

    Each call loads one snapshot and evaluates it at one instant.
    """

    def __init__(
        self,
        complaint_repository: IComplaintRepository,
        config_provider: ISLAConfigProvider,
        clock: Optional[Clock] = None
    ):
        self._complaint_repo = complaint_repository
        self._config_provider = config_provider
        self._clock = clock or utc_now

    @property
    def policy(self) -> SLAPolicy:
        return self._config_provider.get_policy()

    def now(self) -> datetime:
        return self._clock()

    async def summary(self) -> AnalyticsSummary:
        complaints = await self._complaint_repo.list_all()
        return compute_analytics(complaints, self._clock(), self.policy)

    async def list_filtered(
        self,
        status: str = ALL_FILTER,
        category: str = ALL_FILTER,
        now: Optional[datetime] = None
    ) -> List[Complaint]:
        """Complaints matching the log filters, newest first."""
        if status not in (ALL_FILTER, ESCALATED_FILTER, *VALID_STATUSES):
            raise ValidationException(f"Unknown status filter '{status}'", {"field": "status"})
        if category not in (ALL_FILTER, *VALID_CATEGORIES):
            raise ValidationException(f"Unknown category filter '{category}'", {"field": "category"})

        complaints = await self._complaint_repo.list_all()
        return filter_complaints(complaints, status, category, now or self._clock(), self.policy)
