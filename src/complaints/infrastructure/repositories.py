"""
Complaint Infrastructure Repositories
======================================

Concrete implementations of repository interfaces using SQLAlchemy.

This layer contains the data access logic - how we store and retrieve
entities from the database. Repositories only flush; the session owner
commits or rolls back, so a failed mutation leaves nothing behind.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from uuid import UUID

import yaml
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.complaints.application import (
    IComplaintRepository, ITechnicianRepository, ISLAConfigProvider
)
from src.complaints.domain import (
    Complaint, Technician, TechnicianSnapshot, UpdateRecord, SLAPolicy
)
from src.complaints.infrastructure.models import ComplaintModel, TechnicianModel
from src.core import ConfigurationException, RepositoryException, ValidationException
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes returned by drivers without tz support."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(value)
    except (ValueError, TypeError):
        return None


def _complaint_to_domain(model: ComplaintModel) -> Complaint:
    technician = None
    if model.technician:
        technician = TechnicianSnapshot(
            id=model.technician["id"],
            name=model.technician["name"]
        )

    return Complaint(
        id=str(model.id),
        title=model.title,
        description=model.description,
        category=model.category,
        priority=model.priority,
        resident=model.resident,
        room_number=model.room_number,
        status=model.status,
        images=list(model.images or []),
        technician=technician,
        updates=[
            UpdateRecord(
                time=_as_utc(datetime.fromisoformat(u["time"])),
                message=u["message"],
                by=u["by"]
            )
            for u in (model.updates or [])
        ],
        created_at=_as_utc(model.created_at),
        updated_at=_as_utc(model.updated_at),
        resolved_at=_as_utc(model.resolved_at),
    )


def _technician_to_domain(model: TechnicianModel) -> Technician:
    return Technician(
        id=str(model.id),
        name=model.name,
        email=model.email,
        specialization=model.specialization,
        created_at=_as_utc(model.created_at),
    )


class SQLAlchemyComplaintRepository(IComplaintRepository):
    """
    SQLAlchemy implementation of complaint repository.

    Handles persistence of Complaint entities using async SQLAlchemy.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _get_model(self, complaint_id: str) -> Optional[ComplaintModel]:
        complaint_uuid = _parse_uuid(complaint_id)
        if complaint_uuid is None:
            return None

        stmt = select(ComplaintModel).where(ComplaintModel.id == complaint_uuid)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, complaint: Complaint) -> Complaint:
        """Create new complaint."""
        model = ComplaintModel(
            id=UUID(complaint.id),
            title=complaint.title,
            description=complaint.description,
            category=complaint.category,
            status=complaint.status,
            priority=complaint.priority,
            resident=complaint.resident,
            room_number=complaint.room_number,
            images=list(complaint.images),
            technician=complaint.technician.to_dict() if complaint.technician else None,
            updates=[u.to_dict() for u in complaint.updates],
            created_at=complaint.created_at,
            updated_at=complaint.updated_at,
            resolved_at=complaint.resolved_at,
        )

        try:
            self._session.add(model)
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to create complaint", extra={"complaint_id": complaint.id, "error": str(e)})
            raise RepositoryException(f"Could not create complaint {complaint.id}") from e

        return complaint

    async def get_by_id(self, complaint_id: str) -> Optional[Complaint]:
        """Get complaint by ID."""
        try:
            model = await self._get_model(complaint_id)
        except SQLAlchemyError as e:
            logger.error("Failed to load complaint", extra={"complaint_id": complaint_id, "error": str(e)})
            raise RepositoryException(f"Could not load complaint {complaint_id}") from e

        return _complaint_to_domain(model) if model else None

    async def list_all(self) -> List[Complaint]:
        """List all complaints ordered by created_at descending."""
        stmt = select(ComplaintModel).order_by(ComplaintModel.created_at.desc())

        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Failed to list complaints", extra={"error": str(e)})
            raise RepositoryException("Could not list complaints") from e

        return [_complaint_to_domain(model) for model in result.scalars().all()]

    async def save(self, complaint: Complaint) -> Complaint:
        """Write back the mutable fields of an existing complaint."""
        try:
            model = await self._get_model(complaint.id)
            if not model:
                raise RepositoryException(f"Complaint {complaint.id} not found")

            model.status = complaint.status
            model.technician = complaint.technician.to_dict() if complaint.technician else None
            model.updates = [u.to_dict() for u in complaint.updates]
            model.updated_at = complaint.updated_at
            model.resolved_at = complaint.resolved_at

            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to save complaint", extra={"complaint_id": complaint.id, "error": str(e)})
            raise RepositoryException(f"Could not save complaint {complaint.id}") from e

        return complaint


class SQLAlchemyTechnicianRepository(ITechnicianRepository):
    """
    SQLAlchemy implementation of technician repository.

    Handles persistence of Technician entities.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, technician: Technician) -> Technician:
        """Create new technician."""
        model = TechnicianModel(
            id=UUID(technician.id),
            name=technician.name,
            email=technician.email,
            specialization=technician.specialization,
            created_at=technician.created_at or datetime.now(timezone.utc),
        )

        try:
            self._session.add(model)
            await self._session.flush()
        except IntegrityError as e:
            logger.warning("Duplicate technician email", extra={"technician_id": technician.id})
            raise ValidationException(
                "Technician with this email already exists",
                {"field": "email"}
            ) from e
        except SQLAlchemyError as e:
            logger.error("Failed to create technician", extra={"technician_id": technician.id, "error": str(e)})
            raise RepositoryException(f"Could not create technician {technician.id}") from e

        return _technician_to_domain(model)

    async def get_by_id(self, technician_id: str) -> Optional[Technician]:
        """Get technician by ID."""
        technician_uuid = _parse_uuid(technician_id)
        if technician_uuid is None:
            return None

        stmt = select(TechnicianModel).where(TechnicianModel.id == technician_uuid)
        return await self._first(stmt)

    async def get_by_email(self, email: str) -> Optional[Technician]:
        """Get technician by email."""
        stmt = select(TechnicianModel).where(TechnicianModel.email == email)
        return await self._first(stmt)

    async def list_all(self) -> List[Technician]:
        """List technicians ordered by name."""
        stmt = select(TechnicianModel).order_by(TechnicianModel.name.asc())

        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Failed to list technicians", extra={"error": str(e)})
            raise RepositoryException("Could not list technicians") from e

        return [_technician_to_domain(model) for model in result.scalars().all()]

    async def _first(self, stmt) -> Optional[Technician]:
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Failed to load technician", extra={"error": str(e)})
            raise RepositoryException("Could not load technician") from e

        model = result.scalar_one_or_none()
        return _technician_to_domain(model) if model else None


class YAMLConfigProvider(ISLAConfigProvider):
    """
    SLA configuration provider that loads from YAML.

    Expected shape:

        category_sla_hours:
          electricity: 4
          water: 2

    A missing file means default thresholds.
    """

    def __init__(self, config_path: str | Path):
        self._config_path = Path(config_path)
        self._policy: Optional[SLAPolicy] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            logger.warning(f"SLA config file not found: {self._config_path}, using defaults")
            self._policy = SLAPolicy()
            return

        with open(self._config_path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationException(
                f"Invalid SLA config in {self._config_path}: expected a mapping",
                {"type": type(data).__name__}
            )

        try:
            self._policy = SLAPolicy(**data)
        except ValidationError as e:
            raise ConfigurationException(
                f"Invalid SLA config in {self._config_path}",
                {"errors": str(e)}
            ) from e

    def get_policy(self) -> SLAPolicy:
        """Get current SLA thresholds."""
        return self._policy

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()
        logger.info("SLA configuration reloaded", extra={"path": str(self._config_path)})
