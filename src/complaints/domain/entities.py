"""
Complaint Domain Entities
==========================

Pure Python domain entities for the maintenance logbook.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List

from src.config import (
    ComplaintStatus, Role, VALID_STATUSES, UPDATABLE_STATUSES, ADMIN_DISPLAY_NAME,
    DEFAULT_RESOLUTION_MESSAGE,
)
from src.core import InvalidTransitionException, ValidationException


@dataclass(frozen=True)
class UpdateRecord:
    """A timestamped note appended to a complaint's history."""
    time: datetime
    message: str
    by: str

    def to_dict(self) -> dict:
        return {"time": self.time.isoformat(), "message": self.message, "by": self.by}


@dataclass(frozen=True)
class TechnicianSnapshot:
    """
    Copy of a technician's identity taken at assignment time.

    Not a live reference: the name is whatever it was when assigned,
    even if the technician record changes later.
    """
    id: str
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


@dataclass
class Technician:
    """Technician entity, provisioned by an admin."""
    id: str
    name: str
    email: str
    specialization: str
    created_at: Optional[datetime] = None

    def snapshot(self) -> TechnicianSnapshot:
        """Get the {id, name} copy stored on complaints."""
        return TechnicianSnapshot(id=self.id, name=self.name)

    def handles(self, category: str) -> bool:
        """Check if the technician is specialized in a category."""
        return self.specialization == category


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of an operation."""
    id: str
    name: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_technician(self) -> bool:
        return self.role == Role.TECHNICIAN

    @property
    def is_resident(self) -> bool:
        return self.role == Role.RESIDENT

    @property
    def display_name(self) -> str:
        """Name written into the `by` field of update records."""
        return ADMIN_DISPLAY_NAME if self.is_admin else self.name


@dataclass
class Complaint:
    """
    Complaint entity representing a maintenance ticket.

    Status moves forward only: open -> in-progress -> resolved, or
    open -> resolved directly. `updates` is append-only.
    """

    # Core attributes
    id: str
    title: str
    description: str
    category: str
    priority: str
    resident: str
    room_number: str

    # Timestamps
    created_at: datetime
    updated_at: datetime

    status: str = ComplaintStatus.OPEN
    images: List[str] = field(default_factory=list)
    technician: Optional[TechnicianSnapshot] = None
    updates: List[UpdateRecord] = field(default_factory=list)
    resolved_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate complaint invariants on initialization."""
        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot be before created_at")

        if (self.resolved_at is not None) != (self.status == ComplaintStatus.RESOLVED):
            raise ValueError("resolved_at must be set if and only if status is resolved")

        if self.resolved_at and self.resolved_at < self.created_at:
            raise ValueError("resolved_at cannot be before created_at")

    @property
    def is_resolved(self) -> bool:
        """Check if complaint has been resolved."""
        return self.status == ComplaintStatus.RESOLVED

    @property
    def timeline(self) -> List[UpdateRecord]:
        """Update records newest first, for display."""
        return list(reversed(self.updates))

    def is_assigned_to(self, principal_id: str) -> bool:
        """Check if the given principal is the assigned technician."""
        return self.technician is not None and self.technician.id == principal_id

    def assign(self, technician: Technician, timestamp: Optional[datetime] = None) -> UpdateRecord:
        """
        Assign (or reassign) a technician.

        Moves the complaint to in-progress and appends an "Assigned to"
        record written by the admin.
        """
        if self.is_resolved:
            raise InvalidTransitionException(self.id, self.status, ComplaintStatus.IN_PROGRESS)

        now = timestamp or datetime.now(timezone.utc)
        self.technician = technician.snapshot()
        self.status = ComplaintStatus.IN_PROGRESS
        return self._append(f"Assigned to {technician.name}", ADMIN_DISPLAY_NAME, now)

    def record_update(
        self,
        new_status: str,
        message: str,
        by: str,
        timestamp: Optional[datetime] = None
    ) -> UpdateRecord:
        """
        Append a status update and move the complaint to `new_status`.

        A blank message is allowed only when resolving; the default
        resolution note is recorded instead.
        """
        if new_status not in VALID_STATUSES:
            raise ValidationException(
                f"Unknown status '{new_status}'",
                {"field": "status", "value": new_status}
            )
        if self.is_resolved or new_status not in UPDATABLE_STATUSES:
            raise InvalidTransitionException(self.id, self.status, new_status)

        message = (message or "").strip()
        if not message:
            if new_status != ComplaintStatus.RESOLVED:
                raise ValidationException("Update message is required", {"field": "message"})
            message = DEFAULT_RESOLUTION_MESSAGE

        now = timestamp or datetime.now(timezone.utc)
        record = self._append(message, by, now)
        self.status = new_status
        if new_status == ComplaintStatus.RESOLVED:
            self.resolved_at = now
        return record

    def _append(self, message: str, by: str, timestamp: datetime) -> UpdateRecord:
        record = UpdateRecord(time=timestamp, message=message, by=by)
        self.updates.append(record)
        self.updated_at = timestamp
        return record
