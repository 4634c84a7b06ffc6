"""Shared fixtures: fixed clock, principals and in-memory collaborators."""

import copy
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from src.complaints.application import (
    ComplaintService, TechnicianService, AnalyticsService,
    IComplaintRepository, ITechnicianRepository, ISLAConfigProvider, IAttachmentStore,
    ImageUpload,
)
from src.complaints.domain import Complaint, Principal, SLAPolicy, Technician

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class InMemoryComplaintRepository(IComplaintRepository):
    """Stores copies so callers cannot mutate persisted state in place."""

    def __init__(self):
        self.items = {}

    async def create(self, complaint: Complaint) -> Complaint:
        self.items[complaint.id] = copy.deepcopy(complaint)
        return complaint

    async def get_by_id(self, complaint_id: str) -> Optional[Complaint]:
        found = self.items.get(complaint_id)
        return copy.deepcopy(found) if found else None

    async def list_all(self) -> List[Complaint]:
        ordered = sorted(self.items.values(), key=lambda c: c.created_at, reverse=True)
        return [copy.deepcopy(c) for c in ordered]

    async def save(self, complaint: Complaint) -> Complaint:
        self.items[complaint.id] = copy.deepcopy(complaint)
        return complaint


class InMemoryTechnicianRepository(ITechnicianRepository):

    def __init__(self):
        self.items = {}

    async def create(self, technician: Technician) -> Technician:
        self.items[technician.id] = technician
        return technician

    async def get_by_id(self, technician_id: str) -> Optional[Technician]:
        return self.items.get(technician_id)

    async def get_by_email(self, email: str) -> Optional[Technician]:
        return next((t for t in self.items.values() if t.email == email), None)

    async def list_all(self) -> List[Technician]:
        return sorted(self.items.values(), key=lambda t: t.name)


class StaticConfigProvider(ISLAConfigProvider):

    def __init__(self, policy: Optional[SLAPolicy] = None):
        self.policy = policy or SLAPolicy()

    def get_policy(self) -> SLAPolicy:
        return self.policy


class RecordingAttachmentStore(IAttachmentStore):

    def __init__(self):
        self.saved: List[ImageUpload] = []
        self.deleted: List[str] = []

    async def save(self, upload: ImageUpload) -> str:
        self.saved.append(upload)
        return f"uploads/{len(self.saved)}-{upload.filename}"

    async def delete(self, reference: str) -> None:
        self.deleted.append(reference)


def make_complaint(
    complaint_id: str = "c-1",
    category: str = "water",
    status: str = "open",
    created_at: datetime = NOW,
    resolved_at: Optional[datetime] = None,
    **overrides
) -> Complaint:
    fields = dict(
        id=complaint_id,
        title="Leaking tap",
        description="Kitchen tap drips all night",
        category=category,
        priority="medium",
        resident="resident@example.com",
        room_number="A-101",
        status=status,
        created_at=created_at,
        updated_at=resolved_at or created_at,
        resolved_at=resolved_at,
    )
    fields.update(overrides)
    return Complaint(**fields)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    """Mutable clock; set `clock.now` to move time."""
    class Clock:
        def __init__(self):
            self.now = NOW

        def __call__(self):
            return self.now

    return Clock()


@pytest.fixture
def complaint_factory():
    return make_complaint


@pytest.fixture
def resident():
    return Principal(id="u-res", name="Rita Resident", email="rita@example.com", role="resident")


@pytest.fixture
def admin():
    return Principal(id="u-adm", name="Ada Admin", email="ada@example.com", role="admin")


@pytest.fixture
def plumber():
    return Technician(id="t-water", name="Pat Plumber", email="pat@example.com", specialization="water")


@pytest.fixture
def electrician():
    return Technician(id="t-elec", name="Eli Sparks", email="eli@example.com", specialization="electricity")


@pytest.fixture
def plumber_principal(plumber):
    return Principal(id=plumber.id, name=plumber.name, email=plumber.email, role="technician")


@pytest.fixture
def complaint_repo():
    return InMemoryComplaintRepository()


@pytest.fixture
def technician_repo(plumber, electrician):
    repo = InMemoryTechnicianRepository()
    repo.items = {plumber.id: plumber, electrician.id: electrician}
    return repo


@pytest.fixture
def attachment_store():
    return RecordingAttachmentStore()


@pytest.fixture
def config_provider():
    return StaticConfigProvider()


@pytest.fixture
def complaint_service(complaint_repo, technician_repo, attachment_store, clock):
    return ComplaintService(complaint_repo, technician_repo, attachment_store=attachment_store, clock=clock)


@pytest.fixture
def technician_service(technician_repo, clock):
    return TechnicianService(technician_repo, clock=clock)


@pytest.fixture
def analytics_service(complaint_repo, config_provider, clock):
    return AnalyticsService(complaint_repo, config_provider, clock=clock)


def hours_before(hours: float, minutes: float = 0) -> datetime:
    return NOW - timedelta(hours=hours, minutes=minutes)


@pytest.fixture
def ago():
    """`ago(hours, minutes)` -> timestamp that long before NOW."""
    return hours_before
