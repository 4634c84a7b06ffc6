from datetime import timedelta

import pytest

from src.complaints.application import ComplaintCreateDTO, ImageUpload, TechnicianCreateDTO
from src.complaints.domain import Principal
from src.core import (
    AuthorizationException,
    InvalidTransitionException,
    RepositoryException,
    ResourceNotFoundException,
    ValidationException,
)


def complaint_data(**overrides):
    fields = dict(
        title="No hot water",
        description="Shower runs cold since yesterday",
        category="water",
        priority="high",
        room_number="C-303",
    )
    fields.update(overrides)
    return ComplaintCreateDTO(**fields)


def image(name="photo.jpg", content_type="image/jpeg"):
    return ImageUpload(filename=name, content_type=content_type, data=b"\xff\xd8")


class TestCreateComplaint:

    async def test_creates_open_complaint_for_resident(self, complaint_service, complaint_repo, resident, now):
        complaint = await complaint_service.create_complaint(resident, complaint_data())

        assert complaint.status == "open"
        assert complaint.resident == resident.email
        assert complaint.room_number == "C-303"
        assert complaint.created_at == now
        assert complaint.updates == []
        assert complaint.resolved_at is None
        assert complaint.id in complaint_repo.items

    async def test_priority_defaults_to_medium(self, complaint_service, resident):
        complaint = await complaint_service.create_complaint(resident, complaint_data(priority=None))
        assert complaint.priority == "medium"

    async def test_uploads_are_stored_and_referenced(self, complaint_service, attachment_store, resident):
        complaint = await complaint_service.create_complaint(
            resident, complaint_data(), [image("a.jpg"), image("b.png", "image/png")]
        )

        assert len(attachment_store.saved) == 2
        assert complaint.images == ["uploads/1-a.jpg", "uploads/2-b.png"]

    async def test_six_images_rejected_before_anything_is_written(
        self, complaint_service, complaint_repo, attachment_store, resident
    ):
        with pytest.raises(ValidationException):
            await complaint_service.create_complaint(
                resident, complaint_data(), [image(f"{i}.jpg") for i in range(6)]
            )

        assert complaint_repo.items == {}
        assert attachment_store.saved == []

    async def test_image_references_count_toward_cap(self, complaint_service, complaint_repo, resident):
        data = complaint_data(images=["uploads/x.jpg"] * 4)
        with pytest.raises(ValidationException):
            await complaint_service.create_complaint(resident, data, [image(), image()])
        assert complaint_repo.items == {}

    async def test_non_image_upload_rejected(self, complaint_service, attachment_store, resident):
        with pytest.raises(ValidationException):
            await complaint_service.create_complaint(
                resident, complaint_data(), [image(), image("notes.pdf", "application/pdf")]
            )
        assert attachment_store.saved == []

    async def test_stored_images_removed_when_create_fails(
        self, complaint_service, complaint_repo, attachment_store, resident
    ):
        async def failing_create(complaint):
            raise RepositoryException("Could not create complaint")

        complaint_repo.create = failing_create

        with pytest.raises(RepositoryException):
            await complaint_service.create_complaint(resident, complaint_data(), [image("a.jpg"), image("b.jpg")])

        assert attachment_store.deleted == ["uploads/1-a.jpg", "uploads/2-b.jpg"]
        assert complaint_repo.items == {}

    @pytest.mark.parametrize("field", ["title", "description", "room_number"])
    async def test_blank_required_text_rejected(self, complaint_service, complaint_repo, resident, field):
        with pytest.raises(ValidationException):
            await complaint_service.create_complaint(resident, complaint_data(**{field: "  "}))
        assert complaint_repo.items == {}

    async def test_unknown_category_rejected(self, complaint_service, resident):
        with pytest.raises(ValidationException):
            await complaint_service.create_complaint(resident, complaint_data(category="gas"))

    async def test_unknown_priority_rejected(self, complaint_service, resident):
        with pytest.raises(ValidationException):
            await complaint_service.create_complaint(resident, complaint_data(priority="urgent"))

    async def test_only_residents_file_complaints(self, complaint_service, admin, plumber_principal):
        for principal in (admin, plumber_principal):
            with pytest.raises(AuthorizationException):
                await complaint_service.create_complaint(principal, complaint_data())


class TestAssignTechnician:

    @pytest.fixture
    async def complaint(self, complaint_service, resident):
        return await complaint_service.create_complaint(resident, complaint_data())

    async def test_assign_open_complaint(self, complaint_service, complaint_repo, complaint, admin, plumber):
        updated = await complaint_service.assign_technician(admin, complaint.id, plumber.id)

        assert updated.status == "in-progress"
        assert updated.technician.id == plumber.id
        assert len(updated.updates) == 1
        assert updated.updates[0].by == "Admin"
        assert updated.updates[0].message == f"Assigned to {plumber.name}"

        stored = complaint_repo.items[complaint.id]
        assert stored.status == "in-progress"
        assert stored.technician.name == plumber.name

    async def test_reassign_in_progress(self, complaint_service, technician_repo, complaint, admin, plumber):
        other = type(plumber)(id="t-water-2", name="Wes Water", email="wes@example.com", specialization="water")
        await technician_repo.create(other)

        await complaint_service.assign_technician(admin, complaint.id, plumber.id)
        updated = await complaint_service.assign_technician(admin, complaint.id, other.id)

        assert updated.technician.id == other.id
        assert [u.message for u in updated.updates] == ["Assigned to Pat Plumber", "Assigned to Wes Water"]

    async def test_specialization_must_match(self, complaint_service, complaint_repo, complaint, admin, electrician):
        with pytest.raises(ValidationException):
            await complaint_service.assign_technician(admin, complaint.id, electrician.id)
        assert complaint_repo.items[complaint.id].status == "open"

    async def test_unknown_technician(self, complaint_service, complaint, admin):
        with pytest.raises(ResourceNotFoundException):
            await complaint_service.assign_technician(admin, complaint.id, "nobody")

    async def test_unknown_complaint(self, complaint_service, admin, plumber):
        with pytest.raises(ResourceNotFoundException):
            await complaint_service.assign_technician(admin, "missing", plumber.id)

    async def test_resolved_complaint_cannot_be_assigned(self, complaint_service, complaint, admin, plumber):
        await complaint_service.record_status_update(admin, complaint.id, "resolved", "Fixed")
        with pytest.raises(InvalidTransitionException):
            await complaint_service.assign_technician(admin, complaint.id, plumber.id)

    async def test_resident_cannot_assign(self, complaint_service, complaint, resident, plumber):
        with pytest.raises(AuthorizationException):
            await complaint_service.assign_technician(resident, complaint.id, plumber.id)

    async def test_technician_cannot_self_assign(self, complaint_service, complaint, plumber_principal, plumber):
        with pytest.raises(AuthorizationException):
            await complaint_service.assign_technician(plumber_principal, complaint.id, plumber.id)


class TestRecordStatusUpdate:

    @pytest.fixture
    async def assigned(self, complaint_service, resident, admin, plumber):
        complaint = await complaint_service.create_complaint(resident, complaint_data())
        return await complaint_service.assign_technician(admin, complaint.id, plumber.id)

    async def test_assigned_technician_updates_under_own_name(self, complaint_service, assigned, plumber_principal):
        updated = await complaint_service.record_status_update(
            plumber_principal, assigned.id, "in-progress", "On my way"
        )
        assert updated.updates[-1].by == "Pat Plumber"
        assert updated.updates[-1].message == "On my way"

    async def test_admin_updates_as_admin(self, complaint_service, assigned, admin):
        updated = await complaint_service.record_status_update(admin, assigned.id, "in-progress", "Chasing")
        assert updated.updates[-1].by == "Admin"

    async def test_resolve_sets_resolved_at(self, complaint_service, assigned, plumber_principal, clock, now):
        clock.now = now + timedelta(hours=3)

        updated = await complaint_service.record_status_update(
            plumber_principal, assigned.id, "resolved", "Boiler repaired"
        )

        assert updated.status == "resolved"
        assert updated.resolved_at == now + timedelta(hours=3)

    async def test_history_is_preserved(self, complaint_service, complaint_repo, assigned, admin):
        await complaint_service.record_status_update(admin, assigned.id, "in-progress", "First")
        await complaint_service.record_status_update(admin, assigned.id, "in-progress", "Second")

        stored = complaint_repo.items[assigned.id]
        assert [u.message for u in stored.updates] == ["Assigned to Pat Plumber", "First", "Second"]

    async def test_other_technician_forbidden(self, complaint_service, assigned):
        stranger = Principal(id="t-other", name="Olly", email="o@example.com", role="technician")
        with pytest.raises(AuthorizationException):
            await complaint_service.record_status_update(stranger, assigned.id, "in-progress", "Hi")

    async def test_resident_forbidden(self, complaint_service, assigned, resident):
        with pytest.raises(AuthorizationException):
            await complaint_service.record_status_update(resident, assigned.id, "resolved", "Done")

    async def test_unassigned_technician_forbidden(self, complaint_service, resident, plumber_principal):
        complaint = await complaint_service.create_complaint(resident, complaint_data())
        with pytest.raises(AuthorizationException):
            await complaint_service.record_status_update(plumber_principal, complaint.id, "in-progress", "Hi")

    async def test_resolve_with_blank_message_uses_default_note(self, complaint_service, complaint_repo, assigned, admin):
        await complaint_service.record_status_update(admin, assigned.id, "resolved", "")

        stored = complaint_repo.items[assigned.id]
        assert stored.status == "resolved"
        assert stored.updates[-1].message == "Issue resolved."

    async def test_in_progress_requires_message(self, complaint_service, assigned, admin):
        with pytest.raises(ValidationException):
            await complaint_service.record_status_update(admin, assigned.id, "in-progress", "  ")

    async def test_no_update_after_resolution(self, complaint_service, assigned, admin):
        await complaint_service.record_status_update(admin, assigned.id, "resolved", "Done")
        with pytest.raises(InvalidTransitionException):
            await complaint_service.record_status_update(admin, assigned.id, "in-progress", "Again")

    async def test_unknown_complaint(self, complaint_service, admin):
        with pytest.raises(ResourceNotFoundException):
            await complaint_service.record_status_update(admin, "missing", "resolved", "Done")


class TestTechnicianService:

    async def test_admin_adds_technician(self, technician_service, technician_repo, admin):
        technician = await technician_service.add_technician(
            admin, TechnicianCreateDTO(name="Wendy Wifi", email="Wendy@Example.com", specialization="wifi")
        )

        assert technician.email == "wendy@example.com"
        assert technician.specialization == "wifi"
        assert technician.id in technician_repo.items

    async def test_duplicate_email_rejected(self, technician_service, admin, plumber):
        with pytest.raises(ValidationException):
            await technician_service.add_technician(
                admin, TechnicianCreateDTO(name="Pat Again", email=plumber.email, specialization="water")
            )

    async def test_unknown_specialization_rejected(self, technician_service, admin):
        with pytest.raises(ValidationException):
            await technician_service.add_technician(
                admin, TechnicianCreateDTO(name="Gus", email="gus@example.com", specialization="gas")
            )

    async def test_only_admin_provisions(self, technician_service, resident, plumber_principal):
        data = TechnicianCreateDTO(name="Self", email="self@example.com", specialization="wifi")
        for principal in (resident, plumber_principal):
            with pytest.raises(AuthorizationException):
                await technician_service.add_technician(principal, data)

    async def test_get_technician(self, technician_service, plumber):
        assert (await technician_service.get_technician(plumber.id)).name == "Pat Plumber"
        with pytest.raises(ResourceNotFoundException):
            await technician_service.get_technician("nobody")

    async def test_technicians_for_complaint(self, technician_service, complaint_factory, admin):
        matching, others = await technician_service.technicians_for(admin, complaint_factory(category="water"))
        assert [t.id for t in matching] == ["t-water"]
        assert [t.id for t in others] == ["t-elec"]


class TestAnalyticsService:

    async def test_summary_uses_clock(self, analytics_service, complaint_repo, complaint_factory, ago):
        await complaint_repo.create(complaint_factory("c-1", category="water", created_at=ago(3)))
        await complaint_repo.create(complaint_factory("c-2", category="water", created_at=ago(1)))

        summary = await analytics_service.summary()

        assert summary.total == 2
        assert summary.escalated == 1

    async def test_list_filtered_newest_first(self, analytics_service, complaint_repo, complaint_factory, ago):
        await complaint_repo.create(complaint_factory("old", created_at=ago(5)))
        await complaint_repo.create(complaint_factory("new", created_at=ago(1)))

        complaints = await analytics_service.list_filtered()

        assert [c.id for c in complaints] == ["new", "old"]

    async def test_unknown_filter_rejected(self, analytics_service):
        with pytest.raises(ValidationException):
            await analytics_service.list_filtered(status="closed")
        with pytest.raises(ValidationException):
            await analytics_service.list_filtered(category="gas")
