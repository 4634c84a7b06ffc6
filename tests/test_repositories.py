from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.complaints.application import ImageUpload
from src.complaints.domain import Technician
from src.complaints.infrastructure import (
    LocalAttachmentStore,
    SQLAlchemyComplaintRepository,
    SQLAlchemyTechnicianRepository,
    YAMLConfigProvider,
)
from src.core import ConfigurationException, RepositoryException, ValidationException
from src.infrastructure.database import Base


@pytest.fixture
async def session_maker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'logbook.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


class TestComplaintRepository:

    async def test_round_trip_with_history(self, session_maker, complaint_factory, plumber, now):
        complaint = complaint_factory(str(uuid4()), images=["uploads/a.jpg"])

        async with session_maker() as session:
            repo = SQLAlchemyComplaintRepository(session)
            await repo.create(complaint)
            await session.commit()

        complaint.assign(plumber, now + timedelta(minutes=10))
        complaint.record_update("resolved", "Fixed", "Pat Plumber", now + timedelta(hours=1))

        async with session_maker() as session:
            repo = SQLAlchemyComplaintRepository(session)
            await repo.save(complaint)
            await session.commit()

        async with session_maker() as session:
            loaded = await SQLAlchemyComplaintRepository(session).get_by_id(complaint.id)

        assert loaded.status == "resolved"
        assert loaded.resolved_at == now + timedelta(hours=1)
        assert loaded.images == ["uploads/a.jpg"]
        assert loaded.technician.id == plumber.id
        assert [u.message for u in loaded.updates] == ["Assigned to Pat Plumber", "Fixed"]
        assert loaded.updates[0].time == now + timedelta(minutes=10)
        assert loaded.created_at == now

    async def test_list_all_newest_first(self, session_maker, complaint_factory, ago):
        old = complaint_factory(str(uuid4()), created_at=ago(5))
        new = complaint_factory(str(uuid4()), created_at=ago(1))

        async with session_maker() as session:
            repo = SQLAlchemyComplaintRepository(session)
            await repo.create(old)
            await repo.create(new)
            await session.commit()

        async with session_maker() as session:
            complaints = await SQLAlchemyComplaintRepository(session).list_all()

        assert [c.id for c in complaints] == [new.id, old.id]

    async def test_unknown_or_malformed_id(self, session_maker):
        async with session_maker() as session:
            repo = SQLAlchemyComplaintRepository(session)
            assert await repo.get_by_id(str(uuid4())) is None
            assert await repo.get_by_id("not-a-uuid") is None

    async def test_save_missing_complaint_fails(self, session_maker, complaint_factory):
        async with session_maker() as session:
            with pytest.raises(RepositoryException):
                await SQLAlchemyComplaintRepository(session).save(complaint_factory(str(uuid4())))


class TestTechnicianRepository:

    async def test_create_and_lookup(self, session_maker):
        technician = Technician(id=str(uuid4()), name="Pat", email="pat@example.com", specialization="water")

        async with session_maker() as session:
            await SQLAlchemyTechnicianRepository(session).create(technician)
            await session.commit()

        async with session_maker() as session:
            repo = SQLAlchemyTechnicianRepository(session)
            by_id = await repo.get_by_id(technician.id)
            by_email = await repo.get_by_email("pat@example.com")
            everyone = await repo.list_all()

        assert by_id.specialization == "water"
        assert by_email.id == technician.id
        assert [t.id for t in everyone] == [technician.id]

    async def test_duplicate_email_is_a_validation_error(self, session_maker):
        async with session_maker() as session:
            repo = SQLAlchemyTechnicianRepository(session)
            await repo.create(Technician(id=str(uuid4()), name="A", email="dup@example.com", specialization="wifi"))
            with pytest.raises(ValidationException):
                await repo.create(Technician(id=str(uuid4()), name="B", email="dup@example.com", specialization="wifi"))


class TestYAMLConfigProvider:

    def test_missing_file_uses_defaults(self, tmp_path):
        provider = YAMLConfigProvider(tmp_path / "absent.yaml")
        assert provider.get_policy().get_threshold_hours("water") == 2

    def test_loads_overrides(self, tmp_path):
        path = tmp_path / "sla.yaml"
        path.write_text("category_sla_hours:\n  water: 1\n")

        policy = YAMLConfigProvider(path).get_policy()

        assert policy.get_threshold_hours("water") == 1
        assert policy.get_threshold_hours("wifi") == 6

    def test_reload_picks_up_changes(self, tmp_path):
        path = tmp_path / "sla.yaml"
        path.write_text("category_sla_hours:\n  wifi: 3\n")
        provider = YAMLConfigProvider(path)

        path.write_text("category_sla_hours:\n  wifi: 9\n")
        provider.reload()

        assert provider.get_policy().get_threshold_hours("wifi") == 9

    def test_invalid_config(self, tmp_path):
        path = tmp_path / "sla.yaml"
        path.write_text("category_sla_hours:\n  gas: 1\n")

        with pytest.raises(ConfigurationException):
            YAMLConfigProvider(path)

    @pytest.mark.parametrize("content", ["- water\n- wifi\n", "4\n"])
    def test_non_mapping_config(self, tmp_path, content):
        path = tmp_path / "sla.yaml"
        path.write_text(content)

        with pytest.raises(ConfigurationException):
            YAMLConfigProvider(path)


class TestLocalAttachmentStore:

    async def test_save_then_delete(self, tmp_path):
        store = LocalAttachmentStore(tmp_path / "uploads")

        reference = await store.save(ImageUpload(filename="leak.JPG", content_type="image/jpeg", data=b"\xff\xd8"))

        assert reference.startswith("uploads/") and reference.endswith(".jpg")
        stored = tmp_path / "uploads" / reference.split("/")[-1]
        assert stored.read_bytes() == b"\xff\xd8"

        await store.delete(reference)
        assert not stored.exists()

    async def test_delete_missing_file_is_ignored(self, tmp_path):
        await LocalAttachmentStore(tmp_path).delete("uploads/gone.jpg")
