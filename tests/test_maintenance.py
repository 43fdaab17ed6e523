import pytest

from doccollab.domains.collaboration.services import PresenceService
from doccollab.domains.documents.services import DocumentService
from doccollab.domains.versions.services import VersionService
from doccollab.maintenance import run_maintenance_pass


@pytest.mark.asyncio
async def test_maintenance_pass_cleans_up(session_factory, alice, monkeypatch):
    from doccollab.core.config import settings

    monkeypatch.setattr(settings, "max_versions", 2)

    async with session_factory() as session:
        document = await DocumentService(session).create_document(alice, title="Plan")
        unbounded = VersionService(session, max_versions=100)
        for _ in range(4):
            await unbounded.create_version(document.uuid, alice)
        await PresenceService(session).update_presence(document.uuid, alice)

    result = await run_maintenance_pass(session_factory)

    assert result == {"versions_evicted": 2, "presence_removed": 0}

    async with session_factory() as session:
        assert await VersionService(session).get_version_count(document.uuid, alice) == 2


@pytest.mark.asyncio
async def test_maintenance_pass_survives_failures(session_factory, monkeypatch, caplog):
    async def broken_cleanup(self):
        raise RuntimeError("boom")

    monkeypatch.setattr(VersionService, "cleanup_old_versions", broken_cleanup)

    result = await run_maintenance_pass(session_factory)

    assert result == {"versions_evicted": 0, "presence_removed": 0}
    assert "Version cleanup failed" in caplog.text
