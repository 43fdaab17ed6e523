import json
import uuid

import pytest

from doccollab.core.errors import Unauthorized, NotFound, Forbidden, ValidationError
from doccollab.db.repositories.collaboration_repository import (
    CollaboratorRepository, PresenceRepository
)
from doccollab.db.repositories.version_repository import DocumentVersionRepository
from doccollab.domains.access.entities import Role
from doccollab.domains.access.services import AccessControlService
from doccollab.domains.collaboration.services import PresenceService
from doccollab.domains.documents.entities import EMPTY_CONTENT, DocumentPatch, default_title
from doccollab.domains.documents.services import DocumentService
from doccollab.domains.folders.services import FolderService
from doccollab.domains.versions.services import VersionService


def test_default_title_numbering(clock):
    assert default_title(clock(), 0) == "Mar 14, 2026"
    assert default_title(clock(), 1) == "Mar 14, 2026 (2)"
    assert default_title(clock(), 4) == "Mar 14, 2026 (5)"


def test_patch_distinguishes_unset_from_root():
    assert DocumentPatch().is_empty()
    assert DocumentPatch(title="x").to_values() == {"title": "x"}
    assert DocumentPatch(parent_folder_id=None).to_values() == {"parent_folder_id": None}


@pytest.mark.asyncio
async def test_create_document_defaults(session, clock, alice):
    documents = DocumentService(session, clock)

    first = await documents.create_document(alice)
    second = await documents.create_document(alice, title="   ")
    named = await documents.create_document(alice, title="Roadmap")
    clock.advance(days=1)
    next_day = await documents.create_document(alice)

    assert first.title == "Mar 14, 2026"
    assert second.title == "Mar 14, 2026 (2)"
    assert named.title == "Roadmap"
    assert next_day.title == "Mar 15, 2026"

    assert json.loads(first.content) == {"type": "doc", "content": []}
    assert first.content == EMPTY_CONTENT
    assert first.owner_id == "alice"
    assert not first.is_deleted


@pytest.mark.asyncio
async def test_create_document_requires_identity_and_owned_folder(session, clock, alice, bob):
    documents = DocumentService(session, clock)
    bobs_folder = await FolderService(session, clock).create_folder(bob, "Bob's")

    with pytest.raises(Unauthorized):
        await documents.create_document(None, title="Plan")
    with pytest.raises(NotFound):
        await documents.create_document(alice, title="Plan", parent_folder_id=uuid.uuid4())
    with pytest.raises(NotFound):
        await documents.create_document(alice, title="Plan", parent_folder_id=bobs_folder.uuid)

    own_folder = await FolderService(session, clock).create_folder(alice, "Work")
    placed = await documents.create_document(alice, title="Plan", parent_folder_id=own_folder.uuid)
    assert placed.parent_folder_id == own_folder.uuid


@pytest.mark.asyncio
async def test_get_document_is_access_filtered(session, clock, alice, carol):
    documents = DocumentService(session, clock)
    document = await documents.create_document(alice, title="Plan")

    assert (await documents.get_document(document.uuid, alice)).title == "Plan"
    assert await documents.get_document(document.uuid, carol) is None
    assert await documents.get_document(document.uuid, None) is None
    assert await documents.get_document(uuid.uuid4(), alice) is None


@pytest.mark.asyncio
async def test_list_documents_merges_owned_and_shared(session, clock, alice, bob):
    documents = DocumentService(session, clock)
    access = AccessControlService(session, clock)

    own = await documents.create_document(alice, title="Own")
    clock.advance(minutes=1)
    shared = await documents.create_document(bob, title="Shared")
    await access.add_collaborator(shared.uuid, bob, "alice", Role.VIEWER)
    clock.advance(minutes=1)
    await documents.update_document(own.uuid, alice, DocumentPatch(content=EMPTY_CONTENT))

    listed = await documents.list_documents(alice)
    assert [d.uuid for d in listed] == [own.uuid, shared.uuid]
    assert await documents.list_documents(None) == []


@pytest.mark.asyncio
async def test_list_documents_include_deleted_never_shows_shared_trash(session, clock, alice, bob):
    documents = DocumentService(session, clock)
    access = AccessControlService(session, clock)

    own = await documents.create_document(alice, title="Own")
    shared = await documents.create_document(bob, title="Shared")
    await access.add_collaborator(shared.uuid, bob, "alice", Role.EDITOR)
    await documents.delete_document(own.uuid, alice)
    await documents.delete_document(shared.uuid, bob)

    assert await documents.list_documents(alice) == []
    with_trash = await documents.list_documents(alice, include_deleted=True)
    assert [d.uuid for d in with_trash] == [own.uuid]


@pytest.mark.asyncio
async def test_list_documents_by_folder(session, clock, alice):
    documents = DocumentService(session, clock)
    folder = await FolderService(session, clock).create_folder(alice, "Work")
    inside = await documents.create_document(alice, title="Inside", parent_folder_id=folder.uuid)
    await documents.create_document(alice, title="Outside")

    listed = await documents.list_documents(alice, folder_id=folder.uuid)
    assert [d.uuid for d in listed] == [inside.uuid]


@pytest.mark.asyncio
async def test_search_documents(session, clock, alice, bob, carol):
    documents = DocumentService(session, clock)
    access = AccessControlService(session, clock)

    own = await documents.create_document(alice, title="Project Plan")
    shared = await documents.create_document(bob, title="Plan B")
    await access.add_collaborator(shared.uuid, bob, "alice", Role.VIEWER)
    await documents.create_document(carol, title="Secret plan")
    percent = await documents.create_document(alice, title="100% done")

    found = await documents.search_documents(alice, "PLAN")
    assert {d.uuid for d in found} == {own.uuid, shared.uuid}

    assert [d.uuid for d in await documents.search_documents(alice, "%")] == [percent.uuid]
    assert await documents.search_documents(alice, "   ") == []
    assert await documents.search_documents(None, "plan") == []


@pytest.mark.asyncio
async def test_recent_and_trash_listings(session, clock, alice):
    documents = DocumentService(session, clock)
    created = []
    for title in ("a", "b", "c"):
        created.append(await documents.create_document(alice, title=title))
        clock.advance(seconds=10)
    await documents.delete_document(created[0].uuid, alice)

    recent = await documents.list_recent_documents(alice, limit=1)
    assert [d.title for d in recent] == ["c"]
    assert [d.title for d in await documents.list_trash(alice)] == ["a"]


@pytest.mark.asyncio
async def test_update_document_requires_editor(session, clock, alice, bob, carol):
    documents = DocumentService(session, clock)
    access = AccessControlService(session, clock)
    document = await documents.create_document(alice, title="Plan")
    await access.add_collaborator(document.uuid, alice, "bob", Role.EDITOR)
    await access.add_collaborator(document.uuid, alice, "carol", Role.VIEWER)
    new_content = json.dumps({"type": "doc", "content": [{"type": "paragraph"}]})

    with pytest.raises(Forbidden):
        await documents.update_document(document.uuid, carol, DocumentPatch(content=new_content))

    clock.advance(minutes=2)
    updated = await documents.update_document(document.uuid, bob, DocumentPatch(content=new_content))

    assert updated.content == new_content
    assert updated.title == "Plan"
    assert updated.updated_at == clock()


@pytest.mark.asyncio
async def test_rename_and_move(session, clock, alice, bob):
    documents = DocumentService(session, clock)
    folders = FolderService(session, clock)
    folder = await folders.create_folder(alice, "Work")
    bobs_folder = await folders.create_folder(bob, "Bob's")
    document = await documents.create_document(alice, title="Plan", parent_folder_id=folder.uuid)

    renamed = await documents.rename_document(document.uuid, alice, "  Final plan  ")
    assert renamed.title == "Final plan"
    assert renamed.parent_folder_id == folder.uuid

    with pytest.raises(ValidationError):
        await documents.rename_document(document.uuid, alice, "   ")

    moved = await documents.move_document(document.uuid, alice, None)
    assert moved.parent_folder_id is None

    with pytest.raises(NotFound):
        await documents.move_document(document.uuid, alice, bobs_folder.uuid)


@pytest.mark.asyncio
async def test_delete_restore_round_trip(session, clock, alice, bob):
    documents = DocumentService(session, clock)
    access = AccessControlService(session, clock)
    content = json.dumps({"type": "doc", "content": [{"type": "paragraph", "content": [{"type": "text", "text": "hi"}]}]})
    document = await documents.create_document(alice, title="Plan", content=content)
    await access.add_collaborator(document.uuid, alice, "bob", Role.EDITOR)

    with pytest.raises(Forbidden):
        await documents.delete_document(document.uuid, bob)

    await documents.delete_document(document.uuid, alice)
    await documents.delete_document(document.uuid, alice)

    assert await documents.get_document(document.uuid, bob) is None
    assert await documents.list_documents(bob) == []
    with pytest.raises(NotFound):
        await documents.rename_document(document.uuid, bob, "Hijacked")

    restored = await documents.restore_document(document.uuid, alice)
    again = await documents.restore_document(document.uuid, alice)

    assert not restored.is_deleted and not again.is_deleted
    visible = await documents.get_document(document.uuid, bob)
    assert visible.content == content
    assert visible.title == "Plan"
    renamed = await documents.rename_document(document.uuid, bob, "Edited")
    assert renamed.title == "Edited"


@pytest.mark.asyncio
async def test_permanent_delete_cascades(session, clock, alice, bob):
    documents = DocumentService(session, clock)
    document = await documents.create_document(alice, title="Plan")
    await AccessControlService(session, clock).add_collaborator(document.uuid, alice, "bob", Role.EDITOR)
    await VersionService(session, clock).create_version(document.uuid, alice)
    await PresenceService(session, clock).update_presence(document.uuid, bob, cursor_position=1)

    with pytest.raises(Forbidden):
        await documents.permanently_delete_document(document.uuid, bob)

    await documents.permanently_delete_document(document.uuid, alice)

    assert await documents.document_repository.get_by_uuid(document.uuid) is None
    assert await DocumentVersionRepository(session).count_by_document(document.uuid) == 0
    assert await CollaboratorRepository(session).get_by_document(document.uuid) == []
    assert await PresenceRepository(session).get(document.uuid, "bob") is None


@pytest.mark.asyncio
async def test_empty_trash(session, clock, alice):
    documents = DocumentService(session, clock)
    kept = await documents.create_document(alice, title="Kept")
    for title in ("Old 1", "Old 2"):
        trashed = await documents.create_document(alice, title=title)
        await documents.delete_document(trashed.uuid, alice)

    assert await documents.empty_trash(alice) == 2
    assert await documents.list_trash(alice) == []
    assert [d.uuid for d in await documents.list_documents(alice)] == [kept.uuid]
    assert await documents.empty_trash(alice) == 0


@pytest.mark.asyncio
async def test_duplicate_document(session, clock, alice, bob):
    documents = DocumentService(session, clock)
    folder = await FolderService(session, clock).create_folder(alice, "Work")
    content = json.dumps({"type": "doc", "content": [{"type": "horizontalRule"}]})
    source = await documents.create_document(alice, title="Plan", content=content, parent_folder_id=folder.uuid)
    await AccessControlService(session, clock).add_collaborator(source.uuid, alice, "bob", Role.EDITOR)

    copy = await documents.duplicate_document(source.uuid, alice)

    assert copy.uuid != source.uuid
    assert copy.title == "Plan (Copy)"
    assert copy.content == content
    assert copy.parent_folder_id == folder.uuid
    assert copy.owner_id == "alice"

    with pytest.raises(Forbidden):
        await documents.duplicate_document(source.uuid, bob)
