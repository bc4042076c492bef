import asyncio

import pytest

from docshare.core.config import settings
from docshare.core.errors import AccessDeniedError, DocumentNotAccessibleError, SaveTimeoutError
from docshare.db.repositories.comment_repository import CommentRepository
from docshare.db.repositories.document_repository import DocumentIndexRepository
from docshare.db.repositories.sharing_repository import PublicLookupRepository, SharedReferenceRepository
from docshare.domains.comments.entities import BlockType
from docshare.domains.comments.services import CommentService
from docshare.domains.documents.entities import DEFAULT_TITLE
from docshare.domains.documents.services import DocumentService
from docshare.domains.sharing.entities import Collaborator, Permission, PermissionLevel, ShareMeta
from docshare.domains.sharing.services import SharingService


@pytest.fixture
def document_service(test_db):
    return DocumentService(test_db)


async def test_save_registers_index(test_db, document_service, owner):
    document = await document_service.save_document(owner.id, "doc-9", {"blocks": []})

    assert document.title == DEFAULT_TITLE
    entry = await DocumentIndexRepository(test_db).get("doc-9")
    assert entry.owner_id == owner.id


async def test_resave_keeps_created_at_and_sharing(test_db, document_service, owner, essay):
    await SharingService(test_db).share_with_user(
        owner.id, essay.id, "bob@x.com", PermissionLevel.VIEWER, ShareMeta(title=essay.title)
    )

    updated = await document_service.save_document(owner.id, essay.id, {"blocks": ["new"]}, "Renamed")

    assert updated.created_at == essay.created_at
    assert updated.title == "Renamed"
    assert updated.data == {"blocks": ["new"]}
    assert updated.sharing.collaborator_emails == ("bob@x.com",)


async def test_document_id_owned_by_someone_else(document_service, alice, essay):
    with pytest.raises(AccessDeniedError):
        await document_service.save_document(alice.id, essay.id, {"blocks": []})


async def test_list_documents_newest_first(document_service, owner, essay):
    await document_service.save_document(owner.id, "doc-2", {})
    documents = await document_service.list_documents(owner.id)
    assert [d.id for d in documents] == ["doc-2", essay.id]


async def test_save_timeout(test_db, document_service, owner, monkeypatch):
    async def slow_save(*args, **kwargs):
        await asyncio.sleep(1)

    monkeypatch.setattr(settings, "save_timeout_seconds", 0.01)
    monkeypatch.setattr(document_service.document_repository, "save_content", slow_save)

    with pytest.raises(SaveTimeoutError) as exc_info:
        await document_service.save_document(owner.id, "doc-slow", {})

    assert exc_info.value.document_id == "doc-slow"
    assert await DocumentIndexRepository(test_db).get("doc-slow") is None


async def test_editor_saves_shared_content(test_db, document_service, owner, alice, bob, essay):
    await SharingService(test_db).save_sharing_settings(
        owner.id,
        essay.id,
        [Collaborator(alice.email, PermissionLevel.EDITOR), Collaborator(bob.email, PermissionLevel.VIEWER)],
        False
    )

    saved = await document_service.save_shared_content(
        essay.id, {"blocks": ["by alice"]}, caller_id=alice.id, caller_email=alice.email
    )
    assert saved.owner_id == owner.id
    assert saved.title == essay.title
    assert saved.data == {"blocks": ["by alice"]}
    assert saved.sharing.editor_emails == ("alice@example.com",)

    with pytest.raises(AccessDeniedError):
        await document_service.save_shared_content(essay.id, {}, caller_id=bob.id, caller_email=bob.email)


async def test_public_editor_saves_anonymously(test_db, document_service, owner, essay):
    await SharingService(test_db).set_public(owner.id, essay.id, True, PermissionLevel.EDITOR)

    saved = await document_service.save_shared_content(essay.id, {"blocks": ["anon"]})
    assert saved.data == {"blocks": ["anon"]}


async def test_open_document_hides_private(document_service, owner, bob, essay):
    access = await document_service.open_document(essay.id, owner.id, owner.email)
    assert access.permission == Permission.OWNER

    with pytest.raises(DocumentNotAccessibleError):
        await document_service.open_document(essay.id, bob.id, bob.email)
    with pytest.raises(DocumentNotAccessibleError):
        await document_service.open_document("missing")


async def test_delete_cleans_up_everything(test_db, document_service, owner, essay):
    token = await SharingService(test_db).save_sharing_settings(
        owner.id, essay.id, [Collaborator("bob@x.com", PermissionLevel.VIEWER)], True, meta=ShareMeta(title=essay.title)
    )
    await CommentService(test_db).add_comment(essay.id, owner, "b1", BlockType.CLAIM, "note")

    assert await document_service.delete_document(owner.id, essay.id) is True

    assert await document_service.get_document(owner.id, essay.id) is None
    assert await DocumentIndexRepository(test_db).get(essay.id) is None
    assert await PublicLookupRepository(test_db).get(token) is None
    assert await SharedReferenceRepository(test_db).list_for_recipient("bob@x.com") == []
    assert await CommentRepository(test_db).list_for_document(owner.id, essay.id) == []

    assert await document_service.delete_document(owner.id, essay.id) is False
