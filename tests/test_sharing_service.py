import pytest
from sqlalchemy.exc import SQLAlchemyError

from docshare.core.errors import DocumentNotAccessibleError, SharingSyncError
from docshare.db.repositories.sharing_repository import PublicLookupRepository, SharedReferenceRepository
from docshare.domains.sharing.entities import (
    Collaborator, Permission, PermissionLevel, PublicLookupEntry, ShareMeta, shared_reference_key
)
from docshare.domains.sharing.resolver import PermissionResolver
from docshare.domains.sharing.services import SharingService

META = ShareMeta(owner_email="owner@example.com", owner_display_name="Owner", title="My Essay")


@pytest.fixture
def sharing_service(test_db):
    return SharingService(test_db)


async def test_share_with_viewer_creates_reference(test_db, sharing_service, owner, essay):
    sharing = await sharing_service.share_with_user(owner.id, essay.id, "bob@x.com", PermissionLevel.VIEWER, META)

    assert sharing.collaborator_emails == ("bob@x.com",)
    assert sharing.editor_emails == ()

    reference = await SharedReferenceRepository(test_db).get("bob@x.com", owner.id, essay.id)
    assert reference is not None
    assert reference.key == shared_reference_key(owner.id, essay.id)
    assert reference.permission == PermissionLevel.VIEWER
    assert reference.owner_email == "owner@example.com"
    assert reference.title == "My Essay"
    assert reference.notification_status is None


async def test_promote_to_editor_updates_reference_in_place(test_db, sharing_service, owner, essay):
    await sharing_service.share_with_user(owner.id, essay.id, "bob@x.com", PermissionLevel.VIEWER, META)

    await sharing_service.save_sharing_settings(
        owner.id, essay.id, [Collaborator("bob@x.com", PermissionLevel.EDITOR)], False, meta=META
    )

    sharing = await sharing_service.get_sharing_info(owner.id, essay.id)
    assert sharing.editor_emails == ("bob@x.com",)

    references = await SharedReferenceRepository(test_db).list_for_document(owner.id, essay.id)
    assert len(references) == 1
    assert references[0].permission == PermissionLevel.EDITOR


async def test_enable_public_editor(test_db, sharing_service, owner, essay):
    token = await sharing_service.save_sharing_settings(
        owner.id, essay.id, [], True, PermissionLevel.EDITOR, META
    )

    assert token is not None and len(token) == 8
    entry = await PublicLookupRepository(test_db).get(token)
    assert entry.document_id == essay.id
    assert entry.owner_id == owner.id

    access = await PermissionResolver(test_db).resolve(essay.id)
    assert access.permission == Permission.EDITOR


async def test_disable_public_removes_lookup(test_db, sharing_service, owner, essay):
    token = await sharing_service.save_sharing_settings(owner.id, essay.id, [], True, meta=META)

    result = await sharing_service.save_sharing_settings(owner.id, essay.id, [], False, meta=META)

    assert result is None
    assert await PublicLookupRepository(test_db).get(token) is None
    access = await PermissionResolver(test_db).resolve(essay.id)
    assert not access.granted
    assert access.document is None


async def test_token_kept_across_unrelated_edits(sharing_service, owner, essay):
    token = await sharing_service.save_sharing_settings(owner.id, essay.id, [], True, meta=META)

    again = await sharing_service.save_sharing_settings(
        owner.id, essay.id, [Collaborator("alice@example.com", PermissionLevel.VIEWER)], True, meta=META
    )
    assert again == token

    via_toggle = await sharing_service.set_public(owner.id, essay.id, True, PermissionLevel.EDITOR)
    assert via_toggle == token


async def test_public_permission_stored_only_while_public(sharing_service, owner, essay):
    await sharing_service.set_public(owner.id, essay.id, True, PermissionLevel.EDITOR)
    await sharing_service.set_public(owner.id, essay.id, False)

    sharing = await sharing_service.get_sharing_info(owner.id, essay.id)
    assert sharing.is_public is False
    assert sharing.public_token is None
    assert sharing.public_permission is None


async def test_round_trip(sharing_service, owner, essay):
    collaborators = [
        Collaborator("alice@example.com", PermissionLevel.EDITOR),
        Collaborator("bob@example.com", PermissionLevel.VIEWER),
    ]
    token = await sharing_service.save_sharing_settings(
        owner.id, essay.id, collaborators, True, PermissionLevel.VIEWER, META
    )

    sharing = await sharing_service.get_sharing_info(owner.id, essay.id)
    assert sharing.is_public is True
    assert sharing.public_token == token
    assert sharing.public_permission == PermissionLevel.VIEWER
    assert [(c.email, c.permission) for c in sharing.collaborators] == [
        (c.email, c.permission) for c in collaborators
    ]


async def test_clearing_everything_removes_all_views(test_db, sharing_service, owner, essay):
    token = await sharing_service.save_sharing_settings(
        owner.id,
        essay.id,
        [Collaborator("alice@example.com", PermissionLevel.EDITOR), Collaborator("bob@x.com", PermissionLevel.VIEWER)],
        True,
        meta=META
    )

    await sharing_service.save_sharing_settings(owner.id, essay.id, [], False, meta=META)

    assert await SharedReferenceRepository(test_db).list_for_document(owner.id, essay.id) == []
    assert await PublicLookupRepository(test_db).get(token) is None
    assert await sharing_service.list_shared_with_me("alice@example.com") == []


async def test_email_matching_is_case_insensitive(test_db, sharing_service, owner, essay):
    await sharing_service.share_with_user(owner.id, essay.id, "A@B.com", PermissionLevel.EDITOR, META)

    access = await PermissionResolver(test_db).resolve(essay.id, "someone", "a@b.com")
    assert access.permission == Permission.EDITOR

    shared = await sharing_service.list_shared_with_me("A@B.COM")
    assert [ref.document_id for ref in shared] == [essay.id]


async def test_repeated_reconciliation_is_noop(test_db, sharing_service, owner, essay):
    collaborators = [Collaborator("bob@x.com", PermissionLevel.VIEWER)]
    await sharing_service.save_sharing_settings(owner.id, essay.id, collaborators, False, meta=META)
    first = await SharedReferenceRepository(test_db).get("bob@x.com", owner.id, essay.id)
    before = await sharing_service.get_sharing_info(owner.id, essay.id)

    await sharing_service.save_sharing_settings(owner.id, essay.id, collaborators, False, meta=META)

    second = await SharedReferenceRepository(test_db).get("bob@x.com", owner.id, essay.id)
    assert second.shared_at == first.shared_at
    after = await sharing_service.get_sharing_info(owner.id, essay.id)
    assert after == before


async def test_unshare_removes_reference(test_db, sharing_service, owner, essay):
    await sharing_service.share_with_user(owner.id, essay.id, "bob@x.com", PermissionLevel.VIEWER, META)

    sharing = await sharing_service.unshare_user(owner.id, essay.id, "BOB@x.com")

    assert sharing.collaborator_emails == ()
    assert await SharedReferenceRepository(test_db).get("bob@x.com", owner.id, essay.id) is None


async def test_retry_heals_failed_reference_write(test_db, sharing_service, owner, essay, monkeypatch):
    reference_repository = sharing_service.reference_repository
    original_upsert = reference_repository.upsert

    async def failing_upsert(reference):
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(reference_repository, "upsert", failing_upsert)
    collaborators = [Collaborator("bob@x.com", PermissionLevel.VIEWER)]

    with pytest.raises(SharingSyncError) as exc_info:
        await sharing_service.save_sharing_settings(owner.id, essay.id, collaborators, False, meta=META)
    assert exc_info.value.failed_recipients == ["bob@x.com"]

    # основная запись прошла, ссылки получателя нет
    sharing = await sharing_service.get_sharing_info(owner.id, essay.id)
    assert sharing.collaborator_emails == ("bob@x.com",)
    assert await SharedReferenceRepository(test_db).get("bob@x.com", owner.id, essay.id) is None

    monkeypatch.setattr(reference_repository, "upsert", original_upsert)
    await sharing_service.save_sharing_settings(owner.id, essay.id, collaborators, False, meta=META)

    reference = await SharedReferenceRepository(test_db).get("bob@x.com", owner.id, essay.id)
    assert reference is not None
    assert reference.permission == PermissionLevel.VIEWER


async def test_added_at_kept_for_unchanged_collaborator(sharing_service, owner, essay):
    await sharing_service.share_with_user(owner.id, essay.id, "bob@x.com", PermissionLevel.VIEWER, META)
    before = (await sharing_service.get_sharing_info(owner.id, essay.id)).find("bob@x.com")

    await sharing_service.save_sharing_settings(
        owner.id, essay.id, [Collaborator("bob@x.com", PermissionLevel.VIEWER)], True, meta=META
    )

    after = (await sharing_service.get_sharing_info(owner.id, essay.id)).find("bob@x.com")
    assert after.added_at == before.added_at


async def test_get_public_document_checks_token(sharing_service, owner, essay):
    token = await sharing_service.set_public(owner.id, essay.id, True)

    access = await sharing_service.get_public_document(token)
    assert access.permission == Permission.VIEWER
    assert access.document.id == essay.id

    await sharing_service.set_public(owner.id, essay.id, False)
    assert not (await sharing_service.get_public_document(token)).granted
    assert not (await sharing_service.get_public_document("nope1234")).granted


async def test_operations_on_foreign_document_rejected(sharing_service, alice, essay):
    with pytest.raises(DocumentNotAccessibleError):
        await sharing_service.save_sharing_settings(alice.id, essay.id, [], True, meta=META)
    assert await sharing_service.get_sharing_info(alice.id, essay.id) is None


async def test_leftover_lookup_entries_removed(test_db, sharing_service, owner, essay):
    lookup_repository = PublicLookupRepository(test_db)
    # запись от прерванного включения: токен так и не попал в документ
    await lookup_repository.upsert(PublicLookupEntry(token="ORPHAN01", document_id=essay.id, owner_id=owner.id))

    token = await sharing_service.save_sharing_settings(owner.id, essay.id, [], True, meta=META)

    assert token != "ORPHAN01"
    assert await lookup_repository.get("ORPHAN01") is None
    assert (await lookup_repository.get(token)).document_id == essay.id

    await lookup_repository.upsert(PublicLookupEntry(token="ORPHAN02", document_id=essay.id, owner_id=owner.id))
    await sharing_service.save_sharing_settings(owner.id, essay.id, [], False, meta=META)

    assert await lookup_repository.get("ORPHAN02") is None
    assert await lookup_repository.get(token) is None
    assert not (await sharing_service.get_public_document("ORPHAN02")).granted
