from docshare.domains.documents.entities import Document
from docshare.domains.sharing.entities import Collaborator, Permission, PermissionLevel, SharingInfo
from docshare.domains.sharing.resolver import NO_ACCESS, PermissionResolver, resolve_permission


def make_document(sharing=None):
    return Document(id="doc-1", owner_id="owner-1", title="Essay", data={}, sharing=sharing)


SHARED = SharingInfo(collaborators=(
    Collaborator("editor@example.com", PermissionLevel.EDITOR),
    Collaborator("viewer@example.com", PermissionLevel.VIEWER),
))


def test_owner_wins():
    document = make_document(SHARED)
    assert resolve_permission(document, "owner-1", "editor@example.com") == Permission.OWNER


def test_collaborators_by_email_case_insensitive():
    document = make_document(SHARED)
    assert resolve_permission(document, "u2", "Editor@Example.COM") == Permission.EDITOR
    assert resolve_permission(document, "u3", "viewer@example.com") == Permission.VIEWER


def test_private_document_refuses_strangers():
    document = make_document(SHARED)
    assert resolve_permission(document, "u4", "stranger@example.com") is None
    assert resolve_permission(document) is None


def test_public_permission_applies_to_anyone():
    sharing = SharingInfo(is_public=True, public_token="abcdEFGH", public_permission=PermissionLevel.EDITOR)
    document = make_document(sharing)
    assert resolve_permission(document) == Permission.EDITOR
    assert resolve_permission(document, "u4", "stranger@example.com") == Permission.EDITOR


def test_collaborator_permission_beats_public():
    sharing = SharingInfo(
        is_public=True,
        public_token="abcdEFGH",
        public_permission=PermissionLevel.EDITOR,
        collaborators=(Collaborator("viewer@example.com", PermissionLevel.VIEWER),),
    )
    assert resolve_permission(make_document(sharing), "u3", "viewer@example.com") == Permission.VIEWER


def test_can_write():
    assert Permission.OWNER.can_write
    assert Permission.EDITOR.can_write
    assert not Permission.VIEWER.can_write


async def test_unknown_document_resolves_to_no_access(test_db):
    resolver = PermissionResolver(test_db)
    assert await resolver.resolve("missing") == NO_ACCESS


async def test_resolver_uses_index(test_db, owner, essay):
    resolver = PermissionResolver(test_db)
    access = await resolver.resolve(essay.id, owner.id, owner.email)
    assert access.granted
    assert access.permission == Permission.OWNER
    assert access.owner_id == owner.id

    anonymous = await resolver.resolve(essay.id)
    assert not anonymous.granted
    assert anonymous.document is None
