from docshare.domains.sharing.entities import (
    PermissionLevel, Permission, Collaborator, SharingInfo, ShareMeta,
    SharedReference, PublicLookupEntry, DocumentIndexEntry, normalize_email
)
from docshare.domains.sharing.tokens import generate_public_token, PUBLIC_TOKEN_ALPHABET

__all__ = [
    "PermissionLevel", "Permission", "Collaborator", "SharingInfo", "ShareMeta",
    "SharedReference", "PublicLookupEntry", "DocumentIndexEntry", "normalize_email",
    "generate_public_token", "PUBLIC_TOKEN_ALPHABET"
]
