# core/identity.py

from typing import Mapping, Optional, Sequence

from core.errors import MissingCredential, ProfileInitFailed, RowStoreError
from core.logging_config import logger
from core.repositories import ProfileRepository
from models.enums import Role
from models.principal import ExternalIdentity, Principal


# Provider metadata keys, first present wins
NAME_METADATA_KEYS = ("full_name", "name", "user_name")
AVATAR_METADATA_KEYS = ("avatar_url", "picture", "avatar")


def first_present(metadata: Mapping, keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = metadata.get(key)
        if value:
            return value
    return None


def resolve_role(value) -> Role:
    try:
        return Role(value) if value else Role.user
    except ValueError:
        logger.warning(f"Unknown role '{value}' on profile, treating as user")
        return Role.user


class IdentityResolver:
    """
    Bearer token → Principal.

    1. verify the token with the identity provider (every request)
    2. find the profile linked to the identity
    3. else adopt an unlinked legacy profile with the same email
    4. else auto-provision a profile from provider metadata
    """

    def __init__(self, identity_provider, profiles: ProfileRepository):
        self.identity_provider = identity_provider
        self.profiles = profiles

    def resolve(self, bearer: Optional[str]) -> Principal:
        token = (bearer or "").strip()
        if not token:
            raise MissingCredential()

        identity = self.identity_provider.verify_token(token)
        metadata = identity.user_metadata or {}
        meta_name = first_present(metadata, NAME_METADATA_KEYS)
        meta_avatar = first_present(metadata, AVATAR_METADATA_KEYS)

        try:
            profile = self.profiles.find_by_auth_user_id(identity.id)
            if profile is None:
                profile = self.link_legacy_profile(identity)
            if profile is None:
                profile = self.provision_profile(identity, meta_name, meta_avatar)
        except RowStoreError as e:
            logger.error(f"Profile lookup failed for auth user {identity.id}: {e.reason}")
            raise ProfileInitFailed() from e

        return Principal(
            identity_id=identity.id,
            profile_id=str(profile["id"]),
            role=resolve_role(profile.get("role")),
            email=identity.email or "",
            # Stored profile fields win over provider metadata
            display_name=profile.get("full_name") or meta_name,
            avatar_url=profile.get("avatar_url") or meta_avatar,
        )

    # -----------------------------------------------------
    # One-time migration: profiles created before auth linking
    # -----------------------------------------------------
    def link_legacy_profile(self, identity: ExternalIdentity) -> Optional[dict]:
        if not identity.email:
            return None

        legacy = self.profiles.find_unlinked_by_email(identity.email)
        if legacy is None:
            return None

        linked = self.profiles.link_identity(legacy["id"], identity.id)
        if linked is None:
            # Someone linked it first; whatever they linked is the answer
            return self.profiles.find_by_auth_user_id(identity.id)

        logger.info(f"Linked legacy profile {legacy['id']} to auth user {identity.id}")
        return linked

    # -----------------------------------------------------
    # First sight of this identity
    # -----------------------------------------------------
    def provision_profile(
        self,
        identity: ExternalIdentity,
        full_name: Optional[str],
        avatar_url: Optional[str],
    ) -> dict:
        created = self.profiles.provision(
            identity.id, identity.email or "", full_name, avatar_url
        )
        if created is None:
            # Upsert hit an existing row (concurrent first request)
            created = self.profiles.find_by_auth_user_id(identity.id)

        if created is None:
            logger.error(f"Profile create returned nothing for auth user {identity.id}")
            raise ProfileInitFailed()

        logger.info(f"Provisioned profile {created['id']} for auth user {identity.id}")
        return created
