# core/cascade.py

"""
User deletion cascade.

Removes a profile and everything it owns, in this order:

    locate_profile        fatal (NotFound if absent)
    enumerate_businesses  fatal
    delete_businesses     fatal, per business bottom-up:
                          item tags → food types → items → categories → business
    cleanup_media         listing failures soft, removal failures fatal
    delete_profile        fatal
    delete_identity       soft

This is a best-effort cascade, not a transaction. Businesses deleted before a
failure stay deleted; every delete is delete-if-exists, so an operator can
simply re-run the cascade after fixing the cause.

The profile is removed before the auth identity: if the last step fails the
leftover is an identity with no profile, which cannot act in the app.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from core.errors import CascadeStepFailed, MediaHostError, NotFound
from core.logging_config import logger
from core.repositories import (
    BusinessRepository,
    CategoryRepository,
    FoodTypeRepository,
    ItemRepository,
    ProfileRepository,
)

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


@dataclass
class CascadeReport:
    profile_id: str
    identity_id: Optional[str] = None
    businesses_deleted: List[str] = field(default_factory=list)
    categories_deleted: int = 0
    items_deleted: int = 0
    media_removed: int = 0
    profile_deleted: bool = False
    identity_deleted: bool = False
    warnings: List[str] = field(default_factory=list)


@dataclass
class CascadeContext:
    profile_id: str
    report: CascadeReport
    profile: Optional[dict] = None
    business_ids: List[str] = field(default_factory=list)
    # What the running step is working on, for failure attribution
    resource_id: Optional[str] = None

    @property
    def identity_id(self) -> Optional[str]:
        return self.report.identity_id

    def warn(self, message: str):
        logger.warning(f"[cascade {self.profile_id}] {message}")
        self.report.warnings.append(message)


@dataclass(frozen=True)
class CascadeStep:
    name: str
    run: Callable[[CascadeContext], None]
    fatal: bool = True


def _reason(error: Exception) -> str:
    return getattr(error, "reason", None) or str(error) or type(error).__name__


class CascadeDeletion:
    def __init__(
        self,
        profiles: ProfileRepository,
        businesses: BusinessRepository,
        categories: CategoryRepository,
        items: ItemRepository,
        food_types: FoodTypeRepository,
        identity_provider,
        media_host,
        media_buckets: Sequence[str] = ("logos", "menu-images"),
    ):
        self.profiles = profiles
        self.businesses = businesses
        self.categories = categories
        self.items = items
        self.food_types = food_types
        self.identity_provider = identity_provider
        self.media_host = media_host
        self.media_buckets = tuple(media_buckets)

        self.steps: Tuple[CascadeStep, ...] = (
            CascadeStep("locate_profile", self._locate_profile),
            CascadeStep("enumerate_businesses", self._enumerate_businesses),
            CascadeStep("delete_businesses", self._delete_businesses),
            CascadeStep("cleanup_media", self._cleanup_media),
            CascadeStep("delete_profile", self._delete_profile),
            CascadeStep("delete_identity", self._delete_identity, fatal=False),
        )

    # =====================================================
    # Entry point
    # =====================================================
    def delete_principal(self, profile_id: str) -> CascadeReport:
        ctx = CascadeContext(profile_id=profile_id, report=CascadeReport(profile_id=profile_id))

        for step in self.steps:
            ctx.resource_id = profile_id
            try:
                step.run(ctx)
            except NotFound:
                raise
            except Exception as e:
                if step.fatal:
                    logger.error(
                        f"[cascade {profile_id}] step '{step.name}' failed on {ctx.resource_id}: {_reason(e)}"
                    )
                    raise CascadeStepFailed(step.name, ctx.resource_id, _reason(e)) from e
                ctx.warn(f"{step.name} failed for {ctx.resource_id}: {_reason(e)}")

        logger.info(
            f"[cascade {profile_id}] done: {len(ctx.report.businesses_deleted)} businesses, "
            f"{ctx.report.categories_deleted} categories, {ctx.report.items_deleted} items, "
            f"{ctx.report.media_removed} files"
        )
        return ctx.report

    # =====================================================
    # Reusable bottom-up deletes
    # =====================================================
    def delete_category_tree(self, category_id: str) -> int:
        """Delete one category, its items and their tags. Returns items removed."""
        self.food_types.delete_tags_for_items(self.items.ids_for_categories([category_id]))
        removed = len(self.items.delete_by_category_ids([category_id]))
        self.categories.delete_by_id(category_id)
        return removed

    def delete_business_tree(self, business_id: str) -> Tuple[int, int]:
        """
        Delete one business bottom-up. Returns (categories, items) removed.
        Item tags go first (by the business's items and by its food types),
        then food types, items (batched by category id), categories and
        finally the business row.
        """
        category_ids = self.categories.ids_for_business(business_id)
        self.food_types.delete_tags_for_items(self.items.ids_for_categories(category_ids))
        self.food_types.delete_tags_for_food_types(self.food_types.ids_for_business(business_id))
        self.food_types.delete_by_business(business_id)
        items_removed = len(self.items.delete_by_category_ids(category_ids))
        categories_removed = len(self.categories.delete_by_business(business_id))
        self.businesses.delete_by_id(business_id)
        return categories_removed, items_removed

    # =====================================================
    # Steps
    # =====================================================
    def _locate_profile(self, ctx: CascadeContext):
        profile = self.profiles.find_by_id(ctx.profile_id)
        if profile is None:
            raise NotFound("User not found")
        ctx.profile = profile
        ctx.report.identity_id = profile.get("auth_user_id")

    def _enumerate_businesses(self, ctx: CascadeContext):
        ctx.business_ids = [b["id"] for b in self.businesses.find_by_owner(ctx.profile_id)]
        logger.info(f"[cascade {ctx.profile_id}] deleting {len(ctx.business_ids)} businesses")

    def _delete_businesses(self, ctx: CascadeContext):
        for business_id in ctx.business_ids:
            ctx.resource_id = business_id
            categories, items = self.delete_business_tree(business_id)
            ctx.report.businesses_deleted.append(business_id)
            ctx.report.categories_deleted += categories
            ctx.report.items_deleted += items

    def _cleanup_media(self, ctx: CascadeContext):
        folder = ctx.identity_id
        if not folder:
            ctx.warn("profile has no auth user id, skipping media cleanup")
            return

        for bucket in self.media_buckets:
            ctx.resource_id = f"{bucket}/{folder}"
            try:
                refs = self.media_host.list(bucket, folder)
            except MediaHostError as e:
                ctx.warn(f"could not list {bucket}/{folder}: {_reason(e)}")
                continue

            if refs:
                ctx.report.media_removed += self.media_host.delete_many(bucket, refs)

    def _delete_profile(self, ctx: CascadeContext):
        self.profiles.delete(ctx.profile_id)
        ctx.report.profile_deleted = True

    def _delete_identity(self, ctx: CascadeContext):
        identity_id = ctx.identity_id
        if not identity_id:
            ctx.warn("profile has no auth user id, skipping identity deletion")
            return
        if not UUID_PATTERN.match(str(identity_id)):
            ctx.warn(f"auth user id '{identity_id}' is not a valid UUID, skipping identity deletion")
            return

        ctx.resource_id = identity_id
        self.identity_provider.delete_identity(identity_id)
        ctx.report.identity_deleted = True
