# stockpos/services/states.py
from dataclasses import dataclass
from typing import Optional

from stockpos.enums import CatalogStatus, EntityType, SaleStatus, UserStatus


@dataclass(frozen=True)
class LifecycleProfile:
    """Status values an entity type moves through.

    ``live`` is the initial state, ``deleted`` the terminal one. Users have no
    pending state: while a request is open the Validation row is the only marker.
    """

    live: str
    pending: Optional[str]
    deleted: str

    def is_live(self, status) -> bool:
        return status == self.live

    def is_pending(self, status) -> bool:
        return self.pending is not None and status == self.pending

    def is_deleted(self, status) -> bool:
        return status == self.deleted


PROFILES = {
    EntityType.USER: LifecycleProfile(UserStatus.ACTIVE.value, None, UserStatus.DISABLED.value),
    EntityType.CATEGORY: LifecycleProfile(
        CatalogStatus.ACTIVE.value, CatalogStatus.PENDING_DELETION.value, CatalogStatus.DELETED.value
    ),
    EntityType.PRODUCT: LifecycleProfile(
        CatalogStatus.ACTIVE.value, CatalogStatus.PENDING_DELETION.value, CatalogStatus.DELETED.value
    ),
    EntityType.SALE: LifecycleProfile(
        SaleStatus.VALID.value, SaleStatus.PENDING_DELETION.value, SaleStatus.DELETED.value
    ),
}

# Entity types that can be the target of a validation request
WORKFLOW_TYPES = frozenset(PROFILES)


def profile_for(entity_type) -> Optional[LifecycleProfile]:
    return PROFILES.get(EntityType(entity_type))
