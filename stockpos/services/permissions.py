# stockpos/services/permissions.py
"""
Role-permission evaluator.

Every screen and every service asks the same two questions here:

* ``has_right``   - does the actor's role (and ownership of the target) allow
                    the action at all?
* ``can_perform`` - ``has_right`` *and* the target's lifecycle state allows it
                    right now (e.g. deleting is only possible from the live state).

Both are pure predicates: they read ``actor.role``, ``actor.status``,
``actor.id`` and the target's status/owner attribute, nothing else.
"""
import enum
from typing import Optional

from stockpos.enums import EntityType, Role, UserStatus, ValidationStatus
from stockpos.services.states import WORKFLOW_TYPES, profile_for


class Action(str, enum.Enum):
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"  # direct deletion, no validation request
    REQUEST_DELETION = "request_deletion"
    REQUEST_RESTORATION = "request_restoration"
    RESOLVE = "resolve"


ALL_TYPES = frozenset(EntityType)
CATALOG = frozenset({EntityType.CATEGORY, EntityType.PRODUCT})

# Entity types each role may touch, per action
_TYPE_RIGHTS = {
    Role.ADMIN: {
        Action.VIEW: ALL_TYPES,
        Action.CREATE: frozenset({
            EntityType.USER, EntityType.CATEGORY, EntityType.PRODUCT,
            EntityType.SALE, EntityType.STOCK_MOVEMENT,
        }),
        # Sales and ledger entries are immutable once recorded
        Action.EDIT: frozenset({EntityType.USER, EntityType.CATEGORY, EntityType.PRODUCT}),
        Action.DELETE: WORKFLOW_TYPES,
        Action.REQUEST_DELETION: WORKFLOW_TYPES,
        Action.REQUEST_RESTORATION: WORKFLOW_TYPES,
        Action.RESOLVE: frozenset({EntityType.VALIDATION}),
    },
    Role.STOCK_MANAGER: {
        Action.VIEW: CATALOG | {EntityType.STOCK_MOVEMENT, EntityType.VALIDATION},
        Action.CREATE: CATALOG | {EntityType.STOCK_MOVEMENT},
        Action.EDIT: CATALOG,
        Action.REQUEST_DELETION: CATALOG,
        Action.REQUEST_RESTORATION: CATALOG,
    },
    Role.CASHIER: {
        Action.VIEW: CATALOG | {EntityType.SALE, EntityType.VALIDATION},
        Action.CREATE: frozenset({EntityType.SALE}),
        Action.REQUEST_DELETION: frozenset({EntityType.SALE}),
        Action.REQUEST_RESTORATION: frozenset({EntityType.SALE}),
    },
}

# (role, action) pairs that only apply to targets the actor owns
_OWN_ONLY = {
    (Role.STOCK_MANAGER, Action.EDIT): CATALOG,
    (Role.STOCK_MANAGER, Action.VIEW): frozenset({EntityType.VALIDATION}),
    (Role.CASHIER, Action.VIEW): frozenset({EntityType.SALE, EntityType.VALIDATION}),
    (Role.CASHIER, Action.REQUEST_DELETION): frozenset({EntityType.SALE}),
    (Role.CASHIER, Action.REQUEST_RESTORATION): frozenset({EntityType.SALE}),
}

# Attribute holding the owning user id, per entity type
OWNER_FIELDS = {
    EntityType.USER: "id",
    EntityType.CATEGORY: "owner_id",
    EntityType.PRODUCT: "owner_id",
    EntityType.SALE: "cashier_id",
    EntityType.STOCK_MOVEMENT: "user_id",
    EntityType.VALIDATION: "requested_by",
}


def role_of(actor) -> Optional[Role]:
    try:
        return Role(getattr(actor, "role", None))
    except ValueError:
        return None


def is_admin(actor) -> bool:
    return role_of(actor) is Role.ADMIN


def owner_id(entity_type, target):
    field = OWNER_FIELDS.get(EntityType(entity_type))
    return getattr(target, field, None) if field else None


def has_right(actor, action, entity_type, target=None) -> bool:
    """Role and ownership check, ignoring the target's current state.

    With ``target=None`` the question is type-level ("may this actor ever do
    this to some entity of this type?"), so own-only rules pass.
    """
    if actor is None or getattr(actor, "status", UserStatus.ACTIVE.value) != UserStatus.ACTIVE.value:
        return False
    role = role_of(actor)
    if role is None:
        return False

    action = Action(action)
    entity_type = EntityType(entity_type)
    if entity_type not in _TYPE_RIGHTS[role].get(action, ()):
        return False

    if target is not None and entity_type in _OWN_ONLY.get((role, action), ()):
        if owner_id(entity_type, target) != actor.id:
            return False

    # Nobody disables their own account
    if action in (Action.DELETE, Action.REQUEST_DELETION) and entity_type is EntityType.USER and target is not None:
        if target.id == actor.id:
            return False
    return True


def state_allows(action, entity_type, target) -> bool:
    """Whether the target's lifecycle state accepts the action."""
    action = Action(action)
    entity_type = EntityType(entity_type)
    status = getattr(target, "status", None)

    if entity_type is EntityType.VALIDATION:
        if action is Action.RESOLVE:
            return status == ValidationStatus.PENDING.value
        return True

    profile = profile_for(entity_type) if entity_type in WORKFLOW_TYPES else None
    if profile is None:
        return True
    if action in (Action.DELETE, Action.REQUEST_DELETION):
        return profile.is_live(status)
    if action is Action.REQUEST_RESTORATION:
        return profile.is_deleted(status)
    if action is Action.EDIT and entity_type is not EntityType.USER:
        # Admins re-enable users through an edit; catalog entries stay frozen once deleted
        return not profile.is_deleted(status)
    return True


def can_perform(actor, action, entity_type, target=None) -> bool:
    if not has_right(actor, action, entity_type, target):
        return False
    if target is None:
        return True
    return state_allows(action, entity_type, target)


def deletion_route(actor, entity_type, target) -> Optional[str]:
    """What a delete click does for this actor: "direct", "request" or None."""
    if can_perform(actor, Action.DELETE, entity_type, target):
        return "direct"
    if can_perform(actor, Action.REQUEST_DELETION, entity_type, target):
        return "request"
    return None


def allowed_actions(actor, entity_type, target) -> list:
    """Actions the actor may run on the target right now, for list screens."""
    return [a.value for a in Action if can_perform(actor, a, entity_type, target)]
