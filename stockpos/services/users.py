# stockpos/services/users.py
import logging

from stockpos.enums import EntityType, Role, UserStatus
from stockpos.exceptions import InvalidStateError, NotFoundError, PermissionDeniedError, ValidationInputError
from stockpos.services.lifecycle import open_validation
from stockpos.services.permissions import Action, has_right
from stockpos.services.store import utcnow

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("first_name", "last_name", "role", "status")


def normalize_email(email):
    email = (email or "").strip().lower()
    if not email or "@" not in email:
        raise ValidationInputError("email", "A valid e-mail address is required")
    return email


def _role(value):
    try:
        return Role(value).value
    except ValueError:
        raise ValidationInputError("role", f"Unknown role '{value}'")


def _status(value):
    try:
        return UserStatus(value).value
    except ValueError:
        raise ValidationInputError("status", f"Unknown status '{value}'")


def find_by_email(repo, email):
    rows = repo.list("user", email=normalize_email(email))
    return rows[0] if rows else None


def create_user(repo, actor, email, password_hash, role, first_name=None, last_name=None):
    if not has_right(actor, Action.CREATE, EntityType.USER):
        raise PermissionDeniedError("Only administrators can create users", {"kind": "user"})
    email = normalize_email(email)
    if find_by_email(repo, email) is not None:
        raise ValidationInputError("email", "Email already registered")

    with repo.atomic():
        user = repo.insert(
            "user",
            email=email,
            password_hash=password_hash,
            role=_role(role),
            first_name=first_name,
            last_name=last_name,
            status=UserStatus.ACTIVE.value,
            created_at=utcnow(),
            last_login=None,
        )
    logger.info("User %s (%s) created by user %s", user.id, user.role, actor.id)
    return user


def update_user(repo, actor, user_id, changes):
    user = repo.get("user", user_id)
    if user is None:
        raise NotFoundError("user", user_id)
    if not has_right(actor, Action.EDIT, EntityType.USER, user):
        raise PermissionDeniedError("Only administrators can edit users", {"kind": "user", "id": user_id})

    changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS and v is not None}
    if "role" in changes:
        changes["role"] = _role(changes["role"])
    if "status" in changes:
        changes["status"] = _status(changes["status"])

    # An admin cannot lock themselves out
    if user.id == actor.id and (
        changes.get("role", user.role) != user.role or changes.get("status", user.status) != user.status
    ):
        raise PermissionDeniedError("You cannot change your own role or status", {"kind": "user", "id": user_id})

    # Status moves through the approval queue while a request is open
    if changes.get("status", user.status) != user.status:
        pending = open_validation(repo, EntityType.USER, user_id)
        if pending is not None:
            raise InvalidStateError(
                f"user {user_id} has an open request (validation {pending.id})",
                {"validation_id": pending.id},
            )

    with repo.atomic():
        user = repo.update("user", user_id, changes)
    logger.info("User %s updated by user %s: %s", user_id, actor.id, sorted(changes))
    return user


def touch_login(repo, user):
    with repo.atomic():
        return repo.update("user", user.id, {"last_login": utcnow()})
