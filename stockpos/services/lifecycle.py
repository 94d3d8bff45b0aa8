# stockpos/services/lifecycle.py
"""
Lifecycle state machine and validation-request workflow.

    live --request_delete--> pending_deletion --approve--> deleted
      ^                            |
      +----------reject------------+
    live --delete_direct (admin)--> deleted
    deleted --request_restoration--> (open restoration request) --approve--> live

``live`` is ``active`` for categories/products/users and ``valid`` for sales;
users have no pending state and end up ``disabled`` instead of ``deleted``.

Every transition writes the entity and its Validation inside one
``repo.atomic()`` block. Resolving a request is a conditional write on the
Validation still being ``pending``, so two admins racing on the same request
get one success and one ``ConflictError``.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from stockpos.enums import Decision, EntityType, ValidationAction, ValidationStatus
from stockpos.exceptions import (
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationInputError,
)
from stockpos.services.permissions import Action, has_right
from stockpos.services.states import WORKFLOW_TYPES, profile_for
from stockpos.services.store import utcnow

logger = logging.getLogger(__name__)


@dataclass
class DeletionOutcome:
    mode: str  # "direct" or "request"
    entity: Any
    validation: Optional[Any] = None


def _workflow_type(entity_type) -> EntityType:
    try:
        entity_type = EntityType(entity_type)
    except ValueError:
        raise ValidationInputError("target_type", f"Unknown entity type '{entity_type}'")
    if entity_type not in WORKFLOW_TYPES:
        raise ValidationInputError("target_type", f"{entity_type.value} has no lifecycle")
    return entity_type


def _load(repo, entity_type: EntityType, entity_id):
    entity = repo.get(entity_type.value, entity_id)
    if entity is None:
        raise NotFoundError(entity_type.value, entity_id)
    return entity


def _require(actor, action: Action, entity_type: EntityType, target):
    if not has_right(actor, action, entity_type, target):
        raise PermissionDeniedError(
            f"Role '{getattr(actor, 'role', None)}' may not {action.value} {entity_type.value} {target.id}",
            {"action": action.value, "kind": entity_type.value, "id": target.id},
        )


def open_validation(repo, entity_type, entity_id):
    """The pending Validation for a target, if any."""
    rows = repo.list(
        "validation",
        target_type=EntityType(entity_type).value,
        target_id=entity_id,
        status=ValidationStatus.PENDING.value,
    )
    return rows[0] if rows else None


def _ensure_no_open_request(repo, entity_type: EntityType, entity_id):
    existing = open_validation(repo, entity_type, entity_id)
    if existing is not None:
        raise InvalidStateError(
            f"{entity_type.value} {entity_id} already has an open request (validation {existing.id})",
            {"validation_id": existing.id},
        )


def _new_request(repo, actor, entity_type: EntityType, entity, action: ValidationAction, prior_status):
    return repo.insert(
        "validation",
        target_type=entity_type.value,
        target_id=entity.id,
        action=action.value,
        status=ValidationStatus.PENDING.value,
        requested_by=actor.id,
        requested_at=utcnow(),
        resolved_by=None,
        resolved_at=None,
        # Last known live state, restored if the request is rejected
        prior_status=prior_status,
    )


def request_delete(repo, actor, entity_type, entity_id):
    """Move a live entity to pending deletion and open a Validation for it."""
    entity_type = _workflow_type(entity_type)
    entity = _load(repo, entity_type, entity_id)
    _require(actor, Action.REQUEST_DELETION, entity_type, entity)

    profile = profile_for(entity_type)
    if not profile.is_live(entity.status):
        raise InvalidStateError(
            f"Cannot request deletion of {entity_type.value} {entity_id} in state '{entity.status}'",
            {"status": entity.status},
        )
    _ensure_no_open_request(repo, entity_type, entity_id)

    prior_status = entity.status
    with repo.atomic():
        if profile.pending is not None:
            repo.update(
                entity_type.value, entity.id,
                {"status": profile.pending},
                expected={"status": entity.status},
            )
        validation = _new_request(
            repo, actor, entity_type, entity, ValidationAction.DELETION, prior_status
        )

    logger.info(
        "Deletion of %s %s requested by user %s (validation %s)",
        entity_type.value, entity_id, actor.id, validation.id,
    )
    return validation


def delete_direct(repo, actor, entity_type, entity_id):
    """Admin-only immediate deletion from the live state, no Validation."""
    entity_type = _workflow_type(entity_type)
    entity = _load(repo, entity_type, entity_id)
    _require(actor, Action.DELETE, entity_type, entity)

    profile = profile_for(entity_type)
    if not profile.is_live(entity.status):
        raise InvalidStateError(
            f"Cannot delete {entity_type.value} {entity_id} in state '{entity.status}'",
            {"status": entity.status},
        )
    _ensure_no_open_request(repo, entity_type, entity_id)

    with repo.atomic():
        entity = repo.update(
            entity_type.value, entity.id,
            {"status": profile.deleted},
            expected={"status": entity.status},
        )

    logger.info("%s %s deleted directly by user %s", entity_type.value, entity_id, actor.id)
    return entity


def request_restoration(repo, actor, entity_type, entity_id):
    """Open a restoration request for a deleted entity; it stays deleted until approved."""
    entity_type = _workflow_type(entity_type)
    entity = _load(repo, entity_type, entity_id)
    _require(actor, Action.REQUEST_RESTORATION, entity_type, entity)

    profile = profile_for(entity_type)
    if not profile.is_deleted(entity.status):
        raise InvalidStateError(
            f"Cannot restore {entity_type.value} {entity_id} in state '{entity.status}'",
            {"status": entity.status},
        )
    _ensure_no_open_request(repo, entity_type, entity_id)

    with repo.atomic():
        validation = _new_request(
            repo, actor, entity_type, entity, ValidationAction.RESTORATION, entity.status
        )

    logger.info(
        "Restoration of %s %s requested by user %s (validation %s)",
        entity_type.value, entity_id, actor.id, validation.id,
    )
    return validation


def delete_entity(repo, actor, entity_type, entity_id) -> DeletionOutcome:
    """Delete click: admins delete directly, everyone else files a request."""
    entity_type = _workflow_type(entity_type)
    entity = _load(repo, entity_type, entity_id)

    if has_right(actor, Action.DELETE, entity_type, entity):
        return DeletionOutcome("direct", delete_direct(repo, actor, entity_type, entity_id))
    if has_right(actor, Action.REQUEST_DELETION, entity_type, entity):
        validation = request_delete(repo, actor, entity_type, entity_id)
        return DeletionOutcome("request", repo.get(entity_type.value, entity_id), validation)
    _require(actor, Action.DELETE, entity_type, entity)


def _target_status_after(validation, decision: Decision, profile) -> Optional[str]:
    if validation.action == ValidationAction.DELETION.value:
        if decision is Decision.APPROVE:
            return profile.deleted
        return validation.prior_status or profile.live
    # Restoration
    if decision is Decision.APPROVE:
        return profile.live
    return None


def resolve_validation(repo, resolver, validation_id, decision):
    """Approve or reject a pending request and apply the deferred action."""
    try:
        decision = Decision(decision)
    except ValueError:
        raise ValidationInputError("decision", f"Unknown decision '{decision}'")

    validation = repo.get("validation", validation_id)
    if validation is None:
        raise NotFoundError("validation", validation_id)
    _require(resolver, Action.RESOLVE, EntityType.VALIDATION, validation)

    if validation.status != ValidationStatus.PENDING.value:
        raise InvalidStateError(
            f"Validation {validation_id} is already {validation.status}",
            {"status": validation.status},
        )

    entity_type = _workflow_type(validation.target_type)
    if entity_type is EntityType.USER and validation.target_id == resolver.id:
        raise PermissionDeniedError(
            "You cannot resolve a request about your own account",
            {"action": Action.RESOLVE.value, "kind": EntityType.VALIDATION.value, "id": validation.id},
        )
    target = _load(repo, entity_type, validation.target_id)
    new_status = _target_status_after(validation, decision, profile_for(entity_type))

    final = ValidationStatus.APPROVED if decision is Decision.APPROVE else ValidationStatus.REJECTED
    with repo.atomic():
        validation = repo.update(
            "validation", validation.id,
            {"status": final.value, "resolved_by": resolver.id, "resolved_at": utcnow()},
            expected={"status": ValidationStatus.PENDING.value},
        )
        if new_status is not None and new_status != target.status:
            repo.update(
                entity_type.value, target.id,
                {"status": new_status},
                expected={"status": target.status},
            )

    logger.info(
        "Validation %s (%s of %s %s) %s by user %s",
        validation.id, validation.action, entity_type.value, target.id, final.value, resolver.id,
    )
    return validation
