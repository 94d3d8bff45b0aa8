# stockpos/routes/validations.py
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request

from stockpos.enums import Decision, EntityType
from stockpos.exceptions import NotFoundError, PermissionDeniedError
from stockpos.models.users import User
from stockpos.models.validation import Validation
from stockpos.repository import SqlAlchemyRepository, get_repo
from stockpos.schemas.validation import ValidationOut, ValidationPage
from stockpos.services.lifecycle import resolve_validation
from stockpos.services.permissions import Action, has_right
from stockpos.utils.audit import client_ip, write_log
from stockpos.utils.tokenJWT import permission_required

router = APIRouter(prefix="/validations", tags=["Validations"])

can_view = permission_required(Action.VIEW, EntityType.VALIDATION)
can_resolve = permission_required(Action.RESOLVE, EntityType.VALIDATION)


def _page(query, page, page_size):
    total = query.count()
    rows = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": rows, "total": total, "page": page, "page_size": page_size}


# Approval queue (Admin only)
@router.get("", response_model=ValidationPage)
def list_validations(
    status_filter: Optional[Literal["pending", "approved", "rejected"]] = Query(None, alias="status"),
    target_type: Optional[str] = Query(None),
    action: Optional[Literal["deletion", "restoration"]] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_resolve),
):
    query = repo.session.query(Validation)
    if status_filter:
        query = query.filter(Validation.status == status_filter)
    if target_type:
        query = query.filter(Validation.target_type == target_type)
    if action:
        query = query.filter(Validation.action == action)
    query = query.order_by(Validation.requested_at.desc(), Validation.id.desc())
    return _page(query, page, page_size)


# Requests filed by the current user
@router.get("/mine", response_model=ValidationPage)
def my_validations(
    status_filter: Optional[Literal["pending", "approved", "rejected"]] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    query = repo.session.query(Validation).filter(Validation.requested_by == current_user.id)
    if status_filter:
        query = query.filter(Validation.status == status_filter)
    query = query.order_by(Validation.requested_at.desc(), Validation.id.desc())
    return _page(query, page, page_size)


@router.get("/{validation_id}", response_model=ValidationOut)
def get_validation(
    validation_id: int,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    validation = repo.get("validation", validation_id)
    if validation is None:
        raise NotFoundError("validation", validation_id)
    if not has_right(current_user, Action.VIEW, EntityType.VALIDATION, validation):
        raise PermissionDeniedError("You can only see your own requests", {"kind": "validation", "id": validation_id})
    return validation


def _resolve(repo, current_user, validation_id, decision, request):
    validation = resolve_validation(repo, current_user, validation_id, decision)
    write_log(repo.session, user_id=current_user.id,
              action="VALIDATION_APPROVE" if decision is Decision.APPROVE else "VALIDATION_REJECT",
              resource="validations", ip=client_ip(request),
              meta={"id": validation.id, "target_type": validation.target_type,
                    "target_id": validation.target_id, "action": validation.action})
    return validation


@router.post("/{validation_id}/approve", response_model=ValidationOut)
def approve_validation(
    validation_id: int,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_resolve),
):
    return _resolve(repo, current_user, validation_id, Decision.APPROVE, request)


@router.post("/{validation_id}/reject", response_model=ValidationOut)
def reject_validation(
    validation_id: int,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_resolve),
):
    return _resolve(repo, current_user, validation_id, Decision.REJECT, request)
