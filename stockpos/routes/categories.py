# stockpos/routes/categories.py
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from stockpos.enums import EntityType
from stockpos.exceptions import NotFoundError
from stockpos.models.category import Category
from stockpos.models.users import User
from stockpos.repository import SqlAlchemyRepository, get_repo
from stockpos.schemas.category import CategoryCreate, CategoryOut, CategoryPage, CategoryUpdate
from stockpos.schemas.validation import DeletionResult, RequestResult
from stockpos.services.catalog import create_category, update_category
from stockpos.services.lifecycle import delete_entity, request_delete, request_restoration
from stockpos.services.permissions import Action, allowed_actions
from stockpos.utils.audit import client_ip, write_log
from stockpos.utils.tokenJWT import permission_required

router = APIRouter(prefix="/categories", tags=["Categories"])

can_view = permission_required(Action.VIEW, EntityType.CATEGORY)


def _out(category: Category, user: User) -> CategoryOut:
    out = CategoryOut.model_validate(category)
    out.allowed_actions = allowed_actions(user, EntityType.CATEGORY, category)
    return out


@router.get("", response_model=CategoryPage)
def list_categories(
    q: Optional[str] = Query(None, description="Search by name"),
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    sort_by: Literal["id", "name", "created_at"] = "name",
    order: Literal["asc", "desc"] = "asc",
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    query = repo.session.query(Category)
    if q:
        query = query.filter(Category.name.ilike(f"%{q}%"))
    if status_filter:
        query = query.filter(Category.status == status_filter)

    col = getattr(Category, sort_by)
    query = query.order_by(col.asc() if order == "asc" else col.desc())

    total = query.count()
    rows = query.offset((page - 1) * page_size).limit(page_size).all()
    return {
        "items": [_out(c, current_user) for c in rows],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(
    category_id: int,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    category = repo.get("category", category_id)
    if category is None:
        raise NotFoundError("category", category_id)
    return _out(category, current_user)


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def add_category(
    payload: CategoryCreate,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    category = create_category(repo, current_user, payload.name, payload.description)
    write_log(repo.session, user_id=current_user.id, action="CATEGORY_CREATE", resource="categories",
              ip=client_ip(request), meta={"id": category.id, "name": category.name})
    return _out(category, current_user)


@router.patch("/{category_id}", response_model=CategoryOut)
def edit_category(
    category_id: int,
    payload: CategoryUpdate,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    changes = payload.model_dump(exclude_unset=True)
    category = update_category(repo, current_user, category_id, changes)
    write_log(repo.session, user_id=current_user.id, action="CATEGORY_UPDATE", resource="categories",
              ip=client_ip(request), meta={"id": category_id, "changes": changes})
    return _out(category, current_user)


# Admins delete directly; anyone else with the right files a request
@router.delete("/{category_id}", response_model=DeletionResult)
def delete_category(
    category_id: int,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    outcome = delete_entity(repo, current_user, EntityType.CATEGORY, category_id)
    write_log(repo.session, user_id=current_user.id,
              action="CATEGORY_DELETE" if outcome.mode == "direct" else "CATEGORY_DELETE_REQUEST",
              resource="categories", ip=client_ip(request), meta={"id": category_id})
    return DeletionResult.from_outcome(EntityType.CATEGORY, category_id, outcome)


@router.post("/{category_id}/request-deletion", response_model=RequestResult)
def request_category_deletion(
    category_id: int,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    validation = request_delete(repo, current_user, EntityType.CATEGORY, category_id)
    write_log(repo.session, user_id=current_user.id, action="CATEGORY_DELETE_REQUEST", resource="categories",
              ip=client_ip(request), meta={"id": category_id, "validation_id": validation.id})
    return {
        "target_type": EntityType.CATEGORY.value,
        "target_id": category_id,
        "status": repo.get("category", category_id).status,
        "validation": validation,
    }


@router.post("/{category_id}/request-restoration", response_model=RequestResult)
def request_category_restoration(
    category_id: int,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view),
):
    validation = request_restoration(repo, current_user, EntityType.CATEGORY, category_id)
    write_log(repo.session, user_id=current_user.id, action="CATEGORY_RESTORE_REQUEST", resource="categories",
              ip=client_ip(request), meta={"id": category_id, "validation_id": validation.id})
    return {
        "target_type": EntityType.CATEGORY.value,
        "target_id": category_id,
        "status": repo.get("category", category_id).status,
        "validation": validation,
    }
