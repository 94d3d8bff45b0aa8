# stockpos/routes/users.py
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from stockpos.enums import EntityType
from stockpos.models.users import User
from stockpos.repository import SqlAlchemyRepository, get_repo
from stockpos.schemas.user import PaginatedUsersResponse, UserCreate, UserResponse, UserUpdate
from stockpos.schemas.validation import DeletionResult
from stockpos.services.lifecycle import delete_entity
from stockpos.services.permissions import Action
from stockpos.services.users import create_user, update_user
from stockpos.utils.audit import client_ip, write_log
from stockpos.utils.hashing import get_password_hash
from stockpos.utils.tokenJWT import permission_required

router = APIRouter(prefix="/users", tags=["Users"])

can_view_users = permission_required(Action.VIEW, EntityType.USER)


# Retrieve a list of users with filtering, sorting, and pagination (Admin only)
@router.get("", response_model=PaginatedUsersResponse)
def list_users(
    q: Optional[str] = Query(None, description="Search by e-mail"),
    last_name: Optional[str] = Query(None, description="Search by last name"),
    role: Optional[str] = Query(None, description="Filter by role"),
    status_filter: Optional[str] = Query(None, alias="status", description="active / disabled"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: Literal["id", "email", "role", "first_name", "last_name", "created_at"] = "id",
    order: Literal["asc", "desc"] = "asc",
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view_users),
):
    query = repo.session.query(User)

    if q:
        query = query.filter(User.email.ilike(f"%{q.lower()}%"))
    if role:
        query = query.filter(User.role == role)
    if status_filter:
        query = query.filter(User.status == status_filter)
    if last_name:
        query = query.filter(User.last_name.ilike(f"%{last_name}%"))

    col = getattr(User, sort_by)
    query = query.order_by(col.asc() if order == "asc" else col.desc())

    total = query.count()
    users = query.offset((page - 1) * page_size).limit(page_size).all()

    return {"items": users, "total": total, "page": page, "page_size": page_size}


# Create an account for a staff member (Admin only)
@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def add_user(
    payload: UserCreate,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view_users),
):
    user = create_user(
        repo, current_user,
        email=payload.email,
        password_hash=get_password_hash(payload.password),
        role=payload.role,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    write_log(repo.session, user_id=current_user.id, action="USER_CREATE", resource="users",
              ip=client_ip(request), meta={"id": user.id, "email": user.email, "role": user.role})
    return user


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view_users),
):
    user = repo.get("user", user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


# Change role, status or names (Admin only)
@router.patch("/{user_id}", response_model=UserResponse)
def edit_user(
    user_id: int,
    payload: UserUpdate,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view_users),
):
    changes = payload.model_dump(exclude_unset=True)
    user = update_user(repo, current_user, user_id, changes)
    write_log(repo.session, user_id=current_user.id, action="USER_UPDATE", resource="users",
              ip=client_ip(request), meta={"id": user_id, "changes": changes})
    return user


# Users are never removed; deleting one disables the account
@router.delete("/{user_id}", response_model=DeletionResult)
def disable_user(
    user_id: int,
    request: Request,
    repo: SqlAlchemyRepository = Depends(get_repo),
    current_user: User = Depends(can_view_users),
):
    outcome = delete_entity(repo, current_user, EntityType.USER, user_id)
    write_log(repo.session, user_id=current_user.id, action="USER_DISABLE", resource="users",
              ip=client_ip(request), meta={"id": user_id})
    return DeletionResult.from_outcome(EntityType.USER, user_id, outcome)
