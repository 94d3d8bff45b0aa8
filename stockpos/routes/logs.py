# stockpos/routes/logs.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional, Any
from datetime import date, datetime, timezone
from pydantic import BaseModel, ConfigDict

from stockpos.database import get_db
from stockpos.enums import EntityType
from stockpos.models.log import Log
from stockpos.models.users import User
from stockpos.services.periods import day_bounds
from stockpos.services.permissions import Action
from stockpos.utils.tokenJWT import permission_required

router = APIRouter(prefix="/logs", tags=["Logs"])

# The audit trail is visible to whoever may manage accounts
admin_only = permission_required(Action.EDIT, EntityType.USER)


class LogResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    user_email: Optional[str] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    ts: datetime
    meta: Optional[Any] = None

    model_config = ConfigDict(from_attributes=True)


class LogPage(BaseModel):
    items: List[LogResponse]
    total: int
    page: int
    page_size: int


@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action"),
    user_id: Optional[int] = Query(None, description="Filter by user id"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    status: Optional[str] = Query(None, description="SUCCESS / FAIL"),
    date_from: Optional[date] = Query(None, description="From (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, description="To (YYYY-MM-DD), inclusive"),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    query = db.query(Log)

    if action:
        query = query.filter(Log.action.ilike(f"%{action}%"))
    if user_id is not None:
        query = query.filter(Log.user_id == user_id)
    if resource:
        query = query.filter(Log.resource.ilike(f"%{resource}%"))
    if status:
        query = query.filter(Log.status == status)
    if date_from or date_to:
        lower, upper = day_bounds(date_from or date.min, date_to or datetime.now(timezone.utc).date())
        query = query.filter(Log.ts >= lower, Log.ts < upper)

    # Newest first
    query = query.order_by(Log.ts.desc(), Log.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": logs,
        "total": total,
        "page": page,
        "page_size": page_size,
    }
