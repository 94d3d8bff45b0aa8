# stockpos/routes/settings.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from stockpos.database import get_db
from stockpos.enums import EntityType
from stockpos.models.store_settings import StoreSettings
from stockpos.models.users import User
from stockpos.schemas.settings import StoreSettingsOut, StoreSettingsUpdate
from stockpos.services.permissions import Action
from stockpos.utils.audit import client_ip, write_log
from stockpos.utils.tokenJWT import get_current_user, permission_required

router = APIRouter(prefix="/settings", tags=["Settings"])

# Store configuration is an admin concern, like account management
admin_only = permission_required(Action.EDIT, EntityType.USER)


def load_store_settings(db: Session) -> StoreSettings:
    """The single settings row, created with defaults on first access."""
    row = db.query(StoreSettings).order_by(StoreSettings.id.asc()).first()
    if row is None:
        row = StoreSettings()
        db.add(row)
        db.commit()
        db.refresh(row)
    return row


@router.get("", response_model=StoreSettingsOut)
def get_settings(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return load_store_settings(db)


@router.put("", response_model=StoreSettingsOut)
def update_settings(
    payload: StoreSettingsUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    row = load_store_settings(db)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(row, field, value)
    db.commit()
    db.refresh(row)

    write_log(db, user_id=current_user.id, action="SETTINGS_UPDATE", resource="settings",
              ip=client_ip(request), meta={"fields": sorted(changes)})
    return row
