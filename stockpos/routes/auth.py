# stockpos/routes/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status, Request

from stockpos.repository import SqlAlchemyRepository, get_repo
from stockpos.utils.hashing import verify_password
from stockpos.utils.tokenJWT import create_access_token, get_current_user
from stockpos.utils.audit import write_log, client_ip
from stockpos.services.users import find_by_email, touch_login
from stockpos.models.users import User
from stockpos.schemas import user as schemas

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.LoginResponse)
def login(payload: schemas.UserLogin, request: Request, repo: SqlAlchemyRepository = Depends(get_repo)):
    db = repo.session
    db_user = find_by_email(repo, payload.email)

    # Validate credentials and log failure on error
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", resource="auth",
                  status="FAIL", ip=client_ip(request), meta={"email": payload.email})
        logger.info("Failed login for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if db_user.status != "active":
        write_log(db, user_id=db_user.id, action="LOGIN", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": db_user.email, "reason": "disabled"})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")

    db_user = touch_login(repo, db_user)
    access_token = create_access_token(data={"sub": db_user.email, "role": db_user.role})

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": db_user.email})

    return {"user": db_user, "token": access_token, "token_type": "bearer"}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
