# backend/routes/admin.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import Settings
from database import get_db
from models.users import User
from schemas.user import PaginatedUsersResponse, UserResponse, UserUpdate
from routes.auth import VALID_ROLES, find_user_by_email, normalize_email
from utils.audit import write_log, client_ip
from utils.hashing import get_password_hash
from utils.tokenJWT import get_settings, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Admin"])


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    return user


# List users with search, role filter and pagination (Admin only)
@router.get("", response_model=PaginatedUsersResponse)
def list_users(
    q: Optional[str] = Query(None, description="Search by email or name"),
    role: Optional[str] = Query(None, description="Filter by role"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    admin: Optional[dict] = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(User)

    if q:
        like = f"%{q.strip().lower()}%"
        query = query.filter(or_(User.email.ilike(like), User.name.ilike(like)))

    if role:
        query = query.filter(User.role == role)

    query = query.order_by(User.id.asc())

    total = query.count()
    users = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": users,
        "total": total,
        "page": page,
        "page_size": page_size,
    }


# Update a user's profile, role or password (Admin only)
@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    payload: UserUpdate,
    request: Request,
    admin: Optional[dict] = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = _get_user_or_404(db, user_id)
    changed = []

    if payload.role is not None:
        if payload.role not in VALID_ROLES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role.")
        user.role = payload.role
        changed.append("role")

    if payload.email is not None:
        new_email = normalize_email(payload.email)
        if not new_email:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email cannot be empty.")
        other = find_user_by_email(db, new_email)
        if other and other.id != user.id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists.")
        user.email = new_email
        changed.append("email")

    if payload.name is not None:
        user.name = payload.name
        changed.append("name")

    if payload.password:
        user.password_hash = get_password_hash(payload.password, settings.BCRYPT_ROUNDS)
        changed.append("password")

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists.")
    db.refresh(user)

    logger.info("Updated user %s (%s)", user.id, ", ".join(changed) or "no changes")
    write_log(db, user_id=admin.get("id") if admin else None, action="USER_UPDATE", ip=client_ip(request),
              meta={"target_id": user.id, "fields": changed})

    return user


# Delete a user account (Admin only)
@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    request: Request,
    admin: Optional[dict] = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = _get_user_or_404(db, user_id)

    # Prevent self-deletion
    if admin and admin.get("id") == user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account.")

    email = user.email
    db.delete(user)
    db.commit()

    logger.info("Deleted user %s (%s)", user_id, email)
    write_log(db, user_id=admin.get("id") if admin else None, action="USER_DELETE", ip=client_ip(request),
              meta={"target_id": user_id, "email": email})

    return {"ok": True}
