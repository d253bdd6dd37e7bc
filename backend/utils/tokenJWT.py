# utils/tokenJWT.py
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from config import Settings
from database import get_db
from models.users import User, UserRole

logger = logging.getLogger(__name__)

# Missing or non-Bearer Authorization headers resolve to None instead of failing
bearer_scheme = HTTPBearer(auto_error=False)

RESET_TOKEN_TYPE = "reset"


# Settings are built once per application and kept on app.state
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def token_claims(user: User) -> dict:
    return {"id": user.id, "email": user.email, "role": user.role}


# Generate a signed access token carrying the given claims and an expiry
def create_access_token(data: dict, settings: Settings, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, settings: Settings) -> Optional[dict]:
    """Return the token's claims, or None for a bad signature, expiry or garbage."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    # Reset tokens of passwordless accounts share the signing key
    if payload.get("type") == RESET_TOKEN_TYPE:
        return None
    return payload


# Reset tokens are signed with the current hash, so they die once the password changes
def _reset_key(user: User, settings: Settings) -> str:
    return settings.JWT_SECRET + (user.password_hash or "")


def create_reset_token(user: User, settings: Settings, expires_delta: timedelta = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES))
    to_encode = {"id": user.id, "type": RESET_TOKEN_TYPE, "exp": expire}
    return jwt.encode(to_encode, _reset_key(user, settings), algorithm=settings.JWT_ALGORITHM)


def resolve_reset_token(token: str, db: Session, settings: Settings) -> Optional[User]:
    """Return the user a reset token was issued for, or None if it is unusable."""
    try:
        user_id = jwt.get_unverified_claims(token).get("id")
    except JWTError:
        return None
    if not isinstance(user_id, int):
        return None

    user = db.get(User, user_id)
    if user is None:
        return None

    try:
        payload = jwt.decode(token, _reset_key(user, settings), algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != RESET_TOKEN_TYPE:
        return None
    return user


# Retrieve the currently authenticated user based on the JWT token
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials.",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    payload = decode_token(credentials.credentials, settings)
    if payload is None or payload.get("id") is None:
        raise credentials_exception

    user = db.query(User).filter(User.id == payload["id"]).first()
    if user is None:
        raise credentials_exception
    return user


def require_admin(
    x_admin_key: Optional[str] = Header(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Optional[dict]:
    """Gate for administrative endpoints.

    Passes when the x-admin-key header matches ADMIN_SECRET, or when the bearer
    token verifies and carries the Admin role. Returns the token claims, or
    None when the static key was used. Undecodable tokens count as "not admin".
    """
    if settings.ADMIN_SECRET and x_admin_key is not None:
        if secrets.compare_digest(x_admin_key.encode("utf-8"), settings.ADMIN_SECRET.encode("utf-8")):
            return None

    if credentials is not None:
        payload = decode_token(credentials.credentials, settings)
        if payload and payload.get("role") == UserRole.ADMIN.value:
            return payload

    logger.warning("Rejected admin request (admin key present: %s, bearer present: %s)",
                   x_admin_key is not None, credentials is not None)
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden.")
