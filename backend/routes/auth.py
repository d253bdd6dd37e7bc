# backend/routes/auth.py
import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import Settings
from database import get_db
from models.users import User, UserRole
from schemas import user as schemas
from utils.audit import write_log, client_ip
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import (
    create_access_token,
    create_reset_token,
    get_current_user,
    get_settings,
    require_admin,
    resolve_reset_token,
    token_claims,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

INVALID_CREDENTIALS = "Invalid credentials."
FORGOT_RESPONSE = {"ok": True, "message": "If your email exists, we sent you a reset link."}
VALID_ROLES = {r.value for r in UserRole}


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def public_user(user: User, name: Optional[str] = None) -> dict:
    return {"id": user.id, "email": user.email, "role": user.role, "name": name or user.name}


# Authenticate with email and password and issue a JWT
@router.post("/login", response_model=schemas.AuthResponse)
def login(
    payload: schemas.UserLogin,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if not payload.email or not payload.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email and password are required.")

    db_user = find_user_by_email(db, payload.email)

    # Unknown user, passwordless account and wrong password share one response
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        logger.info("Failed login for %s", normalize_email(payload.email))
        write_log(db, user_id=(db_user.id if db_user else None), action="LOGIN", status="FAIL",
                  ip=client_ip(request), meta={"email": normalize_email(payload.email)})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    token = create_access_token(token_claims(db_user), settings)
    write_log(db, user_id=db_user.id, action="LOGIN", ip=client_ip(request), meta={"email": db_user.email})

    return {"token": token, "user": public_user(db_user)}


# Federated login stub: issues tokens for pre-provisioned emails only.
# The asserted email is trusted as-is; no provider token is verified.
@router.post("/google", response_model=schemas.AuthResponse)
def google_login(
    payload: schemas.GoogleLogin,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if not payload.email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required.")

    db_user = find_user_by_email(db, payload.email)
    if not db_user:
        logger.info("Google login refused for unknown email %s", normalize_email(payload.email))
        write_log(db, user_id=None, action="GOOGLE_LOGIN", status="FAIL",
                  ip=client_ip(request), meta={"email": normalize_email(payload.email)})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized email.")

    token = create_access_token(token_claims(db_user), settings)
    write_log(db, user_id=db_user.id, action="GOOGLE_LOGIN", ip=client_ip(request), meta={"email": db_user.email})

    return {"token": token, "user": public_user(db_user, name=payload.name)}


# Provision a new account (admin key or Admin bearer token required)
@router.post("/register", response_model=schemas.UserResponse)
def register(
    payload: schemas.UserCreate,
    request: Request,
    admin: Optional[dict] = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if not payload.email or not payload.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email and password are required.")

    role = payload.role or UserRole.WORKER.value
    if role not in VALID_ROLES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role.")

    normalized_email = normalize_email(payload.email)
    actor_id = admin.get("id") if admin else None

    if find_user_by_email(db, normalized_email):
        write_log(db, user_id=actor_id, action="REGISTER", status="FAIL", ip=client_ip(request),
                  meta={"email": normalized_email, "reason": "Email exists"})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists.")

    new_user = User(
        email=normalized_email,
        name=payload.name,
        role=role,
        password_hash=get_password_hash(payload.password, settings.BCRYPT_ROUNDS),
    )
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists.")
    db.refresh(new_user)

    logger.info("Registered %s with role %s", new_user.email, new_user.role)
    write_log(db, user_id=actor_id, action="REGISTER", ip=client_ip(request),
              meta={"email": new_user.email, "created_id": new_user.id})

    return public_user(new_user)


# Retrieve the user behind the bearer token
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user


# Send a reset link; the answer is the same whether or not the email exists
@router.post("/forgot")
def forgot_password(
    payload: schemas.ForgotPassword,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if not payload.email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required.")

    db_user = find_user_by_email(db, payload.email)
    if not db_user:
        write_log(db, user_id=None, action="PASSWORD_RESET_REQUEST", status="FAIL",
                  ip=client_ip(request), meta={"email": normalize_email(payload.email)})
        return FORGOT_RESPONSE

    token = create_reset_token(db_user, settings)
    link = f"{settings.PASSWORD_RESET_URL}?{urlencode({'token': token, 'email': db_user.email})}"
    request.app.state.send_reset_link(db_user.email, link)

    write_log(db, user_id=db_user.id, action="PASSWORD_RESET_REQUEST", ip=client_ip(request),
              meta={"email": db_user.email})
    return FORGOT_RESPONSE


# Set a new password using the token from a reset link
@router.post("/reset")
def reset_password(
    payload: schemas.ResetPassword,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if not payload.token or not payload.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Token and password are required.")

    user = resolve_reset_token(payload.token, db, settings)
    if user is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token.")

    user.password_hash = get_password_hash(payload.password, settings.BCRYPT_ROUNDS)
    db.commit()

    logger.info("Password reset for user %s", user.id)
    write_log(db, user_id=user.id, action="PASSWORD_RESET", ip=client_ip(request), meta={"email": user.email})
    return {"ok": True}
