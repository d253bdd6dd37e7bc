from fastapi import Request
from sqlalchemy.orm import Session
from models.log import AuthLog
from models.users import User


def client_ip(request: Request):
    return request.client.host if request.client else None


def write_log(db: Session, *, user_id, action, status="SUCCESS", ip=None, meta=None):
    # Admin tokens are stateless and may outlive their user
    if user_id is not None and db.get(User, user_id) is None:
        meta = dict(meta or {}, stale_user_id=user_id)
        user_id = None
    entry = AuthLog(user_id=user_id, action=action, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    db.commit()
