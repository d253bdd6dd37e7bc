# backend/routes/logs.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional, Any
from datetime import datetime
from pydantic import BaseModel

from database import get_db
from models.log import AuthLog
from utils.tokenJWT import require_admin

router = APIRouter(prefix="/logs", tags=["Logs"])

class LogResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    action: str
    status: str
    ip: Optional[str] = None
    ts: datetime
    meta: Optional[Any] = None

    class Config:
        from_attributes = True

class LogPage(BaseModel):
    items: List[LogResponse]
    total: int
    page: int
    page_size: int

# Audit trail, newest first (Admin only)
@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action, e.g. LOGIN"),
    user_id: Optional[int] = Query(None, description="Filter by user ID"),
    status: Optional[str] = Query(None, description="Filter by status (SUCCESS/FAIL)"),
    admin: Optional[dict] = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(AuthLog)

    if action:
        query = query.filter(AuthLog.action == action.upper())
    if user_id is not None:
        query = query.filter(AuthLog.user_id == user_id)
    if status:
        query = query.filter(AuthLog.status == status.upper())

    # ts has second resolution on SQLite, id breaks ties
    query = query.order_by(AuthLog.ts.desc(), AuthLog.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": logs,
        "total": total,
        "page": page,
        "page_size": page_size,
    }
