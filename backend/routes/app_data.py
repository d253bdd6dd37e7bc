# backend/routes/app_data.py
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models.app_data import AppData
from models.users import User
from schemas.app_data import AppDataResponse, AppDataUpdate
from utils.tokenJWT import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/app-data", tags=["App data"])


# Snapshot of the caller's client-side data; nulls when nothing was uploaded
@router.get("", response_model=AppDataResponse, response_model_by_alias=True)
def get_app_data(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    row = db.query(AppData).filter(AppData.user_id == current_user.id).first()
    if not row:
        return AppDataResponse()
    return AppDataResponse(data=row.data, updated_at=row.updated_at)


# Replace the caller's snapshot (last writer wins)
@router.put("", response_model=AppDataResponse, response_model_by_alias=True)
def put_app_data(
    payload: AppDataUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    row = db.query(AppData).filter(AppData.user_id == current_user.id).first()
    now = datetime.now(timezone.utc)

    if row is None:
        row = AppData(user_id=current_user.id, data=payload.data, updated_at=now)
        db.add(row)
    else:
        row.data = payload.data
        row.updated_at = now

    db.commit()
    db.refresh(row)

    logger.info("Stored app data for user %s (%d keys)", current_user.id, len(payload.data))
    return AppDataResponse(data=row.data, updated_at=row.updated_at)
