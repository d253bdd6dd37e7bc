# backend/models/app_data.py
from sqlalchemy import Column, Integer, DateTime, ForeignKey, JSON, func
from database import Base

# Per-user snapshot of the client's local-storage keys, one row per user
class AppData(Base):
    __tablename__ = "app_data"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)
    data = Column(JSON, nullable=False)  # {storage key: serialized value}
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
