# backend/models/users.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, func
from database import Base

# Roles a CRM account can hold
class UserRole(str, enum.Enum):
    ADMIN = "Admin"
    WORKER = "Worker"
    CUSTOMER = "Customer"

# Represents a user account; password_hash is empty for federated-only accounts
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)  # always stored lower-cased
    password_hash = Column(String(255), nullable=True)
    name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.WORKER.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
