# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    PORT: int = 4000

    # Token signing
    JWT_SECRET: str = "dev-secret"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 7 * 24 * 60

    # Password reset links
    RESET_TOKEN_EXPIRE_MINUTES: int = 30
    PASSWORD_RESET_URL: str = "http://localhost:5173/reset-password"

    # Static key accepted in the x-admin-key header; empty disables the bypass
    ADMIN_SECRET: str = ""

    DATABASE_URL: str = "sqlite:///./crm.db"
    BCRYPT_ROUNDS: int = 10
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"
