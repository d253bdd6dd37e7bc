from datetime import datetime
from pydantic import BaseModel, Field
from typing import Dict, Optional

# Client upload; values are the raw local-storage strings
class AppDataUpdate(BaseModel):
    data: Dict[str, str]

# Stored snapshot; both fields are null until the first upload
class AppDataResponse(BaseModel):
    data: Optional[Dict[str, str]] = None
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")
