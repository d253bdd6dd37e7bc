from pydantic import BaseModel
from typing import List, Optional

# Fields are optional so that missing values surface as 400s from the routes

# Credentials for password login
class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

# Identity asserted by the federated login stub
class GoogleLogin(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None

# Schema for admin-provisioned accounts
class UserCreate(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None  # defaults to Worker

# Partial update applied by an administrator
class UserUpdate(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None

# Public projection of a user; never carries the password hash
class UserResponse(BaseModel):
    id: int
    email: str
    role: str
    name: Optional[str] = None

    class Config:
        from_attributes = True

# Token plus the user it was issued for
class AuthResponse(BaseModel):
    token: str
    user: UserResponse

class PaginatedUsersResponse(BaseModel):
    items: List[UserResponse]
    total: int
    page: int
    page_size: int

# Start of the password reset flow
class ForgotPassword(BaseModel):
    email: Optional[str] = None

# Completes a reset with the token from the emailed link
class ResetPassword(BaseModel):
    token: Optional[str] = None
    password: Optional[str] = None
