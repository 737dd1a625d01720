from pydantic import BaseModel
from typing import Optional

from app.schemas.user import UserRead


# -------------------------------------------------------------------
# LOGIN REQUEST
# -------------------------------------------------------------------
class LoginRequest(BaseModel):
    email: str
    password: str

    class Config:
        json_schema_extra = {
            "examples": [
                {"email": "superadmin@example.com", "password": "password123"}
            ]
        }


# -------------------------------------------------------------------
# TOKEN + USER DETAILS (Used for login response)
# -------------------------------------------------------------------
class TokenWithUser(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user: UserRead
    password_change_required: bool = False


# -------------------------------------------------------------------
# CHANGE PASSWORD
# -------------------------------------------------------------------
class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str


# -------------------------------------------------------------------
# FORGOT PASSWORD (request goes to an administrator)
# -------------------------------------------------------------------
class ForgotPasswordRequest(BaseModel):
    email: str
