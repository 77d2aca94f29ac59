from pydantic import BaseModel, Field
from typing import Optional


class SignInRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    remember_me: bool = False


class SignUpRequest(BaseModel):
    username: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str
    confirm_password: Optional[str] = None


class ProfileUpdate(BaseModel):
    email: str = ""
    first_name: str = ""
    last_name: str = ""


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordForm(BaseModel):
    token: Optional[str] = ""
    password: str = ""
    confirm_password: str = ""


class SessionOut(BaseModel):
    user_id: Optional[str] = None
    username: Optional[str] = None
