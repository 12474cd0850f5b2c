from pydantic import BaseModel, Field

from app.models.admin_user import AdminPublic


class LoginRequest(BaseModel):
    username: str = Field(min_length=3)
    password: str = Field(min_length=6)


class AdminCreateRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6, max_length=72)  # bcrypt ignores bytes past 72


class AdminResponse(BaseModel):
    success: bool = True
    message: str
    admin: AdminPublic


class MeResponse(BaseModel):
    admin: AdminPublic


class LogoutResponse(BaseModel):
    success: bool = True
    message: str = "Logout realizado com sucesso"
