import uuid

from pydantic import EmailStr, Field

from feedback360.schemas.base import CamelModel


class SendOtpRequest(CamelModel):
    email: EmailStr


class VerifyOtpRequest(CamelModel):
    email: EmailStr
    code: str = Field(pattern=r"^\d{6}$")


class ManagerLoginRequest(CamelModel):
    manager_id: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AdminLoginRequest(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserOut(CamelModel):
    id: uuid.UUID
    email: str
    first_name: str | None
    last_name: str | None


class LoginResponse(CamelModel):
    message: str
    user: UserOut


class ConsoleUserOut(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str


class ManagerLoginResponse(CamelModel):
    message: str
    user: ConsoleUserOut


class ManagerStatusOut(CamelModel):
    authenticated: bool
    user: ConsoleUserOut | None = None
