from pydantic import BaseModel, Field, field_validator


class UserCreate(BaseModel):
    username: str = ""
    password: str = ""

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    message: str
    token: str
    username: str
    role: str = "user"


class MessageResponse(BaseModel):
    message: str


# Identity decoded from a verified bearer token
class CurrentUser(BaseModel):
    user_id: str
    username: str
    role: str = Field(default="user")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
