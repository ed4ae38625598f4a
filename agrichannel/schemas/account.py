from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class PasswordIn(BaseModel):
    # left untyped; AuthService rejects non-string passwords
    password: Optional[Any] = None


class AuthResponse(BaseModel):
    user_id: int = Field(alias="userId")
    token: str

    model_config = ConfigDict(populate_by_name=True)
