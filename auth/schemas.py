from pydantic import BaseModel, ConfigDict, constr, field_validator
from typing import Optional


def _normalize_role_label(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    if not v:
        return None
    return v.lower()


# ---------- Requests ----------
class LoginIn(BaseModel):
    username: constr(strip_whitespace=True, min_length=1)
    password: constr(min_length=1)


# ---------- API answers ----------
class LoginUser(BaseModel):
    model_config = ConfigDict(extra="ignore")
    role: Optional[str] = None
    username: Optional[str] = None

    @field_validator("role")
    @classmethod
    def normalize_role(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_role_label(v)


class LoginResult(BaseModel):
    token: str
    user: LoginUser = LoginUser()


# ---------- Responses ----------
class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: Optional[str] = None


class SessionOut(BaseModel):
    username: Optional[str] = None
    role: Optional[str] = None
    is_admin: bool
