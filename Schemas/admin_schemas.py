from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from Schemas.complaints_schema import SortOrder


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"


class Tab(str, Enum):
    COMPLAINTS = "complaints"
    BRANCHES = "branches"
    USERS = "users"


ALL_BRANCHES = "all"


# ---------- Records ----------
class Branch(BaseModel):
    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str

    @field_validator("id", mode="before")
    @classmethod
    def id_as_str(cls, v):
        return str(v)


class UserAccount(BaseModel):
    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    username: str
    role: str

    @field_validator("id", mode="before")
    @classmethod
    def id_as_str(cls, v):
        return str(v)


# ---------- Requests ----------
class BranchIn(BaseModel):
    name: str = ""


class UserIn(BaseModel):
    username: str = ""
    password: str = ""
    role: Role = Role.MANAGER


class TabIn(BaseModel):
    tab: Tab


class FiltersIn(BaseModel):
    branch: Optional[str] = None
    sort: Optional[SortOrder] = None
