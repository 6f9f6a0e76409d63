# Schemas/complaints_schema.py
from enum import Enum
from typing import List, Optional

from pydantic import (
    AliasChoices, BaseModel, ConfigDict, Field, conint, constr, field_validator
)

from Helpers.helpers import as_rating, blank_to_none

PAGE_SIZE = 15


class ComplaintStatus(str, Enum):
    NEW = "New"
    IN_PROGRESS = "In progress"
    SOLVED = "Solved"


class SortOrder(str, Enum):
    DATE_DESC = "date_desc"
    DATE_ASC = "date_asc"
    RATING_ASC = "rating_asc"
    RATING_DESC = "rating_desc"


# ---------- Records ----------
class Complaint(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"), serialization_alias="id")
    full_name: str = Field(alias="fullName")
    branch: str
    problem: str
    solution: Optional[str] = None
    contact: Optional[str] = None
    rating: Optional[int] = None
    admin_comment: Optional[str] = Field(None, alias="adminComment")
    created_at: Optional[str] = Field(None, alias="createdAt")
    status: ComplaintStatus = ComplaintStatus.NEW

    @field_validator("id", mode="before")
    @classmethod
    def id_as_str(cls, v):
        return str(v)

    @field_validator("rating", mode="before")
    @classmethod
    def rating_unset(cls, v):
        return as_rating(v)


class ComplaintsPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: List[Complaint] = []
    total_pages: int = Field(1, alias="totalPages")

    @field_validator("total_pages", mode="before")
    @classmethod
    def default_one(cls, v):
        return v or 1


class Analytics(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int = 0
    global_avg_rating: float = Field(0, alias="globalAvgRating")

    @field_validator("global_avg_rating", mode="before")
    @classmethod
    def none_is_zero(cls, v):
        return v or 0


# ---------- Wizard steps ----------
# One model per wizard step; the wizard validates only the model of the step it is on.
class PersonalStep(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: constr(min_length=2, max_length=100) = Field(..., alias="fullName")
    branch: constr(min_length=1)


class ProblemStep(BaseModel):
    problem: constr(min_length=10, max_length=1000)


class SuggestionStep(BaseModel):
    solution: Optional[constr(max_length=1000)] = None


class ContactStep(BaseModel):
    contact: Optional[str] = None
    rating: Optional[conint(ge=1, le=5, strict=True)] = None


class ComplaintSubmission(PersonalStep, ProblemStep, SuggestionStep, ContactStep):
    """Body of POST /complaints: every wizard field plus the bot-verification token."""

    captcha_token: constr(min_length=1) = Field(..., alias="captchaToken")

    @field_validator("solution", "contact", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return blank_to_none(v)

    def payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------- Requests ----------
class WizardFieldsIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: Optional[str] = Field(None, alias="fullName")
    branch: Optional[str] = None
    problem: Optional[str] = None
    solution: Optional[str] = None
    contact: Optional[str] = None
    rating: Optional[int] = None


class CaptchaIn(BaseModel):
    token: constr(min_length=1)


class StatusIn(BaseModel):
    status: ComplaintStatus


class CommentIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    admin_comment: str = Field("", alias="adminComment")
