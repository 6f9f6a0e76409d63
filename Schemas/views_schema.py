# Schemas/views_schema.py
# JSON documents describing what the wizard and the dashboard show.
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from Schemas.admin_schemas import UserAccount
from Schemas.complaints_schema import Analytics, Complaint

STATUS_LABELS = {
    "New": "Новое",
    "In progress": "В работе",
    "Solved": "Решено",
}

SORT_LABELS = {
    "date_desc": "Сначала новые",
    "date_asc": "Сначала старые",
    "rating_asc": "Сначала низкая оценка",
    "rating_desc": "Сначала высокая оценка",
}

STEP_TITLES = ["Личные данные", "Описание проблемы", "Предложение", "Контакты"]


class ViewModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Wizard ----------
class StepOut(ViewModel):
    number: int
    title: str
    is_active: bool
    is_completed: bool


class CaptchaOut(ViewModel):
    site_key: str
    verified: bool


class WizardView(ViewModel):
    step: int
    steps: List[StepOut]
    submitted: bool
    submitting: bool
    values: Dict[str, Any]
    errors: Dict[str, str] = {}
    branches: List[str]
    branches_status: str
    branch_placeholder: str
    captcha: CaptchaOut
    can_go_back: bool
    can_go_next: bool
    can_submit: bool


# ---------- Dashboard ----------
class ComplaintRow(Complaint):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    created_date: Optional[str] = None
    status_label: str = ""


class ComplaintDetail(ComplaintRow):
    created_at_display: Optional[str] = None
    can_edit_status: bool = False
    can_edit_comment: bool = False
    status_options: List[str] = []


class PaginationOut(ViewModel):
    page: int
    total_pages: int
    can_previous: bool
    can_next: bool


class BranchRow(ViewModel):
    id: str
    name: str
    can_delete: bool


class FiltersOut(ViewModel):
    branch: str
    sort: str
    branch_options: List[str]
    sort_options: Dict[str, str]


class DashboardView(ViewModel):
    role: Optional[str] = None
    is_admin: bool
    loaded: bool
    tabs: List[str]
    active_tab: str
    analytics: Analytics
    filters: FiltersOut
    complaints: List[ComplaintRow]
    pagination: PaginationOut
    branches: List[BranchRow]
    can_add_branch: bool
    users: Optional[List[UserAccount]] = None
    can_add_user: bool = False
    selected: Optional[ComplaintDetail] = None
