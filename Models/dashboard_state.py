# Models/dashboard_state.py
import asyncio
import logging
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from Connections.api_client import ApiError, ComplaintsApi
from Helpers.helpers import trimmed
from Schemas.admin_schemas import ALL_BRANCHES, Branch, Role, Tab, UserAccount
from Schemas.complaints_schema import (
    PAGE_SIZE, Analytics, Complaint, ComplaintStatus, SortOrder
)
from Schemas.views_schema import (
    SORT_LABELS, STATUS_LABELS, BranchRow, ComplaintDetail, ComplaintRow,
    DashboardView, FiltersOut, PaginationOut,
)
from utils.date_utils import format_date, format_datetime

logger = logging.getLogger(__name__)

STATUS_ERROR = "Ошибка при обновлении статуса"
COMMENT_ERROR = "Ошибка при сохранении комментария"
BRANCH_ADD_ERROR = "Ошибка при добавлении филиала"
BRANCH_DELETE_ERROR = "Ошибка при удалении филиала"
BRANCH_DELETE_CONFIRM = "Удалить этот филиал?"
USER_ADD_ERROR = "Ошибка при добавлении пользователя"

_MISSING = object()


class MutationFailed(Exception):
    pass


class ConfirmationRequired(Exception):
    pass


class InvalidInput(ValueError):
    pass


class ComplaintNotFound(LookupError):
    pass


class AdminDashboard:
    """
    Server-side state of one admin console.

    Every change of tab, branch filter, sort order or page is followed by a
    `refresh()`. Refreshes are numbered; a response that comes back after a
    newer refresh has started is dropped, so the last started refresh wins.
    A failed refresh keeps whatever was shown before.
    """

    def __init__(self, api: ComplaintsApi, role: Optional[str]):
        self.api = api
        self.role = role
        self.tab = Tab.COMPLAINTS
        self.branch_filter = ALL_BRANCHES
        self.sort = SortOrder.DATE_DESC
        self.page = 1
        self.total_pages = 1
        self.complaints: List[Complaint] = []
        self.branches: List[Branch] = []
        self.users: List[UserAccount] = []
        self.analytics = Analytics()
        self.selected: Optional[Complaint] = None
        self.loaded = False
        self._generation = 0

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    # ---------- Fetch ----------
    async def refresh(self) -> bool:
        self._generation += 1
        generation = self._generation

        branch, sort = None, None
        if self.tab == Tab.COMPLAINTS:
            if self.branch_filter != ALL_BRANCHES:
                branch = self.branch_filter
            sort = self.sort

        calls = [
            self.api.list_complaints(self.page, PAGE_SIZE, branch=branch, sort=sort),
            self.api.list_branches(),
            self.api.get_analytics(),
        ]
        if self.is_admin:
            calls.append(self.api.list_users())

        try:
            results = await asyncio.gather(*calls)
        except (ApiError, ValidationError):
            logger.exception("Dashboard refresh failed, keeping previous data")
            return False
        finally:
            self.loaded = True

        if generation != self._generation:
            logger.debug("Dropping dashboard response %s, newer refresh %s started", generation, self._generation)
            return False

        page, branches, analytics = results[:3]
        self.complaints = page.data
        self.total_pages = page.total_pages
        self.page = min(self.page, self.total_pages)
        self.branches = branches
        if analytics is not None:
            self.analytics = analytics
        if self.is_admin:
            self.users = results[3]
        return True

    # ---------- Navigation ----------
    def set_tab(self, tab: Tab) -> bool:
        tab = Tab(tab)
        if tab == self.tab:
            return False
        self.tab = tab
        return True

    def set_filters(self, branch: Optional[str] = None, sort: Optional[SortOrder] = None) -> bool:
        changed = False
        if branch is not None and (branch or ALL_BRANCHES) != self.branch_filter:
            self.branch_filter = branch or ALL_BRANCHES
            changed = True
        if sort is not None and SortOrder(sort) != self.sort:
            self.sort = SortOrder(sort)
            changed = True
        if changed:
            self.page = 1
        return changed

    def next_page(self) -> bool:
        return self._go_to(min(self.total_pages, self.page + 1))

    def previous_page(self) -> bool:
        return self._go_to(max(1, self.page - 1))

    def _go_to(self, page: int) -> bool:
        if page == self.page:
            return False
        self.page = page
        return True

    # ---------- Detail ----------
    def select_complaint(self, complaint_id: str) -> Complaint:
        for c in self.complaints:
            if c.id == complaint_id:
                self.selected = c
                return c
        raise ComplaintNotFound(complaint_id)

    def close_complaint(self):
        self.selected = None

    def _apply(self, complaint_id: str, field: str, value: Any) -> Tuple[Any, Any]:
        """Set `field` on the list row and on the open complaint; returns their old values."""
        old_row = old_selected = _MISSING
        rows = []
        for c in self.complaints:
            if c.id == complaint_id:
                old_row = getattr(c, field)
                c = c.model_copy(update={field: value})
            rows.append(c)
        self.complaints = rows
        if self.selected is not None and self.selected.id == complaint_id:
            old_selected = getattr(self.selected, field)
            self.selected = self.selected.model_copy(update={field: value})
        return old_row, old_selected

    def _revert(self, complaint_id: str, field: str, old_row: Any, old_selected: Any):
        if old_row is not _MISSING:
            self.complaints = [
                c.model_copy(update={field: old_row}) if c.id == complaint_id else c
                for c in self.complaints
            ]
        if old_selected is not _MISSING and self.selected is not None and self.selected.id == complaint_id:
            self.selected = self.selected.model_copy(update={field: old_selected})

    # ---------- Mutations ----------
    async def update_status(self, complaint_id: str, status: ComplaintStatus):
        status = ComplaintStatus(status)
        old_row, old_selected = self._apply(complaint_id, "status", status)
        try:
            await self.api.update_complaint(complaint_id, status=status)
        except ApiError as e:
            self._revert(complaint_id, "status", old_row, old_selected)
            logger.error("Status update of complaint %s failed: %s", complaint_id, e.message)
            raise MutationFailed(STATUS_ERROR) from e

    async def save_comment(self, complaint_id: str, comment: str):
        old_row, old_selected = self._apply(complaint_id, "admin_comment", comment)
        try:
            await self.api.update_complaint(complaint_id, admin_comment=comment)
        except ApiError as e:
            self._revert(complaint_id, "admin_comment", old_row, old_selected)
            logger.error("Comment update of complaint %s failed: %s", complaint_id, e.message)
            raise MutationFailed(COMMENT_ERROR) from e

    async def add_branch(self, name: str):
        name = trimmed(name)
        if not name:
            raise InvalidInput("Введите название филиала")
        try:
            await self.api.create_branch(name)
        except ApiError as e:
            raise MutationFailed(e.error or BRANCH_ADD_ERROR) from e
        logger.info("Branch %r added", name)
        await self.refresh()

    async def delete_branch(self, branch_id: str, confirmed: bool = False):
        if not confirmed:
            raise ConfirmationRequired(BRANCH_DELETE_CONFIRM)
        try:
            await self.api.delete_branch(branch_id)
        except ApiError as e:
            raise MutationFailed(e.error or BRANCH_DELETE_ERROR) from e
        logger.info("Branch %s deleted", branch_id)
        await self.refresh()

    async def add_user(self, username: str, password: str, role: Role = Role.MANAGER):
        username = trimmed(username)
        if not username or not trimmed(password):
            raise InvalidInput("Введите логин и пароль")
        try:
            await self.api.create_user(username, password, Role(role).value)
        except ApiError as e:
            raise MutationFailed(e.error or USER_ADD_ERROR) from e
        logger.info("User %r (%s) added", username, Role(role).value)
        await self.refresh()

    # ---------- View ----------
    def _row(self, c: Complaint) -> ComplaintRow:
        return ComplaintRow.model_validate({
            **c.model_dump(),
            "created_date": format_date(c.created_at),
            "status_label": STATUS_LABELS[c.status.value],
        })

    def _detail(self, c: Complaint) -> ComplaintDetail:
        return ComplaintDetail.model_validate({
            **self._row(c).model_dump(),
            "created_at_display": format_datetime(c.created_at),
            "can_edit_status": self.is_admin,
            "can_edit_comment": self.is_admin,
            "status_options": [s.value for s in ComplaintStatus] if self.is_admin else [],
        })

    def view(self) -> DashboardView:
        tabs = [Tab.COMPLAINTS.value, Tab.BRANCHES.value]
        if self.is_admin:
            tabs.append(Tab.USERS.value)
        return DashboardView(
            role=self.role,
            is_admin=self.is_admin,
            loaded=self.loaded,
            tabs=tabs,
            active_tab=self.tab.value,
            analytics=self.analytics,
            filters=FiltersOut(
                branch=self.branch_filter,
                sort=self.sort.value,
                branch_options=[ALL_BRANCHES] + [b.name for b in self.branches],
                sort_options=SORT_LABELS,
            ),
            complaints=[self._row(c) for c in self.complaints],
            pagination=PaginationOut(
                page=self.page,
                total_pages=self.total_pages,
                can_previous=self.page > 1,
                can_next=self.page < self.total_pages,
            ),
            branches=[BranchRow(id=b.id, name=b.name, can_delete=self.is_admin) for b in self.branches],
            can_add_branch=self.is_admin,
            users=self.users if self.is_admin else None,
            can_add_user=self.is_admin,
            selected=self._detail(self.selected) if self.selected is not None else None,
        )
