# routes/dashboard.py
from fastapi import APIRouter, Depends, HTTPException, Query, status

from Models.dashboard_state import (
    AdminDashboard, ComplaintNotFound, ConfirmationRequired, InvalidInput, MutationFailed
)
from Schemas.admin_schemas import BranchIn, FiltersIn, Role, Tab, TabIn, UserIn
from Schemas.complaints_schema import CommentIn, StatusIn
from Schemas.views_schema import DashboardView
from auth.deps import get_session, require_roles
from auth.session import AdminSession

router = APIRouter()

admin_only = require_roles(Role.ADMIN.value)


def get_dashboard(session: AdminSession = Depends(get_session)) -> AdminDashboard:
    return session.dashboard


async def _view(dashboard: AdminDashboard, changed: bool = True) -> DashboardView:
    if changed or not dashboard.loaded:
        await dashboard.refresh()
    return dashboard.view()


# ---------- View & navigation ----------
@router.get("/dashboard", response_model=DashboardView, response_model_exclude_none=True)
async def show(dashboard: AdminDashboard = Depends(get_dashboard)):
    return await _view(dashboard, changed=False)


@router.post("/dashboard/refresh", response_model=DashboardView, response_model_exclude_none=True)
async def refresh(dashboard: AdminDashboard = Depends(get_dashboard)):
    return await _view(dashboard)


@router.put("/dashboard/tab", response_model=DashboardView, response_model_exclude_none=True)
async def switch_tab(
        body: TabIn,
        session: AdminSession = Depends(get_session),
):
    if body.tab == Tab.USERS and not session.is_admin:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Forbidden")
    dashboard = session.dashboard
    return await _view(dashboard, dashboard.set_tab(body.tab))


@router.put("/dashboard/filters", response_model=DashboardView, response_model_exclude_none=True)
async def filter_complaints(body: FiltersIn, dashboard: AdminDashboard = Depends(get_dashboard)):
    return await _view(dashboard, dashboard.set_filters(branch=body.branch, sort=body.sort))


@router.post("/dashboard/page/next", response_model=DashboardView, response_model_exclude_none=True)
async def next_page(dashboard: AdminDashboard = Depends(get_dashboard)):
    return await _view(dashboard, dashboard.next_page())


@router.post("/dashboard/page/previous", response_model=DashboardView, response_model_exclude_none=True)
async def previous_page(dashboard: AdminDashboard = Depends(get_dashboard)):
    return await _view(dashboard, dashboard.previous_page())


# ---------- Complaint detail ----------
@router.get("/complaints/{complaint_id}", response_model=DashboardView, response_model_exclude_none=True)
def open_complaint(complaint_id: str, dashboard: AdminDashboard = Depends(get_dashboard)):
    try:
        dashboard.select_complaint(complaint_id)
    except ComplaintNotFound:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Complaint not found")
    return dashboard.view()


@router.delete("/complaints/selected", response_model=DashboardView, response_model_exclude_none=True)
def close_complaint(dashboard: AdminDashboard = Depends(get_dashboard)):
    dashboard.close_complaint()
    return dashboard.view()


@router.patch("/complaints/{complaint_id}/status", response_model=DashboardView, response_model_exclude_none=True)
async def change_status(
        complaint_id: str,
        body: StatusIn,
        session: AdminSession = Depends(admin_only),
):
    try:
        await session.dashboard.update_status(complaint_id, body.status)
    except MutationFailed as e:
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, str(e))
    return session.dashboard.view()


@router.patch("/complaints/{complaint_id}/comment", response_model=DashboardView, response_model_exclude_none=True)
async def save_comment(
        complaint_id: str,
        body: CommentIn,
        session: AdminSession = Depends(admin_only),
):
    try:
        await session.dashboard.save_comment(complaint_id, body.admin_comment)
    except MutationFailed as e:
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, str(e))
    return session.dashboard.view()


# ---------- Branches ----------
@router.post("/branches", response_model=DashboardView, response_model_exclude_none=True)
async def add_branch(body: BranchIn, session: AdminSession = Depends(admin_only)):
    try:
        await session.dashboard.add_branch(body.name)
    except InvalidInput as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))
    except MutationFailed as e:
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, str(e))
    return session.dashboard.view()


@router.delete("/branches/{branch_id}", response_model=DashboardView, response_model_exclude_none=True)
async def delete_branch(
        branch_id: str,
        confirm: bool = Query(False, description="must be true, mirrors the confirmation dialog"),
        session: AdminSession = Depends(admin_only),
):
    try:
        await session.dashboard.delete_branch(branch_id, confirmed=confirm)
    except ConfirmationRequired as e:
        raise HTTPException(status.HTTP_409_CONFLICT, str(e))
    except MutationFailed as e:
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, str(e))
    return session.dashboard.view()


# ---------- Users ----------
@router.post("/users", response_model=DashboardView, response_model_exclude_none=True)
async def add_user(body: UserIn, session: AdminSession = Depends(admin_only)):
    try:
        await session.dashboard.add_user(body.username, body.password, body.role)
    except InvalidInput as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))
    except MutationFailed as e:
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, str(e))
    return session.dashboard.view()
