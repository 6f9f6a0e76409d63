# Connections/api_client.py
import os
import logging
from typing import Any, List, Optional

import httpx
from dotenv import load_dotenv
from fastapi import Request
from pydantic import ValidationError

from auth.schemas import LoginResult
from Schemas.admin_schemas import Branch, UserAccount
from Schemas.complaints_schema import (
    Analytics, ComplaintStatus, ComplaintsPage, ComplaintSubmission, SortOrder
)

load_dotenv()

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:5000/api").strip()
API_TIMEOUT = os.getenv("API_TIMEOUT", "").strip()

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Transport failure or non-2xx answer from the complaints API."""

    def __init__(self, status_code: Optional[int], message: str, error: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        # the API's own `error` text, shown to admins when present
        self.error = error


def _server_error(resp: httpx.Response) -> Optional[str]:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None


def create_http_client(**kwargs) -> httpx.AsyncClient:
    if API_TIMEOUT:
        kwargs.setdefault("timeout", float(API_TIMEOUT))
    return httpx.AsyncClient(base_url=API_BASE_URL, **kwargs)


class ComplaintsApi:
    def __init__(self, client: httpx.AsyncClient, token: Optional[str] = None):
        self._client = client
        self._token = token

    def authorized(self, token: str) -> "ComplaintsApi":
        return ComplaintsApi(self._client, token=token)

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        try:
            resp = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(None, f"{method} {path} failed: {e}") from e

        if resp.is_error:
            logger.warning("API %s %s -> %s", method, path, resp.status_code)
            error = _server_error(resp)
            raise ApiError(resp.status_code, error or f"{method} {path}: HTTP {resp.status_code}", error)
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(resp.status_code, f"{method} {path}: response is not JSON") from e

    async def _document(self, method: str, path: str, **kwargs) -> dict:
        """`_request` for endpoints that answer with a JSON object; an empty body reads as `{}`."""
        body = await self._request(method, path, **kwargs)
        if body is None:
            return {}
        if not isinstance(body, dict):
            logger.warning("API %s %s -> unexpected %s body", method, path, type(body).__name__)
            raise ApiError(None, f"{method} {path}: unexpected response shape")
        return body

    async def _listing(self, path: str) -> list:
        items = (await self._document("GET", path)).get("data") or []
        if not isinstance(items, list):
            raise ApiError(None, f"GET {path}: `data` is not a list")
        return items

    # ---------- Auth ----------
    async def login(self, username: str, password: str) -> LoginResult:
        body = await self._document("POST", "/auth/login", json={"username": username, "password": password})
        try:
            return LoginResult.model_validate(body)
        except ValidationError as e:
            raise ApiError(None, "POST /auth/login: unexpected response shape") from e

    # ---------- Complaints ----------
    async def list_complaints(
            self,
            page: int,
            limit: int,
            branch: Optional[str] = None,
            sort: Optional[SortOrder] = None,
    ) -> ComplaintsPage:
        params = {"page": page, "limit": limit}
        if branch:
            params["branch"] = branch
        if sort:
            params["sort"] = SortOrder(sort).value
        body = await self._document("GET", "/complaints", params=params)
        return ComplaintsPage.model_validate(body)

    async def get_analytics(self) -> Optional[Analytics]:
        body = await self._document("GET", "/complaints/analytics")
        if not body.get("success"):
            return None
        return Analytics.model_validate(body.get("data") or {})

    async def create_complaint(self, submission: ComplaintSubmission) -> Any:
        return await self._request("POST", "/complaints", json=submission.payload())

    async def update_complaint(
            self,
            complaint_id: str,
            status: Optional[ComplaintStatus] = None,
            admin_comment: Optional[str] = None,
    ) -> Any:
        body = {}
        if status is not None:
            body["status"] = ComplaintStatus(status).value
        if admin_comment is not None:
            body["adminComment"] = admin_comment
        return await self._request("PATCH", f"/complaints/{complaint_id}", json=body)

    # ---------- Branches ----------
    async def list_branches(self) -> List[Branch]:
        return [Branch.model_validate(b) for b in await self._listing("/branches")]

    async def create_branch(self, name: str) -> Any:
        return await self._request("POST", "/branches", json={"name": name})

    async def delete_branch(self, branch_id: str) -> Any:
        return await self._request("DELETE", f"/branches/{branch_id}")

    # ---------- Users ----------
    async def list_users(self) -> List[UserAccount]:
        return [UserAccount.model_validate(u) for u in await self._listing("/users")]

    async def create_user(self, username: str, password: str, role: str) -> Any:
        return await self._request(
            "POST", "/users", json={"username": username, "password": password, "role": role}
        )


def get_api(request: Request) -> ComplaintsApi:
    return request.app.state.api
