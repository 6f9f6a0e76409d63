"""
In-memory stand-in for the complaints REST API, served through httpx.MockTransport
"""
import json
from typing import Any, Dict, List, Optional, Tuple

import httpx

API_BASE = "http://api.test/api"


def make_complaint(i: int, **overrides) -> dict:
    doc = {
        "id": f"c{i}",
        "fullName": f"Посетитель {i}",
        "branch": "Центральный",
        "problem": "Очень долго ждал обслуживания в кассе",
        "rating": (i % 5) + 1,
        "createdAt": "2026-10-01T09:30:00.000Z",
        "status": "New",
    }
    doc.update(overrides)
    return doc


class FakeBackend:
    def __init__(self):
        self.accounts = {"root": ("secret", "admin"), "olga": ("secret", "manager")}
        self.branches: List[dict] = [
            {"id": "b1", "name": "Центральный"},
            {"id": "b2", "name": "Южный"},
        ]
        self.complaints: List[dict] = [make_complaint(i) for i in range(1, 4)]
        self.users: List[dict] = [
            {"id": "u1", "username": "root", "role": "admin"},
            {"id": "u2", "username": "olga", "role": "manager"},
        ]
        self.total_pages: Optional[int] = 1
        self.analytics = {"total": 3, "globalAvgRating": 4.2}
        self.analytics_success = True
        self.failures: Dict[Tuple[str, str], Tuple[int, Optional[str]]] = {}
        self.canned: Dict[Tuple[str, str], Tuple[int, Any]] = {}
        self.requests: List[httpx.Request] = []

    # ---------- Test controls ----------
    def fail(self, method: str, path: str, status: int = 500, error: Optional[str] = None):
        self.failures[(method, path)] = (status, error)

    def respond(self, method: str, path: str, status: int, body: Any):
        self.canned[(method, path)] = (status, body)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and self._path(r) == path]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @staticmethod
    def _path(request: httpx.Request) -> str:
        path = request.url.path
        return path[len("/api"):] if path.startswith("/api") else path

    # ---------- Routing ----------
    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method, path = request.method, self._path(request)
        body = json.loads(request.content) if request.content else None

        if (method, path) in self.canned:
            status, doc = self.canned[(method, path)]
            return httpx.Response(status, json=doc)

        if (method, path) in self.failures:
            status, error = self.failures[(method, path)]
            return httpx.Response(status, json={"error": error} if error else {})

        if (method, path) == ("POST", "/auth/login"):
            account = self.accounts.get(body.get("username"))
            if not account or account[0] != body.get("password"):
                return httpx.Response(401, json={"error": "Invalid credentials"})
            return httpx.Response(200, json={"token": f"tok-{body['username']}",
                                             "user": {"role": account[1], "username": body["username"]}})

        if (method, path) == ("GET", "/complaints"):
            doc = {"data": self.complaints}
            if self.total_pages is not None:
                doc["totalPages"] = self.total_pages
            return httpx.Response(200, json=doc)
        if (method, path) == ("GET", "/complaints/analytics"):
            return httpx.Response(200, json={"success": self.analytics_success, "data": self.analytics})
        if (method, path) == ("POST", "/complaints"):
            return httpx.Response(201, json={"success": True, "data": {"id": "new", **body}})
        if method == "PATCH" and path.startswith("/complaints/"):
            complaint_id = path.rsplit("/", 1)[1]
            for c in self.complaints:
                if c["id"] == complaint_id:
                    c.update(body)
                    return httpx.Response(200, json={"success": True, "data": c})
            return httpx.Response(404, json={"error": "Not found"})

        if (method, path) == ("GET", "/branches"):
            return httpx.Response(200, json={"data": self.branches})
        if (method, path) == ("POST", "/branches"):
            if any(b["name"] == body["name"] for b in self.branches):
                return httpx.Response(400, json={"error": "Филиал уже существует"})
            self.branches.append({"id": f"b{len(self.branches) + 1}", "name": body["name"]})
            return httpx.Response(201, json={"success": True})
        if method == "DELETE" and path.startswith("/branches/"):
            branch_id = path.rsplit("/", 1)[1]
            self.branches = [b for b in self.branches if b["id"] != branch_id]
            return httpx.Response(200, json={"success": True})

        if (method, path) == ("GET", "/users"):
            return httpx.Response(200, json={"data": self.users})
        if (method, path) == ("POST", "/users"):
            self.users.append({"id": f"u{len(self.users) + 1}", "username": body["username"],
                               "role": body["role"]})
            return httpx.Response(201, json={"success": True})

        return httpx.Response(404, json={"error": f"no route {method} {path}"})
