import httpx
import pytest

from Connections.api_client import ApiError, ComplaintsApi
from Schemas.complaints_schema import ComplaintStatus, SortOrder
from mocks.fake_backend import API_BASE


@pytest.mark.asyncio
async def test_list_complaints_params(api, backend):
    page = await api.list_complaints(2, 15, branch="Южный", sort=SortOrder.RATING_ASC)

    params = backend.calls("GET", "/complaints")[0].url.params
    assert dict(params) == {"page": "2", "limit": "15", "branch": "Южный", "sort": "rating_asc"}
    assert [c.full_name for c in page.data] == ["Посетитель 1", "Посетитель 2", "Посетитель 3"]


@pytest.mark.asyncio
async def test_mongo_style_ids(api, backend):
    backend.branches = [{"_id": 17, "name": "Центральный"}]
    branches = await api.list_branches()
    assert branches[0].id == "17"


@pytest.mark.asyncio
async def test_error_text_extracted(api, backend):
    backend.fail("DELETE", "/branches/b1", 400, "Филиал используется")

    with pytest.raises(ApiError) as exc:
        await api.delete_branch("b1")

    assert exc.value.status_code == 400
    assert exc.value.error == "Филиал используется"


@pytest.mark.asyncio
async def test_error_without_text(api, backend):
    backend.fail("GET", "/users", 500)
    with pytest.raises(ApiError) as exc:
        await api.list_users()
    assert exc.value.status_code == 500
    assert exc.value.error is None


@pytest.mark.asyncio
async def test_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    api = ComplaintsApi(httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=API_BASE))
    with pytest.raises(ApiError) as exc:
        await api.list_branches()
    assert exc.value.status_code is None
    await api.aclose()


@pytest.mark.asyncio
async def test_authorized_sends_bearer(api, backend):
    await api.list_branches()
    await api.authorized("abc").update_complaint("c1", status=ComplaintStatus.SOLVED)

    assert "Authorization" not in backend.calls("GET", "/branches")[0].headers
    assert backend.calls("PATCH", "/complaints/c1")[0].headers["Authorization"] == "Bearer abc"


@pytest.mark.asyncio
async def test_login_role_is_lowercased(api, backend):
    backend.accounts["boss"] = ("pw", "Admin")
    result = await api.login("boss", "pw")
    assert result.token == "tok-boss"
    assert result.user.role == "admin"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [["unexpected"], {"data": 5}, "text"])
async def test_branches_of_wrong_shape(api, backend, body):
    backend.respond("GET", "/branches", 200, body)
    with pytest.raises(ApiError):
        await api.list_branches()


@pytest.mark.asyncio
async def test_analytics_of_wrong_shape(api, backend):
    backend.respond("GET", "/complaints/analytics", 200, ["unexpected"])
    with pytest.raises(ApiError) as exc:
        await api.get_analytics()
    assert exc.value.status_code is None


@pytest.mark.asyncio
async def test_login_answer_without_token(api, backend):
    backend.respond("POST", "/auth/login", 200, {"user": {"role": "admin"}})
    with pytest.raises(ApiError) as exc:
        await api.login("root", "secret")
    assert exc.value.status_code is None
