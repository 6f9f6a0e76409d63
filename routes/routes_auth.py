from fastapi import APIRouter, Depends, HTTPException, Response

from Connections.api_client import ApiError, ComplaintsApi, get_api
from auth.deps import get_session, get_session_store
from auth.schemas import LoginIn, SessionOut, TokenOut
from auth.security import (
    SESSION_COOKIE, SESSION_COOKIE_SECURE, SESSION_HOURS, create_session_token
)
from auth.session import AdminSession, SessionStore

router = APIRouter()

LOGIN_FAILED = "Неверный логин или пароль"


# ---------------- Endpoints ---------------- #
@router.post("/login", response_model=TokenOut)
async def login(
        data: LoginIn,
        response: Response,
        api: ComplaintsApi = Depends(get_api),
        store: SessionStore = Depends(get_session_store),
):
    try:
        result = await api.login(data.username, data.password)
    except ApiError as e:
        if e.status_code is None or e.status_code >= 500:
            raise HTTPException(502, LOGIN_FAILED)
        raise HTTPException(401, LOGIN_FAILED)

    session = store.create(result.token, result.user.role, api, username=result.user.username or data.username)
    token = create_session_token(session.sid, session.role)
    response.set_cookie(
        SESSION_COOKIE, token,
        max_age=SESSION_HOURS * 3600,
        httponly=True,
        samesite="lax",
        secure=SESSION_COOKIE_SECURE,
    )
    return TokenOut(access_token=token, role=session.role)


@router.post("/logout", status_code=204)
def logout(
        session: AdminSession = Depends(get_session),
        store: SessionStore = Depends(get_session_store),
):
    store.drop(session.sid)
    response = Response(status_code=204)
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("/me", response_model=SessionOut)
def me(session: AdminSession = Depends(get_session)):
    return SessionOut(username=session.username, role=session.role, is_admin=session.is_admin)
