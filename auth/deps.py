from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from auth.security import SESSION_COOKIE, decode_session_token
from auth.session import AdminSession, SessionStore

bearer = HTTPBearer(auto_error=False)


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_session(
        request: Request,
        creds: HTTPAuthorizationCredentials = Depends(bearer),
        store: SessionStore = Depends(get_session_store),
) -> AdminSession:
    raw = creds.credentials if creds else request.cookies.get(SESSION_COOKIE)
    if not raw:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        payload = decode_session_token(raw)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    session = store.get(payload.get("sub"))
    if session is None:
        raise HTTPException(status_code=401, detail="Session closed")
    return session


def require_roles(*allowed):
    def _guard(session: AdminSession = Depends(get_session)):
        if session.role not in allowed:
            raise HTTPException(status_code=403, detail="Forbidden")
        return session

    return _guard
