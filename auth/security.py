# auth/security.py
import os, secrets, datetime as dt
from dotenv import load_dotenv
from jose import jwt

load_dotenv()

JWT_ALG = "HS256"
SESSION_SECRET = os.getenv("SESSION_SECRET", "change-me")
SESSION_HOURS = int(os.getenv("SESSION_HOURS", "12"))
SESSION_COOKIE = "admin_session"
SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"


def new_session_id():
    return secrets.token_urlsafe(24)


def create_session_token(sid: str, role: str | None):
    exp = dt.datetime.now(dt.timezone.utc) + dt.timedelta(hours=SESSION_HOURS)
    return jwt.encode({"sub": sid, "role": role, "exp": exp}, SESSION_SECRET, algorithm=JWT_ALG)


def decode_session_token(token: str):
    return jwt.decode(token, SESSION_SECRET, algorithms=[JWT_ALG])
