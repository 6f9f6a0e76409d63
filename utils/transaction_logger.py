# utils/transaction_logger.py
import json
import logging
from datetime import datetime, timezone

logger = logging.getLogger("transaction")

REDACTED = "***"
SECRET_FIELDS = {"password", "captchaToken", "token", "access_token"}
SECRET_HEADERS = {"authorization", "cookie", "set-cookie"}


def redact_body(raw):
    """Mask secrets in a JSON request body; non-JSON bodies are kept as-is."""
    if not raw:
        return raw
    try:
        doc = json.loads(raw)
    except ValueError:
        return raw
    if isinstance(doc, dict):
        doc = {k: (REDACTED if k in SECRET_FIELDS else v) for k, v in doc.items()}
    return doc


def redact_headers(headers) -> dict:
    return {k: (REDACTED if k.lower() in SECRET_HEADERS else v) for k, v in dict(headers).items()}


def log_transaction_sync(db, log: dict):
    """Write a log entry into Transaction_History, or to the `transaction` logger without a DB"""
    if db is None:
        logger.info(
            "%s %s -> %s (%sms)",
            log["method"], log["endpoint"], log["response_status"], log["duration_ms"],
        )
        return
    coll = db["Transaction_History"]
    coll.insert_one(log)


def build_log(request, response_status, duration_ms: int):
    """Build log document"""
    return {
        "endpoint": request.url.path,
        "method": request.method,
        "query_params": dict(request.query_params),
        "headers": redact_headers(request.headers),
        "body": redact_body(getattr(request.state, "body", None)),
        "response_status": response_status,
        "timestamp": datetime.now(timezone.utc),
        "duration_ms": duration_ms,
    }
