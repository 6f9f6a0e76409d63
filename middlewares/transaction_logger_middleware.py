import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from utils.transaction_logger import build_log, log_transaction_sync

logger = logging.getLogger(__name__)


class TransactionLoggerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.time()

        # read before call_next so the endpoint still receives the body
        try:
            body_bytes = await request.body()
            request.state.body = body_bytes.decode("utf-8") if body_bytes else None
        except Exception:
            request.state.body = None

        response = await call_next(request)
        duration = int((time.time() - start) * 1000)

        log = build_log(request, response.status_code, duration)
        try:
            db = getattr(request.app.state, "mongo_sync_db", None)
            log_transaction_sync(db, log)
        except Exception as e:
            logger.warning("Could not insert transaction log: %s", e)

        return response
