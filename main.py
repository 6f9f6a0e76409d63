# main.py
import os
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo import MongoClient

from Connections.api_client import ComplaintsApi, create_http_client
from Models.complaint_wizard import WizardRegistry
from auth.session import SessionStore
from middlewares.transaction_logger_middleware import TransactionLoggerMiddleware

# ── Routers
from routes.routes_auth import router as auth_router
from routes.wizard import router as wizard_router
from routes.dashboard import router as dashboard_router

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def init_state(app: FastAPI, api: ComplaintsApi, mongo_db=None):
    app.state.api = api
    app.state.wizards = WizardRegistry()
    app.state.sessions = SessionStore()
    app.state.mongo_sync_db = mongo_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    api = ComplaintsApi(create_http_client())

    # Transaction log goes to Mongo only when it is configured
    mongo_uri = os.getenv("MONGO_URI")
    sm_client = None
    mongo_db = None
    if mongo_uri:
        sm_client = MongoClient(mongo_uri)
        try:
            sm_client.admin.command("ping")
        except Exception as e:
            sm_client.close()
            await api.aclose()
            raise RuntimeError(f"MongoDB ping failed: {e}") from e
        mongo_db = sm_client[os.getenv("MONGO_DB", "plovster_feedback")]
    else:
        logger.info("MONGO_URI not set, transaction log goes to the 'transaction' logger")

    init_state(app, api, mongo_db)
    try:
        yield
    finally:
        await api.aclose()
        if sm_client is not None:
            sm_client.close()


app = FastAPI(title="Plovster Feedback", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=os.getenv("CORS_CREDENTIALS", "false").lower() == "true",
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TransactionLoggerMiddleware)

# Register Routers
app.include_router(wizard_router, prefix="/wizard", tags=["Complaint Wizard"])
app.include_router(auth_router, prefix="/auth", tags=["Auth"])
app.include_router(dashboard_router, prefix="/admin", tags=["Admin Console"])


@app.get("/")
async def root():
    return {"message": "Plovster feedback is running!"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8080, reload=True)
