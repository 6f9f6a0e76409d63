import logging

import pytest
from httpx import AsyncClient

from main import app
from utils.transaction_logger import REDACTED, redact_body, redact_headers


def test_secrets_are_masked():
    body = redact_body('{"username": "root", "password": "secret"}')
    assert body == {"username": "root", "password": REDACTED}

    headers = redact_headers({"Authorization": "Bearer x", "Accept": "*/*"})
    assert headers == {"Authorization": REDACTED, "Accept": "*/*"}


def test_non_json_body_kept():
    assert redact_body("plain text") == "plain text"


class _Collection:
    def __init__(self):
        self.docs = []

    def insert_one(self, doc):
        self.docs.append(doc)


@pytest.mark.asyncio
async def test_requests_are_logged_to_mongo(client: AsyncClient):
    collection = _Collection()
    app.state.mongo_sync_db = {"Transaction_History": collection}

    await client.post("/auth/login", json={"username": "root", "password": "secret"})

    log = collection.docs[-1]
    assert log["endpoint"] == "/auth/login"
    assert log["method"] == "POST"
    assert log["response_status"] == 200
    assert log["body"] == {"username": "root", "password": REDACTED}


@pytest.mark.asyncio
async def test_requests_are_logged_without_mongo(client: AsyncClient, caplog):
    with caplog.at_level(logging.INFO, logger="transaction"):
        await client.get("/")
    assert "GET / -> 200" in caplog.text
