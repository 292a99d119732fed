import asyncio

import pytest
from fastapi.testclient import TestClient

from callcenter.config import settings
from callcenter.db.init_db import init_db
from callcenter.db.unit_of_work import UnitOfWork
from callcenter.main import app
from callcenter.services import auth_service
from callcenter.services import batch_call_service
from callcenter.utils.helper import new_id, utc_now
from helpers import SYSTEM_PROMPT, FakeVapiClient


@pytest.fixture(autouse=True)
def db(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_PATH", str(tmp_path / "test.db"))
    monkeypatch.setattr(settings, "WAVE_COOLDOWN_SECONDS", 0)
    monkeypatch.setattr(settings, "DISPATCH_MODE", "waves")
    monkeypatch.setattr(settings, "DEFAULT_COUNTRY_CODE", "60")
    monkeypatch.setattr(settings, "DEFAULT_CONCURRENT_LIMIT", 10)
    monkeypatch.setattr(settings, "MAX_CONCURRENT_LIMIT", 50)
    monkeypatch.setattr(settings, "WEBHOOK_SECRET", "")
    monkeypatch.setattr(settings, "VAPI_SERVER_URL", "")
    monkeypatch.setattr(settings, "ASSISTANT_CONFIG_PATH", "")
    init_db()
    return settings.DATABASE_PATH


@pytest.fixture
def fake_vapi(monkeypatch):
    FakeVapiClient.instances = []
    FakeVapiClient.fail_numbers = set()
    monkeypatch.setattr(batch_call_service, "VapiClient", FakeVapiClient)
    return FakeVapiClient


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user():
    def _make_user(username="alice", password="secret123"):
        result = asyncio.run(auth_service.sign_up(username, password))
        return result["user"]["id"], result["session_token"]
    return _make_user


@pytest.fixture
def seed_account():
    """Give a user API keys, a trunk config and one prompt; returns the prompt id"""
    def _seed(user_id, assistant_id="asst-1", phone_number_id=None, with_phone_config=True):
        now = utc_now()
        prompt_id = new_id()
        with UnitOfWork() as uow:
            uow.credentials.upsert_api_keys(new_id(), user_id, "vapi-key-123456", assistant_id, phone_number_id, now)
            if with_phone_config:
                uow.credentials.upsert_phone_config(new_id(), user_id, "+17755550100", "AC123", "token-abc", now)
            uow.prompts.create(prompt_id, user_id, "Cold call", "Hello there", SYSTEM_PROMPT, now)
        return prompt_id
    return _seed

