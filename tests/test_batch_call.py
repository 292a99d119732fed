import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from callcenter.config import settings
from callcenter.db.unit_of_work import UnitOfWork
from callcenter.exceptions import ValidationError
from callcenter.repositories.call_repo import CallLogRepository
from callcenter.repositories.campaign_repo import CampaignRepository
from callcenter.routers import batch_call_router
from callcenter.services import batch_call_service
from callcenter.services.batch_call_service import run_batch_call
from callcenter.services.dispatcher import WaveDispatcher
from callcenter.tasks.batch_tasks import run_batch_call_task
from callcenter.utils.helper import new_id, utc_now
from helpers import RecordingCooldown, auth_headers


def local_numbers(count):
    return [f"01234{i:05d}" for i in range(count)]


def e164(local):
    return "+60" + local[1:]


def campaign_rows(user_id):
    with UnitOfWork() as uow:
        return uow.campaigns.list_by_user(user_id)


def call_logs_for(campaign_id):
    with UnitOfWork() as uow:
        return uow.call_logs.get_by_campaign(campaign_id)


def test_batch_call_places_every_valid_number(client, make_user, seed_account, fake_vapi):
    user_id, token = make_user()
    prompt_id = seed_account(user_id)

    response = client.post("/api/batch-call", headers=auth_headers(token), json={
        "campaignName": "September push",
        "promptId": prompt_id,
        "phoneNumbers": local_numbers(25) + ["abc", "12"],
        "concurrentLimit": 10,
    })

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Batch call campaign completed successfully"
    assert body["summary"] == {
        "total_provided": 27,
        "valid_numbers": 25,
        "invalid_numbers": 2,
        "successful_calls": 25,
        "failed_calls": 0,
        "chunks_processed": 3,
        "concurrent_limit_used": 10,
    }
    assert body["invalid_numbers"] == ["abc", "12"]

    client_instance = fake_vapi.instances[0]
    assert client_instance.api_key == "vapi-key-123456"
    assert client_instance.max_in_flight <= 10
    assert len(client_instance.payloads) == 25

    logs = call_logs_for(body["campaign_id"])
    assert len(logs) == 25
    assert {log["phone_number"] for log in logs} == {e164(n) for n in local_numbers(25)}
    assert all(log["status"] == "queued" for log in logs)
    assert all(log["metadata"]["batch_call"] for log in logs)

    campaign = campaign_rows(user_id)[0]
    assert campaign["status"] == "completed"
    assert campaign["total_numbers"] == 25
    assert campaign["successful_calls"] == 25
    assert campaign["failed_calls"] == 0


def test_each_payload_is_personalised(client, make_user, seed_account, fake_vapi):
    user_id, token = make_user()
    prompt_id = seed_account(user_id)

    body = client.post("/api/batch-call", headers=auth_headers(token), json={
        "campaignName": "Personal",
        "promptId": prompt_id,
        "phoneNumbers": ["0123456789"],
    }).json()

    payload = fake_vapi.instances[0].payloads[0]
    assert payload["customer"]["number"] == "+60123456789"
    assert payload["assistant"]["model"]["systemPrompt"].count("+60123456789") == 2
    assert payload["metadata"]["campaign_id"] == body["campaign_id"]
    assert payload["phoneNumber"]["twilioPhoneNumber"] == "+17755550100"
    assert body["summary"]["concurrent_limit_used"] == settings.DEFAULT_CONCURRENT_LIMIT


def test_saved_voice_config_shapes_the_batch(client, make_user, seed_account, fake_vapi):
    user_id, token = make_user()
    prompt_id = seed_account(user_id)
    client.put("/api/settings/voice-config", headers=auth_headers(token), json={
        "country_code": "65",
        "concurrent_limit": 2,
        "manual_voice_id": "voice-42",
        "speed": 1.0,
    })

    body = client.post("/api/batch-call", headers=auth_headers(token), json={
        "campaignName": "Voiced",
        "promptId": prompt_id,
        "phoneNumbers": ["0812345678", "0912345678", "0812345679"],
    }).json()

    payloads = fake_vapi.instances[0].payloads
    assert sorted(p["customer"]["number"] for p in payloads) == ["+65812345678", "+65812345679", "+65912345678"]
    assert {p["assistant"]["voice"]["voiceId"] for p in payloads} == {"voice-42"}
    assert payloads[0]["assistant"]["voice"]["speed"] == 1.0
    assert body["summary"]["concurrent_limit_used"] == 2
    assert body["summary"]["chunks_processed"] == 2


def test_provider_rejections_are_logged_as_failed(client, make_user, seed_account, fake_vapi):
    user_id, token = make_user()
    prompt_id = seed_account(user_id)
    numbers = local_numbers(5)
    fake_vapi.fail_numbers = {e164(numbers[1])}

    body = client.post("/api/batch-call", headers=auth_headers(token), json={
        "campaignName": "Partial",
        "promptId": prompt_id,
        "phoneNumbers": numbers,
        "concurrentLimit": 2,
    }).json()

    assert body["summary"]["successful_calls"] == 4
    assert body["summary"]["failed_calls"] == 1

    logs = call_logs_for(body["campaign_id"])
    assert len(logs) == 5
    failed = [log for log in logs if log["status"] == "failed"]
    assert len(failed) == 1
    assert failed[0]["phone_number"] == e164(numbers[1])
    assert "VAPI API Error [400]" in failed[0]["metadata"]["error"]
    assert failed[0]["vapi_call_id"] is None

    campaign = campaign_rows(user_id)[0]
    assert (campaign["successful_calls"], campaign["failed_calls"]) == (4, 1)


def test_waves_cool_down_between_each_other(make_user, seed_account, fake_vapi):
    user_id, _ = make_user()
    prompt_id = seed_account(user_id)
    cooldown = RecordingCooldown()

    result = asyncio.run(run_batch_call(user_id, {
        "campaignName": "Cooldown",
        "promptId": prompt_id,
        "phoneNumbers": local_numbers(25),
        "concurrentLimit": 10,
    }, cooldown=cooldown))

    assert result["summary"]["chunks_processed"] == 3
    assert cooldown.waits == 2


def test_pool_mode_reports_equivalent_waves(monkeypatch, make_user, seed_account, fake_vapi):
    monkeypatch.setattr(settings, "DISPATCH_MODE", "pool")
    user_id, _ = make_user()
    prompt_id = seed_account(user_id)

    result = asyncio.run(run_batch_call(user_id, {
        "campaignName": "Pool",
        "promptId": prompt_id,
        "phoneNumbers": local_numbers(7),
        "concurrentLimit": 3,
    }, cooldown=RecordingCooldown()))

    assert result["summary"]["chunks_processed"] == 3
    assert result["summary"]["successful_calls"] == 7
    assert fake_vapi.instances[0].max_in_flight <= 3


def test_campaign_is_finalized_exactly_once(monkeypatch, make_user, seed_account, fake_vapi):
    user_id, _ = make_user()
    prompt_id = seed_account(user_id)
    calls = []
    original = batch_call_service.finalize_campaign

    def counting_finalize(*args):
        calls.append(args)
        return original(*args)

    monkeypatch.setattr(batch_call_service, "finalize_campaign", counting_finalize)

    result = asyncio.run(run_batch_call(user_id, {
        "campaignName": "Once",
        "promptId": prompt_id,
        "phoneNumbers": local_numbers(12),
        "concurrentLimit": 5,
    }))

    assert calls == [(result["campaign_id"], 12, 0)]


def test_call_log_write_failure_does_not_stop_the_batch(monkeypatch, make_user, seed_account, fake_vapi):
    user_id, _ = make_user()
    prompt_id = seed_account(user_id)
    numbers = local_numbers(4)
    original_insert = CallLogRepository.insert

    def flaky_insert(self, log):
        if log["phone_number"] == e164(numbers[0]):
            raise RuntimeError("disk I/O error")
        return original_insert(self, log)

    monkeypatch.setattr(CallLogRepository, "insert", flaky_insert)

    result = asyncio.run(run_batch_call(user_id, {
        "campaignName": "Flaky",
        "promptId": prompt_id,
        "phoneNumbers": numbers,
    }))

    assert result["summary"]["successful_calls"] == 4
    assert len(call_logs_for(result["campaign_id"])) == 3


def test_dispatch_crash_marks_campaign_failed(monkeypatch, make_user, seed_account, fake_vapi):
    user_id, _ = make_user()
    prompt_id = seed_account(user_id)

    async def crash(self, numbers, attempt, on_outcome=None):
        raise RuntimeError("event loop closed")

    monkeypatch.setattr(WaveDispatcher, "dispatch", crash)

    with pytest.raises(RuntimeError):
        asyncio.run(run_batch_call(user_id, {
            "campaignName": "Crash",
            "promptId": prompt_id,
            "phoneNumbers": local_numbers(3),
        }))

    assert campaign_rows(user_id)[0]["status"] == "failed"


def test_dispatch_cancellation_marks_campaign_failed(monkeypatch, make_user, seed_account, fake_vapi):
    user_id, _ = make_user()
    prompt_id = seed_account(user_id)

    async def cancelled(self, numbers, attempt, on_outcome=None):
        raise asyncio.CancelledError()

    monkeypatch.setattr(WaveDispatcher, "dispatch", cancelled)

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(run_batch_call(user_id, {
            "campaignName": "Cancelled",
            "promptId": prompt_id,
            "phoneNumbers": local_numbers(3),
        }))

    assert campaign_rows(user_id)[0]["status"] == "failed"


def test_finalize_failure_still_returns_the_summary(monkeypatch, make_user, seed_account, fake_vapi):
    user_id, _ = make_user()
    prompt_id = seed_account(user_id)

    def broken_finalize(self, *args):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(CampaignRepository, "finalize", broken_finalize)

    result = asyncio.run(run_batch_call(user_id, {
        "campaignName": "Unfinalized",
        "promptId": prompt_id,
        "phoneNumbers": local_numbers(2),
    }))

    assert result["summary"]["successful_calls"] == 2
    assert "could not be finalized" in result["message"]
    assert campaign_rows(user_id)[0]["status"] == "failed"
    assert len(call_logs_for(result["campaign_id"])) == 2


@pytest.mark.parametrize("payload, message", [
    ({"promptId": "p", "phoneNumbers": ["0123456789"]}, "Missing required parameters"),
    ({"campaignName": "  ", "promptId": "p", "phoneNumbers": ["0123456789"]}, "Missing required parameters"),
    ({"campaignName": "x", "phoneNumbers": ["0123456789"]}, "Missing required parameters"),
    ({"campaignName": "x", "promptId": "p"}, "Missing required parameters"),
])
def test_incomplete_request_is_rejected(client, make_user, payload, message):
    _, token = make_user()

    response = client.post("/api/batch-call", headers=auth_headers(token), json=payload)

    assert response.status_code == 500
    assert message in response.json()["error"]


@pytest.mark.parametrize("payload, message", [
    ({"campaignName": "x", "promptId": "p", "phoneNumbers": "0123456789"}, "Missing required parameters"),
    ({"campaignName": 7, "promptId": "p", "phoneNumbers": ["0123456789"]}, "Missing required parameters"),
    ({"campaignName": "x", "promptId": {"id": "p"}, "phoneNumbers": ["0123456789"]},
     "Missing required parameters"),
    ({"campaignName": "x", "promptId": "p", "phoneNumbers": ["0123456789"], "concurrentLimit": "ten"},
     "concurrentLimit must be an integer"),
    ({"campaignName": "x", "promptId": "p", "phoneNumbers": ["0123456789"], "concurrentLimit": 2.5},
     "concurrentLimit must be an integer"),
])
def test_malformed_request_gets_an_error_body(client, make_user, payload, message):
    _, token = make_user()

    response = client.post("/api/batch-call", headers=auth_headers(token), json=payload)

    assert response.status_code == 500
    assert message in response.json()["error"]


@pytest.mark.parametrize("limit", [0, -1, 51, True])
def test_concurrent_limit_out_of_range(make_user, seed_account, limit):
    user_id, _ = make_user()
    prompt_id = seed_account(user_id)

    with pytest.raises(ValidationError):
        asyncio.run(run_batch_call(user_id, {
            "campaignName": "Limits",
            "promptId": prompt_id,
            "phoneNumbers": ["0123456789"],
            "concurrentLimit": limit,
        }))

    assert campaign_rows(user_id) == []


def test_missing_api_key_is_reported(client, make_user):
    _, token = make_user()

    response = client.post("/api/batch-call", headers=auth_headers(token), json={
        "campaignName": "No keys", "promptId": "p", "phoneNumbers": ["0123456789"],
    })

    assert response.status_code == 500
    assert response.json() == {"error": "VAPI API key not found. Please configure your API keys first."}


def test_prompt_of_another_user_is_not_found(client, make_user, seed_account, fake_vapi):
    owner_id, _ = make_user("owner")
    other_id, other_token = make_user("intruder")
    prompt_id = seed_account(owner_id)
    seed_account(other_id)

    response = client.post("/api/batch-call", headers=auth_headers(other_token), json={
        "campaignName": "Borrowed", "promptId": prompt_id, "phoneNumbers": ["0123456789"],
    })

    assert response.status_code == 500
    assert response.json() == {"error": "Prompt not found"}
    assert fake_vapi.instances == []


def test_missing_phone_configuration_is_reported(client, make_user, seed_account):
    user_id, token = make_user()
    prompt_id = seed_account(user_id, with_phone_config=False)

    response = client.post("/api/batch-call", headers=auth_headers(token), json={
        "campaignName": "No trunk", "promptId": prompt_id, "phoneNumbers": ["0123456789"],
    })

    assert response.status_code == 500
    assert "Phone configuration not found" in response.json()["error"]


def test_provisioned_number_id_skips_trunk_check(make_user, seed_account, fake_vapi):
    user_id, _ = make_user()
    prompt_id = seed_account(user_id, phone_number_id="pn-42", with_phone_config=False)

    asyncio.run(run_batch_call(user_id, {
        "campaignName": "Provisioned", "promptId": prompt_id, "phoneNumbers": ["0123456789"],
    }))

    payload = fake_vapi.instances[0].payloads[0]
    assert payload["phoneNumberId"] == "pn-42"
    assert "phoneNumber" not in payload


def test_no_valid_numbers_creates_no_campaign(client, make_user, seed_account, fake_vapi):
    user_id, token = make_user()
    prompt_id = seed_account(user_id)

    response = client.post("/api/batch-call", headers=auth_headers(token), json={
        "campaignName": "Empty", "promptId": prompt_id, "phoneNumbers": ["abc", "12"],
    })

    assert response.status_code == 500
    assert response.json() == {"error": "No valid phone numbers provided"}
    assert campaign_rows(user_id) == []
    assert fake_vapi.instances == []


def test_dispatch_requires_a_session(client):
    response = client.post("/api/batch-call", json={"campaignName": "x"})

    assert response.status_code == 401
    assert response.json()["detail"] == "No authorization header"


def test_unknown_token_is_rejected(client):
    response = client.post("/api/batch-call", headers=auth_headers("not-a-token"), json={})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid session token"


def test_expired_session_is_rejected(client, make_user):
    user_id, _ = make_user()
    expired = (datetime.now(timezone.utc) - timedelta(minutes=5)).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    with UnitOfWork() as uow:
        uow.users.create_session(new_id(), user_id, "stale-token", expired, utc_now())

    response = client.post("/api/batch-call", headers=auth_headers("stale-token"), json={})

    assert response.status_code == 401
    assert response.json()["detail"] == "Session expired"


def test_enqueue_hands_the_request_to_the_worker(monkeypatch, client, make_user):
    user_id, token = make_user()
    queued = []

    class FakeAsyncResult:
        id = "task-123"

    class FakeTask:
        def delay(self, *args):
            queued.append(args)
            return FakeAsyncResult()

    monkeypatch.setattr(batch_call_router, "run_batch_call_task", FakeTask())

    response = client.post("/api/batch-call/enqueue", headers=auth_headers(token), json={
        "campaignName": "Later", "promptId": "p", "phoneNumbers": ["0123456789"],
    })

    assert response.status_code == 202
    assert response.json() == {"task_id": "task-123", "status": "queued"}
    assert queued[0][0] == user_id
    assert queued[0][1]["campaignName"] == "Later"


def test_worker_task_reports_errors_instead_of_retrying(make_user):
    user_id, _ = make_user()

    result = run_batch_call_task.run(user_id, {"campaignName": "x"})

    assert "Missing required parameters" in result["error"]
