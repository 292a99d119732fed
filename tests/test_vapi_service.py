import pytest
import requests

from callcenter.exceptions import ProviderError
from callcenter.services import vapi_service
from callcenter.services.vapi_service import VapiClient


class FakeResponse:

    def __init__(self, status_code=201, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("No JSON object could be decoded")
        return self._body


@pytest.fixture
def sent(monkeypatch):
    requests_made = []
    responses = []

    def fake_post(url, json=None, headers=None, timeout=None):
        requests_made.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(vapi_service.requests, "post", fake_post)
    return requests_made, responses


def test_create_call_posts_payload_with_bearer_key(sent):
    requests_made, responses = sent
    responses.append(FakeResponse(201, {"id": "call-1", "status": "queued"}))

    result = VapiClient("key-1", base_url="https://api.example.com/", timeout=5).create_call({"customer": {}})

    assert result == {"id": "call-1", "status": "queued"}
    assert requests_made[0]["url"] == "https://api.example.com/call"
    assert requests_made[0]["headers"]["Authorization"] == "Bearer key-1"
    assert requests_made[0]["timeout"] == 5


def test_rejected_call_raises_provider_error(sent):
    _, responses = sent
    responses.append(FakeResponse(400, text="customer.number must be a valid phone number" * 10))

    with pytest.raises(ProviderError) as exc:
        VapiClient("key-1").create_call({})

    assert exc.value.http_status == 400
    assert exc.value.message.startswith("VAPI API Error [400]: customer.number")
    assert len(exc.value.message) <= len("VAPI API Error [400]: ") + 200


def test_network_failure_raises_provider_error(sent):
    _, responses = sent
    responses.append(requests.ConnectionError("connection refused"))

    with pytest.raises(ProviderError) as exc:
        VapiClient("key-1").create_call({})

    assert "connection refused" in exc.value.message
    assert exc.value.http_status is None


def test_non_json_reply_raises_provider_error(sent):
    _, responses = sent
    responses.append(FakeResponse(200, None, text="<html>"))

    with pytest.raises(ProviderError):
        VapiClient("key-1").create_call({})


def test_create_assistant_posts_to_the_assistant_endpoint(sent):
    requests_made, responses = sent
    responses.append(FakeResponse(201, {"id": "asst-9", "name": "Aina"}))

    result = VapiClient("key-1", base_url="https://api.example.com").create_assistant({"name": "Aina"})

    assert result["id"] == "asst-9"
    assert requests_made[0]["url"] == "https://api.example.com/assistant"
    assert requests_made[0]["json"] == {"name": "Aina"}
