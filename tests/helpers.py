import threading
import time

from callcenter.exceptions import ProviderError

SYSTEM_PROMPT = "You are calling {{CUSTOMER_PHONE_NUMBER}}. Confirm {{CUSTOMER_PHONE_NUMBER}} before the offer."


class FakeVapiClient:
    """Stands in for the calling platform; records payloads and concurrency"""

    instances = []
    fail_numbers = set()
    delay = 0.01

    def __init__(self, api_key, base_url=None, timeout=None):
        self.api_key = api_key
        self.payloads = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()
        FakeVapiClient.instances.append(self)

    def create_call(self, payload):
        number = payload["customer"]["number"]
        with self._lock:
            self.payloads.append(payload)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            time.sleep(self.delay)
            if number in self.fail_numbers:
                raise ProviderError("VAPI API Error [400]: bad number", http_status=400)
            return {"id": f"call-{number}", "status": "queued", "assistantId": "asst-1"}
        finally:
            with self._lock:
                self.in_flight -= 1

    def create_assistant(self, payload):
        self.payloads.append(payload)
        return {"id": f"asst-{len(self.payloads)}", "name": payload["name"]}


class RecordingCooldown:

    def __init__(self):
        self.waits = 0

    async def wait(self):
        self.waits += 1


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
