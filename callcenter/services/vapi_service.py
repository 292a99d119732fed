import requests

from callcenter.config import settings
from callcenter.exceptions import ProviderError


class VapiClient:
    """Thin client for the calling platform's REST API"""

    def __init__(self, api_key: str, base_url: str = None, timeout: int = None):
        self.api_key = api_key
        self.base_url = (base_url or settings.VAPI_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.VAPI_REQUEST_TIMEOUT

    def _headers(self):
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _post(self, path: str, payload: dict) -> dict:
        try:
            response = requests.post(
                f"{self.base_url}/{path}",
                json=payload,
                headers=self._headers(),
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise ProviderError(f"VAPI request failed: {e}")

        if not response.ok:
            raise ProviderError(
                f"VAPI API Error [{response.status_code}]: {response.text[:200]}",
                http_status=response.status_code
            )

        try:
            return response.json()
        except ValueError:
            raise ProviderError("VAPI returned a non-JSON response", http_status=response.status_code)

    def create_call(self, payload: dict) -> dict:
        return self._post("call", payload)

    def create_assistant(self, payload: dict) -> dict:
        return self._post("assistant", payload)
