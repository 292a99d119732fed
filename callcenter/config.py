# callcenter/config.py
import os
from dotenv import load_dotenv
load_dotenv()

DISPATCH_MODES = ("waves", "pool")


class Settings:

    def __init__(self):
        self.BACKEND_HOST = os.getenv('BACKEND_HOST', '0.0.0.0')
        self.BACKEND_PORT = int(os.getenv('BACKEND_PORT', '8000'))

        self.DATABASE_PATH = os.getenv('DATABASE_PATH', 'call_center.db')

        self.VAPI_BASE_URL = os.getenv('VAPI_BASE_URL', 'https://api.vapi.ai').rstrip('/')
        self.VAPI_SERVER_URL = os.getenv('VAPI_SERVER_URL', '')
        self.VAPI_REQUEST_TIMEOUT = int(os.getenv('VAPI_REQUEST_TIMEOUT', '30'))

        self.DEFAULT_COUNTRY_CODE = os.getenv('DEFAULT_COUNTRY_CODE', '60').lstrip('+')
        self.DEFAULT_CONCURRENT_LIMIT = int(os.getenv('DEFAULT_CONCURRENT_LIMIT', '10'))
        self.MAX_CONCURRENT_LIMIT = int(os.getenv('MAX_CONCURRENT_LIMIT', '50'))
        self.WAVE_COOLDOWN_SECONDS = float(os.getenv('WAVE_COOLDOWN_SECONDS', '3'))
        self.DISPATCH_MODE = os.getenv('DISPATCH_MODE', 'waves').lower()

        self.ASSISTANT_CONFIG_PATH = os.getenv('ASSISTANT_CONFIG_PATH', '')

        self.SESSION_TTL_HOURS = int(os.getenv('SESSION_TTL_HOURS', '24'))
        self.WEBHOOK_SECRET = os.getenv('WEBHOOK_SECRET', '')

        self.REDIS_BROKER_URL = os.getenv('REDIS_BROKER_URL', 'redis://localhost:6379/0')
        self.REDIS_BACKEND_URL = os.getenv('REDIS_BACKEND_URL', 'redis://localhost:6379/1')

        self._validate()

    def _validate(self):
        if self.DISPATCH_MODE not in DISPATCH_MODES:
            raise RuntimeError(
                f"DISPATCH_MODE must be one of {', '.join(DISPATCH_MODES)}, got {self.DISPATCH_MODE!r}"
            )

        if not 1 <= self.DEFAULT_CONCURRENT_LIMIT <= self.MAX_CONCURRENT_LIMIT:
            raise RuntimeError("DEFAULT_CONCURRENT_LIMIT must be between 1 and MAX_CONCURRENT_LIMIT.")

        if self.WAVE_COOLDOWN_SECONDS < 0:
            raise RuntimeError("WAVE_COOLDOWN_SECONDS cannot be negative.")

        if not self.DEFAULT_COUNTRY_CODE.isdigit():
            raise RuntimeError("DEFAULT_COUNTRY_CODE must contain digits only.")


settings = Settings()
