"""Build the call-creation request body sent to the calling platform"""
import copy
import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

from callcenter.config import settings
from callcenter.exceptions import ValidationError
from callcenter.utils.helper import utc_now

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "data" / "assistant_config.json"


@lru_cache(maxsize=8)
def _read_config(path: str) -> dict:
    with open(path, encoding="utf-8") as handle:
        config = json.load(handle)

    for section in ("assistant", "tools", "analysisPlan"):
        if section not in config:
            raise RuntimeError(f"Assistant config {path} is missing '{section}'")

    return config


def load_assistant_config(path: Optional[str] = None) -> dict:
    """Return a private copy of the versioned assistant defaults"""
    path = path or settings.ASSISTANT_CONFIG_PATH or str(DEFAULT_CONFIG_PATH)
    return copy.deepcopy(_read_config(path))


def interpolate_prompt(template: str, values: dict) -> str:
    """Replace every ``{{KEY}}`` for the keys given; unknown placeholders stay as they are"""
    result = template or ""
    for key, value in values.items():
        result = result.replace("{{" + key + "}}", str(value))
    return result


def build_telephony_block(api_keys: dict, phone_config: Optional[dict]) -> dict:
    """Pick how the provider should place the call: a provisioned number id or a trunk"""
    phone_number_id = (api_keys or {}).get("phone_number_id")
    if phone_number_id:
        return {"phoneNumberId": phone_number_id}

    if phone_config:
        return {
            "phoneNumber": {
                "twilioPhoneNumber": phone_config["twilio_phone_number"],
                "twilioAccountSid": phone_config["twilio_account_sid"],
                "twilioAuthToken": phone_config["twilio_auth_token"],
            }
        }

    raise ValidationError("Phone configuration not found. Please configure your phone settings first.")


# voice_config column -> assistant.voice key
VOICE_OVERRIDES = {
    "manual_voice_id": "voiceId",
    "provider": "provider",
    "model": "model",
    "stability": "stability",
    "similarity_boost": "similarityBoost",
    "style": "style",
    "use_speaker_boost": "useSpeakerBoost",
    "speed": "speed",
    "optimize_streaming_latency": "optimizeStreamingLatency",
    "auto_mode": "autoMode",
}


def apply_voice_config(assistant: dict, voice_config: Optional[dict]) -> dict:
    """Overlay a user's saved voice settings on the assistant block; unset values keep the defaults"""
    if not voice_config:
        return assistant

    voice = assistant.setdefault("voice", {})
    for column, key in VOICE_OVERRIDES.items():
        value = voice_config.get(column)
        if value is not None and value != "":
            voice[key] = value

    if voice_config.get("default_name"):
        assistant["name"] = voice_config["default_name"]

    return assistant


def build_call_payload(
    prompt: dict,
    phone_number: str,
    campaign_id: str,
    prompt_id: str,
    telephony: dict,
    config: Optional[dict] = None,
    voice_config: Optional[dict] = None,
) -> dict:
    config = copy.deepcopy(config) if config else load_assistant_config()

    assistant = apply_voice_config(config["assistant"], voice_config)
    assistant["firstMessage"] = prompt.get("first_message") or ""
    assistant["model"]["systemPrompt"] = interpolate_prompt(
        prompt.get("system_prompt") or "",
        {"CUSTOMER_PHONE_NUMBER": phone_number},
    )
    assistant["model"]["tools"] = config["tools"]
    assistant["analysisPlan"] = config["analysisPlan"]

    if settings.VAPI_SERVER_URL:
        assistant.setdefault("server", {})["url"] = settings.VAPI_SERVER_URL
    elif not assistant.get("server", {}).get("url"):
        assistant.pop("server", None)

    metadata = dict(config.get("metadata") or {})
    metadata.update({
        "customer_phone": phone_number,
        "timestamp": utc_now(),
        "campaign_id": campaign_id,
        "batch_id": campaign_id,
        "prompt_version": prompt_id,
        "config_version": config.get("version"),
    })

    payload = {
        "assistant": assistant,
        "customer": {"number": phone_number},
        "metadata": metadata,
    }
    payload.update(telephony)
    return payload
