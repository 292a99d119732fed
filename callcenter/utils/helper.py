import json
import uuid
from datetime import datetime, timezone


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def new_id() -> str:
    return str(uuid.uuid4())


def to_json(value) -> str:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False, default=str)


def from_json(value):
    if not value:
        return None
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return None


def mask_secret(value: str, visible: int = 4) -> str:
    if not value:
        return ""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]


def round_seconds(value) -> int:
    """Round a provider duration to whole seconds, halves rounding up"""
    if value in (None, ""):
        return 0
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return 0
    if seconds < 0:
        return 0
    return int(seconds + 0.5)
