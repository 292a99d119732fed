"""Turn free-text phone numbers into E.164 numbers for the default country"""
import re
from dataclasses import dataclass, field
from typing import List, Optional

from callcenter.config import settings

MIN_E164_LENGTH = 12
MAX_E164_LENGTH = 15

_NON_DIALABLE = re.compile(r"[^0-9+]")


@dataclass
class PhoneValidationResult:
    valid: List[str] = field(default_factory=list)
    invalid: List[str] = field(default_factory=list)


def normalize_phone_number(raw, country_code: Optional[str] = None) -> Optional[str]:
    """Return the E.164 form of ``raw`` or None when it cannot be dialled.

    Policy for a number without ``+``: a number already starting with the
    country code gets ``+`` prepended, a national leading zero is replaced by
    ``+<country code>``, anything else gets ``+<country code>`` prepended.
    """
    country_code = (country_code or settings.DEFAULT_COUNTRY_CODE).lstrip("+")

    if raw is None:
        return None

    cleaned = _NON_DIALABLE.sub("", str(raw)).strip()
    has_plus = cleaned.startswith("+")
    digits = cleaned.replace("+", "")

    if not digits:
        return None

    if has_plus:
        formatted = "+" + digits
    elif digits.startswith(country_code):
        formatted = "+" + digits
    elif digits.startswith("0"):
        formatted = "+" + country_code + digits[1:]
    else:
        formatted = "+" + country_code + digits

    if MIN_E164_LENGTH <= len(formatted) <= MAX_E164_LENGTH:
        return formatted
    return None


def normalize_phone_numbers(raw_numbers, country_code: Optional[str] = None) -> PhoneValidationResult:
    result = PhoneValidationResult()

    for raw in raw_numbers or []:
        formatted = normalize_phone_number(raw, country_code)
        if formatted:
            result.valid.append(formatted)
        else:
            result.invalid.append(raw)

    return result
