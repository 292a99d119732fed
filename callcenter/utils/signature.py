import hashlib
import hmac

from callcenter.exceptions import SignatureError


def compute_signature(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: str, secret: str):
    """Raise SignatureError unless ``signature`` is the hex HMAC-SHA256 of ``body``"""
    if not signature:
        raise SignatureError("Missing webhook signature")

    signature = signature.strip()
    if signature.startswith("sha256="):
        signature = signature[len("sha256="):]

    # compare_digest only accepts ASCII text, header values may be any latin-1
    expected = compute_signature(body, secret).encode()
    received = signature.encode("utf-8", "surrogateescape")
    if not hmac.compare_digest(expected, received):
        raise SignatureError("Invalid webhook signature")
