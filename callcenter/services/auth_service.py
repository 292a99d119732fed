import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException

from callcenter.config import settings
from callcenter.db.unit_of_work import UnitOfWork
from callcenter.logger import logger
from callcenter.utils.helper import new_id, utc_now

PBKDF2_ITERATIONS = 200_000


def hash_password(password: str, salt: str = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"{salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    salt, _, _ = password_hash.partition("$")
    return hmac.compare_digest(hash_password(password, salt), password_hash)


def _validate_credentials(username: str, password: str):
    if not username or not username.strip():
        raise HTTPException(status_code=400, detail="Username is required")
    if not password or len(password) < 6:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")


def _issue_session(uow, user_id: str) -> dict:
    token = secrets.token_urlsafe(32)
    expires_at = (
        datetime.now(timezone.utc) + timedelta(hours=settings.SESSION_TTL_HOURS)
    ).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    uow.users.create_session(new_id(), user_id, token, expires_at, utc_now())
    return {"session_token": token, "expires_at": expires_at}


async def sign_up(username: str, password: str):
    _validate_credentials(username, password)
    username = username.strip()

    with UnitOfWork() as uow:
        if uow.users.get_by_username(username):
            raise HTTPException(status_code=409, detail="Username already exists")

        user_id = new_id()
        created_at = utc_now()
        uow.users.create_user(user_id, username, hash_password(password), created_at)
        session = _issue_session(uow, user_id)

    logger.success(f"User signed up: {username}")
    return {
        "user": {"id": user_id, "username": username, "created_at": created_at},
        **session
    }


async def sign_in(username: str, password: str):
    with UnitOfWork() as uow:
        user = uow.users.get_by_username((username or "").strip())

        if not user or not verify_password(password or "", user["password_hash"]):
            raise HTTPException(status_code=401, detail="Invalid username or password")

        session = _issue_session(uow, user["id"])

    return {
        "user": {"id": user["id"], "username": user["username"], "created_at": user["created_at"]},
        **session
    }


async def sign_out(token: str):
    with UnitOfWork() as uow:
        uow.users.delete_session(token)
    return {"status": "signed_out"}


async def change_password(user_id: str, current_password: str, new_password: str):
    with UnitOfWork() as uow:
        user = uow.users.get_with_password_hash(user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        if not verify_password(current_password or "", user["password_hash"]):
            raise HTTPException(status_code=400, detail="Current password is incorrect")

        _validate_credentials(user["username"], new_password)
        uow.users.update_password(user_id, hash_password(new_password), utc_now())

    return {"status": "password_changed"}


def cleanup_expired_sessions() -> int:
    with UnitOfWork() as uow:
        removed = uow.users.delete_expired_sessions(utc_now())
    if removed:
        logger.info(f"Removed {removed} expired session(s)")
    return removed
