from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from callcenter.db.unit_of_work import UnitOfWork

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    user_id: str
    username: str
    token: str


def _unauthorized(detail: str):
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise _unauthorized("No authorization header")

    token = credentials.credentials

    with UnitOfWork() as uow:
        session = uow.users.get_session(token)

    if not session:
        raise _unauthorized("Invalid session token")

    if parse_timestamp(session["expires_at"]) < datetime.now(timezone.utc):
        raise _unauthorized("Session expired")

    return Principal(user_id=session["user_id"], username=session["username"], token=token)
