from fastapi import HTTPException

from callcenter.db.unit_of_work import UnitOfWork
from callcenter.config import settings
from callcenter.models.schemas import ApiKeysUpdate, PhoneConfigUpdate, NumberCreate, VoiceConfigUpdate
from callcenter.services.phone_service import normalize_phone_number
from callcenter.utils.helper import mask_secret, new_id, utc_now


def _public_api_keys(row):
    if not row:
        return None
    return {
        "assistant_id": row["assistant_id"],
        "phone_number_id": row["phone_number_id"],
        "vapi_api_key": mask_secret(row["vapi_api_key"]),
        "status": row["status"],
        "updated_at": row["updated_at"],
    }


def _public_phone_config(row):
    if not row:
        return None
    return {
        "twilio_phone_number": row["twilio_phone_number"],
        "twilio_account_sid": row["twilio_account_sid"],
        "twilio_auth_token": mask_secret(row["twilio_auth_token"]),
        "updated_at": row["updated_at"],
    }


async def get_api_keys(user_id: str):
    with UnitOfWork() as uow:
        row = uow.credentials.get_api_keys(user_id)
    return {"api_keys": _public_api_keys(row)}


async def save_api_keys(user_id: str, data: ApiKeysUpdate):
    with UnitOfWork() as uow:
        uow.credentials.upsert_api_keys(
            new_id(),
            user_id,
            data.vapi_api_key.strip(),
            data.assistant_id.strip(),
            (data.phone_number_id or "").strip() or None,
            utc_now()
        )
        row = uow.credentials.get_api_keys(user_id)
    return {"api_keys": _public_api_keys(row)}


async def get_phone_config(user_id: str):
    with UnitOfWork() as uow:
        row = uow.credentials.get_phone_config(user_id)
    return {"phone_config": _public_phone_config(row)}


async def save_phone_config(user_id: str, data: PhoneConfigUpdate):
    phone_number = normalize_phone_number(data.twilio_phone_number)
    if not phone_number:
        raise HTTPException(status_code=400, detail="Invalid trunk phone number")

    with UnitOfWork() as uow:
        uow.credentials.upsert_phone_config(
            new_id(),
            user_id,
            phone_number,
            data.twilio_account_sid.strip(),
            data.twilio_auth_token.strip(),
            utc_now()
        )
        row = uow.credentials.get_phone_config(user_id)
    return {"phone_config": _public_phone_config(row)}


# ---------- VOICE CONFIG ----------

async def get_voice_config(user_id: str):
    with UnitOfWork() as uow:
        row = uow.voice_config.get(user_id)
    return {"voice_config": row}


async def save_voice_config(user_id: str, data: VoiceConfigUpdate):
    if data.concurrent_limit is not None and data.concurrent_limit > settings.MAX_CONCURRENT_LIMIT:
        raise HTTPException(
            status_code=400,
            detail=f"concurrent_limit must be between 1 and {settings.MAX_CONCURRENT_LIMIT}"
        )

    values = data.model_dump()
    for field in ("default_name", "manual_voice_id", "provider", "model"):
        values[field] = (values[field] or "").strip() or None
    if values["country_code"]:
        values["country_code"] = values["country_code"].lstrip("+")

    with UnitOfWork() as uow:
        uow.voice_config.upsert(new_id(), user_id, values, utc_now())
        row = uow.voice_config.get(user_id)
    return {"voice_config": row}


# ---------- PROVISIONED NUMBERS ----------

async def list_numbers(user_id: str):
    with UnitOfWork() as uow:
        numbers = uow.numbers.list_by_user(user_id)
    return {"numbers": numbers}


async def add_number(user_id: str, data: NumberCreate):
    phone_number = normalize_phone_number(data.phone_number)
    if not phone_number:
        raise HTTPException(status_code=400, detail="Invalid phone number")

    number_id = new_id()
    with UnitOfWork() as uow:
        if uow.numbers.get_owner_by_phone(phone_number):
            raise HTTPException(status_code=409, detail="Phone number already registered")

        uow.numbers.create(
            number_id,
            user_id,
            phone_number,
            data.phone_number_id or "",
            data.agent_id or "",
            utc_now()
        )

    return {"id": number_id, "phone_number": phone_number}


async def delete_number(user_id: str, number_id: str):
    with UnitOfWork() as uow:
        if not uow.numbers.delete(number_id, user_id):
            raise HTTPException(status_code=404, detail="Number not found")
    return {"status": "deleted"}
