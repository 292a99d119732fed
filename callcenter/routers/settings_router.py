from fastapi import APIRouter, Depends
from callcenter.models.schemas import ApiKeysUpdate, PhoneConfigUpdate, NumberCreate, VoiceConfigUpdate
from callcenter.services import settings_service
from callcenter.utils.auth import Principal, get_current_principal

router = APIRouter(prefix="/api", tags=["Settings"])


@router.get("/settings/api-keys")
async def get_api_keys(principal: Principal = Depends(get_current_principal)):
    return await settings_service.get_api_keys(principal.user_id)


@router.put("/settings/api-keys")
async def save_api_keys(data: ApiKeysUpdate, principal: Principal = Depends(get_current_principal)):
    return await settings_service.save_api_keys(principal.user_id, data)


@router.get("/settings/phone-config")
async def get_phone_config(principal: Principal = Depends(get_current_principal)):
    return await settings_service.get_phone_config(principal.user_id)


@router.put("/settings/phone-config")
async def save_phone_config(data: PhoneConfigUpdate, principal: Principal = Depends(get_current_principal)):
    return await settings_service.save_phone_config(principal.user_id, data)


@router.get("/settings/voice-config")
async def get_voice_config(principal: Principal = Depends(get_current_principal)):
    return await settings_service.get_voice_config(principal.user_id)


@router.put("/settings/voice-config")
async def save_voice_config(data: VoiceConfigUpdate, principal: Principal = Depends(get_current_principal)):
    return await settings_service.save_voice_config(principal.user_id, data)


@router.get("/numbers")
async def list_numbers(principal: Principal = Depends(get_current_principal)):
    return await settings_service.list_numbers(principal.user_id)


@router.post("/numbers", status_code=201)
async def add_number(data: NumberCreate, principal: Principal = Depends(get_current_principal)):
    return await settings_service.add_number(principal.user_id, data)


@router.delete("/numbers/{number_id}")
async def delete_number(number_id: str, principal: Principal = Depends(get_current_principal)):
    return await settings_service.delete_number(principal.user_id, number_id)
