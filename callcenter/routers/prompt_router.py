from fastapi import APIRouter, Depends
from callcenter.models.schemas import PromptCreate
from callcenter.services import prompt_service
from callcenter.utils.auth import Principal, get_current_principal

router = APIRouter(prefix="/api/prompts", tags=["Prompts"])


@router.get("")
async def list_prompts(principal: Principal = Depends(get_current_principal)):
    return await prompt_service.list_prompts(principal.user_id)


@router.post("", status_code=201)
async def create_prompt(data: PromptCreate, principal: Principal = Depends(get_current_principal)):
    return await prompt_service.create_prompt(principal.user_id, data)


@router.get("/{prompt_id}")
async def get_prompt(prompt_id: str, principal: Principal = Depends(get_current_principal)):
    return await prompt_service.get_prompt(principal.user_id, prompt_id)


@router.put("/{prompt_id}")
async def update_prompt(prompt_id: str, data: PromptCreate, principal: Principal = Depends(get_current_principal)):
    return await prompt_service.update_prompt(principal.user_id, prompt_id, data)


@router.delete("/{prompt_id}")
async def delete_prompt(prompt_id: str, principal: Principal = Depends(get_current_principal)):
    return await prompt_service.delete_prompt(principal.user_id, prompt_id)
