from fastapi import HTTPException

from callcenter.db.unit_of_work import UnitOfWork
from callcenter.models.schemas import PromptCreate
from callcenter.utils.helper import new_id, utc_now


async def list_prompts(user_id: str):
    with UnitOfWork() as uow:
        prompts = uow.prompts.list_by_user(user_id)
    return {"prompts": prompts}


async def get_prompt(user_id: str, prompt_id: str):
    with UnitOfWork() as uow:
        prompt = uow.prompts.get_owned(prompt_id, user_id)

    if not prompt:
        raise HTTPException(status_code=404, detail="Prompt not found")
    return prompt


async def create_prompt(user_id: str, data: PromptCreate):
    prompt_id = new_id()

    with UnitOfWork() as uow:
        uow.prompts.create(
            prompt_id,
            user_id,
            data.prompt_name,
            data.first_message,
            data.system_prompt,
            utc_now()
        )
        prompt = uow.prompts.get_owned(prompt_id, user_id)

    return prompt


async def update_prompt(user_id: str, prompt_id: str, data: PromptCreate):
    with UnitOfWork() as uow:
        updated = uow.prompts.update(
            prompt_id,
            user_id,
            data.prompt_name,
            data.first_message,
            data.system_prompt,
            utc_now()
        )
        if not updated:
            raise HTTPException(status_code=404, detail="Prompt not found")
        prompt = uow.prompts.get_owned(prompt_id, user_id)

    return prompt


async def delete_prompt(user_id: str, prompt_id: str):
    with UnitOfWork() as uow:
        if not uow.prompts.delete(prompt_id, user_id):
            raise HTTPException(status_code=404, detail="Prompt not found")

    return {"status": "deleted"}
