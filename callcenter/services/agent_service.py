import asyncio

from fastapi import HTTPException

from callcenter.db.unit_of_work import UnitOfWork
from callcenter.exceptions import ProviderError
from callcenter.logger import logger
from callcenter.models.schemas import AgentCreate, AgentUpdate
from callcenter.services.vapi_service import VapiClient
from callcenter.utils.helper import new_id, utc_now


def build_assistant_body(data: AgentCreate) -> dict:
    return {
        "name": data.name,
        "voice": {"provider": "11labs", "voiceId": data.voice},
        "transcriber": {"provider": "deepgram", "language": data.language},
        "firstMessage": data.first_message or f"Hello! I'm {data.name}. How can I help you today?",
    }


async def list_agents(user_id: str):
    with UnitOfWork() as uow:
        agents = uow.agents.list_by_user(user_id)
    return {"agents": agents}


async def get_agent(user_id: str, row_id: str):
    with UnitOfWork() as uow:
        agent = uow.agents.get_owned(row_id, user_id)

    if not agent:
        raise HTTPException(status_code=404, detail="Agent not found")
    return agent


async def create_agent(user_id: str, data: AgentCreate):
    agent_id = (data.agent_id or "").strip()

    if not agent_id:
        with UnitOfWork() as uow:
            api_keys = uow.credentials.get_api_keys(user_id)
        if not api_keys or not api_keys.get("vapi_api_key"):
            raise HTTPException(status_code=400, detail="API key not configured")

        client = VapiClient(api_keys["vapi_api_key"])
        loop = asyncio.get_running_loop()
        try:
            assistant = await loop.run_in_executor(None, client.create_assistant, build_assistant_body(data))
        except ProviderError as e:
            logger.error(f"Could not create agent '{data.name}': {e.message}")
            raise HTTPException(status_code=e.status_code, detail=e.message)

        agent_id = assistant.get("id")
        if not agent_id:
            raise HTTPException(status_code=502, detail="VAPI did not return an assistant id")

    row_id = new_id()
    with UnitOfWork() as uow:
        uow.agents.create(row_id, user_id, agent_id, data.name, data.voice, data.language, utc_now())
        agent = uow.agents.get_owned(row_id, user_id)

    logger.success(f"Agent '{data.name}' saved", agent_id=agent_id)
    return agent


async def update_agent(user_id: str, row_id: str, data: AgentUpdate):
    with UnitOfWork() as uow:
        if not uow.agents.update(row_id, user_id, data.name, data.voice, data.language, utc_now()):
            raise HTTPException(status_code=404, detail="Agent not found")
        agent = uow.agents.get_owned(row_id, user_id)
    return agent


async def delete_agent(user_id: str, row_id: str):
    with UnitOfWork() as uow:
        if not uow.agents.delete(row_id, user_id):
            raise HTTPException(status_code=404, detail="Agent not found")
    return {"status": "deleted"}
