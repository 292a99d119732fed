from fastapi import APIRouter, Depends
from callcenter.models.schemas import AgentCreate, AgentUpdate
from callcenter.services import agent_service
from callcenter.utils.auth import Principal, get_current_principal

router = APIRouter(prefix="/api/agents", tags=["Agents"])


@router.get("")
async def list_agents(principal: Principal = Depends(get_current_principal)):
    return await agent_service.list_agents(principal.user_id)


@router.post("", status_code=201)
async def create_agent(data: AgentCreate, principal: Principal = Depends(get_current_principal)):
    return await agent_service.create_agent(principal.user_id, data)


@router.get("/{agent_row_id}")
async def get_agent(agent_row_id: str, principal: Principal = Depends(get_current_principal)):
    return await agent_service.get_agent(principal.user_id, agent_row_id)


@router.put("/{agent_row_id}")
async def update_agent(agent_row_id: str, data: AgentUpdate, principal: Principal = Depends(get_current_principal)):
    return await agent_service.update_agent(principal.user_id, agent_row_id, data)


@router.delete("/{agent_row_id}")
async def delete_agent(agent_row_id: str, principal: Principal = Depends(get_current_principal)):
    return await agent_service.delete_agent(principal.user_id, agent_row_id)
