from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from callcenter.logger import logger
from callcenter.models.schemas import BatchCallRequest
from callcenter.services.batch_call_service import run_batch_call
from callcenter.tasks.batch_tasks import run_batch_call_task
from callcenter.utils.auth import Principal, get_current_principal

router = APIRouter(prefix="/api/batch-call", tags=["Batch Call"])


@router.post("")
async def batch_call(data: BatchCallRequest, principal: Principal = Depends(get_current_principal)):
    try:
        return await run_batch_call(principal.user_id, data.model_dump())
    except Exception as e:
        logger.error(f"Error in batch call: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})


@router.post("/enqueue", status_code=202)
async def enqueue_batch_call(data: BatchCallRequest, principal: Principal = Depends(get_current_principal)):
    task = run_batch_call_task.delay(principal.user_id, data.model_dump())
    return {"task_id": task.id, "status": "queued"}
