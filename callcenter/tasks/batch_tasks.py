import asyncio

from callcenter.celery_app import celery_app
from callcenter.logger import logger
from callcenter.services.batch_call_service import run_batch_call


@celery_app.task(name="callcenter.run_batch_call")
def run_batch_call_task(user_id: str, request: dict):
    """Run a whole batch-call dispatch off the request path"""
    try:
        return asyncio.run(run_batch_call(user_id, request))
    except Exception as exc:
        # Not retried: a rerun would place every call a second time.
        logger.error(f"Queued batch call failed for user {user_id}: {exc}")
        return {"error": str(exc)}
