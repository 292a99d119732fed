from celery import Celery
from callcenter.config import settings

celery_app = Celery(
    "call_center",
    broker=settings.REDIS_BROKER_URL,
    backend=settings.REDIS_BACKEND_URL
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # a batch dispatch can hold a worker for minutes
    worker_prefetch_multiplier=1,
    task_track_started=True,
)

# Register the dispatch task with the worker
import callcenter.tasks.batch_tasks
