from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import datetime
from callcenter.config import settings
from callcenter.db.init_db import init_db
from callcenter.logger import logger
from callcenter.routers import (
    agent_router,
    auth_router,
    batch_call_router,
    campaign_router,
    prompt_router,
    settings_router,
)
from callcenter.services.auth_service import cleanup_expired_sessions
from callcenter.webhooks import vapi_webhook


app = FastAPI(title="Voice AI Call Center")

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
async def startup_event():
    logger.info("=" * 50)
    logger.info("Voice AI Call Center - Starting")
    logger.info(f"Backend: http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
    logger.info(f"Database: {settings.DATABASE_PATH}")
    logger.info(f"Dispatch mode: {settings.DISPATCH_MODE}")
    if not settings.WEBHOOK_SECRET:
        logger.warning("WEBHOOK_SECRET is not set; webhook signatures are not verified")
    logger.info("=" * 50)

    init_db()
    cleanup_expired_sessions()


@app.get("/")
def health():
    return {
        "status": "alive",
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "version": "1.0",
        "webhook_signing": bool(settings.WEBHOOK_SECRET)
    }

app.include_router(vapi_webhook.router)
app.include_router(auth_router.router)
app.include_router(batch_call_router.router)
app.include_router(campaign_router.router)
app.include_router(prompt_router.router)
app.include_router(settings_router.router)
app.include_router(agent_router.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("callcenter.main:app", host=settings.BACKEND_HOST, port=settings.BACKEND_PORT)
