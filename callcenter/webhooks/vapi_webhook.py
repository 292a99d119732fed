import json

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from callcenter.config import settings
from callcenter.exceptions import AttributionError, SignatureError, ValidationError
from callcenter.logger import logger
from callcenter.services.webhook_service import process_end_of_call_report, process_function_call
from callcenter.utils.signature import verify_signature

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type, x-webhook-signature",
}


def _respond(content: dict, status_code: int = 200):
    return JSONResponse(status_code=status_code, content=content, headers=CORS_HEADERS)


@router.options("/webhooks/vapi")
async def vapi_webhook_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/webhooks/vapi")
async def vapi_webhook(request: Request):
    body = await request.body()

    if settings.WEBHOOK_SECRET:
        try:
            verify_signature(body, request.headers.get("x-webhook-signature"), settings.WEBHOOK_SECRET)
        except SignatureError as e:
            logger.warning(f"Rejected webhook: {e.message}")
            return _respond({"status": "error", "message": e.message}, 401)

    try:
        payload = json.loads(body or b"null")
    except ValueError:
        payload = None

    message = payload.get("message") if isinstance(payload, dict) else None
    message_type = message.get("type") if isinstance(message, dict) else None

    if not message_type:
        logger.warning("Invalid webhook format")
        return _respond({"status": "ignored", "reason": "Invalid format"}, 400)

    try:
        if message_type in ("tool-calls", "function-call"):
            return _respond(process_function_call(message))

        if message_type == "end-of-call-report":
            return _respond(process_end_of_call_report(message))

        logger.info(f"Webhook type '{message_type}' received but ignored")
        return _respond({"status": "ignored"})

    except (AttributionError, ValidationError) as e:
        return _respond({"status": "error", "message": e.message}, e.status_code)

    except Exception as e:
        logger.error(f"Webhook processing error: {e}")
        return _respond({"status": "error", "message": str(e)}, 500)
