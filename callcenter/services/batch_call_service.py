import asyncio
from concurrent.futures import ThreadPoolExecutor

from callcenter.config import settings
from callcenter.db.unit_of_work import UnitOfWork
from callcenter.exceptions import AppError, ValidationError
from callcenter.logger import logger
from callcenter.services.call_recorder import CallRecorder
from callcenter.services.dispatcher import CallOutcome, get_dispatcher
from callcenter.services.payload_service import (
    build_call_payload,
    build_telephony_block,
    load_assistant_config,
)
from callcenter.services.phone_service import normalize_phone_numbers
from callcenter.services.vapi_service import VapiClient
from callcenter.utils.helper import new_id, utc_now

# requests is blocking, so provider calls run on threads
executor = ThreadPoolExecutor(max_workers=settings.MAX_CONCURRENT_LIMIT)


def _resolve_concurrent_limit(value, user_default=None) -> int:
    """An explicit request value must be valid; otherwise the user's saved limit or the global default"""
    if value is None:
        return min(user_default or settings.DEFAULT_CONCURRENT_LIMIT, settings.MAX_CONCURRENT_LIMIT)

    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("concurrentLimit must be an integer")

    if not 1 <= value <= settings.MAX_CONCURRENT_LIMIT:
        raise ValidationError(f"concurrentLimit must be between 1 and {settings.MAX_CONCURRENT_LIMIT}")

    return value


def _validate_request(request: dict):
    campaign_name = request.get("campaignName")
    prompt_id = request.get("promptId")
    phone_numbers = request.get("phoneNumbers")

    if (
        not isinstance(campaign_name, str) or not campaign_name.strip()
        or not isinstance(prompt_id, str) or not prompt_id.strip()
        or not isinstance(phone_numbers, list)
    ):
        raise ValidationError("Missing required parameters: campaignName, promptId, phoneNumbers")

    return campaign_name.strip(), prompt_id, phone_numbers


def create_campaign(user_id: str, campaign_name: str, prompt_id: str, total_numbers: int) -> str:
    campaign_id = new_id()

    try:
        with UnitOfWork() as uow:
            uow.campaigns.create_campaign(
                campaign_id,
                user_id,
                campaign_name,
                prompt_id,
                total_numbers,
                utc_now()
            )
    except Exception as e:
        raise AppError(f"Failed to create campaign: {e}")

    return campaign_id


def finalize_campaign(campaign_id: str, successful_calls: int, failed_calls: int) -> bool:
    try:
        with UnitOfWork() as uow:
            uow.campaigns.finalize(campaign_id, successful_calls, failed_calls, utc_now())
    except Exception as e:
        logger.error(f"Could not finalize campaign {campaign_id}: {e}")
        mark_campaign_failed(campaign_id)
        return False

    return True


def mark_campaign_failed(campaign_id: str):
    try:
        with UnitOfWork() as uow:
            uow.campaigns.mark_failed(campaign_id, utc_now())
    except Exception as e:
        logger.error(f"Could not mark campaign {campaign_id} as failed: {e}")


async def run_batch_call(user_id: str, request: dict, cooldown=None, cancel_event=None) -> dict:
    """Validate, create the campaign, place every call and return the summary"""
    campaign_name, prompt_id, phone_numbers = _validate_request(request)
    requested_limit = request.get("concurrentLimit")
    if requested_limit is not None:
        _resolve_concurrent_limit(requested_limit)

    logger.info(f"Starting batch call campaign: {campaign_name} for user: {user_id}")

    with UnitOfWork() as uow:
        api_keys = uow.credentials.get_api_keys(user_id)
        if not api_keys or not api_keys.get("vapi_api_key"):
            raise ValidationError("VAPI API key not found. Please configure your API keys first.")

        prompt = uow.prompts.get_owned(prompt_id, user_id)
        if not prompt:
            raise ValidationError("Prompt not found")

        phone_config = uow.credentials.get_phone_config(user_id)
        voice_config = uow.voice_config.get(user_id) or {}

    concurrent_limit = _resolve_concurrent_limit(requested_limit, voice_config.get("concurrent_limit"))
    telephony = build_telephony_block(api_keys, phone_config)
    assistant_config = load_assistant_config()

    numbers = normalize_phone_numbers(phone_numbers, voice_config.get("country_code"))
    if not numbers.valid:
        raise ValidationError("No valid phone numbers provided")

    campaign_id = create_campaign(user_id, campaign_name, prompt_id, len(numbers.valid))
    logger.campaign(campaign_id, f"Created with {len(numbers.valid)} valid numbers")

    client = VapiClient(api_keys["vapi_api_key"])
    recorder = CallRecorder(user_id, campaign_id)
    loop = asyncio.get_running_loop()

    async def attempt(phone_number: str) -> CallOutcome:
        payload = build_call_payload(
            prompt,
            phone_number,
            campaign_id,
            prompt_id,
            telephony,
            config=assistant_config,
            voice_config=voice_config
        )
        response = await loop.run_in_executor(executor, client.create_call, payload)
        logger.call(phone_number, f"Call initiated: {response.get('id')}")
        return CallOutcome(
            phone_number=phone_number,
            success=True,
            call_id=response.get("id"),
            response=response
        )

    dispatcher = get_dispatcher(concurrent_limit, cooldown=cooldown, cancel_event=cancel_event)

    try:
        result = await dispatcher.dispatch(numbers.valid, attempt, on_outcome=recorder.record)
    except BaseException:
        # cancellation included, the row must not stay 'processing'
        mark_campaign_failed(campaign_id)
        raise

    finalized = finalize_campaign(campaign_id, result.success_count, result.failure_count)
    logger.campaign(
        campaign_id,
        f"Batch call completed. Success: {result.success_count}, Failed: {result.failure_count}"
    )

    return {
        "message": (
            "Batch call campaign completed successfully" if finalized
            else "Batch call campaign completed, but the campaign record could not be finalized"
        ),
        "campaign_id": campaign_id,
        "summary": {
            "total_provided": len(phone_numbers),
            "valid_numbers": len(numbers.valid),
            "invalid_numbers": len(numbers.invalid),
            "successful_calls": result.success_count,
            "failed_calls": result.failure_count,
            "chunks_processed": result.waves,
            "concurrent_limit_used": concurrent_limit,
        },
        "invalid_numbers": numbers.invalid,
    }
