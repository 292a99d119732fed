import hashlib
import json
import sqlite3
from typing import Optional

from callcenter.db.unit_of_work import UnitOfWork
from callcenter.exceptions import AttributionError, ValidationError
from callcenter.logger import logger
from callcenter.repositories.call_repo import TERMINAL_STATUSES
from callcenter.utils.helper import new_id, round_seconds, utc_now


def _dig(data, *path):
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


# ---------- FUNCTION / TOOL CALLS ----------

def _parse_arguments(arguments) -> dict:
    if isinstance(arguments, dict):
        return arguments
    if isinstance(arguments, str) and arguments.strip():
        try:
            parsed = json.loads(arguments)
            return parsed if isinstance(parsed, dict) else {}
        except ValueError:
            return {}
    return {}


def handle_whatsapp_tool(args: dict) -> dict:
    phone_number = args.get("phoneNumber")
    message_type = args.get("messageType") or "testimonial_package"

    if not phone_number:
        logger.error("WhatsApp tool called without a phone number")
        return {"success": False, "error": "Phone number is required"}

    # No messaging integration yet: the send is acknowledged, not delivered.
    logger.call(phone_number, f"WhatsApp '{message_type}' requested", customer=args.get("customerName"))

    return {
        "success": True,
        "message": "WhatsApp processing completed",
        "phone_number": phone_number,
        "message_type": message_type,
    }


def process_function_call(message: dict) -> dict:
    function_calls = (
        message.get("toolCalls")
        or message.get("tool_calls")
        or ([message["functionCall"]] if message.get("functionCall") else [])
    )
    results = []

    for function_call in function_calls:
        function_name = _dig(function_call, "function", "name") or function_call.get("name")
        args = _parse_arguments(
            _dig(function_call, "function", "arguments") or function_call.get("arguments")
        )
        logger.info(f"Processing function call: {function_name}")

        if function_name == "send_whatsapp_tool":
            result = handle_whatsapp_tool(args)
        elif function_name == "end_call_tool":
            result = {"success": True, "message": "Call ended"}
        else:
            logger.warning(f"Unknown function call: {function_name}")
            result = {"error": "Unknown function"}

        entry = {"tool": function_name, "result": result}
        if function_call.get("id"):
            entry["toolCallId"] = function_call["id"]
        results.append(entry)

    return {
        "status": "success",
        "processed_calls": len(function_calls),
        "results": results,
    }


# ---------- END OF CALL ----------

def extract_customer_phone(message: dict) -> Optional[str]:
    return (
        _dig(message, "call", "customer", "number")
        or _dig(message, "customer", "number")
        or _dig(message, "call", "metadata", "customer_phone")
        or _dig(message, "metadata", "customer_phone")
    )


def extract_campaign_id(message: dict) -> Optional[str]:
    return (
        _dig(message, "call", "metadata", "campaign_id")
        or _dig(message, "metadata", "campaign_id")
        or _dig(message, "call", "metadata", "batch_id")
        or _dig(message, "metadata", "batch_id")
    )


def resolve_call_owner(uow, campaign_id: Optional[str], phone_number: Optional[str], assistant_id: Optional[str]) -> Optional[str]:
    """Find the account a call belongs to: campaign, then provisioned number, then assistant id.

    Each lookup is tried in that order and the first hit wins. A failing
    lookup is logged and the next one is tried.
    """
    lookups = (
        ("campaign", campaign_id, uow.campaigns.get_owner),
        ("number", phone_number, uow.numbers.get_owner_by_phone),
        ("assistant", assistant_id, uow.credentials.get_owner_by_assistant_id),
    )

    for source, key, lookup in lookups:
        if not key:
            continue
        try:
            user_id = lookup(key)
        except sqlite3.Error as e:
            logger.error(f"Owner lookup by {source} failed: {e}")
            continue
        if user_id:
            return user_id

    return None


def _report_fields(message: dict, campaign_id: Optional[str]) -> dict:
    structured_data = _dig(message, "analysis", "structuredData") or {}
    stage_reached = structured_data.get("stage_reached") or "Unknown"
    is_closed = (structured_data.get("is_closed") or "No") == "Yes"
    evaluation_status = "Success" if is_closed else "Fail"

    return {
        "evaluation_status": evaluation_status,
        "status": evaluation_status.lower(),
        "duration": round_seconds(message.get("durationSeconds")),
        "agent_id": _dig(message, "call", "assistantId") or "",
        "call_id": _dig(message, "call", "id") or message.get("id"),
        "campaign_id": campaign_id,
        "end_of_call_report": message,
        "metadata": {
            "structured_data": structured_data,
            "stage_reached": stage_reached,
            "is_closed": is_closed,
            "reason_not_closed": structured_data.get("reason_not_closed"),
            "customer_name": structured_data.get("customer_name"),
            "customer_address": structured_data.get("customer_address"),
            "package_discussed": structured_data.get("package_discussed"),
            "evaluation_status": evaluation_status,
            "call_cost": message.get("cost") or 0,
            "recording_url": message.get("recordingUrl"),
            "transcript": message.get("transcript"),
            "summary": message.get("summary"),
            "call_status": message.get("endedReason") or "unknown",
        },
    }


def report_fingerprint(message: dict, phone_number: str, campaign_id: Optional[str]) -> str:
    """Stable key for a report that carries no provider call id.

    Redeliveries of the same report hash to the same key, two different calls
    differ in their timestamps or transcript.
    """
    key = {
        "phone": phone_number,
        "campaign_id": campaign_id,
        "created_at": _dig(message, "call", "createdAt"),
        "started_at": message.get("startedAt"),
        "ended_at": message.get("endedAt"),
        "duration": message.get("durationSeconds"),
        "transcript": message.get("transcript"),
    }
    digest = hashlib.sha256(json.dumps(key, sort_keys=True, default=str).encode()).hexdigest()
    return f"report_{digest[:32]}"


def process_end_of_call_report(message: dict) -> dict:
    phone_number = extract_customer_phone(message)
    if not phone_number:
        raise ValidationError("Missing customer_phone")

    campaign_id = extract_campaign_id(message)
    assistant_id = _dig(message, "call", "assistantId")
    fields = _report_fields(message, campaign_id)
    vapi_call_id = fields["call_id"]

    with UnitOfWork() as uow:
        user_id = resolve_call_owner(uow, campaign_id, phone_number, assistant_id)
        if not user_id:
            logger.error(f"Could not resolve owner for call to {phone_number}; skipping")
            raise AttributionError("Could not resolve user_id")

        now = utc_now()
        if vapi_call_id:
            call_id = vapi_call_id
            existing = uow.call_logs.get_by_vapi_call_id(vapi_call_id, user_id)
        else:
            call_id = report_fingerprint(message, phone_number, campaign_id)
            existing = uow.call_logs.get_by_call_id(call_id, user_id)
        duplicate = bool(existing and existing["status"] in TERMINAL_STATUSES)

        if existing:
            uow.call_logs.apply_end_of_call_report(existing["id"], fields, now)
            record_id = existing["id"]
        else:
            record_id = new_id()
            uow.call_logs.insert({
                "id": record_id,
                "user_id": user_id,
                "campaign_id": campaign_id,
                "call_id": call_id,
                "vapi_call_id": vapi_call_id,
                "agent_id": assistant_id or "unknown",
                "phone_number": phone_number,
                "caller_number": phone_number,
                "start_time": _dig(message, "call", "createdAt") or now,
                "duration": fields["duration"],
                "status": fields["status"],
                "metadata": fields["metadata"],
                "end_of_call_report": message,
                "created_at": now,
            })

        if campaign_id and not duplicate:
            if fields["evaluation_status"] == "Success":
                uow.campaigns.increment_closed(campaign_id)
            else:
                uow.campaigns.increment_not_closed(campaign_id)

    logger.success(
        f"End of call recorded for {phone_number}",
        record_id=record_id,
        stage=fields["metadata"]["stage_reached"],
        evaluation=fields["evaluation_status"],
        campaign_id=campaign_id,
        duplicate=duplicate,
    )

    return {
        "status": "success",
        "record_id": record_id,
        "evaluation_status": fields["evaluation_status"],
    }
