from callcenter.db.unit_of_work import UnitOfWork
from callcenter.logger import logger
from callcenter.services.dispatcher import CallOutcome
from callcenter.utils.helper import new_id, utc_now


class CallRecorder:
    """Writes one call log row per dispatch attempt.

    Writes are best effort: a failed insert is logged and swallowed so the
    batch carries on.
    """

    def __init__(self, user_id: str, campaign_id: str):
        self.user_id = user_id
        self.campaign_id = campaign_id
        self.recorded = 0

    def build_entry(self, outcome: CallOutcome) -> dict:
        now = utc_now()
        entry = {
            "id": new_id(),
            "user_id": self.user_id,
            "campaign_id": self.campaign_id,
            "phone_number": outcome.phone_number,
            "caller_number": outcome.phone_number,
            "start_time": now,
            "created_at": now,
        }

        if outcome.success:
            response = outcome.response or {}
            entry.update({
                "call_id": outcome.call_id,
                "vapi_call_id": outcome.call_id,
                "status": response.get("status") or "initiated",
                "agent_id": response.get("assistantId") or "",
                "metadata": {"vapi_response": response, "batch_call": True},
            })
        else:
            entry.update({
                "status": "failed",
                "metadata": {"error": outcome.error, "batch_call": True},
            })

        return entry

    def record(self, outcome: CallOutcome) -> bool:
        try:
            with UnitOfWork() as uow:
                uow.call_logs.insert(self.build_entry(outcome))
        except Exception as e:
            logger.error(f"Failed to write call log for {outcome.phone_number}: {e}")
            return False

        self.recorded += 1
        return True
