"""Concurrent fan-out of outbound call attempts.

``WaveDispatcher`` splits the numbers into ordered waves of at most
``concurrent_limit`` numbers, fires each wave at once, waits for every
attempt in it to resolve, then waits on the cooldown policy before the next
wave. ``PooledDispatcher`` keeps up to ``concurrent_limit`` attempts in
flight continuously and applies the cooldown per slot instead.

An attempt is an ``async`` callable taking one phone number and returning a
``CallOutcome``. Anything it raises becomes a failed outcome for that number
only. ``on_outcome`` runs once per number, right after its outcome is known.
"""
import asyncio
import math
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from callcenter.config import settings
from callcenter.logger import logger

CANCELLED_ERROR = "Dispatch cancelled before the call was placed"


@dataclass
class CallOutcome:
    phone_number: str
    success: bool
    call_id: Optional[str] = None
    response: Optional[dict] = None
    error: Optional[str] = None


@dataclass
class DispatchResult:
    outcomes: List[CallOutcome] = field(default_factory=list)
    waves: int = 0

    @property
    def success_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)


class NoCooldown:

    async def wait(self):
        return None


class FixedCooldown:

    def __init__(self, seconds: float):
        self.seconds = seconds

    async def wait(self):
        if self.seconds > 0:
            await asyncio.sleep(self.seconds)


def chunk_numbers(numbers: List[str], size: int) -> List[List[str]]:
    return [numbers[i:i + size] for i in range(0, len(numbers), size)]


Attempt = Callable[[str], Awaitable[CallOutcome]]
OutcomeHook = Callable[[CallOutcome], None]


class BaseDispatcher:

    def __init__(self, concurrent_limit: int, cooldown=None, cancel_event: Optional[asyncio.Event] = None):
        if concurrent_limit < 1:
            raise ValueError("concurrent_limit must be at least 1")
        self.concurrent_limit = concurrent_limit
        self.cooldown = cooldown or NoCooldown()
        self.cancel_event = cancel_event

    def _cancelled(self) -> bool:
        return bool(self.cancel_event and self.cancel_event.is_set())

    async def _run_one(self, attempt: Attempt, phone_number: str, on_outcome: Optional[OutcomeHook]) -> CallOutcome:
        if self._cancelled():
            outcome = CallOutcome(phone_number=phone_number, success=False, error=CANCELLED_ERROR)
        else:
            try:
                outcome = await attempt(phone_number)
            except Exception as e:
                logger.call(phone_number, f"Call failed: {e}")
                outcome = CallOutcome(phone_number=phone_number, success=False, error=str(e))

        if on_outcome:
            try:
                on_outcome(outcome)
            except Exception as e:
                logger.error(f"Outcome hook failed for {phone_number}: {e}")

        return outcome

    async def dispatch(self, numbers: List[str], attempt: Attempt, on_outcome: Optional[OutcomeHook] = None) -> DispatchResult:
        raise NotImplementedError


class WaveDispatcher(BaseDispatcher):

    async def dispatch(self, numbers, attempt, on_outcome=None):
        waves = chunk_numbers(list(numbers), self.concurrent_limit)
        result = DispatchResult(waves=len(waves))

        for index, wave in enumerate(waves):
            logger.info(f"Processing wave {index + 1}/{len(waves)} with {len(wave)} calls")

            outcomes = await asyncio.gather(*(
                self._run_one(attempt, phone_number, on_outcome)
                for phone_number in wave
            ))
            result.outcomes.extend(outcomes)

            if index < len(waves) - 1:
                await self.cooldown.wait()

        return result


class PooledDispatcher(BaseDispatcher):

    async def dispatch(self, numbers, attempt, on_outcome=None):
        numbers = list(numbers)
        semaphore = asyncio.Semaphore(self.concurrent_limit)

        async def worker(phone_number):
            async with semaphore:
                outcome = await self._run_one(attempt, phone_number, on_outcome)
                await self.cooldown.wait()
                return outcome

        outcomes = await asyncio.gather(*(worker(phone_number) for phone_number in numbers))
        return DispatchResult(
            outcomes=list(outcomes),
            waves=math.ceil(len(numbers) / self.concurrent_limit)
        )


def get_dispatcher(concurrent_limit: int, mode: str = None, cooldown=None, cancel_event=None) -> BaseDispatcher:
    mode = mode or settings.DISPATCH_MODE
    if cooldown is None:
        cooldown = FixedCooldown(settings.WAVE_COOLDOWN_SECONDS)

    if mode == "pool":
        return PooledDispatcher(concurrent_limit, cooldown=cooldown, cancel_event=cancel_event)
    return WaveDispatcher(concurrent_limit, cooldown=cooldown, cancel_event=cancel_event)
