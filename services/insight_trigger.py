"""Fire-and-forget dispatch of insight generation after a round completes.

Dispatch has no result channel: the triggering request never learns
whether generation succeeded. Outcomes are only visible in the logs.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Optional, Protocol, Set

import httpx

from services.config import settings

if TYPE_CHECKING:
    from services.insight_generator import InsightGenerator

logger = logging.getLogger(__name__)


class InsightTrigger(Protocol):
    """Anything that can start insight generation without blocking."""

    def dispatch(self, profile_id: str, round_id: str) -> None:
        ...


class NullInsightTrigger:
    """Does nothing. Used when generation is disabled and in tests."""

    def dispatch(self, profile_id: str, round_id: str) -> None:
        return None


class _BackgroundTrigger:
    """Keeps strong references to running tasks until they finish."""

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for in-flight dispatches (shutdown, tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class InProcessInsightTrigger(_BackgroundTrigger):
    """Runs the generator as a background task on the current event loop.

    A started generation is never cancelled here; it ends when the model
    call returns or hits its own timeout (INSIGHTS_MODEL_TIMEOUT).
    """

    def __init__(self, generator: "InsightGenerator"):
        super().__init__()
        self._generator = generator

    def dispatch(self, profile_id: str, round_id: str) -> None:
        self._spawn(self._run(profile_id, round_id))

    async def _run(self, profile_id: str, round_id: str) -> None:
        try:
            response = await self._generator.generate_insights(profile_id, round_id)
        except Exception:
            # Generation failures must never reach the round-completion flow.
            logger.exception(
                "Insight generation failed for round %s", round_id,
                extra={"extra_fields": {"event": "insights_trigger_failed",
                                        "profile_id": profile_id, "round_id": round_id}},
            )
            return
        logger.info("Insights generated for round %s (record %s)", round_id, response.insights_id)


class HttpInsightTrigger(_BackgroundTrigger):
    """POSTs `{profileId, roundId}` to a remotely deployed insights function."""

    def __init__(
        self,
        url: str,
        *,
        api_key: Optional[str] = None,
        timeout: float = settings.INSIGHTS_TRIGGER_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__()
        self.url = url
        self.timeout = timeout
        self._api_key = api_key
        self._client = client

    def dispatch(self, profile_id: str, round_id: str) -> None:
        self._spawn(self._post(profile_id, round_id))

    async def _post(self, profile_id: str, round_id: str) -> None:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        body = {"profileId": profile_id, "roundId": round_id}
        try:
            if self._client is not None:
                response = await self._client.post(self.url, json=body, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.url, json=body, headers=headers)
        except httpx.HTTPError as e:
            logger.error(
                "Exception calling insights function for round %s: %s", round_id, e,
                extra={"extra_fields": {"event": "insights_trigger_failed",
                                        "profile_id": profile_id, "round_id": round_id}},
            )
            return
        if response.is_success:
            logger.info("Insights function accepted round %s", round_id)
        else:
            logger.error(
                "Insights function returned %d for round %s: %s",
                response.status_code, round_id, response.text[:500],
                extra={"extra_fields": {"event": "insights_trigger_failed",
                                        "status_code": response.status_code,
                                        "profile_id": profile_id, "round_id": round_id}},
            )
