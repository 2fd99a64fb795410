"""Per-service hourly request budgets and cost tracking."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Awaitable, Callable
from typing import Literal

from pydantic import BaseModel

from presales_research.errors import RateLimitExceeded
from presales_research.models import ServiceMetrics

logger = logging.getLogger(__name__)

Service = Literal["firecrawl", "ai", "openai"]

WINDOW_SECONDS = 3600.0
SOFT_LIMIT_RATIO = 0.8
BACKOFF_SECONDS = 2.0
COST_WARNING_THRESHOLD = 10.0  # USD


class ServiceLimit(BaseModel):
    requests_per_hour: int
    cost_per_request: float


RATE_LIMITS: dict[str, ServiceLimit] = {
    "firecrawl": ServiceLimit(requests_per_hour=100, cost_per_request=0.01),
    "ai": ServiceLimit(requests_per_hour=200, cost_per_request=0.002),
    "openai": ServiceLimit(requests_per_hour=1000, cost_per_request=0.005),
}


class RateLimiter:
    """Hourly request counters per service, with a soft backoff near the limit.

    Counters only move when track() records a successful request, so
    enforce() checks the budget without consuming it. Callers that run
    requests concurrently use acquire()/release(), which also counts
    requests still in flight against the budget.
    """

    def __init__(
        self,
        limits: dict[str, ServiceLimit] | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.limits = limits or RATE_LIMITS
        self._clock = clock
        self._sleep = sleep
        now = clock()
        self.metrics: dict[str, ServiceMetrics] = {
            name: ServiceMetrics(last_reset=now) for name in self.limits
        }
        self.total = ServiceMetrics(last_reset=now)
        self._in_flight: dict[str, int] = {name: 0 for name in self.limits}
        self._cost_warned = False

    def _used(self, service: Service) -> int:
        return self.metrics[service].count + self._in_flight[service]

    def _check(self, service: Service) -> None:
        limit = self.limits[service]
        tracker = self.metrics[service]

        now = self._clock()
        since_reset = now - tracker.last_reset
        if since_reset > WINDOW_SECONDS:
            tracker.count = 0
            tracker.last_reset = now
            since_reset = 0.0

        if self._used(service) >= limit.requests_per_hour:
            wait = WINDOW_SECONDS - since_reset
            raise RateLimitExceeded(service, math.ceil(wait / 60))

    async def enforce(self, service: Service) -> None:
        """Raise RateLimitExceeded if the service's hourly budget is spent.

        Resets the counter once an hour has passed since the last reset and
        sleeps briefly once usage is above 80% of the budget.
        """
        self._check(service)

        limit = self.limits[service].requests_per_hour
        used = self._used(service)
        if used > limit * SOFT_LIMIT_RATIO:
            logger.debug("%s at %d/%d requests, backing off", service, used, limit)
            await self._sleep(BACKOFF_SECONDS)

    async def acquire(self, service: Service) -> None:
        """enforce(), then hold one slot of the budget until release()."""
        await self.enforce(service)
        # Other requests may have taken the last slot during the backoff
        self._check(service)
        self._in_flight[service] += 1

    def release(
        self,
        service: Service,
        success: bool = True,
        actual_cost: float | None = None,
    ) -> None:
        self._in_flight[service] = max(0, self._in_flight[service] - 1)
        self.track(service, success, actual_cost)

    def track(
        self,
        service: Service,
        success: bool = True,
        actual_cost: float | None = None,
    ) -> None:
        """Record one successful request and its cost."""
        if not success:
            return

        cost = actual_cost or self.limits[service].cost_per_request
        self.metrics[service].count += 1
        self.metrics[service].costs += cost
        self.total.count += 1
        self.total.costs += cost

        if self.total.costs > COST_WARNING_THRESHOLD and not self._cost_warned:
            self._cost_warned = True
            logger.warning(
                "API costs have exceeded $%.0f. Current total: $%.2f",
                COST_WARNING_THRESHOLD, self.total.costs,
            )

    def remaining(self, service: Service) -> int:
        return max(0, self.limits[service].requests_per_hour - self._used(service))
