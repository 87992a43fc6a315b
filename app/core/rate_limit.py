"""Rate limiting for brute-forceable endpoints.

Premium-code redemption and two-factor verification both accept short
guessable inputs, so each viewer gets a small sliding-window budget.
Entries older than the window are pruned periodically.
"""

import time
import uuid as uuid_pkg
from collections import defaultdict
from dataclasses import dataclass
from typing import TypeAlias

from fastapi import HTTPException, status


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""

    requests: int  # Maximum requests allowed
    window_seconds: int  # Time window in seconds


REDEEM_LIMIT = RateLimitConfig(requests=10, window_seconds=60)
TWO_FACTOR_LIMIT = RateLimitConfig(requests=5, window_seconds=60)


UserId: TypeAlias = uuid_pkg.UUID
Timestamp: TypeAlias = float


class RateLimiter:
    """In-memory rate limiter with sliding window.

    Single-instance only: each worker process keeps its own counters.
    """

    def __init__(self) -> None:
        # user_id -> endpoint_key -> request timestamps
        self._requests: dict[UserId, dict[str, list[Timestamp]]] = defaultdict(
            lambda: defaultdict(list)
        )
        self._last_cleanup = time.time()
        self._cleanup_interval = 300

    def _cleanup_expired(self, window_seconds: int) -> None:
        now = time.time()
        if now - self._last_cleanup < self._cleanup_interval:
            return

        cutoff = now - window_seconds
        users_to_remove: list[UserId] = []

        for user_id, endpoints in self._requests.items():
            endpoints_to_remove = [
                endpoint
                for endpoint, timestamps in endpoints.items()
                if not any(ts > cutoff for ts in timestamps)
            ]
            for endpoint in endpoints_to_remove:
                del endpoints[endpoint]
            if not endpoints:
                users_to_remove.append(user_id)

        for user_id in users_to_remove:
            del self._requests[user_id]

        self._last_cleanup = now

    def check_rate_limit(
        self,
        user_id: UserId,
        endpoint_key: str,
        config: RateLimitConfig,
    ) -> None:
        """Record a request, rejecting it if the viewer is over budget.

        Raises:
            HTTPException: 429 Too Many Requests if limit exceeded
        """
        now = time.time()
        cutoff = now - config.window_seconds

        self._cleanup_expired(config.window_seconds)

        recent_requests = [ts for ts in self._requests[user_id][endpoint_key] if ts > cutoff]

        if len(recent_requests) >= config.requests:
            retry_after = int(min(recent_requests) + config.window_seconds - now) + 1
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Too many attempts. Try again in {retry_after} seconds.",
                headers={"Retry-After": str(retry_after)},
            )

        recent_requests.append(now)
        self._requests[user_id][endpoint_key] = recent_requests

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._requests.clear()


rate_limiter = RateLimiter()
