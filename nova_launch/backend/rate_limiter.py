"""
Global per-client rate limiting for the relay API
"""

import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

from aiohttp import web

logger = logging.getLogger(__name__)

EXEMPT_PATHS = ('/health',)
MAX_TRACKED_CLIENTS = 10_000


class RateLimiter:
    """Sliding-window limiter keyed by client IP"""

    def __init__(self, max_requests: int = 100, window: int = 900,
                 clock: Callable[[], float] = time.time):
        self.max_requests = max_requests
        self.window = window  # seconds
        self.clock = clock
        self.history: Dict[str, List[float]] = {}

    def hit(self, client: str) -> Tuple[bool, int, int]:
        """Record a request

        Returns:
            Tuple of (allowed, remaining, retry_after_seconds)
        """
        now = self.clock()
        if len(self.history) > MAX_TRACKED_CLIENTS:
            self.prune()

        # Drop requests that fell out of the window
        recent = [t for t in self.history.get(client, []) if now - t < self.window]

        if len(recent) >= self.max_requests:
            self.history[client] = recent
            retry_after = int(self.window - (now - recent[0])) + 1
            return False, 0, retry_after

        recent.append(now)
        self.history[client] = recent
        return True, self.max_requests - len(recent), 0

    def prune(self) -> None:
        """Forget clients with no requests inside the window"""
        now = self.clock()
        self.history = {
            client: stamps for client, stamps in self.history.items()
            if stamps and now - stamps[-1] < self.window
        }


def client_ip(request: web.Request) -> str:
    """First hop of X-Forwarded-For, else the peer address"""
    forwarded = request.headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.remote or 'unknown'


def rate_limit_middleware(limiter: RateLimiter, exempt: Optional[Tuple[str, ...]] = EXEMPT_PATHS):
    @web.middleware
    async def middleware(request: web.Request, handler):
        if exempt and request.path in exempt:
            return await handler(request)

        allowed, remaining, retry_after = limiter.hit(client_ip(request))
        if not allowed:
            logger.warning(f"Rate limit exceeded for {client_ip(request)} on {request.path}")
            return web.json_response(
                {'success': False, 'error': 'Too many requests, please try again later.'},
                status=429,
                headers={
                    'Retry-After': str(retry_after),
                    'RateLimit-Limit': str(limiter.max_requests),
                    'RateLimit-Remaining': '0',
                },
            )

        response = await handler(request)
        response.headers['RateLimit-Limit'] = str(limiter.max_requests)
        response.headers['RateLimit-Remaining'] = str(remaining)
        return response

    return middleware
