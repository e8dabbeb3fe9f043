"""
Webhook delivery with retries
"""

import asyncio
import logging
from typing import Dict, List, Optional

import aiohttp

from nova_launch.database import WebhookDatabase
from nova_launch.models import TokenEvent, WebhookSubscription


class WebhookDeliveryService:
    """POSTs event payloads to subscriber URLs"""

    def __init__(self, db: WebhookDatabase, timeout: float = 5.0, max_retries: int = 3,
                 backoff_base: float = 1.0):
        self.db = db
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_base = backoff_base  # 1s, 2s, 4s...
        self.logger = logging.getLogger('nova_launch')
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={'User-Agent': 'NovaLaunch-Webhooks/1.0'},
            )
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()

    async def deliver(self, subscription: WebhookSubscription, payload: Dict) -> bool:
        """Send one payload, retrying failures with exponential backoff"""
        session = await self._get_session()
        event_type = payload.get('event')

        for attempt in range(1, self.max_retries + 1):
            status_code = None
            error = None
            try:
                async with session.post(subscription.url, json=payload) as response:
                    status_code = response.status
                    success = 200 <= response.status < 300
                    if not success:
                        error = f"HTTP {response.status}"
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                success = False
                error = str(e) or e.__class__.__name__

            self.db.log_delivery(
                subscription.id, event_type, payload, status_code,
                success, attempt=attempt, error=error
            )

            if success:
                self.db.mark_triggered(subscription.id)
                self.logger.info(f"Delivered {event_type} to webhook {subscription.id[:8]} (attempt {attempt})")
                return True

            self.logger.warning(
                f"Webhook {subscription.id[:8]} delivery failed (attempt {attempt}/{self.max_retries}): {error}"
            )
            if attempt < self.max_retries:
                await asyncio.sleep(self.backoff_base * (2 ** (attempt - 1)))

        self.logger.error(f"Giving up on webhook {subscription.id[:8]} for {event_type}")
        return False

    async def dispatch(self, event: TokenEvent) -> int:
        """Fan an event out to every matching subscription

        Returns:
            Number of successful deliveries
        """
        subscriptions: List[WebhookSubscription] = self.db.find_subscribers(
            event.event_type, event.token_address
        )
        if not subscriptions:
            return 0

        payload = event.to_payload()
        results = await asyncio.gather(
            *(self.deliver(subscription, payload) for subscription in subscriptions)
        )
        return sum(1 for ok in results if ok)
