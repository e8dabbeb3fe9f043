"""
Polls the factory contract for token events and relays them to webhooks
"""

import asyncio
import logging
from datetime import datetime
from functools import partial
from typing import Any, Dict, Optional

from nova_launch.database import WebhookDatabase
from nova_launch.models import TokenEvent
from nova_launch.services import SorobanRPC
from nova_launch.backend.delivery import WebhookDeliveryService

# First topic symbol emitted by the factory -> webhook event type
TOPIC_EVENT_TYPES = {
    'tok_reg': 'token_created',
    'created': 'token_created',
    'burn': 'burn_self',
    'adm_burn': 'burn_admin',
}


def scval_to_native(value: Any) -> Any:
    """Convert an RPC JSON-encoded ScVal into plain Python values

    128/256-bit and 64-bit integers stay strings so they survive JSON consumers.
    """
    if not isinstance(value, dict):
        return value
    if len(value) != 1:
        return {k: scval_to_native(v) for k, v in value.items()}

    kind, inner = next(iter(value.items()))
    if kind in ('symbol', 'string', 'address', 'bytes'):
        return inner
    if kind in ('u32', 'i32'):
        return int(inner)
    if kind in ('u64', 'i64', 'u128', 'i128', 'u256', 'i256', 'timepoint', 'duration'):
        return str(inner)
    if kind == 'bool':
        return bool(inner)
    if kind == 'vec':
        return [scval_to_native(item) for item in inner or []]
    if kind == 'map':
        return {
            str(scval_to_native(entry['key'])): scval_to_native(entry['val'])
            for entry in inner or []
        }
    return inner


def parse_event(raw: Dict[str, Any]) -> Optional[TokenEvent]:
    """Turn a getEvents record into a TokenEvent (None for unrelated events)"""
    topics = [scval_to_native(t) for t in raw.get('topicJson', [])]
    if not topics or not isinstance(topics[0], str):
        return None

    event_type = TOPIC_EVENT_TYPES.get(topics[0])
    if event_type is None:
        return None

    value = scval_to_native(raw.get('valueJson'))

    token_address = next(
        (t for t in topics[1:] if isinstance(t, str) and t.startswith('C')),
        None
    )
    if token_address is None and isinstance(value, dict):
        token_address = value.get('token_address') or value.get('token')

    return TokenEvent(
        event_id=raw['id'],
        event_type=event_type,
        token_address=token_address,
        ledger=int(raw.get('ledger', 0)),
        transaction_hash=raw.get('txHash'),
        data={
            'topics': topics[1:],
            'value': value,
            'ledgerClosedAt': raw.get('ledgerClosedAt'),
        },
    )


class StellarEventListener:
    """Background poller for factory contract events"""

    def __init__(self, rpc: SorobanRPC, db: WebhookDatabase, delivery: WebhookDeliveryService,
                 contract_id: str, poll_interval: float = 5.0):
        self.rpc = rpc
        self.db = db
        self.delivery = delivery
        self.contract_id = contract_id
        self.poll_interval = poll_interval
        self.logger = logging.getLogger('nova_launch')
        self._task: Optional[asyncio.Task] = None
        self.last_poll: Optional[datetime] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start polling in the background (no-op if already running)"""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        self.logger.info(f"Event listener watching {self.contract_id[:8]}... every {self.poll_interval}s")

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        await self.delivery.close()
        self.logger.info("Event listener stopped")

    async def _run(self) -> None:
        while True:
            try:
                relayed = await self.poll_once()
                if relayed:
                    self.logger.info(f"Relayed {relayed} new event(s)")
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # Keep polling; the RPC node may just be lagging
                self.logger.error(f"Event poll failed: {e}")
            await asyncio.sleep(self.poll_interval)

    async def _fetch(self) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        cursor = self.db.get_cursor()
        if cursor:
            fetch = partial(self.rpc.get_events, [self.contract_id], cursor=cursor)
        else:
            latest = await loop.run_in_executor(None, self.rpc.get_latest_ledger)
            self.logger.info(f"No saved cursor, starting from ledger {latest}")
            fetch = partial(self.rpc.get_events, [self.contract_id], start_ledger=latest)
        return await loop.run_in_executor(None, fetch)

    async def poll_once(self) -> int:
        """Fetch one page of events; returns how many new events were relayed

        An event is stored only after it has been dispatched. If a dispatch
        raises, the event stays unstored and the cursor is not advanced, so the
        next poll fetches the page again and retries it.
        """
        result = await self._fetch()
        self.last_poll = datetime.now()

        relayed = 0
        failed = 0
        for raw in result['events']:
            event = parse_event(raw)
            if event is None or self.db.has_event(event.event_id):
                continue

            try:
                delivered = await self.delivery.dispatch(event)
            except Exception as e:
                failed += 1
                self.logger.error(f"Dispatch of {event.event_type} {event.event_id} failed, will retry: {e}")
                continue

            self.logger.debug(f"{event.event_type} {event.event_id}: {delivered} webhook(s) notified")
            if self.db.save_event(event):
                relayed += 1

        if result.get('cursor') and not failed:
            self.db.set_cursor(result['cursor'])

        return relayed
