"""
Webhook subscription routes (/api/webhooks)
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from aiohttp import web

from nova_launch.backend.delivery import WebhookDeliveryService
from nova_launch.database import WebhookDatabase
from nova_launch.models import EVENT_TYPES, TokenEvent
from nova_launch.utils.validation import is_valid_contract_address, is_valid_stellar_address

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()

DB_KEY = web.AppKey('webhook_db', WebhookDatabase)
DELIVERY_KEY = web.AppKey('webhook_delivery', WebhookDeliveryService)


def _error(message: str, status: int = 400) -> web.Response:
    return web.json_response({'success': False, 'error': message}, status=status)


def _is_valid_url(url: Any) -> bool:
    if not isinstance(url, str):
        return False
    parsed = urlparse(url)
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


async def _json_body(request: web.Request) -> Optional[Dict[str, Any]]:
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def validate_subscription(body: Dict[str, Any]) -> Optional[str]:
    """Return an error message for a bad subscribe request, else None"""
    if not _is_valid_url(body.get('url')):
        return 'A valid http(s) url is required'

    events = body.get('events')
    if not isinstance(events, list) or not events:
        return 'events must be a non-empty list'
    unknown = [e for e in events if e not in EVENT_TYPES]
    if unknown:
        return f"Unknown event type(s): {', '.join(map(str, unknown))}"

    if not is_valid_stellar_address(body.get('createdBy')):
        return 'createdBy must be a valid Stellar address'

    token_address = body.get('tokenAddress')
    if token_address is not None and not is_valid_contract_address(token_address):
        return 'tokenAddress must be a valid contract address'

    return None


@routes.post('/api/webhooks/subscribe')
async def subscribe(request: web.Request) -> web.Response:
    body = await _json_body(request)
    if body is None:
        return _error('Request body must be a JSON object')

    problem = validate_subscription(body)
    if problem:
        return _error(problem)

    db = request.app[DB_KEY]
    subscription = db.create_subscription(
        url=body['url'],
        events=list(dict.fromkeys(body['events'])),
        created_by=body['createdBy'],
        token_address=body.get('tokenAddress'),
    )
    return web.json_response({'success': True, 'data': subscription.to_dict()}, status=201)


@routes.get('/api/webhooks/list/{created_by}')
async def list_subscriptions(request: web.Request) -> web.Response:
    created_by = request.match_info['created_by']
    if not is_valid_stellar_address(created_by):
        return _error('Invalid Stellar address')

    subscriptions = request.app[DB_KEY].list_subscriptions(created_by)
    return web.json_response({
        'success': True,
        'data': [s.to_dict() for s in subscriptions],
    })


@routes.delete('/api/webhooks/unsubscribe/{subscription_id}')
async def unsubscribe(request: web.Request) -> web.Response:
    if not request.app[DB_KEY].delete_subscription(request.match_info['subscription_id']):
        return _error('Subscription not found', status=404)
    return web.json_response({'success': True})


@routes.patch('/api/webhooks/{subscription_id}/toggle')
async def toggle(request: web.Request) -> web.Response:
    body = await _json_body(request)
    if body is None or not isinstance(body.get('active'), bool):
        return _error('active must be true or false')

    db = request.app[DB_KEY]
    subscription_id = request.match_info['subscription_id']
    if not db.set_subscription_active(subscription_id, body['active']):
        return _error('Subscription not found', status=404)
    return web.json_response({'success': True, 'data': db.get_subscription(subscription_id).to_dict()})


@routes.get('/api/webhooks/{subscription_id}/logs')
async def delivery_logs(request: web.Request) -> web.Response:
    db = request.app[DB_KEY]
    subscription_id = request.match_info['subscription_id']
    if db.get_subscription(subscription_id) is None:
        return _error('Subscription not found', status=404)

    try:
        limit = min(int(request.query.get('limit', '50')), 200)
    except ValueError:
        return _error('limit must be a number')

    return web.json_response({'success': True, 'data': db.get_delivery_logs(subscription_id, limit)})


@routes.post('/api/webhooks/test')
async def send_test(request: web.Request) -> web.Response:
    """Deliver a synthetic token_created event to one subscription"""
    body = await _json_body(request)
    if body is None or not body.get('subscriptionId'):
        return _error('subscriptionId is required')

    subscription = request.app[DB_KEY].get_subscription(body['subscriptionId'])
    if subscription is None:
        return _error('Subscription not found', status=404)

    logger.info(f"Sending test event to webhook {subscription.id[:8]}")
    event = TokenEvent(
        event_id=f"test-{int(datetime.now().timestamp())}",
        event_type='token_created',
        token_address=subscription.token_address,
        ledger=0,
        data={'test': True},
    )
    delivered = await request.app[DELIVERY_KEY].deliver(subscription, event.to_payload())
    return web.json_response({'success': delivered, 'data': {'delivered': delivered}})
