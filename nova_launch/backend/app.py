"""
aiohttp application for the Nova Launch webhook relay

Run with:
    python run_backend.py
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from aiohttp import web

from nova_launch.backend.delivery import WebhookDeliveryService
from nova_launch.backend.event_listener import StellarEventListener
from nova_launch.backend.rate_limiter import RateLimiter, rate_limit_middleware
from nova_launch.backend.webhooks import DB_KEY, DELIVERY_KEY, routes as webhook_routes
from nova_launch.config import BackendConfig
from nova_launch.database import WebhookDatabase
from nova_launch.services import SorobanRPC

CONFIG_KEY = web.AppKey('config', BackendConfig)
LISTENER_KEY = web.AppKey('event_listener', StellarEventListener)
STARTED_KEY = web.AppKey('started_at', float)

SECURITY_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'SAMEORIGIN',
    'X-DNS-Prefetch-Control': 'off',
    'Referrer-Policy': 'no-referrer',
    'Strict-Transport-Security': 'max-age=15552000; includeSubDomains',
    'Cross-Origin-Opener-Policy': 'same-origin',
}

logger = logging.getLogger(__name__)


@web.middleware
async def error_middleware(request: web.Request, handler):
    """JSON bodies for 404s and unhandled exceptions"""
    try:
        return await handler(request)
    except web.HTTPNotFound:
        return web.json_response({'success': False, 'error': 'Route not found'}, status=404)
    except web.HTTPException:
        raise
    except Exception:
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        return web.json_response({'success': False, 'error': 'Internal server error'}, status=500)


@web.middleware
async def security_headers_middleware(request: web.Request, handler):
    response = await handler(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


def cors_middleware(origins):
    allow_all = '*' in origins

    @web.middleware
    async def middleware(request: web.Request, handler):
        origin = request.headers.get('Origin')
        if request.method == 'OPTIONS' and origin:
            response = web.Response(status=204)
        else:
            response = await handler(request)

        if origin and (allow_all or origin in origins):
            response.headers['Access-Control-Allow-Origin'] = '*' if allow_all else origin
            response.headers['Access-Control-Allow-Methods'] = 'GET,POST,PATCH,DELETE,OPTIONS'
            response.headers['Access-Control-Allow-Headers'] = 'Content-Type,Authorization'
        return response

    return middleware


async def health(request: web.Request) -> web.Response:
    return web.json_response({
        'status': 'ok',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'uptime': round(time.monotonic() - request.app[STARTED_KEY], 3),
    })


async def _start_listener(app: web.Application) -> None:
    if LISTENER_KEY in app:
        app[LISTENER_KEY].start()
        logger.info("Stellar event listener started")
    else:
        logger.warning("FACTORY_CONTRACT_ID not set, event listener not started")


async def _shutdown(app: web.Application) -> None:
    logger.info("Shutting down gracefully...")
    if LISTENER_KEY in app:
        await app[LISTENER_KEY].stop()
    await app[DELIVERY_KEY].close()
    logger.info("HTTP server closed")


def create_app(config: BackendConfig, db: Optional[WebhookDatabase] = None,
               listener: Optional[StellarEventListener] = None,
               limiter: Optional[RateLimiter] = None) -> web.Application:
    """Build the relay application"""
    db = db or WebhookDatabase(config.database_path)
    limiter = limiter or RateLimiter(config.rate_limit_requests, config.rate_limit_window)
    delivery = WebhookDeliveryService(
        db,
        timeout=config.webhook_timeout,
        max_retries=config.webhook_max_retries,
    )

    app = web.Application(middlewares=[
        security_headers_middleware,
        error_middleware,
        cors_middleware(config.cors_origins),
        rate_limit_middleware(limiter),
    ])
    app[CONFIG_KEY] = config
    app[DB_KEY] = db
    app[DELIVERY_KEY] = delivery
    app[STARTED_KEY] = time.monotonic()

    if listener is None and config.factory_contract_id:
        listener = StellarEventListener(
            rpc=SorobanRPC(config.soroban_rpc_url),
            db=db,
            delivery=delivery,
            contract_id=config.factory_contract_id,
            poll_interval=config.poll_interval,
        )
    if listener is not None:
        app[LISTENER_KEY] = listener

    app.router.add_get('/health', health)
    app.router.add_routes(webhook_routes)

    app.on_startup.append(_start_listener)
    app.on_cleanup.append(_shutdown)
    return app
