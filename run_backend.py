#!/usr/bin/env python3
"""
Nova Launch Backend API
Webhook relay for token deployment and burn events
"""

from aiohttp import web

from nova_launch.backend import create_app
from nova_launch.config import load_config
from nova_launch.log import setup_logging

# Combined log format for request lines
ACCESS_LOG_FORMAT = '%a - - %t "%r" %s %b "%{Referer}i" "%{User-Agent}i"'


def main():
    config = load_config()
    logger = setup_logging(config.log_dir, config.debug)

    app = create_app(config)

    print("=" * 50)
    print(f"🚀 Nova Launch Backend API running on port {config.port}")
    print(f"📡 Environment: {config.environment}")
    print(f"🌐 Network: {config.network}")
    if config.factory_contract_id:
        print(f"👂 Watching factory: {config.factory_contract_id}")
    else:
        print("⚠️  FACTORY_CONTRACT_ID not set, event listener disabled")
    print("=" * 50)

    # run_app handles SIGINT/SIGTERM and runs on_cleanup hooks
    web.run_app(
        app,
        host='0.0.0.0',
        port=config.port,
        shutdown_timeout=10.0,
        access_log_format=ACCESS_LOG_FORMAT,
        print=None,
    )
    logger.info("Server stopped")


if __name__ == "__main__":
    main()
