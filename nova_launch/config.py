"""
Network, pinning service and backend configuration

Values come from the environment (a .env file is loaded first).
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dotenv import load_dotenv

STELLAR_CONFIG: Dict[str, Dict[str, str]] = {
    'testnet': {
        'network_passphrase': 'Test SDF Network ; September 2015',
        'horizon_url': 'https://horizon-testnet.stellar.org',
        'soroban_rpc_url': 'https://soroban-testnet.stellar.org',
    },
    'mainnet': {
        'network_passphrase': 'Public Global Stellar Network ; September 2015',
        'horizon_url': 'https://horizon.stellar.org',
        'soroban_rpc_url': 'https://soroban-mainnet.stellar.org',
    },
}

IPFS_CONFIG = {
    'pinata_api_url': 'https://api.pinata.cloud',
    'pinata_gateway': 'https://gateway.pinata.cloud/ipfs',
}


def get_network_config(network: str = 'testnet') -> Dict[str, str]:
    """Get endpoints for a network name"""
    try:
        return STELLAR_CONFIG[network]
    except KeyError:
        raise ValueError(f"Unknown Stellar network: {network}") from None


@dataclass
class BackendConfig:
    """Settings for the webhook relay"""
    port: int = 3001
    environment: str = 'development'
    network: str = 'testnet'
    factory_contract_id: Optional[str] = None
    rpc_url: Optional[str] = None  # Overrides the network default
    database_path: str = 'webhooks.db'
    log_dir: str = 'logs'
    debug: bool = False

    # Rate limiting (per client IP)
    rate_limit_requests: int = 100
    rate_limit_window: int = 900  # 15 minutes in seconds

    # Event listener / delivery
    poll_interval: float = 5.0
    webhook_timeout: float = 5.0
    webhook_max_retries: int = 3

    cors_origins: List[str] = field(default_factory=lambda: ['*'])

    @property
    def soroban_rpc_url(self) -> str:
        return self.rpc_url or get_network_config(self.network)['soroban_rpc_url']


def load_config() -> BackendConfig:
    """Load backend configuration from environment"""
    load_dotenv()

    network = os.getenv('STELLAR_NETWORK', 'testnet').lower()
    # Fail early on a typo rather than at first RPC call
    get_network_config(network)

    return BackendConfig(
        port=int(os.getenv('PORT', '3001')),
        environment=os.getenv('NODE_ENV', os.getenv('ENVIRONMENT', 'development')),
        network=network,
        factory_contract_id=os.getenv('FACTORY_CONTRACT_ID') or None,
        rpc_url=os.getenv('SOROBAN_RPC_URL') or None,
        database_path=os.getenv('DATABASE_PATH', 'webhooks.db'),
        log_dir=os.getenv('LOG_DIR', 'logs'),
        debug=os.getenv('DEBUG', 'false').lower() == 'true',
        rate_limit_requests=int(os.getenv('RATE_LIMIT_REQUESTS', '100')),
        rate_limit_window=int(os.getenv('RATE_LIMIT_WINDOW', '900')),
        poll_interval=float(os.getenv('POLL_INTERVAL', '5')),
        webhook_timeout=float(os.getenv('WEBHOOK_TIMEOUT', '5')),
        webhook_max_retries=int(os.getenv('WEBHOOK_MAX_RETRIES', '3')),
        cors_origins=[o.strip() for o in os.getenv('CORS_ORIGINS', '*').split(',') if o.strip()],
    )
