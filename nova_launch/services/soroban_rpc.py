"""
Minimal Soroban JSON-RPC reader used by the event listener
"""

import itertools
import logging
from typing import Any, Dict, List, Optional

import requests

from nova_launch.utils.errors import AppError, ErrorCode, to_app_error

logger = logging.getLogger(__name__)


class SorobanRPC:
    """Read-only JSON-RPC client (ledgers, events, health)"""

    def __init__(self, rpc_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self._ids = itertools.count(1)

    def _call(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
        }
        if params is not None:
            payload["params"] = params

        try:
            response = self.session.post(self.rpc_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"RPC {method} failed: {e}")
            raise to_app_error(e, default=ErrorCode.NETWORK_ERROR) from e

        try:
            body = response.json()
        except ValueError as e:
            raise AppError(ErrorCode.NETWORK_ERROR, f"Invalid JSON from RPC: {e}") from e

        if 'error' in body:
            error = body['error']
            message = error.get('message', 'unknown RPC error') if isinstance(error, dict) else str(error)
            raise AppError(ErrorCode.NETWORK_ERROR, f"{method}: {message}")

        return body.get('result')

    def get_health(self) -> Dict[str, Any]:
        return self._call('getHealth')

    def get_latest_ledger(self) -> int:
        """Sequence number of the latest closed ledger"""
        return int(self._call('getLatestLedger')['sequence'])

    def get_events(self, contract_ids: List[str], start_ledger: Optional[int] = None,
                   cursor: Optional[str] = None, limit: int = 100) -> Dict[str, Any]:
        """Fetch contract events with topics/values decoded to JSON

        Either start_ledger or cursor must be given; the cursor wins when both are.
        """
        pagination: Dict[str, Any] = {"limit": limit}
        params: Dict[str, Any] = {
            "filters": [{"type": "contract", "contractIds": contract_ids}],
            "pagination": pagination,
            "xdrFormat": "json",
        }
        if cursor:
            pagination["cursor"] = cursor
        elif start_ledger is not None:
            params["startLedger"] = start_ledger
        else:
            raise ValueError("get_events needs start_ledger or cursor")

        result = self._call('getEvents', params)
        return {
            'events': result.get('events', []),
            'cursor': result.get('cursor'),
            'latest_ledger': result.get('latestLedger'),
        }
