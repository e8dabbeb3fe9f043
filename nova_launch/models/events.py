"""
On-chain event and webhook subscription models
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

# Event types a webhook can subscribe to
EVENT_TYPES = ('token_created', 'burn_self', 'burn_admin')


@dataclass
class TokenEvent:
    """A factory contract event observed on chain"""
    event_id: str  # RPC event id, unique per event
    event_type: str  # One of EVENT_TYPES
    token_address: Optional[str]
    ledger: int
    transaction_hash: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    observed_at: datetime = field(default_factory=datetime.now)

    def to_payload(self) -> Dict[str, Any]:
        """JSON body sent to webhook subscribers"""
        return {
            'event': self.event_type,
            'timestamp': self.observed_at.isoformat(),
            'data': {
                'eventId': self.event_id,
                'tokenAddress': self.token_address,
                'ledger': self.ledger,
                'transactionHash': self.transaction_hash,
                **self.data,
            },
        }


@dataclass
class WebhookSubscription:
    """A URL that wants to be notified about token events"""
    id: str
    url: str
    events: List[str]
    created_by: str  # Owner's Stellar address
    token_address: Optional[str] = None  # None = all tokens
    active: bool = True
    created_at: datetime = field(default_factory=datetime.now)
    last_triggered: Optional[datetime] = None

    def wants(self, event_type: str, token_address: Optional[str]) -> bool:
        """Check whether this subscription should receive an event"""
        if not self.active or event_type not in self.events:
            return False
        return self.token_address is None or self.token_address == token_address

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'url': self.url,
            'events': list(self.events),
            'createdBy': self.created_by,
            'tokenAddress': self.token_address,
            'active': self.active,
            'createdAt': self.created_at.isoformat(),
            'lastTriggered': self.last_triggered.isoformat() if self.last_triggered else None,
        }
