"""
Database operations for webhook subscriptions, deliveries and observed events
"""

import json
import sqlite3
import logging
import uuid
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from nova_launch.models import TokenEvent, WebhookSubscription

# Configure SQLite to handle datetime properly for Python 3.12+
sqlite3.register_adapter(datetime, lambda dt: dt.isoformat())
sqlite3.register_converter("timestamp", lambda b: datetime.fromisoformat(b.decode()))

DETECT_TYPES = sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES


class WebhookDatabase:
    """Handles all database operations for the webhook relay"""

    def __init__(self, db_path: str = 'webhooks.db'):
        """Initialize database connection"""
        self.db_path = db_path
        self.logger = logging.getLogger('nova_launch')
        self._setup_database()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, detect_types=DETECT_TYPES)
        conn.row_factory = sqlite3.Row
        return conn

    def _setup_database(self):
        """Create tables if they don't exist"""
        with self._connect() as conn:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS webhook_subscriptions (
                    id TEXT PRIMARY KEY,
                    url TEXT NOT NULL,
                    events TEXT NOT NULL,
                    created_by TEXT NOT NULL,
                    token_address TEXT,
                    active BOOLEAN DEFAULT TRUE,
                    created_at TIMESTAMP,
                    last_triggered TIMESTAMP
                )
            ''')

            conn.execute('''
                CREATE TABLE IF NOT EXISTS webhook_delivery_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    subscription_id TEXT NOT NULL,
                    event_type TEXT,
                    payload TEXT,
                    status_code INTEGER,
                    success BOOLEAN DEFAULT FALSE,
                    attempt INTEGER DEFAULT 1,
                    error TEXT,
                    created_at TIMESTAMP
                )
            ''')

            conn.execute('''
                CREATE TABLE IF NOT EXISTS token_events (
                    event_id TEXT PRIMARY KEY,
                    event_type TEXT,
                    token_address TEXT,
                    ledger INTEGER,
                    tx_hash TEXT,
                    data TEXT,
                    observed_at TIMESTAMP
                )
            ''')

            # Single-row state for the event listener cursor
            conn.execute('''
                CREATE TABLE IF NOT EXISTS listener_state (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            ''')

            conn.execute('''
                CREATE INDEX IF NOT EXISTS idx_subscriptions_owner
                ON webhook_subscriptions(created_by)
            ''')

            conn.execute('''
                CREATE INDEX IF NOT EXISTS idx_delivery_subscription
                ON webhook_delivery_logs(subscription_id, created_at)
            ''')

        self.logger.debug(f"Database initialized at {self.db_path}")

    @staticmethod
    def _row_to_subscription(row: sqlite3.Row) -> WebhookSubscription:
        return WebhookSubscription(
            id=row['id'],
            url=row['url'],
            events=[e for e in row['events'].split(',') if e],
            created_by=row['created_by'],
            token_address=row['token_address'],
            active=bool(row['active']),
            created_at=row['created_at'],
            last_triggered=row['last_triggered'],
        )

    # Subscriptions

    def create_subscription(self, url: str, events: List[str], created_by: str,
                            token_address: Optional[str] = None) -> WebhookSubscription:
        """Save a new subscription and return it"""
        subscription = WebhookSubscription(
            id=uuid.uuid4().hex,
            url=url,
            events=list(events),
            created_by=created_by,
            token_address=token_address,
        )
        with self._connect() as conn:
            conn.execute('''
                INSERT INTO webhook_subscriptions
                (id, url, events, created_by, token_address, active, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            ''', (
                subscription.id, subscription.url, ','.join(subscription.events),
                subscription.created_by, subscription.token_address,
                subscription.active, subscription.created_at
            ))

        self.logger.info(f"Webhook {subscription.id[:8]} subscribed to {','.join(events)} -> {url}")
        return subscription

    def get_subscription(self, subscription_id: str) -> Optional[WebhookSubscription]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM webhook_subscriptions WHERE id = ?",
                (subscription_id,)
            ).fetchone()
        return self._row_to_subscription(row) if row else None

    def list_subscriptions(self, created_by: str) -> List[WebhookSubscription]:
        """All subscriptions owned by an address, newest first"""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM webhook_subscriptions WHERE created_by = ? ORDER BY created_at DESC",
                (created_by,)
            ).fetchall()
        return [self._row_to_subscription(row) for row in rows]

    def delete_subscription(self, subscription_id: str) -> bool:
        """Remove a subscription; False if it didn't exist"""
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM webhook_subscriptions WHERE id = ?",
                (subscription_id,)
            )
            deleted = cursor.rowcount > 0
        if deleted:
            self.logger.info(f"Webhook {subscription_id[:8]} unsubscribed")
        return deleted

    def set_subscription_active(self, subscription_id: str, active: bool) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE webhook_subscriptions SET active = ? WHERE id = ?",
                (active, subscription_id)
            )
            return cursor.rowcount > 0

    def find_subscribers(self, event_type: str, token_address: Optional[str]) -> List[WebhookSubscription]:
        """Active subscriptions that should receive an event"""
        with self._connect() as conn:
            rows = conn.execute('''
                SELECT * FROM webhook_subscriptions
                WHERE active = 1 AND (token_address IS NULL OR token_address = ?)
            ''', (token_address,)).fetchall()
        subscriptions = [self._row_to_subscription(row) for row in rows]
        return [s for s in subscriptions if s.wants(event_type, token_address)]

    def mark_triggered(self, subscription_id: str, when: Optional[datetime] = None) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE webhook_subscriptions SET last_triggered = ? WHERE id = ?",
                (when or datetime.now(), subscription_id)
            )

    # Delivery logs

    def log_delivery(self, subscription_id: str, event_type: str, payload: Dict,
                     status_code: Optional[int], success: bool, attempt: int = 1,
                     error: Optional[str] = None) -> None:
        with self._connect() as conn:
            conn.execute('''
                INSERT INTO webhook_delivery_logs
                (subscription_id, event_type, payload, status_code, success, attempt, error, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ''', (
                subscription_id, event_type, json.dumps(payload), status_code,
                success, attempt, error, datetime.now()
            ))

    def get_delivery_logs(self, subscription_id: str, limit: int = 50) -> List[Dict]:
        """Most recent delivery attempts for a subscription"""
        with self._connect() as conn:
            rows = conn.execute('''
                SELECT * FROM webhook_delivery_logs
                WHERE subscription_id = ?
                ORDER BY id DESC
                LIMIT ?
            ''', (subscription_id, limit)).fetchall()

        return [
            {
                'id': row['id'],
                'event': row['event_type'],
                'statusCode': row['status_code'],
                'success': bool(row['success']),
                'attempt': row['attempt'],
                'error': row['error'],
                'createdAt': row['created_at'].isoformat() if row['created_at'] else None,
            }
            for row in rows
        ]

    # Observed events

    def save_event(self, event: TokenEvent) -> bool:
        """Store an event once; returns False if it was already seen"""
        try:
            with self._connect() as conn:
                conn.execute('''
                    INSERT INTO token_events
                    (event_id, event_type, token_address, ledger, tx_hash, data, observed_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                ''', (
                    event.event_id, event.event_type, event.token_address, event.ledger,
                    event.transaction_hash, json.dumps(event.data), event.observed_at
                ))
        except sqlite3.IntegrityError:
            return False
        return True

    def has_event(self, event_id: str) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM token_events WHERE event_id = ?", (event_id,)
            ).fetchone()
        return row is not None

    def recent_events(self, limit: int = 20) -> List[TokenEvent]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM token_events ORDER BY ledger DESC, observed_at DESC LIMIT ?",
                (limit,)
            ).fetchall()
        return [
            TokenEvent(
                event_id=row['event_id'],
                event_type=row['event_type'],
                token_address=row['token_address'],
                ledger=row['ledger'],
                transaction_hash=row['tx_hash'],
                data=json.loads(row['data'] or '{}'),
                observed_at=row['observed_at'],
            )
            for row in rows
        ]

    # Listener cursor

    def get_cursor(self) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM listener_state WHERE key = 'cursor'"
            ).fetchone()
        return row['value'] if row else None

    def set_cursor(self, cursor: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO listener_state (key, value) VALUES ('cursor', ?)",
                (cursor,)
            )

    def get_stats(self) -> Dict:
        """Counts for the stats tool and health checks"""
        with self._connect() as conn:
            subs = conn.execute('''
                SELECT
                    COUNT(*) as total,
                    SUM(CASE WHEN active = 1 THEN 1 ELSE 0 END) as active
                FROM webhook_subscriptions
            ''').fetchone()

            deliveries = conn.execute('''
                SELECT
                    COUNT(*) as total,
                    SUM(CASE WHEN success = 1 THEN 1 ELSE 0 END) as successful
                FROM webhook_delivery_logs
                WHERE created_at > ?
            ''', (datetime.now() - timedelta(hours=24),)).fetchone()

            events = conn.execute('''
                SELECT event_type, COUNT(*) as count
                FROM token_events
                GROUP BY event_type
            ''').fetchall()

        return {
            'subscriptions_total': subs['total'],
            'subscriptions_active': subs['active'] or 0,
            'deliveries_24h': deliveries['total'],
            'successful_deliveries_24h': deliveries['successful'] or 0,
            'events_by_type': {row['event_type']: row['count'] for row in events},
        }
