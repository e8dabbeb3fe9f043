#!/usr/bin/env python3
"""
Nova Launch Webhook Stats Tool
Quick overview of subscriptions, deliveries and relayed events
"""

import os
import sys

from nova_launch.database import WebhookDatabase
from nova_launch.utils.formatting import format_number, truncate_address

# ANSI color codes (disable on Windows if issues)
ENABLE_COLORS = os.name != 'nt' or os.environ.get('ANSICON')


class Colors:
    if ENABLE_COLORS:
        GREEN = '\033[92m'
        YELLOW = '\033[93m'
        RED = '\033[91m'
        CYAN = '\033[96m'
        BOLD = '\033[1m'
        ENDC = '\033[0m'
    else:
        GREEN = YELLOW = RED = CYAN = BOLD = ENDC = ''


def print_section(title: str):
    """Print section header"""
    print(f"\n{Colors.CYAN}{Colors.BOLD}{title}{Colors.ENDC}")
    print("-" * 40)


def quick_stats(db_path: str):
    """Display quick overview stats"""
    if not os.path.exists(db_path):
        print(f"{Colors.RED}❌ Database not found: {db_path}{Colors.ENDC}")
        return

    db = WebhookDatabase(db_path)
    stats = db.get_stats()

    print(f"\n{Colors.BOLD}{'='*60}{Colors.ENDC}")
    print(f"{Colors.BOLD}NOVA LAUNCH - WEBHOOK STATS{Colors.ENDC}".center(60))
    print(f"{Colors.BOLD}{'='*60}{Colors.ENDC}")

    print_section("🔔 SUBSCRIPTIONS")
    print(f"Total: {format_number(stats['subscriptions_total'])} | Active: {format_number(stats['subscriptions_active'])}")

    print_section("📬 DELIVERIES (24h)")
    total = stats['deliveries_24h']
    ok = stats['successful_deliveries_24h']
    rate = (ok / total * 100) if total else 0
    print(f"Attempts: {format_number(total)} | Success: {format_number(ok)} ({rate:.1f}%)")

    print_section("⛓️  EVENTS")
    if not stats['events_by_type']:
        print("No events relayed yet")
    for event_type, count in sorted(stats['events_by_type'].items()):
        print(f"{event_type}: {format_number(count)}")

    print_section("🕒 RECENT EVENTS")
    for event in db.recent_events(limit=10):
        token = truncate_address(event.token_address) if event.token_address else '-'
        print(f"{event.observed_at:%Y-%m-%d %H:%M} | {event.event_type:<13} | {token} | ledger {event.ledger}")


if __name__ == "__main__":
    # Optional path argument, else DATABASE_PATH
    path = sys.argv[1] if len(sys.argv) > 1 else os.getenv('DATABASE_PATH', 'webhooks.db')
    quick_stats(path)
