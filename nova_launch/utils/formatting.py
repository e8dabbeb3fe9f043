"""
Formatting helpers for amounts, addresses, dates and file sizes
"""

import math
import re
import time
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Optional, Union

from nova_launch.models.token import STROOPS_PER_XLM

Number = Union[int, float, str]

# Leading numeric prefix of a string, e.g. '12.5abc' -> '12.5'
NUMERIC_PREFIX_RE = re.compile(r'\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?Infinity)')


def _to_float(value: Any) -> float:
    """Lenient parse: unparseable input becomes NaN instead of raising"""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return value
    if not isinstance(value, str):
        return math.nan

    match = NUMERIC_PREFIX_RE.match(value)
    if not match:
        return math.nan
    return float(match.group(1).replace('Infinity', 'inf'))


def _group(value: float, max_fraction: int, min_fraction: int = 0) -> str:
    """en-US style grouping with a bounded number of fraction digits, halves rounded up"""
    if isinstance(value, float):
        if math.isnan(value):
            return 'NaN'
        if math.isinf(value):
            return '∞' if value > 0 else '-∞'

    with localcontext() as ctx:
        ctx.prec = 400  # enough for any float written out in full
        exact = Decimal(str(value)).quantize(Decimal(1).scaleb(-max_fraction), rounding=ROUND_HALF_UP)
    text = f"{exact:,.{max_fraction}f}"
    if max_fraction == 0:
        return text

    whole, fraction = text.split('.')
    fraction = fraction.rstrip('0')
    if len(fraction) < min_fraction:
        fraction = fraction.ljust(min_fraction, '0')
    return f"{whole}.{fraction}" if fraction else whole


def format_xlm(amount: Number) -> str:
    """Format an XLM amount with 2 to 7 decimals"""
    return _group(_to_float(amount), max_fraction=7, min_fraction=2)


def format_number(value: Number) -> str:
    """Format a number with thousands separators"""
    return _group(_to_float(value), max_fraction=3)


def truncate_address(address: str, start_chars: int = 6, end_chars: int = 4) -> str:
    """Shorten an address for display, e.g. GABCDE...WXYZ"""
    if len(address) <= start_chars + end_chars:
        return address
    return f"{address[:start_chars]}...{address[-end_chars:]}"


def format_date(timestamp: int) -> str:
    """Format an epoch-milliseconds timestamp, e.g. 'Jan 15, 2024, 10:30 AM'"""
    dt = datetime.fromtimestamp(timestamp / 1000)
    return f"{dt:%b} {dt.day}, {dt.year}, {dt:%I:%M %p}"


def format_relative_time(timestamp: int, now: Optional[int] = None) -> str:
    """Format an epoch-milliseconds timestamp relative to now ('2 hours ago')"""
    if now is None:
        now = int(time.time() * 1000)

    seconds = int((now - timestamp) // 1000)
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days} day{'s' if days > 1 else ''} ago"
    if hours > 0:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    if minutes > 0:
        return f"{minutes} minute{'s' if minutes > 1 else ''} ago"
    return 'Just now'


def stroops_to_xlm(stroops: Union[int, str]) -> float:
    """Convert stroops (smallest unit) to XLM"""
    return int(stroops) / STROOPS_PER_XLM


def xlm_to_stroops(xlm: Number) -> int:
    """Convert XLM to stroops, truncating anything below one stroop"""
    return int(Decimal(str(xlm)) * STROOPS_PER_XLM)


def format_file_size(size: int) -> str:
    """Format a byte count as B, KB or MB"""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size / (1024 * 1024):.2f} MB"
