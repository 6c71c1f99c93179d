"""Value formatting helpers shared by exports, the CLI and the dashboard."""

import re
import unicodedata
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional


def slugify(text: str, max_length: int = 75) -> str:
    """Convert text to a filename-safe slug.

    Examples:
        >>> slugify("Employee Report")
        'employee-report'
        >>> slugify("  Q3 Finance (draft)!  ")
        'q3-finance-draft'
    """
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"-+", "-", text).strip("-")
    if len(text) > max_length:
        text = text[:max_length].rsplit("-", 1)[0]
    return text


def format_money(amount: Optional[Decimal | int | float], symbol: str = "$") -> str:
    """Format an amount with a currency symbol and thousands separators.

    Examples:
        >>> format_money(Decimal("1234.5"))
        '$1,234.50'
        >>> format_money(-700)
        '-$700.00'
    """
    if amount is None:
        return ""
    value = Decimal(str(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_date(value: Optional[date | datetime], fmt: str = "%m/%d/%Y") -> str:
    if value is None:
        return ""
    return value.strftime(fmt)


def format_number(n: int | float | Decimal) -> str:
    """Format a number with human-readable suffixes.

    Examples:
        >>> format_number(1500)
        '1.5K'
        >>> format_number(2500000)
        '2.5M'
        >>> format_number(999)
        '999'
    """
    abs_n = abs(n)
    sign = "-" if n < 0 else ""
    if abs_n >= 1_000_000_000:
        return f"{sign}{abs_n / 1_000_000_000:.1f}B"
    if abs_n >= 1_000_000:
        return f"{sign}{abs_n / 1_000_000:.1f}M"
    if abs_n >= 1_000:
        return f"{sign}{abs_n / 1_000:.1f}K"
    if isinstance(n, (float, Decimal)):
        return f"{sign}{abs_n:.1f}"
    return f"{sign}{abs_n}"


def format_percent(value: float) -> str:
    return f"{value:.1f}%"


def humanize(key: str) -> str:
    """``pending_approval`` -> ``Pending Approval``."""
    return key.replace("_", " ").title()


def format_size(num_bytes: int) -> str:
    """Format a byte count, e.g. 2048 -> '2.0 KB'."""
    size: Any = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{int(size)} B" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"
