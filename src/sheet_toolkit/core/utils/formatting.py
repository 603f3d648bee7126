"""
Module: core.utils.formatting

Purpose:
    Small Indonesian-locale formatting helpers used in document text and
    output metadata.

Key Functions:
    - format_rupiah(): 1500000 -> "Rp 1.500.000"
    - format_bytes(): 2048 -> "2 KB"
    - slugify_filename(): "Sensor Kit #2" -> "sensor-kit--2"
    - format_date_id(): date -> "5 Januari 2026"
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

_MONTHS_ID = (
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
)


def format_rupiah(value: float) -> str:
    """Format an amount as whole Rupiah with dot thousands separators."""
    rounded = int(round(value))
    grouped = f"{abs(rounded):,}".replace(",", ".")
    sign = "-" if rounded < 0 else ""
    return f"{sign}Rp {grouped}"


def format_bytes(size: int, decimals: int = 2) -> str:
    """Human-readable byte size using 1024 steps (Bytes/KB/MB/GB)."""
    if size <= 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB")
    i = 0
    while i < len(units) - 1 and size >= 1024 ** (i + 1):
        i += 1
    value = round(size / (1024 ** i), max(decimals, 0))
    # Drop trailing zeros like parseFloat(x.toFixed(n))
    text = f"{value:.{max(decimals, 0)}f}".rstrip("0").rstrip(".") if decimals > 0 else f"{value:.0f}"
    return f"{text} {units[i]}"


def slugify_filename(name: str) -> str:
    """Replace every non-alphanumeric character with '-' and lowercase."""
    return re.sub(r"[^a-z0-9]", "-", name, flags=re.IGNORECASE).lower()


def format_date_id(value: Optional[date] = None) -> str:
    """Long Indonesian date, e.g. '19 Oktober 2026'."""
    value = value or date.today()
    return f"{value.day} {_MONTHS_ID[value.month - 1]} {value.year}"
