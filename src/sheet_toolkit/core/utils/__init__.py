"""Shared helpers."""

from .formatting import format_rupiah, format_bytes, slugify_filename, format_date_id

__all__ = ["format_rupiah", "format_bytes", "slugify_filename", "format_date_id"]
