"""
Module: exporter

Purpose:
    Paginated PDF export for product details and price lists.
    Assemble → Measure → Plan → Rasterize → Slice/Compose

Key Functions:
    - export(): Export any payload
    - export_product_detail(), export_price_list(), export_group_detail()

Key Classes:
    - ExportConfig: Export configuration
    - ExportResult: Output and pagination metadata

Example:
    >>> from sheet_toolkit.exporter import export_product_detail
    >>> result = export_product_detail({"name": "Sensor Kit", "price": 150000},
    ...                                return_blob=True)
    >>> result.blob.formatted_size
"""

from .config import ExportConfig, load_export_config
from .controller import (
    export,
    export_product_detail,
    export_price_list,
    export_group_detail,
    output_filename,
    ExportResult,
)
from .output import OutputMode, ExportBlob

__all__ = [
    "ExportConfig",
    "load_export_config",
    "export",
    "export_product_detail",
    "export_price_list",
    "export_group_detail",
    "output_filename",
    "ExportResult",
    "OutputMode",
    "ExportBlob",
]
