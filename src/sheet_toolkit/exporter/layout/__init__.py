"""
Module: exporter.layout

Purpose:
    Measurement and page-break planning.

Key Functions:
    - measure_blocks(): Attach geometry to an assembled tree
    - plan_breaks(): Insert spacers and repeated headers
    - rasterize_document(): Draw the planned tree

Used By:
    - exporter.controller
"""

from .planner import plan_breaks, PlanResult, HeaderCluster
from .measurer import measure_blocks, rasterize_document

__all__ = [
    "plan_breaks",
    "PlanResult",
    "HeaderCluster",
    "measure_blocks",
    "rasterize_document",
]
