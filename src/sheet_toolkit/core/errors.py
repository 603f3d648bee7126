"""
Module: core.errors

Purpose:
    Exception taxonomy for document export. Every pipeline stage raises
    its own subclass so callers can tell where an export aborted, while
    still catching everything through ExportError.

Key Classes:
    - ExportError: Base class for all export failures
    - AssemblyError: Malformed payload (missing name/price, bad numbers)
    - MeasurementTimeout: An image never settled within the wait budget
    - RasterizationError: Rendering surface failed to lay out or draw
    - CompositionError: PDF construction or output failed

Used By:
    - exporter.assembly, exporter.layout, exporter.surface, exporter.output
    - exporter.controller: Logs and re-raises
"""


class ExportError(Exception):
    """Base error for a failed export call."""
    pass


class AssemblyError(ExportError):
    """Payload could not be turned into a block tree."""
    pass


class MeasurementTimeout(ExportError):
    """Images did not settle before the measurement deadline."""

    def __init__(self, message: str, urls: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.urls = urls


class RasterizationError(ExportError):
    """Rendering surface failure during layout or rasterization."""
    pass


class CompositionError(ExportError):
    """Output document could not be built or written."""
    pass
