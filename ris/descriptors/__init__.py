# Path: ris/descriptors/__init__.py
# Purpose: Package initializer for descriptor extractors.
# Layer: ris/descriptors.
# Details: Exposes the extractor interface, reference implementations, and a settings-driven factory.

from __future__ import annotations

from typing import TYPE_CHECKING

from ris.errors import InvalidArgument

from .base import DescriptorExtractor
from .cedd import ColorEdgeDescriptor
from .color_histogram import ColorHistogramDescriptor

if TYPE_CHECKING:
    from config import DescriptorSettings


def build_extractor(settings: "DescriptorSettings") -> DescriptorExtractor:
    """Instantiate the extractor named in the descriptor settings."""

    if settings.name == ColorEdgeDescriptor.name:
        return ColorEdgeDescriptor(grid=settings.grid, quantize=settings.quantize)
    if settings.name == ColorHistogramDescriptor.name:
        return ColorHistogramDescriptor(bins=settings.bins)
    raise InvalidArgument(f"Unknown descriptor: {settings.name}")


__all__ = ["DescriptorExtractor", "ColorEdgeDescriptor", "ColorHistogramDescriptor", "build_extractor"]
