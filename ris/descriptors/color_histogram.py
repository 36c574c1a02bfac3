# Path: ris/descriptors/color_histogram.py
# Purpose: Provide a plain per-channel RGB histogram descriptor.
# Layer: ris/descriptors.
# Details: Cheap alternative to the color/edge descriptor; L1-normalised, 3 * bins floats.

from __future__ import annotations

import numpy as np

from .base import DescriptorExtractor


class ColorHistogramDescriptor(DescriptorExtractor):
    """Concatenated R, G and B histograms normalised to unit sum."""

    name = "color_histogram"
    version = "1"

    def __init__(self, bins: int = 32) -> None:
        self.bins = bins
        self.dim = 3 * bins

    def extract(self, pixels: np.ndarray) -> np.ndarray:
        rgb = self._as_rgb(pixels)
        edges = np.linspace(0.0, 256.0, self.bins + 1)
        hists = [np.histogram(rgb[:, :, ch], bins=edges)[0] for ch in range(3)]
        hist = np.concatenate(hists).astype(np.float64)
        total = hist.sum()
        if total > 0:
            hist /= total
        return hist.astype(np.float32)

    def _signature_params(self) -> list[tuple[str, object]]:
        return [("bins", self.bins)]
