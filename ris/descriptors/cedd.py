# Path: ris/descriptors/cedd.py
# Purpose: Provide the default color and edge directivity descriptor (144 floats).
# Layer: ris/descriptors.
# Details: Blocks are classified by MPEG-7 edge filters (6 texture classes) and a 24-color palette.

from __future__ import annotations

import numpy as np

from .base import DescriptorExtractor

TEXTURE_CLASSES = 6
COLOR_CLASSES = 24

# Strongest edge response below this marks a block as non-edge.
NON_EDGE_THRESHOLD = 14.0
# Normalised response needed for non-directional, horizontal, vertical, 45 and 135 degree classes.
EDGE_THRESHOLDS = np.array([0.68, 0.98, 0.98, 0.98, 0.98])

# Upper hue bounds (degrees) of red, orange, yellow, green, cyan, blue and magenta; red wraps at 345.
HUE_EDGES = np.array([15.0, 45.0, 75.0, 165.0, 195.0, 270.0, 345.0])
BLACK_VALUE = 0.15
GREY_SATURATION = 0.15
WHITE_VALUE = 0.75
DARK_VALUE = 0.45
LIGHT_SATURATION = 0.5

QUANTIZATION_LEVELS = np.array([0.0, 0.0125, 0.03, 0.06, 0.1, 0.16, 0.25, 0.4])


class ColorEdgeDescriptor(DescriptorExtractor):
    """Histogram of (texture class, color class) pairs over a grid of image blocks.

    Bin ``texture * 24 + color`` counts the blocks of that color showing that
    texture. A block with edges may fall into several texture classes. The
    histogram is normalised to unit sum and, when ``quantize`` is set, mapped
    to the integer levels 0..7.
    """

    name = "cedd"
    version = "1"
    dim = TEXTURE_CLASSES * COLOR_CLASSES

    def __init__(self, grid: int = 40, quantize: bool = True) -> None:
        self.grid = grid
        self.quantize = quantize

    def extract(self, pixels: np.ndarray) -> np.ndarray:
        rgb = self._as_rgb(pixels)
        height, width = rgb.shape[:2]
        if height < 2 or width < 2:
            rgb = np.repeat(np.repeat(rgb, 2 if height < 2 else 1, axis=0), 2 if width < 2 else 1, axis=1)
            height, width = rgb.shape[:2]

        blocks = max(1, min(self.grid, height // 2, width // 2))
        sub_means = self._cell_means(rgb, 2 * blocks)
        gray = sub_means @ np.array([0.299, 0.587, 0.114])
        block_colors = (
            sub_means[0::2, 0::2] + sub_means[0::2, 1::2] + sub_means[1::2, 0::2] + sub_means[1::2, 1::2]
        ) / 4.0

        textures = self._texture_masks(gray)
        colors = self._color_classes(block_colors).ravel()

        hist = np.zeros(self.dim, dtype=np.float64)
        for texture, mask in enumerate(textures):
            start = texture * COLOR_CLASSES
            hist[start:start + COLOR_CLASSES] = np.bincount(colors[mask.ravel()], minlength=COLOR_CLASSES)

        hist /= hist.sum()
        if self.quantize:
            hist = np.searchsorted(QUANTIZATION_LEVELS, hist, side="right") - 1
        return hist.astype(np.float32)

    def _signature_params(self) -> list[tuple[str, object]]:
        return [("grid", self.grid), ("quantize", int(self.quantize))]

    @staticmethod
    def _cell_means(rgb: np.ndarray, cells: int) -> np.ndarray:
        """Average color of each cell of a ``cells x cells`` partition of the image."""

        height, width = rgb.shape[:2]
        rows = (np.arange(cells + 1) * height) // cells
        cols = (np.arange(cells + 1) * width) // cells
        sums = np.add.reduceat(np.add.reduceat(rgb, rows[:-1], axis=0), cols[:-1], axis=1)
        counts = np.outer(np.diff(rows), np.diff(cols))[:, :, None]
        return sums / counts

    @staticmethod
    def _texture_masks(gray: np.ndarray) -> np.ndarray:
        """Return a ``6 x blocks x blocks`` boolean array of texture memberships."""

        top_left = gray[0::2, 0::2]
        top_right = gray[0::2, 1::2]
        bottom_left = gray[1::2, 0::2]
        bottom_right = gray[1::2, 1::2]
        root2 = np.sqrt(2.0)

        responses = np.abs(
            np.stack(
                [
                    2.0 * top_left - 2.0 * top_right - 2.0 * bottom_left + 2.0 * bottom_right,
                    top_left + top_right - bottom_left - bottom_right,
                    top_left - top_right + bottom_left - bottom_right,
                    root2 * top_left - root2 * bottom_right,
                    root2 * top_right - root2 * bottom_left,
                ]
            )
        )
        strongest = responses.max(axis=0)
        non_edge = strongest < NON_EDGE_THRESHOLD
        normalised = responses / np.where(strongest > 0, strongest, 1.0)
        edges = (normalised >= EDGE_THRESHOLDS[:, None, None]) & ~non_edge
        return np.concatenate([non_edge[None], edges], axis=0)

    @staticmethod
    def _color_classes(rgb: np.ndarray) -> np.ndarray:
        """Map block colors to the 24-entry palette."""

        unit = rgb / 255.0
        red, green, blue = unit[..., 0], unit[..., 1], unit[..., 2]
        cmax = unit.max(axis=-1)
        delta = cmax - unit.min(axis=-1)
        saturation = np.where(cmax > 0, delta / np.where(cmax > 0, cmax, 1.0), 0.0)
        safe = np.where(delta > 0, delta, 1.0)
        hue = 60.0 * np.select(
            [cmax == red, cmax == green],
            [((green - blue) / safe) % 6.0, (blue - red) / safe + 2.0],
            (red - green) / safe + 4.0,
        )

        hue_index = np.digitize(hue, HUE_EDGES) % 7
        shade = np.where(cmax < DARK_VALUE, 0, np.where(saturation < LIGHT_SATURATION, 2, 1))
        chromatic = 3 + hue_index * 3 + shade
        achromatic = np.where(cmax < WHITE_VALUE, 1, 2)
        return np.where(
            cmax < BLACK_VALUE, 0, np.where(saturation < GREY_SATURATION, achromatic, chromatic)
        ).astype(np.intp)
