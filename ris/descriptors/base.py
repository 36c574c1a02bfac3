# Path: ris/descriptors/base.py
# Purpose: Define the DescriptorExtractor interface that turns pixel grids into feature vectors.
# Layer: ris/descriptors.
# Details: Provides input validation shared by every extractor and the signature used for consistency checks.

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from ris.errors import DecodeError


class DescriptorExtractor(ABC):
    """Abstract base class for all global image descriptors.

    Implementations must be deterministic and free of side effects: the same
    pixels always produce the same vector, at indexing time and at query time.

    The pixel scale follows the dtype: integer grids are 0..255, floating
    point grids are 0..1 and boolean grids are 0/1. Values outside the scale
    are clipped.
    """

    name: str
    version: str = "1"
    dim: int

    @abstractmethod
    def extract(self, pixels: np.ndarray) -> np.ndarray:
        """Return a float32 descriptor of length :attr:`dim` for an RGB pixel grid."""

    @property
    def signature(self) -> str:
        """Identify the extractor and every parameter that changes its output."""

        params = ":".join(f"{key}={value}" for key, value in self._signature_params())
        parts = [self.name, f"v{self.version}"]
        if params:
            parts.append(params)
        parts.append(f"dim={self.dim}")
        return ":".join(parts)

    def _signature_params(self) -> list[tuple[str, object]]:
        return []

    @staticmethod
    def _as_rgb(pixels: np.ndarray) -> np.ndarray:
        """Validate a pixel grid and return it as an ``H x W x 3`` float64 array in 0..255.

        Floating point and boolean grids are scaled by 255 whatever their values.
        """

        if pixels is None:
            raise DecodeError("No pixel data.")
        array = np.asarray(pixels)
        if array.dtype == object or not (
            np.issubdtype(array.dtype, np.integer)
            or np.issubdtype(array.dtype, np.floating)
            or array.dtype == np.bool_
        ):
            raise DecodeError(f"Unsupported pixel dtype {array.dtype}.")
        if array.size == 0:
            raise DecodeError("Pixel grid is empty.")

        if array.ndim == 2:
            array = np.repeat(array[:, :, None], 3, axis=2)
        elif array.ndim == 3 and array.shape[2] == 4:
            array = array[:, :, :3]
        elif array.ndim == 3 and array.shape[2] == 1:
            array = np.repeat(array, 3, axis=2)
        if array.ndim != 3 or array.shape[2] != 3:
            raise DecodeError(f"Malformed pixel grid with shape {array.shape}.")

        rgb = array.astype(np.float64)
        if not np.all(np.isfinite(rgb)):
            raise DecodeError("Pixel grid contains non-finite values.")
        if np.issubdtype(array.dtype, np.floating) or array.dtype == np.bool_:
            rgb = rgb * 255.0
        return np.clip(rgb, 0.0, 255.0)
