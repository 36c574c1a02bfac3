# Path: ris/imaging.py
# Purpose: Decode image files into RGB pixel grids for descriptor extraction.
# Layer: ris.
# Details: Wraps Pillow; every failure to read or decode a file surfaces as DecodeError.

from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from ris.errors import DecodeError


class ImageLoader:
    """Open image files with Pillow and return ``H x W x 3`` uint8 arrays."""

    def __init__(self, max_dimension: Optional[int] = None) -> None:
        self.max_dimension = max_dimension

    def load(self, path: Path | str) -> np.ndarray:
        """Decode ``path``, downscaling it first when it exceeds ``max_dimension``."""

        try:
            with Image.open(path) as img:
                img.load()
                rgb = img.convert("RGB")
        except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
            raise DecodeError(f"Cannot decode image {path}: {exc}") from exc
        except (OSError, ValueError, SyntaxError) as exc:
            raise DecodeError(f"Cannot read image {path}: {exc}") from exc

        if self.max_dimension and max(rgb.size) > self.max_dimension:
            rgb.thumbnail((self.max_dimension, self.max_dimension))
        pixels = np.asarray(rgb, dtype=np.uint8)
        if pixels.size == 0:
            raise DecodeError(f"Image {path} has no pixels.")
        return pixels


__all__ = ["ImageLoader"]
