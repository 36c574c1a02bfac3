# Path: tests/test_descriptors.py
# Purpose: Verify descriptor extraction is deterministic, validated, and discriminative.
# Layer: tests.

import numpy as np
import pytest
from PIL import Image

from config import DescriptorSettings
from ris.descriptors import ColorEdgeDescriptor, ColorHistogramDescriptor, build_extractor
from ris.errors import DecodeError
from ris.search.metrics import tanimoto_distance

from .conftest import make_image


def _two_tone(left, right, size=64):
    pixels = np.zeros((size, size, 3), dtype=np.uint8)
    pixels[:, : size // 2] = left
    pixels[:, size // 2 :] = right
    return pixels


def test_cedd_dimension_and_levels(extractor):
    descriptor = extractor.extract(_two_tone((255, 0, 0), (0, 0, 255)))

    assert descriptor.shape == (144,)
    assert descriptor.dtype == np.float32
    assert set(np.unique(descriptor)).issubset(set(range(8)))
    assert descriptor.max() == 7


def test_cedd_is_deterministic(extractor):
    rng = np.random.default_rng(7)
    pixels = rng.integers(0, 256, size=(90, 120, 3), dtype=np.uint8)

    np.testing.assert_array_equal(extractor.extract(pixels), extractor.extract(pixels.copy()))


def test_cedd_unquantized_histogram_sums_to_one():
    rng = np.random.default_rng(3)
    pixels = rng.integers(0, 256, size=(50, 70, 3), dtype=np.uint8)

    descriptor = ColorEdgeDescriptor(quantize=False).extract(pixels)

    assert descriptor.sum() == pytest.approx(1.0, rel=1e-5)


def test_cedd_detects_vertical_edge():
    # One block whose left column is black and right column white: a vertical edge on a grey block.
    pixels = np.array([[0, 255], [0, 255]], dtype=np.uint8)

    descriptor = ColorEdgeDescriptor(grid=1).extract(pixels)

    vertical_grey = 3 * 24 + 1
    assert descriptor[vertical_grey] == 7
    assert descriptor.sum() == 7


def test_cedd_accepts_grayscale_rgba_and_tiny_images(extractor):
    rgb = _two_tone((10, 200, 30), (200, 10, 30))
    rgba = np.concatenate([rgb, np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)], axis=2)

    np.testing.assert_array_equal(extractor.extract(rgb), extractor.extract(rgba))
    assert extractor.extract(np.full((16, 16), 128, dtype=np.uint8)).shape == (144,)
    assert extractor.extract(np.zeros((1, 1, 3), dtype=np.uint8)).shape == (144,)


@pytest.mark.parametrize(
    "pixels",
    [
        np.zeros((0, 0, 3), dtype=np.uint8),
        np.zeros((4, 4, 2), dtype=np.uint8),
        np.zeros(12, dtype=np.uint8),
        np.array([["a", "b"], ["c", "d"]], dtype=object),
        None,
    ],
)
def test_cedd_rejects_malformed_input(extractor, pixels):
    with pytest.raises(DecodeError):
        extractor.extract(pixels)


def test_near_duplicates_are_closer_than_different_images(extractor, tmp_path):
    original = make_image(tmp_path / "original.png", (255, 0, 0), (0, 0, 255), size=128)
    with Image.open(original) as img:
        img.resize((120, 120)).save(tmp_path / "resized.png")
    different = make_image(tmp_path / "different.png", (0, 200, 0), (255, 255, 0), size=128)

    def describe(path):
        with Image.open(path) as img:
            return extractor.extract(np.asarray(img.convert("RGB")))

    probe = describe(original)
    batch = np.vstack([describe(tmp_path / "resized.png"), describe(different)])
    near, far = tanimoto_distance(batch, probe)

    assert near < far


def test_signature_reflects_parameters():
    assert ColorEdgeDescriptor().signature == "cedd:v1:grid=40:quantize=1:dim=144"
    assert ColorEdgeDescriptor(grid=20).signature != ColorEdgeDescriptor().signature
    assert ColorHistogramDescriptor(bins=16).signature == "color_histogram:v1:bins=16:dim=48"


def test_color_histogram_descriptor():
    descriptor = ColorHistogramDescriptor(bins=8).extract(_two_tone((255, 0, 0), (0, 0, 255)))

    assert descriptor.shape == (24,)
    assert descriptor.sum() == pytest.approx(1.0)
    # Half the pixels have red 255, half red 0.
    assert descriptor[0] == pytest.approx(0.5 / 3)
    assert descriptor[7] == pytest.approx(0.5 / 3)


def test_build_extractor_from_settings():
    assert isinstance(build_extractor(DescriptorSettings()), ColorEdgeDescriptor)
    histogram = build_extractor(DescriptorSettings(name="color_histogram", bins=16))
    assert isinstance(histogram, ColorHistogramDescriptor)
    assert histogram.dim == 48


def test_float_grids_are_on_unit_scale(extractor):
    dark = np.full((8, 8, 3), 5, dtype=np.uint8)
    white = np.full((8, 8, 3), 255, dtype=np.uint8)

    np.testing.assert_array_equal(extractor.extract(dark / 255.0), extractor.extract(dark))
    np.testing.assert_array_equal(extractor.extract(np.ones((8, 8, 3))), extractor.extract(white))
    # A float grid is never reinterpreted as 0..255, so 1.0 and 0.02 differ.
    assert not np.array_equal(
        extractor.extract(np.full((8, 8, 3), 0.02)), extractor.extract(np.full((8, 8, 3), 1.0))
    )


def test_bool_grids_are_scaled(extractor):
    mask = np.zeros((8, 8), dtype=bool)
    mask[:, 4:] = True

    np.testing.assert_array_equal(extractor.extract(mask), extractor.extract(mask.astype(np.uint8) * 255))
