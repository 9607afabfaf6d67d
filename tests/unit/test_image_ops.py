import numpy as np
import pytest

from app.preprocessing.exceptions import ImageDecodeError
from app.preprocessing.image_ops import (
    crop_vertically,
    decode_image,
    decode_png,
    encode_png,
    to_greyscale,
)


class TestCropVertically:
    def test_keeps_rows_between_fractions(self, rgb_pixels: np.ndarray) -> None:
        cropped = crop_vertically(rgb_pixels, 0.2, 0.8)

        assert cropped.shape == (6, 4, 3)
        assert cropped[0, 0, 0] == rgb_pixels[2, 0, 0]
        assert cropped[-1, 0, 0] == rgb_pixels[7, 0, 0]

    def test_bounds_are_floored(self) -> None:
        pixels = np.zeros((7, 2, 3), dtype=np.uint8)

        cropped = crop_vertically(pixels, 0.5, 0.9)

        # floor(3.5) = 3, floor(6.3) = 6
        assert cropped.shape[0] == 3

    def test_full_window_keeps_everything(self, rgb_pixels: np.ndarray) -> None:
        assert crop_vertically(rgb_pixels, 0.0, 1.0).shape == rgb_pixels.shape


class TestToGreyscale:
    def test_applies_luma_weights(self) -> None:
        pixels = np.array([[[255, 0, 0], [0, 255, 0], [0, 0, 255], [10, 20, 30]]], dtype=np.uint8)

        grey = to_greyscale(pixels)

        assert grey.dtype == np.uint8
        assert grey.shape == (1, 4)
        assert grey.tolist() == [[76, 150, 29, 18]]

    def test_is_idempotent(self, rgb_pixels: np.ndarray) -> None:
        grey = to_greyscale(rgb_pixels)

        assert np.array_equal(to_greyscale(grey), grey)

    def test_white_stays_white(self) -> None:
        pixels = np.full((2, 2, 3), 255, dtype=np.uint8)

        assert to_greyscale(pixels).tolist() == [[255, 255], [255, 255]]


class TestDecodeImage:
    def test_decodes_png_to_rgb(self, png_bytes: bytes, rgb_pixels: np.ndarray) -> None:
        decoded = decode_image(png_bytes)

        assert np.array_equal(decoded, rgb_pixels)

    def test_raises_on_garbage(self) -> None:
        with pytest.raises(ImageDecodeError):
            decode_image(b"not an image")


class TestPngEncoding:
    def test_round_trip_is_lossless(self, rgb_pixels: np.ndarray) -> None:
        grey = to_greyscale(rgb_pixels)

        data = encode_png(grey)

        assert data.startswith(b"\x89PNG")
        assert np.array_equal(decode_png(data), grey)
