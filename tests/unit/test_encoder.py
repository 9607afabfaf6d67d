import base64

import numpy as np

from app.preprocessing.encoder import decode, encode
from app.preprocessing.image_ops import encode_png
from app.preprocessing.models import NormalizedImage


def _make_image() -> NormalizedImage:
    pixels = np.arange(12, dtype=np.uint8).reshape(3, 4)
    return NormalizedImage(
        filename="p_page1.png",
        source_filename="p.pdf",
        page_index=1,
        pixels=pixels,
        content=encode_png(pixels),
    )


class TestEncode:
    def test_has_no_data_uri_prefix(self) -> None:
        encoded = encode(_make_image())

        assert not encoded.data.startswith("data:")
        assert encoded.mime_type == "image/png"

    def test_is_plain_base64_of_png(self) -> None:
        image = _make_image()

        encoded = encode(image)

        assert base64.b64decode(encoded.data) == image.content
        assert encoded.filename == "p_page1.png"
        assert encoded.page_index == 1

    def test_decode_recovers_pixels(self) -> None:
        image = _make_image()

        assert np.array_equal(decode(encode(image)), image.pixels)
