import base64

import numpy as np

from app.preprocessing.image_ops import decode_png
from app.preprocessing.models import EncodedImage, NormalizedImage


def encode(image: NormalizedImage) -> EncodedImage:
    """Base64-encode the PNG content. Providers add their own data prefix."""
    return EncodedImage(
        filename=image.filename,
        page_index=image.page_index,
        data=base64.b64encode(image.content).decode("ascii"),
    )


def decode(encoded: EncodedImage) -> np.ndarray:
    """Recover the greyscale pixel buffer from its transport encoding."""
    return decode_png(base64.b64decode(encoded.data))
