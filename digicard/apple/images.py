# digicard/apple/images.py
"""
Pass image derivation.

Student photos arrive as WebP. The packaged pass needs PNG icons and
thumbnails at fixed sizes, so the photo is decoded once and each variant is
resampled independently from that decoded original.
"""

import io
import logging
from pathlib import Path
from typing import Dict, Tuple, Union

from PIL import Image, UnidentifiedImageError, features

from digicard.errors import ImageUnsupported

logger = logging.getLogger(__name__)

BASE_SIZE = 116

ORIGINAL_FILENAME = "original.png"

# filename -> (width, height), in archive order
PASS_IMAGE_SIZES: Dict[str, Tuple[int, int]] = {
    "icon.png": (BASE_SIZE, BASE_SIZE),
    "icon@2x.png": (BASE_SIZE * 2, BASE_SIZE * 2),
    "thumbnail.png": (BASE_SIZE, BASE_SIZE),
    "thumbnail@2x.png": (BASE_SIZE * 2, BASE_SIZE * 2),
}


def webp_supported() -> bool:
    """Whether the installed Pillow build can decode WebP."""
    return bool(features.check("webp"))


def decode_image(source: bytes) -> "Image.Image":
    """
    Decode source bytes into an RGBA bitmap.

    Raises:
        ImageUnsupported: If the bytes cannot be decoded, or they are WebP and
            this Pillow build lacks WebP support.
    """
    if source[:4] == b"RIFF" and source[8:12] == b"WEBP" and not webp_supported():
        raise ImageUnsupported("WebP support is not available in the installed Pillow build")

    try:
        img = Image.open(io.BytesIO(source))
        img.load()
    except (UnidentifiedImageError, OSError, SyntaxError, Image.DecompressionBombError) as e:
        # PIL plugins report truncated headers as SyntaxError
        raise ImageUnsupported(f"Failed to decode source image: {e}") from e

    return img.convert("RGBA")


def derive_pass_images(source: bytes, workdir: Union[str, Path]) -> Dict[str, Path]:
    """
    Write the decoded original and the four pass variants into workdir.

    Args:
        source: Encoded source photo
        workdir: Per-invocation directory for the PNG files

    Returns:
        Mapping of archive filename to written path, in PASS_IMAGE_SIZES order.

    Raises:
        ImageUnsupported: If the source cannot be decoded; nothing is written.
    """
    original = decode_image(source)
    workdir = Path(workdir)

    original.save(workdir / ORIGINAL_FILENAME, format="PNG")

    outputs: Dict[str, Path] = {}
    for filename, size in PASS_IMAGE_SIZES.items():
        path = workdir / filename
        original.resize(size, Image.Resampling.BILINEAR).save(path, format="PNG")
        outputs[filename] = path

    logger.debug(f"Derived {len(outputs)} pass images from {original.size[0]}x{original.size[1]} source")
    return outputs


def to_png(source: bytes) -> bytes:
    """Re-encode any decodable image (e.g. a favicon) as PNG."""
    img = decode_image(source)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def placeholder_png(size: Tuple[int, int] = (160, 50), color=(66, 133, 244)) -> bytes:
    """Solid PNG used when the logo cannot be fetched."""
    img = Image.new("RGBA", size, color=(*color, 255))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
