# digicard/apple/__init__.py
"""
Digicard Apple Module - Packaged-pass wallet

Builds pass definitions, derives the PNG assets from the student photo and
signs the resulting .pkpass archive.
"""

from digicard.apple.card import AppleCard, PassArchive, PassUpdateChannel, MIME_TYPE
from digicard.apple.images import derive_pass_images, PASS_IMAGE_SIZES
from digicard.apple.packager import PassPackager
from digicard.apple.passdef import build_pass_definition

__all__ = [
    "AppleCard",
    "PassArchive",
    "PassUpdateChannel",
    "PassPackager",
    "MIME_TYPE",
    "build_pass_definition",
    "derive_pass_images",
    "PASS_IMAGE_SIZES",
]
