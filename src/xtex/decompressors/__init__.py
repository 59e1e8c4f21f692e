"""Texture decompressor implementations"""
from .base import TextureDecompressor
from .bc1 import BC1Decompressor
from .bc3 import BC3Decompressor
from .uncompressed import UncompressedDecompressor

__all__ = [
    'TextureDecompressor',
    'BC1Decompressor',
    'BC3Decompressor',
    'UncompressedDecompressor',
]
