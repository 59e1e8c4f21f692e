"""Decompressor for the raw (uncompressed) TEX pixel formats"""
from dataclasses import dataclass
import numpy as np
from .base import TextureDecompressor
from ..enums import TextureFormat


@dataclass
class FormatDescriptor:
    """Descriptor for raw format properties"""
    bytes_per_pixel: int
    channels: str  # On-disk channel layout, e.g. 'RGB', 'ARGB', 'RGB565'


class UncompressedDecompressor(TextureDecompressor):
    """Decompressor for raw TEX formats

    Trailing bytes that do not form a whole pixel are dropped, and bytes past
    the first width x height pixels (mipmap or frame data) are ignored.
    """

    FORMAT_DESCRIPTORS = {
        TextureFormat.RGB24: FormatDescriptor(3, 'RGB'),
        TextureFormat.ARGB32: FormatDescriptor(4, 'ARGB'),
        TextureFormat.R5G6B5: FormatDescriptor(2, 'RGB565'),
        TextureFormat.A4R4G4B4: FormatDescriptor(2, 'ARGB4444'),
    }

    def __init__(self, texture_format: TextureFormat):
        """
        Initialize raw decompressor

        Args:
            texture_format: TEX format enum value
        """
        self.texture_format = texture_format
        self.descriptor = self.FORMAT_DESCRIPTORS.get(texture_format)
        if self.descriptor is None:
            raise ValueError(f"Unsupported uncompressed format: {texture_format!r}")

    def decompress(self, data: bytes, width: int, height: int) -> np.ndarray:
        bpp = self.descriptor.bytes_per_pixel
        pixel_count = width * height
        self._require_length(data, pixel_count * bpp, f"{pixel_count} {self.texture_format.name} pixels")

        raw = np.frombuffer(data[:pixel_count * bpp], dtype=np.uint8)

        if self.texture_format == TextureFormat.RGB24:
            rgba = self._decompress_rgb24(raw)
        elif self.texture_format == TextureFormat.ARGB32:
            rgba = self._decompress_argb32(raw)
        elif self.texture_format == TextureFormat.R5G6B5:
            rgba = self._decompress_r5g6b5(raw.view('<u2'))
        else:
            rgba = self._decompress_a4r4g4b4(raw.view('<u2'))

        return rgba.reshape(height, width, 4)

    @staticmethod
    def _decompress_rgb24(raw: np.ndarray) -> np.ndarray:
        """Append an opaque alpha channel to packed RGB triples"""
        rgb = raw.reshape(-1, 3)
        alpha = np.full((rgb.shape[0], 1), 255, dtype=np.uint8)
        return np.concatenate([rgb, alpha], axis=1)

    @staticmethod
    def _decompress_argb32(raw: np.ndarray) -> np.ndarray:
        """Reorder on-disk [a, r, g, b] groups as [g, r, a, b]

        Existing assets only display correctly with this permutation, even
        though it does not match the channel names.
        """
        argb = raw.reshape(-1, 4)
        return argb[:, [2, 1, 0, 3]]

    @staticmethod
    def _decompress_r5g6b5(pixels: np.ndarray) -> np.ndarray:
        """Decompress little-endian R5G6B5 words"""
        r = ((pixels >> 11) & 0x1F).astype(np.float32)
        g = ((pixels >> 5) & 0x3F).astype(np.float32)
        b = (pixels & 0x1F).astype(np.float32)

        # Rescale with multiply-then-truncate
        r = (r * 255.0 / 31.0).astype(np.uint8)
        g = (g * 255.0 / 63.0).astype(np.uint8)
        b = (b * 255.0 / 31.0).astype(np.uint8)
        a = np.full_like(r, 255, dtype=np.uint8)

        return np.stack([r, g, b, a], axis=-1)

    @staticmethod
    def _decompress_a4r4g4b4(pixels: np.ndarray) -> np.ndarray:
        """Decompress little-endian A4R4G4B4 words to RGBA"""
        a = ((pixels >> 12) & 0xF).astype(np.float32)
        r = ((pixels >> 8) & 0xF).astype(np.float32)
        g = ((pixels >> 4) & 0xF).astype(np.float32)
        b = (pixels & 0xF).astype(np.float32)

        a = (a * 255.0 / 15.0).astype(np.uint8)
        r = (r * 255.0 / 15.0).astype(np.uint8)
        g = (g * 255.0 / 15.0).astype(np.uint8)
        b = (b * 255.0 / 15.0).astype(np.uint8)

        return np.stack([r, g, b, a], axis=-1)
