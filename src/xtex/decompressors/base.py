"""Base class for texture decompression"""
from abc import ABC, abstractmethod
import numpy as np
from ..errors import MalformedPayloadError


class TextureDecompressor(ABC):
    """Base class for texture decompression"""
    @abstractmethod
    def decompress(self, data: bytes, width: int, height: int) -> np.ndarray:
        """
        Decompress texture data to RGBA8 format

        Args:
            data: Texture payload (trailing bytes beyond the base level are ignored)
            width: Texture width in pixels
            height: Texture height in pixels

        Returns:
            numpy array of shape (height, width, 4) with dtype uint8 (RGBA)

        Raises:
            MalformedPayloadError: If the payload is too short for width x height
        """
        pass

    @staticmethod
    def _require_length(data: bytes, required: int, unit: str) -> None:
        """Raise MalformedPayloadError when data holds fewer than `required` bytes"""
        if len(data) < required:
            raise MalformedPayloadError(
                f"Payload holds {len(data)} bytes, {required} bytes of {unit} required"
            )
