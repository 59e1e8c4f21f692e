"""Main TEX file handler"""
import io
import struct
from typing import BinaryIO, Optional
import numpy as np

from .enums import TextureFormat
from .errors import LengthMismatchError, MalformedPayloadError, TexIOError, UnsupportedFormatError
from .headers import TEX_HEADER
from .decompressors import (
    TextureDecompressor,
    BC1Decompressor,
    BC3Decompressor,
    UncompressedDecompressor,
)


def _read_exact(stream: BinaryIO, size: int, what: str, name: Optional[str]) -> bytes:
    """Read exactly `size` bytes or raise TexIOError"""
    try:
        data = stream.read(size)
    except OSError as e:
        raise TexIOError(f"Failed to read {what}: {e}", path=name) from e
    if len(data) != size:
        raise TexIOError(f"Short read of {what}: expected {size} bytes, got {len(data)}", path=name)
    return data


def get_decompressor(texture_format: TextureFormat) -> TextureDecompressor:
    """
    Select the decompressor for a TEX format

    Raises:
        UnsupportedFormatError: For ACF, UNKNOWN and any other undecodable tag
    """
    if texture_format == TextureFormat.DXT1:
        return BC1Decompressor()
    elif texture_format == TextureFormat.DXT5:
        return BC3Decompressor()
    elif texture_format in UncompressedDecompressor.FORMAT_DESCRIPTORS:
        return UncompressedDecompressor(texture_format)
    raise UnsupportedFormatError(f"Unsupported format {texture_format.name}")


class TEX:
    """TEX texture container"""
    def __init__(self) -> None:
        self.header: TEX_HEADER = TEX_HEADER()
        self.data: bytes = b''  # Pixel payload, exactly header.data_size bytes
        self.name: Optional[str] = None  # Source path, for diagnostics

    def __str__(self) -> str:
        lines = [f"TEX File: {self.name}" if self.name else "TEX File"]
        lines.append(str(self.header))
        lines.append(f"  Payload: {len(self.data)} bytes")
        return "\n".join(lines)

    @classmethod
    def read_header(cls, stream: BinaryIO, name: Optional[str] = None) -> TEX_HEADER:
        """Read only the fixed-size header from a binary stream"""
        return TEX_HEADER.from_bytes(_read_exact(stream, TEX_HEADER.SIZE, "header", name))

    @classmethod
    def from_stream(cls, stream: BinaryIO, name: Optional[str] = None) -> 'TEX':
        """
        Read a TEX container from a binary stream

        Layout: [72-byte header][u32 payload length][payload]

        Raises:
            TexIOError: If the header, length prefix or payload is truncated
            LengthMismatchError: If the length prefix disagrees with header.data_size
        """
        tex = cls()
        tex.name = name
        tex.header = cls.read_header(stream, name)

        (length,) = struct.unpack('<I', _read_exact(stream, 4, "payload length", name))
        if length != tex.header.data_size:
            raise LengthMismatchError(
                f"Payload length {length} does not match header data size {tex.header.data_size}",
                path=name,
            )

        tex.data = _read_exact(stream, length, "payload", name)
        return tex

    @classmethod
    def from_bytes(cls, data: bytes, name: Optional[str] = None) -> 'TEX':
        """Read TEX from bytes"""
        return cls.from_stream(io.BytesIO(data), name)

    @classmethod
    def from_file(cls, path: str) -> 'TEX':
        """Read TEX from a file path"""
        try:
            f = open(path, 'rb')
        except OSError as e:
            raise TexIOError(f"Cannot open file: {e}", path=str(path)) from e
        with f:
            return cls.from_stream(f, str(path))

    def get_width(self) -> int:
        """Get the width of the texture in pixels"""
        return self.header.width

    def get_height(self) -> int:
        """Get the height of the texture in pixels"""
        return self.header.height

    def get_format(self) -> TextureFormat:
        """Get the pixel format of the texture"""
        return self.header.format

    def to_image(self) -> np.ndarray:
        """
        Decode the base level of the texture to a numpy array

        Returns:
            numpy array of shape (height, width, 4) with dtype uint8 (RGBA values 0-255)

        Raises:
            UnsupportedFormatError: If the format has no decompressor
            MalformedPayloadError: If the dimensions are empty or the payload is too short for them
        """
        width = self.header.width
        height = self.header.height

        if width == 0 or height == 0:
            raise MalformedPayloadError(f"Empty image dimensions {width}x{height}", path=self.name)

        try:
            decompressor = get_decompressor(self.header.format)
            rgba_data = decompressor.decompress(self.data, width, height)
        except (UnsupportedFormatError, MalformedPayloadError) as e:
            if e.path is None:
                e.path = self.name
            raise

        if rgba_data.shape != (height, width, 4):
            raise MalformedPayloadError(
                f"Decoder produced {rgba_data.shape}, expected {(height, width, 4)}", path=self.name
            )

        return rgba_data
