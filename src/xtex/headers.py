"""TEX header structure"""
import struct
from typing import List
from .enums import TextureFormat


class TEX_HEADER:
    """TEX Header structure (72 bytes)"""

    SIZE = 72

    def __init__(self) -> None:
        self.resource_tag: int = 0  # Resource identification tag
        self.version: int = 0  # Container version
        self.container_size: int = 0  # Declared total size (informational)
        self.format: TextureFormat = TextureFormat.UNKNOWN  # Pixel encoding
        self.format_code: int = TextureFormat.UNKNOWN.value  # Raw on-disk format ordinal
        self.data_size: int = 0  # Exact payload length in bytes
        self.width: int = 0  # Width of surface in pixels
        self.height: int = 0  # Height of surface in pixels
        self.mipmap_count: int = 0  # Number of mipmap levels
        self.extra_frame_count: int = 0  # Extra animation frames
        self.frame_cycle: int = 0  # Animation frame cycle
        self.reserved: List[int] = [0] * 9  # Reserved (9 DWORDs)

    def __str__(self) -> str:
        lines = ["TEX Header:"]
        lines.append(f"  Resource Tag: 0x{self.resource_tag:08X}")
        lines.append(f"  Version: {self.version}")
        lines.append(f"  Dimensions: {self.width}x{self.height}")
        if self.format is TextureFormat.UNKNOWN:
            lines.append(f"  Format: UNKNOWN (0x{self.format_code:08X})")
        else:
            lines.append(f"  Format: {self.format.name} ({self.format.value})")
        lines.append(f"  Data Size: {self.data_size} bytes")
        lines.append(f"  Container Size: {self.container_size} bytes")
        if self.mipmap_count > 0:
            lines.append(f"  Mipmap Levels: {self.mipmap_count}")
        if self.is_animated():
            lines.append(f"  Extra Frames: {self.extra_frame_count} (cycle {self.frame_cycle})")
        return "\n".join(lines)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'TEX_HEADER':
        """Read TEX_HEADER from exactly 72 bytes of data"""
        if len(data) != cls.SIZE:
            raise ValueError(f"Expected {cls.SIZE} bytes for TEX_HEADER, got {len(data)}")

        header = cls()

        # Identification fields and the first six DWORDs of the header body
        values = struct.unpack_from('<8I', data, 0)
        header.resource_tag = values[0]
        header.version = values[1]
        header.container_size = values[2]
        header.format_code = values[3]
        header.format = TextureFormat(values[3])
        header.data_size = values[4]
        header.width = values[5]
        header.height = values[6]
        header.mipmap_count = values[7]

        # Frame info (2 WORDs starting at offset 32)
        header.extra_frame_count, header.frame_cycle = struct.unpack_from('<2H', data, 32)

        # Reserved tail (9 DWORDs starting at offset 36)
        header.reserved = list(struct.unpack_from('<9I', data, 36))

        return header

    def is_animated(self) -> bool:
        """Check whether the texture declares extra animation frames"""
        return self.extra_frame_count > 0

    def has_mipmaps(self) -> bool:
        """Check whether the texture declares mipmap levels beyond the base level"""
        return self.mipmap_count > 1
