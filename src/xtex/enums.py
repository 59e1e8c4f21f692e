"""TEX enumerations"""
from enum import IntEnum


class TextureFormat(IntEnum):
    """Pixel encoding tag stored in the TEX header"""
    DXT1 = 0
    DXT5 = 1
    RGB24 = 2
    ARGB32 = 3
    R5G6B5 = 4
    A4R4G4B4 = 5
    ACF = 6
    UNKNOWN = 0xFFFFFFFF

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN
