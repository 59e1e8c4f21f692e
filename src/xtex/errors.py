"""Exceptions raised while reading and decoding TEX files"""
from typing import Optional


class TexError(Exception):
    """Base class for per-file TEX failures"""
    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class TexIOError(TexError, OSError):
    """Short or failed read of the header, length prefix or payload"""


class LengthMismatchError(TexError, ValueError):
    """Length prefix disagrees with the header's data_size"""


class UnsupportedFormatError(TexError, NotImplementedError):
    """Format tag is not in the decodable set"""


class MalformedPayloadError(TexError, ValueError):
    """Payload too short for the declared dimensions"""
