"""xtex - TEX texture container reader and PNG converter"""

__version__ = "0.1.0"

# Main TEX class
from .tex import TEX, get_decompressor

# Header structures
from .headers import TEX_HEADER

# Enumerations
from .enums import TextureFormat

# Errors
from .errors import (
    TexError,
    TexIOError,
    LengthMismatchError,
    UnsupportedFormatError,
    MalformedPayloadError,
)

# Batch conversion
from .pipeline import (
    ConversionResult,
    ConversionStatus,
    ConversionSummary,
    convert_directory,
    convert_file,
    iter_textures,
    output_path_for,
)

# CLI entry point
from .cli import main

__all__ = [
    '__version__',
    'TEX',
    'get_decompressor',
    'TEX_HEADER',
    'TextureFormat',
    'TexError',
    'TexIOError',
    'LengthMismatchError',
    'UnsupportedFormatError',
    'MalformedPayloadError',
    'ConversionResult',
    'ConversionStatus',
    'ConversionSummary',
    'convert_directory',
    'convert_file',
    'iter_textures',
    'output_path_for',
    'main',
]
