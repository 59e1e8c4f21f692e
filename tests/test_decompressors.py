import struct

import numpy as np
import pytest

from xtex import MalformedPayloadError, TextureFormat, UnsupportedFormatError, get_decompressor
from xtex.decompressors import BC1Decompressor, BC3Decompressor, UncompressedDecompressor


def decode(texture_format, data, width, height):
    return get_decompressor(texture_format).decompress(bytes(data), width, height)


def _pack_565(rgb):
    r, g, b = (int(round(int(c) * m / 255)) for c, m in zip(rgb, (31, 63, 31)))
    return (r << 11) | (g << 5) | b


def _expand_565(packed):
    r = (packed >> 11) & 0x1F
    g = (packed >> 5) & 0x3F
    b = packed & 0x1F
    return np.array([(r << 3) | (r >> 2), (g << 2) | (g >> 4), (b << 3) | (b >> 2)], dtype=np.int32)


def encode_bc1_block(pixels):
    """Minimal BC1 encoder: farthest pixel pair as endpoints, nearest palette index"""
    pixels = pixels.astype(np.int32)
    dist = ((pixels[:, None] - pixels[None]) ** 2).sum(-1)
    i, j = np.unravel_index(dist.argmax(), dist.shape)
    c0, c1 = _pack_565(pixels[i]), _pack_565(pixels[j])
    if c0 < c1:
        c0, c1 = c1, c0
    if c0 == c1:
        return struct.pack('<HHI', c0, c1, 0)

    e0, e1 = _expand_565(c0), _expand_565(c1)
    palette = np.array([e0, e1, (2 * e0 + e1) // 3, (e0 + 2 * e1) // 3])
    idx = ((pixels[:, None] - palette[None]) ** 2).sum(-1).argmin(1)
    bits = sum(int(k) << (2 * n) for n, k in enumerate(idx))
    return struct.pack('<HHI', c0, c1, bits)


def encode_bc3_block(pixels):
    """Minimal BC3 encoder: min/max alpha endpoints in 8-alpha mode plus a BC1 color block"""
    alpha = pixels[:, 3].astype(np.int32)
    a0, a1 = int(alpha.max()), int(alpha.min())
    levels = np.array([a0, a1] + [((7 - k) * a0 + k * a1) // 7 for k in range(1, 7)])
    idx = np.abs(alpha[:, None] - levels[None]).argmin(1)
    bits = sum(int(k) << (3 * n) for n, k in enumerate(idx))
    return bytes([a0, a1]) + bits.to_bytes(6, 'little') + encode_bc1_block(pixels[:, :3])


def encode_blocks(image, encode_block):
    height, width = image.shape[:2]
    out = b''
    for by in range(0, height, 4):
        for bx in range(0, width, 4):
            block = image[by:by + 4, bx:bx + 4].reshape(16, -1)
            out += encode_block(block)
    return out


def two_tone_image(endpoint_pairs):
    """8x8 RGB image; each 4x4 block lies on the line between its endpoint pair"""
    weights = np.array([0, 1, 2, 3] * 4) / 3.0
    weights[0], weights[15] = 0.0, 1.0
    image = np.zeros((8, 8, 3), dtype=np.uint8)
    for n, (e0, e1) in enumerate(endpoint_pairs):
        e0, e1 = np.array(e0, dtype=np.float64), np.array(e1, dtype=np.float64)
        block = np.rint(e0 + weights[:, None] * (e1 - e0)).astype(np.uint8)
        by, bx = divmod(n, 2)
        image[by * 4:by * 4 + 4, bx * 4:bx * 4 + 4] = block.reshape(4, 4, 3)
    return image


ENDPOINTS = [
    ((200, 40, 10), (20, 180, 240)),
    ((255, 255, 255), (0, 0, 0)),
    ((16, 96, 200), (240, 200, 32)),
    ((128, 0, 255), (0, 255, 64)),
]


# Raw formats

def test_rgb24_appends_opaque_alpha():
    out = decode(TextureFormat.RGB24, [10, 20, 30], 1, 1)
    assert out.tolist() == [[[10, 20, 30, 255]]]


def test_argb32_channel_permutation():
    out = decode(TextureFormat.ARGB32, [0xAA, 0x11, 0x22, 0x33], 1, 1)
    assert out.tolist() == [[[0x22, 0x11, 0xAA, 0x33]]]


@pytest.mark.parametrize("word, expected", [
    (0xF800, [255, 0, 0, 255]),
    (0x07E0, [0, 255, 0, 255]),
    (0x001F, [0, 0, 255, 255]),
    (0x0000, [0, 0, 0, 255]),
    ((16 << 11) | (32 << 5) | 1, [131, 129, 8, 255]),
])
def test_r5g6b5(word, expected):
    out = decode(TextureFormat.R5G6B5, struct.pack('<H', word), 1, 1)
    assert out.tolist() == [[expected]]


@pytest.mark.parametrize("word, expected", [
    (0xF000, [0, 0, 0, 255]),
    (0x0FFF, [255, 255, 255, 0]),
    (0x1234, [34, 51, 68, 17]),
])
def test_a4r4g4b4(word, expected):
    out = decode(TextureFormat.A4R4G4B4, struct.pack('<H', word), 1, 1)
    assert out.tolist() == [[expected]]


def test_raw_rows_are_row_major():
    data = bytes(range(2 * 3 * 3))
    out = decode(TextureFormat.RGB24, data, 3, 2)
    assert out.shape == (2, 3, 4)
    assert out[1, 0].tolist() == [9, 10, 11, 255]
    assert out[0, 2].tolist() == [6, 7, 8, 255]


def test_raw_trailing_partial_pixel_dropped():
    out = decode(TextureFormat.RGB24, [1, 2, 3, 4], 1, 1)
    assert out.tolist() == [[[1, 2, 3, 255]]]


def test_raw_extra_pixels_ignored():
    out = decode(TextureFormat.R5G6B5, struct.pack('<3H', 0xF800, 0x001F, 0x07E0), 1, 2)
    assert out.reshape(-1, 4).tolist() == [[255, 0, 0, 255], [0, 0, 255, 255]]


def test_uncompressed_rejects_block_formats():
    with pytest.raises(ValueError):
        UncompressedDecompressor(TextureFormat.DXT1)


# Block formats

def test_bc1_four_color_block():
    block = struct.pack('<HH', 0xF800, 0x001F) + bytes([0xE4] * 4)
    out = decode(TextureFormat.DXT1, block, 4, 4)
    for y in range(4):
        assert out[y].tolist() == [
            [255, 0, 0, 255],
            [0, 0, 255, 255],
            [170, 0, 85, 255],
            [85, 0, 170, 255],
        ]


def test_bc1_three_color_block_has_transparent_black():
    block = struct.pack('<HH', 0x001F, 0xF800) + bytes([0xE4] * 4)
    out = decode(TextureFormat.DXT1, block, 4, 4)
    assert out[0].tolist() == [
        [0, 0, 255, 255],
        [255, 0, 0, 255],
        [127, 0, 127, 255],
        [0, 0, 0, 0],
    ]


def test_bc1_crops_partial_blocks():
    red = struct.pack('<HHI', 0xF800, 0x0000, 0)
    blue = struct.pack('<HHI', 0x001F, 0x0000, 0)
    out = decode(TextureFormat.DXT1, red + blue, 5, 3)
    assert out.shape == (3, 5, 4)
    assert (out[:, :4] == [255, 0, 0, 255]).all()
    assert (out[:, 4] == [0, 0, 255, 255]).all()


def test_bc3_alpha_block():
    alpha_bits = sum(k << (3 * k) for k in range(8)) | sum(k << (3 * (k + 8)) for k in range(8))
    block = bytes([255, 0]) + alpha_bits.to_bytes(6, 'little') + struct.pack('<HHI', 0xFFFF, 0, 0)
    out = decode(TextureFormat.DXT5, block, 4, 4)
    expected = [255, 0, 218, 182, 145, 109, 72, 36]
    assert out[:, :, 3].reshape(-1).tolist() == expected * 2
    assert (out[:, :, :3] == 255).all()


def test_bc3_six_alpha_mode():
    alpha_bits = sum(k << (3 * k) for k in range(8))
    block = bytes([0, 255]) + alpha_bits.to_bytes(6, 'little') + struct.pack('<HHI', 0, 0, 0)
    out = decode(TextureFormat.DXT5, block, 4, 4)
    assert out[:2, :, 3].reshape(-1).tolist() == [0, 255, 51, 102, 153, 204, 0, 255]


def test_bc1_round_trip_within_tolerance():
    image = two_tone_image(ENDPOINTS)
    data = encode_blocks(image, encode_bc1_block)
    assert len(data) == 4 * BC1Decompressor.BLOCK_SIZE

    out = decode(TextureFormat.DXT1, data, 8, 8)
    diff = np.abs(out[:, :, :3].astype(np.int32) - image.astype(np.int32))
    assert diff.max() <= 8
    assert (out[:, :, 3] == 255).all()


def test_bc3_round_trip_within_tolerance():
    rgb = two_tone_image(ENDPOINTS)
    levels = np.array([255, 0, 218, 182, 145, 109, 72, 36], dtype=np.uint8)
    # Every block holds all eight levels of the 255/0 alpha palette
    alpha = np.tile(levels[np.arange(16) % 8].reshape(4, 4), (2, 2))[:, :, None]
    image = np.concatenate([rgb, alpha], axis=2)
    data = encode_blocks(image, encode_bc3_block)
    assert len(data) == 4 * BC3Decompressor.BLOCK_SIZE

    out = decode(TextureFormat.DXT5, data, 8, 8)
    diff = np.abs(out[:, :, :3].astype(np.int32) - rgb.astype(np.int32))
    assert diff.max() <= 8
    assert (out[:, :, 3] == image[:, :, 3]).all()


# Shared contract

PAYLOAD_SIZES = {
    TextureFormat.DXT1: lambda w, h: ((w + 3) // 4) * ((h + 3) // 4) * 8,
    TextureFormat.DXT5: lambda w, h: ((w + 3) // 4) * ((h + 3) // 4) * 16,
    TextureFormat.RGB24: lambda w, h: w * h * 3,
    TextureFormat.ARGB32: lambda w, h: w * h * 4,
    TextureFormat.R5G6B5: lambda w, h: w * h * 2,
    TextureFormat.A4R4G4B4: lambda w, h: w * h * 2,
}


@pytest.mark.parametrize("texture_format", list(PAYLOAD_SIZES))
@pytest.mark.parametrize("width, height", [(1, 1), (4, 4), (5, 3), (16, 9)])
def test_decoded_pixel_count(texture_format, width, height):
    size = PAYLOAD_SIZES[texture_format](width, height)
    data = bytes((n * 37) & 0xFF for n in range(size))
    out = decode(texture_format, data, width, height)
    assert out.shape == (height, width, 4)
    assert out.dtype == np.uint8
    assert out.reshape(-1, 4).shape[0] == width * height


@pytest.mark.parametrize("texture_format", list(PAYLOAD_SIZES))
def test_short_payload_is_malformed(texture_format):
    size = PAYLOAD_SIZES[texture_format](8, 8)
    with pytest.raises(MalformedPayloadError):
        decode(texture_format, b'\x00' * (size - 1), 8, 8)


@pytest.mark.parametrize("texture_format", [TextureFormat.ACF, TextureFormat.UNKNOWN])
def test_unsupported_formats(texture_format):
    with pytest.raises(UnsupportedFormatError):
        get_decompressor(texture_format)
