import struct

import pytest


def pack_header(texture_format, width, height, data_size, mipmap_count=1,
                extra_frame_count=0, frame_cycle=0, resource_tag=0x20584554, version=1):
    """Pack a 72-byte TEX header"""
    return (
        struct.pack('<8I', resource_tag, version, 72 + 4 + data_size, int(texture_format),
                    data_size, width, height, mipmap_count)
        + struct.pack('<2H', extra_frame_count, frame_cycle)
        + struct.pack('<9I', *range(9))
    )


def pack_tex(texture_format, width, height, payload, length=None, **kwargs):
    """Pack a complete TEX file; `length` overrides the payload length prefix"""
    header = pack_header(texture_format, width, height, len(payload), **kwargs)
    prefix = struct.pack('<I', len(payload) if length is None else length)
    return header + prefix + payload


@pytest.fixture
def write_tex(tmp_path):
    """Write a TEX file below tmp_path and return its path"""
    def _write(relative, texture_format, width, height, payload, **kwargs):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(pack_tex(texture_format, width, height, payload, **kwargs))
        return path
    return _write
