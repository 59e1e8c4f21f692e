"""Batch conversion of TEX files to PNG"""
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, List, Optional

import imageio.v3 as iio
import numpy as np

from .errors import LengthMismatchError, TexError, TexIOError
from .tex import TEX

logger = logging.getLogger(__name__)

ImageWriter = Callable[[str, np.ndarray], None]


class ConversionStatus(Enum):
    EMITTED = "emitted"
    SKIPPED = "skipped"  # Length mismatch, unsupported or malformed payload
    FAILED = "failed"  # I/O errors and writer errors


@dataclass
class ConversionResult:
    """Outcome of converting a single TEX file"""
    source: str
    status: ConversionStatus
    destination: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class ConversionSummary:
    """Outcome of a batch conversion"""
    results: List[ConversionResult] = field(default_factory=list)

    def count(self, status: ConversionStatus) -> int:
        return sum(1 for result in self.results if result.status is status)

    @property
    def emitted(self) -> int:
        return self.count(ConversionStatus.EMITTED)

    @property
    def skipped(self) -> int:
        return self.count(ConversionStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(ConversionStatus.FAILED)


def _write_png(path: str, image: np.ndarray) -> None:
    iio.imwrite(path, image)


def iter_textures(root: str, suffix: str = ".tex", logger: logging.Logger = logger) -> Iterator[str]:
    """
    Lazily yield TEX file paths below `root`, at any depth

    Directories are visited depth-first from an explicit stack. A directory
    that cannot be read is logged and skipped; enumeration continues with the
    remaining entries.
    """
    suffix = suffix.lower()
    pending = [os.fspath(root)]

    while pending:
        directory = pending.pop()
        try:
            with os.scandir(directory) as entries:
                files = []
                for entry in entries:
                    try:
                        is_dir = entry.is_dir(follow_symlinks=False)
                    except OSError as e:
                        logger.warning("Cannot stat %s: %s", entry.path, e)
                        continue
                    if is_dir:
                        pending.append(entry.path)
                    elif entry.name.lower().endswith(suffix):
                        files.append(entry.path)
        except OSError as e:
            logger.warning("Cannot read directory %s: %s", directory, e)
            continue

        yield from sorted(files)


def output_path_for(source: str, output_dir: str, input_root: Optional[str] = None) -> str:
    """
    Derive the PNG path for a TEX file

    The output keeps the source's base name with the extension replaced by
    ``.png``. With `input_root`, the source's subdirectory relative to the root
    is mirrored below `output_dir`; otherwise all outputs land in `output_dir`.
    """
    base = os.path.splitext(os.path.basename(source))[0] + ".png"
    if input_root is None:
        return os.path.join(output_dir, base)

    relative_dir = os.path.relpath(os.path.dirname(os.path.abspath(source)), os.path.abspath(input_root))
    if relative_dir == os.curdir:
        return os.path.join(output_dir, base)
    return os.path.join(output_dir, relative_dir, base)


def convert_file(
    source: str,
    destination: str,
    writer: Optional[ImageWriter] = None,
    logger: logging.Logger = logger,
) -> ConversionResult:
    """
    Convert one TEX file to a PNG

    Every per-file failure is logged against `source` and reported in the
    returned result; nothing is raised for them.
    """
    writer = writer or _write_png

    try:
        tex = TEX.from_file(source)
    except LengthMismatchError as e:
        logger.warning("Skipping %s: length mismatch: %s", source, e)
        return ConversionResult(source, ConversionStatus.SKIPPED, reason="length mismatch")
    except TexIOError as e:
        logger.error("I/O error reading %s: %s", source, e)
        return ConversionResult(source, ConversionStatus.FAILED, reason=f"I/O error: {e}")

    header = tex.header
    if header.is_animated():
        logger.info(
            "%s has %d extra frames (cycle %d); decoding base frame only",
            source, header.extra_frame_count, header.frame_cycle,
        )
    if header.has_mipmaps():
        logger.info("%s has %d mipmap levels; decoding base level only", source, header.mipmap_count)

    start_decompress = time.perf_counter()
    try:
        image = tex.to_image()
    except NotImplementedError as e:
        logger.warning("Skipping %s: unsupported format: %s", source, e)
        return ConversionResult(source, ConversionStatus.SKIPPED, reason="unsupported format")
    except TexError as e:
        logger.warning("Skipping %s: malformed payload: %s", source, e)
        return ConversionResult(source, ConversionStatus.SKIPPED, reason="malformed payload")
    decompress_time = time.perf_counter() - start_decompress

    start_save = time.perf_counter()
    try:
        parent = os.path.dirname(destination)
        if parent:
            os.makedirs(parent, exist_ok=True)
        writer(destination, image)
    except (OSError, ValueError) as e:
        logger.error("Failed to write %s for %s: %s", destination, source, e)
        return ConversionResult(source, ConversionStatus.FAILED, reason=f"write error: {e}")
    save_time = time.perf_counter() - start_save

    logger.info("Saved %s -> %s (%dx%d %s)", source, destination, header.width, header.height, header.format.name)
    logger.debug(
        "%s: decompression %.2f ms, save %.2f ms", source, decompress_time * 1000, save_time * 1000
    )
    return ConversionResult(source, ConversionStatus.EMITTED, destination=destination)


def convert_directory(
    input_dir: str,
    output_dir: str = "output",
    workers: int = 1,
    keep_tree: bool = False,
    writer: Optional[ImageWriter] = None,
    logger: logging.Logger = logger,
) -> ConversionSummary:
    """
    Convert every TEX file below `input_dir` into PNGs in `output_dir`

    Files are processed as they are discovered, either one at a time or on a
    bounded thread pool when `workers` > 1. Each file owns its buffers, so the
    only coordination needed is that two sources never claim the same output
    path; the later one is skipped.
    """
    os.makedirs(output_dir, exist_ok=True)

    summary = ConversionSummary()
    claimed = {}

    def jobs() -> Iterator[tuple]:
        for source in iter_textures(input_dir, logger=logger):
            destination = output_path_for(source, output_dir, input_dir if keep_tree else None)
            key = os.path.normcase(os.path.abspath(destination))
            if key in claimed:
                logger.warning(
                    "Skipping %s: output %s already produced from %s", source, destination, claimed[key]
                )
                summary.results.append(
                    ConversionResult(source, ConversionStatus.SKIPPED, reason="output collision")
                )
                continue
            claimed[key] = source
            yield source, destination

    if workers <= 1:
        for source, destination in jobs():
            summary.results.append(convert_file(source, destination, writer, logger))
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(convert_file, source, destination, writer, logger)
                for source, destination in jobs()
            ]
            for future in futures:
                summary.results.append(future.result())

    logger.info(
        "Converted %d file(s): %d emitted, %d skipped, %d failed",
        len(summary.results), summary.emitted, summary.skipped, summary.failed,
    )
    return summary
