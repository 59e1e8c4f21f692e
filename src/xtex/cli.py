"""Command-line interface for xtex"""
import sys
import argparse
import logging
import os
import time
from .pipeline import convert_directory, iter_textures
from .tex import TEX

logger = logging.getLogger(__name__)


def main(argv=None):
    """Command-line interface for xtex"""
    parser = argparse.ArgumentParser(
        description='Convert TEX texture containers to PNG images',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  xtex textures/                          # Convert every .tex below textures/ into output/
  xtex textures/ -o png                   # Convert into png/
  xtex textures/ -o png --keep-tree       # Mirror the input subdirectories under png/
  xtex textures/ -j 8                     # Convert on 8 worker threads
  xtex textures/ --info                   # Display header info only
        """
    )

    parser.add_argument('input', help='Directory to search for .tex files')
    parser.add_argument('-o', '--output', default='output',
                        help='Output directory (default: output)')
    parser.add_argument('-j', '--workers', type=int, default=1,
                        help='Number of files converted concurrently (default: 1)')
    parser.add_argument('--keep-tree', action='store_true',
                        help='Mirror input subdirectories in the output directory')
    parser.add_argument('--info', action='store_true',
                        help='Display header information without converting')
    parser.add_argument('-v', '--verbose', action='store_true', help='Show per-file progress and timings')
    parser.add_argument('-q', '--quiet', action='store_true', help='Only show errors')

    args = parser.parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s')

    if not os.path.isdir(args.input):
        print(f"Error: Directory '{args.input}' not found")
        sys.exit(1)

    if args.info:
        show_info(args.input)
        return

    start = time.perf_counter()
    summary = convert_directory(
        args.input,
        args.output,
        workers=max(1, args.workers),
        keep_tree=args.keep_tree,
    )
    elapsed = time.perf_counter() - start

    print(f"Total images exported: {summary.emitted}")
    if summary.skipped:
        print(f"Skipped: {summary.skipped}")
    if summary.failed:
        print(f"Failed: {summary.failed}")
    print(f"Total conversion time: {elapsed*1000:.2f} ms")


def show_info(input_dir: str) -> None:
    """Print the header of every TEX file below input_dir"""
    count = 0
    animated = 0
    for path in iter_textures(input_dir):
        try:
            with open(path, 'rb') as f:
                header = TEX.read_header(f, path)
        except OSError as e:
            logger.error("Cannot read header of %s: %s", path, e)
            continue

        count += 1
        if header.is_animated():
            animated += 1
        print(path)
        print(header)

    print(f"\nTextures: {count}")
    if animated:
        print(f"Animated: {animated}")


if __name__ == "__main__":
    main()
