# CLI argument parsing for squashslayer

import argparse
import sys


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Inspect SquashFS images and repack fragments with their original metadata."
    )
    p.add_argument(
        "--image", "-i",
        dest="image_path",
        help="SquashFS image to open",
    )
    p.add_argument(
        "--files",
        action="store_true",
        help="List the paths of all non-directory entries",
    )
    p.add_argument(
        "--listing",
        action="store_true",
        help="Show every entry ls -la style",
    )
    p.add_argument(
        "--json",
        action="store_true",
        help="Dump every entry as JSON",
    )
    p.add_argument(
        "--pseudofile",
        action="store_true",
        help="Print the pseudo file for the whole image",
    )
    p.add_argument(
        "--fragment", "-f",
        dest="fragment",
        nargs="+",
        metavar="PATH",
        help="Image paths to include in a fragment (e.g., etc/passwd dev/null)",
    )
    p.add_argument(
        "--output", "-o",
        dest="output_path",
        help="Fragment image to build; without it the fragment pseudo file is printed",
    )
    p.add_argument(
        "--with-parents",
        action="store_true",
        help="Add metadata lines for the parent directories of fragment paths",
    )
    p.add_argument(
        "--workdir", "-w",
        dest="workdir",
        default=None,
        help="Directory to extract the image under (default: current directory)",
    )
    p.add_argument(
        "--log-file", "-l",
        dest="log_file",
        help="Path to save a complete log of output",
    )
    p.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show progress and skipped listing lines",
    )
    p.add_argument(
        "--api", "-A",
        action="store_true",
        help="Start the API server (uvicorn on 127.0.0.1:8000)",
    )

    args = p.parse_args(argv)
    modes = [args.files, args.listing, args.json, args.pseudofile, args.fragment]
    # Show help if no mode selected
    if not args.api and not any(modes):
        p.print_help()
        sys.exit(0)
    if not args.api and not args.image_path:
        p.error("--image is required")
    if args.output_path and not args.fragment:
        p.error("--output requires --fragment")
    return args
