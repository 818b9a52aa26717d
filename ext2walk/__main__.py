from __future__ import annotations

from argparse import ArgumentParser
import io
import sys
import logging
from typing import Optional, TextIO

from .error import InvalidImage, IoFailure
from .scanner import scan_image

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_IMAGE = 2


def dump(image_path: str, out: TextIO) -> None:
    with open(image_path, "rb") as image:
        for record in scan_image(image):
            out.write(record.to_csv() + "\n")


def main(argv: Optional[list[str]] = None) -> int:
    parser = ArgumentParser(prog="ext2walk", description="Dump the metadata of an ext2 image")
    parser.add_argument("image")
    parser.add_argument("-v", "--verbose", choices=["DEBUG", "INFO", "NONE"], default="NONE")
    parser.add_argument("-o", "--output", type=str, help="write records here instead of stdout")

    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    logging_level = {
        "NONE": None,
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
    }[args.verbose]

    if logging_level:
        logging.basicConfig(level=logging_level)

    try:
        if args.output:
            with open(args.output, "w", encoding="utf-8", errors="surrogateescape") as out:
                dump(args.image, out)
        else:
            # directory names are raw bytes decoded with surrogateescape
            if isinstance(sys.stdout, io.TextIOWrapper):
                sys.stdout.reconfigure(errors="surrogateescape")
            dump(args.image, sys.stdout)
    except InvalidImage as e:
        print(f"ext2walk: {args.image}: {e}", file=sys.stderr)
        return EXIT_INVALID_IMAGE
    except (IoFailure, OSError) as e:
        print(f"ext2walk: {args.image}: {e}", file=sys.stderr)
        return EXIT_FAILURE

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
