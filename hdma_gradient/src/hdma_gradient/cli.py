"""Command line interface for the HDMA gradient ripper."""

from __future__ import annotations

import argparse
import sys
import warnings
from pathlib import Path
from typing import Sequence

from .colour import (
    MODE_ALIASES,
    SINGLE_CHANNEL_CHOICES,
    STANDARD_SCANLINES,
    GradientRequest,
    ImageSource,
    Target,
    build_gradient,
    load_image,
)
from .errors import HdmaError
from .serializer import render_tables
from .table import HdmaTable


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Create SNES HDMA gradient tables from a column of an image.\n"
            "Modes: single (three fixed colour tables), double (single + dual colour table),\n"
            "big (one scrollable gradient table), palette (CG-RAM colour, needs --cgram),\n"
            f"auto (big when the output is taller than {STANDARD_SCANLINES} lines, double otherwise)."
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument("input", help="Image to rip the gradient from")
    parser.add_argument(
        "-o",
        "--output",
        default="gradient.asm",
        help="Destination ASM file (default: gradient.asm)",
    )
    parser.add_argument("-x", "--xpos", type=int, default=0, help="X position of the column (default: 0)")
    parser.add_argument("-s", "--start", type=int, default=0, help="First Y position to rip (default: 0)")
    parser.add_argument("-e", "--end", type=int, help="Y position to stop at (default: image height)")
    parser.add_argument(
        "-H",
        "--height",
        type=int,
        help=f"Scanlines of the output table (default: ripped height, at least {STANDARD_SCANLINES})",
    )
    parser.add_argument(
        "-m",
        "--mode",
        choices=sorted(MODE_ALIASES),
        default="auto",
        help="Table layout (default: auto)",
    )
    parser.add_argument("-c", "--cgram", type=int, help="CG-RAM index for palette gradients (0-255)")
    parser.add_argument(
        "--target",
        choices=[target.value for target in Target],
        help="Macro set that reads the tables (default: scroll for big, hdma otherwise)",
    )
    parser.add_argument(
        "--single-channel",
        choices=SINGLE_CHANNEL_CHOICES,
        default="red",
        help="Channel that gets its own table in double mode (default: red)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=8,
        help="Bits per channel of the source colours (default: 8)",
    )
    parser.add_argument("--label-prefix", default="", help="Prefix for the table labels")
    parser.add_argument(
        "--no-optimise",
        action="store_true",
        help="Write one row per scanline instead of compressing the tables",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Print the size of every table")
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Overwrite an existing output file",
    )
    return parser


def request_from_args(args: argparse.Namespace) -> GradientRequest:
    return GradientRequest(
        x=args.xpos,
        y_start=args.start,
        y_end=args.end,
        height=args.height,
        mode=args.mode,
        palette_index=args.cgram,
        target=args.target,
        single_channel=args.single_channel,
        colour_depth=args.depth,
        optimise=not args.no_optimise,
        label_prefix=args.label_prefix,
    )


def print_table_sizes(tables: Sequence[HdmaTable]) -> None:
    for table in tables:
        print(f"{table.name}: {len(table.rows)} rows, {table.byte_size()} bytes")
    print(f"total: {sum(table.byte_size() for table in tables)} bytes")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        output = Path(args.output)
        if output.exists() and not args.force:
            raise HdmaError(f"Output file already exists (use --force to overwrite): {output}")

        request = request_from_args(args)
        image = load_image(args.input)

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            tables = build_gradient(ImageSource(image), request)
        for warning in caught:
            print(f"Warning: {warning.message}", file=sys.stderr)

        text = render_tables(tables)
        if args.verbose:
            print_table_sizes(tables)

        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text)
        print(f"wrote {output}")
        return 0
    except HdmaError as exc:
        print(exc, file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
