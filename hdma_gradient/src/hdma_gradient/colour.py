"""Colour gradient tables built from an image column."""

# Reference: registers written by the generated tables
# Register | Name       | Notes
# ---------|------------|----------------------------------------------------------
# $2132    | COLDATA    | bit 7/6/5 select blue/green/red, bits 0-4 intensity
# $2121    | CGADD      | CG-RAM word address (palette index)
# $2122    | CGDATA     | CG-RAM data, written low byte then high byte (-bbbbbgggggrrrrr)
#
# Channel transfer modes used by the consuming macros
# Macro                 | $43x0/$43x1 | Table
# ----------------------|-------------|----------------------------------------
# hdma_three_channels   | $3200 x3    | red/green/blue, 1 byte per line each
# hdma_twoo_channels    | $3200,$3202 | single colour (1 byte), dual colour (2 bytes)
# hdma_cgram_indexed    | $2103       | CG-RAM address word + colour word (4 bytes)

from __future__ import annotations

import warnings
from dataclasses import dataclass, replace
from enum import StrEnum
from pathlib import Path
from typing import Callable, Dict, List, Protocol, Sequence, Tuple

from PIL import Image

from .errors import (
    HdmaError,
    InvalidRangeError,
    MissingIndexError,
    ScanlineAdvisory,
    UnsupportedModeForTargetError,
)
from .rows import RepeatRow, new_scanline
from .serializer import render_tables
from .table import HdmaTable, WriteMode

Color = Tuple[int, int, int]

STANDARD_SCANLINES = 224
TARGET_COLOUR_BITS = 5


class Channel(StrEnum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"

    @property
    def position(self) -> int:
        return list(Channel).index(self)

    @property
    def colour_bit(self) -> int:
        return {Channel.RED: 0x20, Channel.GREEN: 0x40, Channel.BLUE: 0x80}[self]


class GradientMode(StrEnum):
    SINGLE = "single"
    DOUBLE = "double"
    BIG = "big"
    PALETTE = "palette"


class Target(StrEnum):
    """Macro set that consumes the generated tables."""

    HDMA = "hdma"  # channel setup macros, real HDMA tables
    SCROLL = "scroll"  # scrollable gradient engine, pseudo tables


MODE_ALIASES: Dict[str, GradientMode | None] = {
    "s": GradientMode.SINGLE,
    "single": GradientMode.SINGLE,
    "d": GradientMode.DOUBLE,
    "double": GradientMode.DOUBLE,
    "b": GradientMode.BIG,
    "big": GradientMode.BIG,
    "c": GradientMode.PALETTE,
    "cgram": GradientMode.PALETTE,
    "palette": GradientMode.PALETTE,
    "a": None,
    "auto": None,
}

SUPPORTED_MODES: Dict[Target, frozenset[GradientMode]] = {
    Target.HDMA: frozenset({GradientMode.SINGLE, GradientMode.DOUBLE, GradientMode.PALETTE}),
    Target.SCROLL: frozenset({GradientMode.BIG}),
}

SINGLE_CHANNEL_CHOICES = ["red", "green", "blue", "auto"]


class PixelSource(Protocol):
    @property
    def size(self) -> Tuple[int, int]: ...

    def sample(self, x: int, y: int) -> Color: ...


class ImageSource:
    """Pixel accessor over a Pillow image."""

    def __init__(self, image: Image.Image):
        self.image = image.convert("RGB")

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    def sample(self, x: int, y: int) -> Color:
        r, g, b = self.image.getpixel((x, y))
        return (r, g, b)


@dataclass
class GradientRequest:
    """Parameters of one image to table conversion."""

    x: int = 0
    y_start: int = 0
    y_end: int | None = None  # default: image height
    height: int | None = None  # default: window height, at least 224
    mode: str = "auto"  # single, double, big, palette, auto (or s/d/b/c/a)
    palette_index: int | None = None
    target: str | None = None  # hdma, scroll; default follows the mode
    single_channel: str = "red"  # red, green, blue, auto
    colour_depth: int = 8
    optimise: bool = True
    label_prefix: str = ""

    def with_defaults(self, image_size: Tuple[int, int]) -> "GradientRequest":
        _, image_height = image_size
        y_end = image_height if self.y_end is None else self.y_end
        height = self.height
        if height is None:
            height = max(y_end - self.y_start, STANDARD_SCANLINES)
        return replace(self, y_end=y_end, height=height)


def resolve_mode(mode: str, height: int) -> GradientMode:
    """Map a mode name or alias to a gradient mode; ``auto`` depends on height."""

    key = str(mode).lower()
    if key not in MODE_ALIASES:
        raise HdmaError(f"Unknown gradient mode: {mode}")
    resolved = MODE_ALIASES[key]
    if resolved is None:
        return GradientMode.BIG if height > STANDARD_SCANLINES else GradientMode.DOUBLE
    return resolved


def resolve_target(target: str | None, mode: GradientMode) -> Target:
    if target is None:
        return Target.SCROLL if mode == GradientMode.BIG else Target.HDMA
    try:
        return Target(str(target).lower())
    except ValueError as exc:
        raise HdmaError(f"Unknown macro target: {target}") from exc


def validate_request(request: GradientRequest, image_size: Tuple[int, int]) -> GradientMode:
    """Check ``request`` against the image before anything is built.

    Returns the resolved gradient mode. Missing window and height values are
    filled in as in :meth:`GradientRequest.with_defaults`.
    """

    width, image_height = image_size
    request = request.with_defaults(image_size)

    if request.x < 0 or request.x >= width:
        raise InvalidRangeError(f"X position {request.x} is outside of the image (width {width})")
    if request.y_start < 0 or request.y_end > image_height:
        raise InvalidRangeError(
            f"Y range {request.y_start}-{request.y_end} is outside of the image (height {image_height})"
        )
    if request.y_start >= request.y_end:
        raise InvalidRangeError(f"Y start ({request.y_start}) must be smaller than Y end ({request.y_end})")
    if request.height < 1:
        raise InvalidRangeError("Output height must be at least 1")
    if request.colour_depth < 1 or request.colour_depth > 16:
        raise InvalidRangeError("Colour depth must be between 1 and 16 bits")
    if request.single_channel not in SINGLE_CHANNEL_CHOICES:
        raise HdmaError(f"Unknown single channel: {request.single_channel}")

    mode = resolve_mode(request.mode, request.height)
    target = resolve_target(request.target, mode)
    if mode not in SUPPORTED_MODES[target]:
        raise UnsupportedModeForTargetError(f"The {target.value} macros cannot use {mode.value} tables")

    if mode == GradientMode.PALETTE:
        if request.palette_index is None:
            raise MissingIndexError("Palette gradients need a CG-RAM index")
        if request.palette_index < 0 or request.palette_index > 0xFF:
            raise InvalidRangeError(f"CG-RAM index must be between 0 and 255, got {request.palette_index}")

    return mode


def warn_questionable_height(height: int, mode: GradientMode) -> None:
    if height < STANDARD_SCANLINES:
        warnings.warn(
            f"The output height is {height} which is smaller than {STANDARD_SCANLINES}; "
            f"a height of at least {STANDARD_SCANLINES} is recommended.",
            ScanlineAdvisory,
            stacklevel=2,
        )
    if mode != GradientMode.BIG and height > STANDARD_SCANLINES:
        warnings.warn(
            f"The output height is {height} which is larger than {STANDARD_SCANLINES}; "
            "a big gradient is recommended instead.",
            ScanlineAdvisory,
            stacklevel=2,
        )


def sample_column(source: PixelSource, x: int, y_start: int, y_end: int, height: int) -> List[Color]:
    """Read ``height`` colours from column ``x``, stretching ``[y_start, y_end)``."""

    span = y_end - y_start
    return [source.sample(x, y_start + (line * span) // height) for line in range(height)]


def to_intensity(value: int, depth: int = 8) -> int:
    """Scale a ``depth`` bit channel value to the 5 bit SNES range."""

    if depth >= TARGET_COLOUR_BITS:
        return (value >> (depth - TARGET_COLOUR_BITS)) & 0x1F
    return (value << (TARGET_COLOUR_BITS - depth)) & 0x1F


def fixed_colour(colour: Color, channel: Channel, depth: int = 8) -> int:
    """COLDATA value setting ``channel`` to the colour's intensity."""

    return channel.colour_bit | to_intensity(colour[channel.position], depth)


def cgram_colour(colour: Color, depth: int = 8) -> int:
    red, green, blue = (to_intensity(value, depth) for value in colour)
    return red | (green << 5) | (blue << 10)


def _table_name(prefix: str, *channels: Channel) -> str:
    return prefix + "_".join(channel.value for channel in channels) + "_table"


def build_single_tables(samples: Sequence[Color], request: GradientRequest) -> Tuple[HdmaTable, ...]:
    tables = []
    for channel in Channel:
        table = HdmaTable(_table_name(request.label_prefix, channel), 1)
        for colour in samples:
            table.push(new_scanline([fixed_colour(colour, channel, request.colour_depth)]))
        table.finish()
        tables.append(table)
    return tuple(tables)


def count_changes(samples: Sequence[Color], channel: Channel, depth: int = 8) -> int:
    values = [to_intensity(colour[channel.position], depth) for colour in samples]
    return sum(1 for previous, current in zip(values, values[1:]) if previous != current)


def pick_single_channel(samples: Sequence[Color], depth: int = 8) -> Channel:
    """Pick the channel that gets its own table in double mode.

    The two channels whose change counts are closest share the dual table,
    so the one left over is the channel farthest from the middle count.
    """

    counts = sorted((count_changes(samples, channel, depth), channel.position, channel) for channel in Channel)
    (low, _, low_channel), (middle, _, _), (high, _, high_channel) = counts
    if middle - low > high - middle:
        return low_channel
    return high_channel


def build_double_tables(samples: Sequence[Color], request: GradientRequest) -> Tuple[HdmaTable, ...]:
    depth = request.colour_depth
    if request.single_channel == "auto":
        single = pick_single_channel(samples, depth)
    else:
        single = Channel(request.single_channel)
    first, second = (channel for channel in Channel if channel != single)

    single_table = HdmaTable(_table_name(request.label_prefix, single), 1)
    dual_table = HdmaTable(_table_name(request.label_prefix, first, second), 2, WriteMode.WORDS)
    for colour in samples:
        single_table.push(new_scanline([fixed_colour(colour, single, depth)]))
        dual_table.push(
            new_scanline([fixed_colour(colour, first, depth), fixed_colour(colour, second, depth)])
        )
    single_table.finish()
    dual_table.finish()
    return single_table, dual_table


def build_big_table(samples: Sequence[Color], request: GradientRequest) -> Tuple[HdmaTable, ...]:
    """One pseudo table of r, g, b bytes per line for the scrollable gradient code.

    The scroll engine copies the bytes straight to COLDATA, so each one already
    carries its channel bit.
    """

    table = HdmaTable(request.label_prefix + "gradient_table", 3, real=False)
    for colour in samples:
        value = bytes(fixed_colour(colour, channel, request.colour_depth) for channel in Channel)
        table.push(RepeatRow(1, value))
    table.finish()
    return (table,)


def build_palette_table(samples: Sequence[Color], request: GradientRequest) -> Tuple[HdmaTable, ...]:
    if request.palette_index is None:
        raise MissingIndexError("Palette gradients need a CG-RAM index")
    table = HdmaTable(request.label_prefix + "colour_table", 4, WriteMode.WORDS)
    for colour in samples:
        value = cgram_colour(colour, request.colour_depth)
        table.push(new_scanline([0x00, request.palette_index, value & 0xFF, value >> 8]))
    table.finish()
    return (table,)


BUILDERS: Dict[GradientMode, Callable[[Sequence[Color], GradientRequest], Tuple[HdmaTable, ...]]] = {
    GradientMode.SINGLE: build_single_tables,
    GradientMode.DOUBLE: build_double_tables,
    GradientMode.BIG: build_big_table,
    GradientMode.PALETTE: build_palette_table,
}


def build_tables(samples: Sequence[Color], request: GradientRequest) -> Tuple[HdmaTable, ...]:
    """Build the raw (uncompressed, terminated) tables for the request's mode."""

    mode = resolve_mode(request.mode, len(samples))
    return BUILDERS[mode](samples, request)


def build_gradient(source: PixelSource, request: GradientRequest) -> Tuple[HdmaTable, ...]:
    """Validate, sample and build the tables; coagulated unless disabled."""

    request = request.with_defaults(source.size)
    mode = validate_request(request, source.size)
    warn_questionable_height(request.height, mode)
    request = replace(request, mode=mode.value)

    samples = sample_column(source, request.x, request.y_start, request.y_end, request.height)
    tables = build_tables(samples, request)
    for table in tables:
        table.validate(request.height)
        if request.optimise:
            table.coagulate()
    return tables


def convert(source: PixelSource, request: GradientRequest | None = None) -> str:
    return render_tables(build_gradient(source, request or GradientRequest()))


def convert_image(image: Image.Image, request: GradientRequest | None = None) -> str:
    return convert(ImageSource(image), request)


def load_image(path: str | Path) -> Image.Image:
    path = Path(path)
    try:
        with Image.open(path) as img:
            return img.convert("RGB")
    except FileNotFoundError as exc:
        raise HdmaError(f"Input file not found: {path}") from exc
    except OSError as exc:
        raise HdmaError(f"Failed to read image: {path}") from exc


def convert_file(path: str | Path, request: GradientRequest | None = None) -> str:
    return convert_image(load_image(path), request)
