"""HDMA gradient ripper.

Turns a column of an image into SNES HDMA tables (fixed colour or CG-RAM
gradients) written as assembler data statements. It can be invoked through
the CLI (``python -m hdma_gradient``) or imported to convert an image into
table text.
"""

from .coagulate import coagulate, coagulate_repeat
from .colour import (
    Channel,
    GradientMode,
    GradientRequest,
    ImageSource,
    Target,
    build_gradient,
    build_tables,
    convert,
    convert_file,
    convert_image,
    sample_column,
)
from .errors import (
    HdmaError,
    InvalidColumnWidthError,
    InvalidCountError,
    InvalidRangeError,
    MissingIndexError,
    ScanlineAdvisory,
    TableStateError,
    UnsupportedModeForTargetError,
)
from .rows import (
    TERMINATOR,
    ContinuousRow,
    RepeatRow,
    Terminator,
    new_continuous,
    new_repeat,
    new_scanline,
)
from .serializer import decode_table, render_table, render_tables
from .table import HdmaTable, TableState, WriteMode

__all__ = [
    "Channel",
    "ContinuousRow",
    "GradientMode",
    "GradientRequest",
    "HdmaError",
    "HdmaTable",
    "ImageSource",
    "InvalidColumnWidthError",
    "InvalidCountError",
    "InvalidRangeError",
    "MissingIndexError",
    "RepeatRow",
    "ScanlineAdvisory",
    "TERMINATOR",
    "TableState",
    "TableStateError",
    "Target",
    "Terminator",
    "UnsupportedModeForTargetError",
    "WriteMode",
    "build_gradient",
    "build_tables",
    "coagulate",
    "coagulate_repeat",
    "convert",
    "convert_file",
    "convert_image",
    "decode_table",
    "new_continuous",
    "new_repeat",
    "new_scanline",
    "render_table",
    "render_tables",
    "sample_column",
]
