"""Exceptions and warning categories shared by the HDMA gradient tools."""


class HdmaError(Exception):
    """Base class for every error raised while building HDMA tables."""


class InvalidCountError(HdmaError):
    """Raised when a row would cover 0 or more than 127 scanlines."""


class InvalidColumnWidthError(HdmaError):
    """Raised for a column width the table or write mode cannot hold."""


class InvalidRangeError(HdmaError):
    """Raised when the requested pixel window or output height is unusable."""


class MissingIndexError(HdmaError):
    """Raised when a palette gradient is requested without a CG-RAM index."""


class UnsupportedModeForTargetError(HdmaError):
    """Raised when the selected macro set cannot consume the requested mode."""


class TableStateError(HdmaError):
    """Raised when a table is used after it has been serialized or finished."""


class ScanlineAdvisory(UserWarning):
    """Non-fatal notice about questionable (but usable) scanline settings."""
