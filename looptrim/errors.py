"""
Exception classes for the loop trimmer.

Hierarchy:
    LoopTrimError (base)
        ConfigurationError     - invalid batch-wide parameters, aborts the run
        MissingServiceError    - encoder for the requested format not provided
        DecodeError            - input bytes are not decodable audio
        RangeRejectedError     - cut points collapsed after zero-cross search
        UnsupportedFormatError - unknown output format name

Everything except ConfigurationError is file-scoped: the batch runner turns
it into a failure entry and continues with the next file.
"""

from typing import Optional


class LoopTrimError(Exception):
    """Base class for all loop trimmer errors."""

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.details: dict = details or {}

    def __str__(self) -> str:
        return self.message


class ConfigurationError(LoopTrimError):
    """Raised by batch validation before any file is processed."""
    pass


class MissingServiceError(LoopTrimError):
    """Raised when the encoder service for a format is not available."""

    def __init__(self, format_name: str, service_name: str) -> None:
        super().__init__(
            f"{service_name} is not available, cannot encode '{format_name}'.\n"
            f"    → Install the encoder backend or pick another output format.",
            details={"format": format_name, "service": service_name},
        )


class DecodeError(LoopTrimError):
    """Raised when an input file cannot be decoded into samples."""
    pass


class RangeRejectedError(LoopTrimError):
    """Raised when the adjusted end index does not exceed the adjusted start."""

    def __init__(self, start_index: int, end_index: int) -> None:
        super().__init__(
            "End point is not after start point after zero-cross adjustment "
            f"(start={start_index}, end={end_index}).\n"
            "    → Widen the time range or lower the search radius.",
            details={"start_index": start_index, "end_index": end_index},
        )
        self.start_index: int = start_index
        self.end_index: int = end_index


class UnsupportedFormatError(LoopTrimError):
    """Raised when the requested output format is not a known variant."""
    pass
