import math
import os
import re
from typing import Any, Sequence

from application.dto.batch_dto import EncodeParameters
from looptrim.errors import ConfigurationError
from looptrim.models import TimeRange

# Input extensions the CLI recognizes; other files get a warning and are still
# handed to the decoder.
SUPPORTED_INPUT_FORMATS: set[str] = {".wav", ".flac", ".ogg", ".mp3", ".aac", ".m4a", ".aiff"}

OUTPUT_SUFFIX: str = "_loop"

# Default parameters
DEFAULT_PARAMS: dict[str, Any] = {
    "start": 0.0,
    "end": 0.0,
    "radius": 4000,
    "format": "wav",
    "quality": 3,
}

QUALITY_MIN: int = 0
QUALITY_MAX: int = 10

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_FINAL_EXTENSION = re.compile(r"\.[^/.]+$")


# Validation helpers

def coerce_quality(value: Any, default: int = DEFAULT_PARAMS["quality"]) -> int:
    """
    Parse a Vorbis quality setting and clamp it to [0, 10].

    Strings are read up to their first non-digit ("7.9" → 7, "4abc" → 4).
    Anything without a leading integer falls back to *default*.
    """
    parsed: int
    if isinstance(value, bool):
        parsed = default
    elif isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        parsed = int(value) if math.isfinite(value) else default
    else:
        match = _LEADING_INT.match(str(value)) if value is not None else None
        parsed = int(match.group(1)) if match else default
    return min(QUALITY_MAX, max(QUALITY_MIN, parsed))


def validate_batch(
    files: Sequence,
    start_seconds: float,
    end_seconds: float,
    search_radius: int = DEFAULT_PARAMS["radius"],
    output_format: str = DEFAULT_PARAMS["format"],
    quality: Any = DEFAULT_PARAMS["quality"],
) -> EncodeParameters:
    """
    Check batch-wide settings and build the shared EncodeParameters.

    Raises ConfigurationError before any file is touched. The output format
    is passed through untouched; unknown names fail per file.
    """
    if not files:
        raise ConfigurationError(
            "No input files selected.\n"
            "    → Select at least one audio file."
        )
    if not (end_seconds > start_seconds):
        raise ConfigurationError(
            f"End time must be after start time. Got: start={start_seconds}, end={end_seconds}.\n"
            f"    → Use an end time greater than the start time.",
            details={"start": start_seconds, "end": end_seconds},
        )
    if search_radius < 0:
        raise ConfigurationError(
            f"Search radius must not be negative. Got: {search_radius}.\n"
            f"    → Use 0 to disable zero-cross search.",
            details={"search_radius": search_radius},
        )

    return EncodeParameters(
        time_range=TimeRange(float(start_seconds), float(end_seconds)),
        output_format=output_format,
        vorbis_quality=coerce_quality(quality),
        search_radius=int(search_radius),
    )


def seconds_to_index(seconds: float, sample_rate: int, frame_count: int) -> int:
    """floor(seconds * sample_rate), clamped to [0, frame_count - 1]."""
    position: float = seconds * sample_rate
    if math.isinf(position):
        return 0 if position < 0 else max(0, frame_count - 1)
    raw: int = math.floor(position)
    return max(0, min(frame_count - 1, raw))


# Path helpers

def get_output_filename(
    input_name: str, output_ext: str = ".wav", suffix: str = OUTPUT_SUFFIX
) -> str:
    """
    Derive the output file name from an input file name.

    Only the final extension is dropped and any directory part is ignored.

    Example: take.01.flac, output_ext='.ogg'  →  take.01_loop.ogg
    """
    base: str = _FINAL_EXTENSION.sub("", os.path.basename(input_name))
    return f"{base}{suffix}{output_ext}"
