"""Core value types shared by the trimming pipeline."""

from dataclasses import dataclass
from enum import Enum

import numpy as np

from looptrim.errors import UnsupportedFormatError


class OutputFormat(Enum):
    """Output encodings. The value is the canonical format name."""

    PCM = "wav"
    VORBIS = "ogg"
    MP3 = "mp3"

    @property
    def extension(self) -> str:
        return f".{self.value}"

    @property
    def mimetype(self) -> str:
        return _MIMETYPES[self]

    @classmethod
    def from_name(cls, name: str) -> "OutputFormat":
        """Resolve a user-supplied format name (e.g. 'wav', 'pcm', 'ogg')."""
        key: str = str(name or "").lower().strip().lstrip(".")
        try:
            return _ALIASES[key]
        except KeyError:
            known: str = ", ".join(sorted(_ALIASES))
            raise UnsupportedFormatError(
                f"Unsupported output format: '{name}'.\n"
                f"    Supported: {known}",
                details={"format": name},
            ) from None


_ALIASES: dict[str, OutputFormat] = {
    "wav": OutputFormat.PCM,
    "pcm": OutputFormat.PCM,
    "ogg": OutputFormat.VORBIS,
    "vorbis": OutputFormat.VORBIS,
    "mp3": OutputFormat.MP3,
}

_MIMETYPES: dict[OutputFormat, str] = {
    OutputFormat.PCM: "audio/wav",
    OutputFormat.VORBIS: "audio/ogg",
    OutputFormat.MP3: "audio/mpeg",
}


@dataclass(frozen=True)
class TimeRange:
    """Requested loop boundaries in seconds."""

    start_seconds: float
    end_seconds: float


@dataclass(frozen=True)
class SampleIndexRange:
    start_index: int
    end_index: int

    @property
    def length(self) -> int:
        return self.end_index - self.start_index


@dataclass(frozen=True)
class DecodedAudio:
    """
    Decoded PCM audio.

    ``samples`` is a float32 array shaped (frame_count, channel_count), the
    same layout soundfile returns with ``always_2d=True``.
    """

    sample_rate: int
    samples: np.ndarray

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        data: np.ndarray = np.array(self.samples, dtype=np.float32)
        if data.ndim == 1:
            data = data[:, np.newaxis]
        if data.ndim != 2 or data.shape[1] < 1:
            raise ValueError(f"Expected (frames, channels) samples, got shape {data.shape}")
        data.setflags(write=False)
        object.__setattr__(self, "samples", data)

    @classmethod
    def from_channels(cls, sample_rate: int, channels: list) -> "DecodedAudio":
        """Build from a list of equal-length per-channel sequences."""
        return cls(sample_rate=sample_rate, samples=np.column_stack(channels))

    @property
    def channel_count(self) -> int:
        return int(self.samples.shape[1])

    @property
    def frame_count(self) -> int:
        return int(self.samples.shape[0])

    def channel(self, index: int) -> np.ndarray:
        return self.samples[:, index]
