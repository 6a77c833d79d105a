# application/ports/audio_encoder_port.py
# Port interfaces for the compressed-format encoder services.
# The core only sees these; concrete backends live in infrastructure/audio.

from abc import ABC, abstractmethod
from typing import Callable, List

import numpy as np


class IVorbisEncoder(ABC):
    """One-shot Ogg Vorbis encoder, constructed per output file."""

    @abstractmethod
    def encode(self, channels: List[np.ndarray]) -> None:
        """
        Feed float samples.

        Args:
            channels: One float32 array per channel (a single array for mono).
        """
        ...

    @abstractmethod
    def finish(self) -> bytes:
        """Finalize the stream and return the complete Ogg file."""
        ...


class IMp3Encoder(ABC):
    """Incremental MP3 encoder, constructed per output file."""

    @abstractmethod
    def encode_buffer(self, pcm16: np.ndarray) -> bytes:
        """Feed int16 samples; return whatever MP3 bytes are ready (may be empty)."""
        ...

    @abstractmethod
    def flush(self) -> bytes:
        """Drain the encoder and return the remaining MP3 bytes."""
        ...


# (sample_rate, channels, quality 0-10) -> encoder
VorbisEncoderFactory = Callable[[int, int, int], IVorbisEncoder]

# (channels, sample_rate, bitrate_kbps) -> encoder
Mp3EncoderFactory = Callable[[int, int, int], IMp3Encoder]
