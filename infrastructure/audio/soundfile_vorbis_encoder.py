# infrastructure/audio/soundfile_vorbis_encoder.py
# Implementation of IVorbisEncoder on libsndfile's OGG/VORBIS writer.

import io
from typing import List

import numpy as np
import soundfile as sf

from application.ports.audio_encoder_port import IVorbisEncoder


def vorbis_available() -> bool:
    """True when the linked libsndfile can write Ogg Vorbis."""
    return "OGG" in sf.available_formats() and "VORBIS" in sf.available_subtypes("OGG")


class SoundfileVorbisEncoder(IVorbisEncoder):
    """Buffers float samples and writes one Ogg Vorbis file on finish()."""

    def __init__(self, sample_rate: int, channels: int, quality: int) -> None:
        self.sample_rate: int = sample_rate
        self.channels: int = channels
        self.quality: int = quality
        self._blocks: List[np.ndarray] = []

    @property
    def compression_level(self) -> float:
        # libsndfile: vorbis quality = 1.0 - compression_level
        return 1.0 - min(10, max(0, self.quality)) / 10.0

    def encode(self, channels: List[np.ndarray]) -> None:
        if len(channels) != self.channels:
            raise ValueError(f"Expected {self.channels} channel(s), got {len(channels)}")
        self._blocks.append(np.column_stack(channels).astype(np.float32))

    def finish(self) -> bytes:
        data: np.ndarray
        if self._blocks:
            data = np.concatenate(self._blocks)
        else:
            data = np.zeros((0, self.channels), dtype=np.float32)
        self._blocks = []

        buf: io.BytesIO = io.BytesIO()
        sf.write(
            buf,
            data,
            self.sample_rate,
            format="OGG",
            subtype="VORBIS",
            compression_level=self.compression_level,
        )
        return buf.getvalue()
