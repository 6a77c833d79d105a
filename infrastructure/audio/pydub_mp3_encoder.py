# infrastructure/audio/pydub_mp3_encoder.py
# Implementation of IMp3Encoder: pydub hands the PCM to ffmpeg/libmp3lame.

import io
import shutil
from typing import List

import numpy as np
from pydub import AudioSegment

from application.ports.audio_encoder_port import IMp3Encoder


def mp3_available() -> bool:
    """True when pydub found an ffmpeg (or avconv) binary to encode with."""
    return shutil.which(AudioSegment.converter) is not None


class PydubMp3Encoder(IMp3Encoder):
    """
    Constant-bitrate MP3 encoder.

    ffmpeg needs the whole stream, so encode_buffer() only collects samples
    and flush() returns the entire file.
    """

    def __init__(self, channels: int, sample_rate: int, bitrate_kbps: int) -> None:
        self.channels: int = channels
        self.sample_rate: int = sample_rate
        self.bitrate_kbps: int = bitrate_kbps
        self._pcm: List[bytes] = []

    def encode_buffer(self, pcm16: np.ndarray) -> bytes:
        self._pcm.append(np.asarray(pcm16, dtype="<i2").tobytes())
        return b""

    def flush(self) -> bytes:
        segment: AudioSegment = AudioSegment(
            data=b"".join(self._pcm),
            sample_width=2,
            frame_rate=self.sample_rate,
            channels=self.channels,
        )
        self._pcm = []

        buf: io.BytesIO = io.BytesIO()
        segment.export(buf, format="mp3", bitrate=f"{self.bitrate_kbps}k")
        return buf.getvalue()
