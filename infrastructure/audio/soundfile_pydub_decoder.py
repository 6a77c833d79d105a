# infrastructure/audio/soundfile_pydub_decoder.py
# Implementation of IAudioDecoder: libsndfile first, ffmpeg (via pydub) as fallback.

import io
import logging

import numpy as np
import soundfile as sf
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from application.ports.audio_decoder_port import IAudioDecoder
from looptrim.errors import DecodeError
from looptrim.models import DecodedAudio

logger = logging.getLogger("loop_trimmer")


class SoundfilePydubDecoder(IAudioDecoder):
    """
    Decode WAV/FLAC/OGG/AIFF directly with soundfile; anything libsndfile
    rejects (MP3, AAC, M4A, ...) is handed to pydub, which shells out to
    ffmpeg, and read back as WAV.
    """

    def __init__(self, use_ffmpeg: bool = True) -> None:
        self.use_ffmpeg: bool = use_ffmpeg

    def decode(self, data: bytes, filename: str = "") -> DecodedAudio:
        if not data:
            raise DecodeError(f"Input file is empty: '{filename}'.")

        samples: np.ndarray
        sr: int
        try:
            samples, sr = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
        except (RuntimeError, TypeError, ValueError) as exc:
            if not self.use_ffmpeg:
                raise DecodeError(
                    f"Could not decode '{filename}': {exc}",
                    details={"filename": filename},
                ) from exc
            logger.debug("soundfile rejected %s (%s), trying ffmpeg", filename, exc)
            samples, sr = self._decode_with_ffmpeg(data, filename)

        if samples.shape[0] == 0:
            raise DecodeError(
                f"No audio frames in '{filename}'.",
                details={"filename": filename},
            )
        return DecodedAudio(sample_rate=int(sr), samples=samples)

    def _decode_with_ffmpeg(self, data: bytes, filename: str) -> tuple[np.ndarray, int]:
        try:
            segment: AudioSegment = AudioSegment.from_file(io.BytesIO(data))
            wav_buf: io.BytesIO = io.BytesIO()
            segment.export(wav_buf, format="wav")
            wav_buf.seek(0)
            return sf.read(wav_buf, dtype="float32", always_2d=True)
        except (CouldntDecodeError, OSError, IndexError, RuntimeError, ValueError) as exc:
            raise DecodeError(
                f"Could not decode '{filename}' as audio: {exc}",
                details={"filename": filename},
            ) from exc
