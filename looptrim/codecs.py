from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from application.ports.audio_encoder_port import Mp3EncoderFactory, VorbisEncoderFactory
from looptrim.errors import MissingServiceError
from looptrim.models import OutputFormat
from looptrim.wav_writer import encode_wav, quantize_pcm16

MP3_BITRATE_KBPS: int = 128
MONO: int = 1


@dataclass(frozen=True)
class CodecServices:
    """Encoder services provided by the host. ``None`` means unavailable."""

    vorbis: Optional[VorbisEncoderFactory] = None
    mp3: Optional[Mp3EncoderFactory] = None


class CodecAdapter:
    """Single dispatch point from an OutputFormat to its encoder."""

    def __init__(self, services: Optional[CodecServices] = None) -> None:
        self.services: CodecServices = services or CodecServices()

    def available_formats(self) -> List[OutputFormat]:
        formats: List[OutputFormat] = [OutputFormat.PCM]
        if self.services.vorbis is not None:
            formats.append(OutputFormat.VORBIS)
        if self.services.mp3 is not None:
            formats.append(OutputFormat.MP3)
        return formats

    def encode(
        self,
        output_format: OutputFormat,
        samples: np.ndarray,
        sample_rate: int,
        quality: Optional[int] = None,
    ) -> bytes:
        if output_format is OutputFormat.PCM:
            return encode_wav(samples, sample_rate)
        if output_format is OutputFormat.VORBIS:
            return self._encode_vorbis(samples, sample_rate, 3 if quality is None else quality)
        if output_format is OutputFormat.MP3:
            return self._encode_mp3(samples, sample_rate)
        raise ValueError(f"Unhandled output format: {output_format!r}")

    def _encode_vorbis(self, samples: np.ndarray, sample_rate: int, quality: int) -> bytes:
        if self.services.vorbis is None:
            raise MissingServiceError(OutputFormat.VORBIS.value, "Ogg Vorbis encoder")

        encoder = self.services.vorbis(sample_rate, MONO, quality)
        encoder.encode([np.asarray(samples, dtype=np.float32)])
        return bytes(encoder.finish())

    def _encode_mp3(self, samples: np.ndarray, sample_rate: int) -> bytes:
        if self.services.mp3 is None:
            raise MissingServiceError(OutputFormat.MP3.value, "MP3 encoder")

        encoder = self.services.mp3(MONO, sample_rate, MP3_BITRATE_KBPS)
        pcm16: np.ndarray = quantize_pcm16(samples)

        chunks: List[bytes] = []
        body: bytes = encoder.encode_buffer(pcm16)
        if len(body) > 0:
            chunks.append(bytes(body))
        tail: bytes = encoder.flush()
        if len(tail) > 0:
            chunks.append(bytes(tail))
        return b"".join(chunks)
