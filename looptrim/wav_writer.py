# looptrim/wav_writer.py
# Canonical 16-bit mono RIFF/WAVE serializer.

import struct

import numpy as np

WAV_HEADER_SIZE: int = 44

# "RIFF" size "WAVE" | "fmt " 16 fmt ch rate byte_rate align bits | "data" size
_HEADER: struct.Struct = struct.Struct("<4sI4s4sIHHIIHH4sI")

PCM_FORMAT_TAG: int = 1
BITS_PER_SAMPLE: int = 16
BYTES_PER_SAMPLE: int = BITS_PER_SAMPLE // 8


def quantize_pcm16(samples: np.ndarray) -> np.ndarray:
    """
    Quantize float samples to int16.

    Samples are clamped to [-1.0, 1.0]; negatives scale by 32768 and
    zero/positives by 32767, then truncate toward zero. NaN becomes 0.
    """
    clipped: np.ndarray = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
    clipped = np.nan_to_num(clipped, nan=0.0)
    scaled: np.ndarray = np.where(clipped < 0, clipped * 32768.0, clipped * 32767.0)
    return np.trunc(scaled).astype(np.int16)


def build_wav_header(sample_count: int, sample_rate: int) -> bytes:
    channels: int = 1
    data_size: int = sample_count * BYTES_PER_SAMPLE
    byte_rate: int = sample_rate * channels * BYTES_PER_SAMPLE
    block_align: int = channels * BYTES_PER_SAMPLE

    return _HEADER.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,
        PCM_FORMAT_TAG,
        channels,
        sample_rate,
        byte_rate,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        data_size,
    )


def encode_wav(samples: np.ndarray, sample_rate: int) -> bytes:
    """Serialize a mono float buffer as a 44-byte-header PCM16 WAV stream."""
    pcm16: np.ndarray = quantize_pcm16(samples)
    header: bytes = build_wav_header(len(pcm16), sample_rate)
    return header + pcm16.astype("<i2").tobytes()
