import io
import logging

import numpy as np
import pytest
import soundfile as sf

import infrastructure.audio.services as services
from infrastructure.audio import (
    PydubMp3Encoder,
    SoundfilePydubDecoder,
    SoundfileVorbisEncoder,
    default_codec_services,
    mp3_available,
    vorbis_available,
)
from looptrim.codecs import CodecAdapter
from looptrim.errors import DecodeError
from looptrim.models import DecodedAudio, OutputFormat

SAMPLE_RATE: int = 22050


def make_tone(frames: int = SAMPLE_RATE) -> np.ndarray:
    t: np.ndarray = np.arange(frames) / SAMPLE_RATE
    return (0.5 * np.sin(2 * np.pi * 330 * t)).astype(np.float32)


def encode_with_soundfile(samples: np.ndarray, fmt: str, subtype: str) -> bytes:
    buf: io.BytesIO = io.BytesIO()
    sf.write(buf, samples, SAMPLE_RATE, format=fmt, subtype=subtype)
    return buf.getvalue()


class TestSoundfilePydubDecoder:
    def test_decodes_mono_wav(self) -> None:
        data: bytes = encode_with_soundfile(make_tone(), "WAV", "FLOAT")

        audio: DecodedAudio = SoundfilePydubDecoder(use_ffmpeg=False).decode(data, "tone.wav")

        assert audio.sample_rate == SAMPLE_RATE
        assert audio.channel_count == 1
        assert audio.frame_count == SAMPLE_RATE
        np.testing.assert_array_equal(audio.channel(0), make_tone())

    def test_decodes_stereo_flac(self) -> None:
        stereo: np.ndarray = np.column_stack([make_tone(), -make_tone()])
        data: bytes = encode_with_soundfile(stereo, "FLAC", "PCM_16")

        audio: DecodedAudio = SoundfilePydubDecoder(use_ffmpeg=False).decode(data, "st.flac")

        assert audio.channel_count == 2
        assert audio.samples.dtype == np.float32

    def test_garbage_is_decode_error(self) -> None:
        with pytest.raises(DecodeError, match="junk.bin"):
            SoundfilePydubDecoder(use_ffmpeg=False).decode(b"\x00\x01garbage" * 10, "junk.bin")

    def test_empty_input_is_decode_error(self) -> None:
        with pytest.raises(DecodeError, match="empty"):
            SoundfilePydubDecoder().decode(b"", "empty.wav")

    def test_zero_frames_is_decode_error(self) -> None:
        data: bytes = encode_with_soundfile(np.zeros(0, dtype=np.float32), "WAV", "PCM_16")
        with pytest.raises(DecodeError, match="No audio frames"):
            SoundfilePydubDecoder(use_ffmpeg=False).decode(data, "silent.wav")

    @pytest.mark.skipif(not mp3_available(), reason="ffmpeg not installed")
    def test_ffmpeg_fallback_rejects_garbage(self) -> None:
        with pytest.raises(DecodeError):
            SoundfilePydubDecoder(use_ffmpeg=True).decode(b"definitely not audio" * 50, "x.mp3")


class TestSoundfileVorbisEncoder:
    @pytest.mark.parametrize("quality,level", [(0, 1.0), (3, 0.7), (10, 0.0), (15, 0.0), (-2, 1.0)])
    def test_compression_level(self, quality: int, level: float) -> None:
        encoder: SoundfileVorbisEncoder = SoundfileVorbisEncoder(SAMPLE_RATE, 1, quality)
        assert encoder.compression_level == pytest.approx(level)

    def test_rejects_channel_mismatch(self) -> None:
        encoder: SoundfileVorbisEncoder = SoundfileVorbisEncoder(SAMPLE_RATE, 1, 3)
        with pytest.raises(ValueError):
            encoder.encode([make_tone(), make_tone()])

    @pytest.mark.skipif(not vorbis_available(), reason="libsndfile built without Vorbis")
    def test_writes_readable_ogg(self) -> None:
        encoder: SoundfileVorbisEncoder = SoundfileVorbisEncoder(SAMPLE_RATE, 1, 5)
        encoder.encode([make_tone()])

        data: bytes = encoder.finish()
        decoded, sr = sf.read(io.BytesIO(data), dtype="float32")

        assert data[:4] == b"OggS"
        assert sr == SAMPLE_RATE
        assert abs(len(decoded) - SAMPLE_RATE) < 2048

    @pytest.mark.skipif(not vorbis_available(), reason="libsndfile built without Vorbis")
    def test_higher_quality_is_not_smaller(self) -> None:
        tone: np.ndarray = make_tone(SAMPLE_RATE * 2) + np.float32(0.1) * np.random.default_rng(1).standard_normal(
            SAMPLE_RATE * 2
        ).astype(np.float32)
        sizes: list = []
        for quality in (0, 10):
            encoder: SoundfileVorbisEncoder = SoundfileVorbisEncoder(SAMPLE_RATE, 1, quality)
            encoder.encode([tone])
            sizes.append(len(encoder.finish()))
        assert sizes[1] > sizes[0]


class TestPydubMp3Encoder:
    def test_encode_buffer_defers_output(self) -> None:
        encoder: PydubMp3Encoder = PydubMp3Encoder(1, SAMPLE_RATE, 128)
        assert encoder.encode_buffer(np.zeros(100, dtype=np.int16)) == b""

    @pytest.mark.skipif(not mp3_available(), reason="ffmpeg not installed")
    def test_flush_returns_mp3(self) -> None:
        encoder: PydubMp3Encoder = PydubMp3Encoder(1, 44100, 128)
        encoder.encode_buffer((make_tone(44100) * 32767).astype(np.int16))

        data: bytes = encoder.flush()

        assert len(data) > 0
        assert data[:3] == b"ID3" or data[0] == 0xFF


class TestDefaultServices:
    def test_missing_backends_are_left_out(self, monkeypatch, caplog) -> None:
        monkeypatch.setattr(services, "vorbis_available", lambda: False)
        monkeypatch.setattr(services, "mp3_available", lambda: False)

        with caplog.at_level(logging.WARNING, logger="loop_trimmer"):
            codec_services = default_codec_services()

        assert codec_services.vorbis is None
        assert codec_services.mp3 is None
        assert "Ogg Vorbis encoding unavailable" in caplog.text
        assert CodecAdapter(codec_services).available_formats() == [OutputFormat.PCM]

    def test_available_backends_are_wired(self, monkeypatch) -> None:
        monkeypatch.setattr(services, "vorbis_available", lambda: True)
        monkeypatch.setattr(services, "mp3_available", lambda: True)

        codec_services = default_codec_services()

        assert codec_services.vorbis is SoundfileVorbisEncoder
        assert codec_services.mp3 is PydubMp3Encoder
