import numpy as np
import pytest

from application.ports.audio_encoder_port import IMp3Encoder, IVorbisEncoder
from looptrim.codecs import MP3_BITRATE_KBPS, CodecAdapter, CodecServices
from looptrim.errors import MissingServiceError
from looptrim.models import OutputFormat
from looptrim.wav_writer import encode_wav, quantize_pcm16


class FakeVorbisEncoder(IVorbisEncoder):
    instances: list = []

    def __init__(self, sample_rate: int, channels: int, quality: int) -> None:
        self.args = (sample_rate, channels, quality)
        self.fed: list = []
        FakeVorbisEncoder.instances.append(self)

    def encode(self, channels: list) -> None:
        self.fed.append(channels)

    def finish(self) -> bytes:
        return b"OggS-fake"


class FakeMp3Encoder(IMp3Encoder):
    instances: list = []
    body: bytes = b"frames"
    tail: bytes = b"-tail"

    def __init__(self, channels: int, sample_rate: int, bitrate_kbps: int) -> None:
        self.args = (channels, sample_rate, bitrate_kbps)
        self.calls: list = []
        FakeMp3Encoder.instances.append(self)

    def encode_buffer(self, pcm16: np.ndarray) -> bytes:
        self.calls.append(("encode", pcm16))
        return self.body

    def flush(self) -> bytes:
        self.calls.append(("flush", None))
        return self.tail


@pytest.fixture(autouse=True)
def reset_fakes():
    FakeVorbisEncoder.instances = []
    FakeMp3Encoder.instances = []
    FakeMp3Encoder.body = b"frames"
    FakeMp3Encoder.tail = b"-tail"


@pytest.fixture
def adapter() -> CodecAdapter:
    return CodecAdapter(CodecServices(vorbis=FakeVorbisEncoder, mp3=FakeMp3Encoder))


SAMPLES: np.ndarray = np.array([0.0, 0.5, -0.5, 1.0, -1.0, 1.5], dtype=np.float32)


class TestPcm:
    def test_pcm_uses_wav_writer(self, adapter: CodecAdapter) -> None:
        assert adapter.encode(OutputFormat.PCM, SAMPLES, 44100) == encode_wav(SAMPLES, 44100)

    def test_pcm_needs_no_services(self) -> None:
        data: bytes = CodecAdapter().encode(OutputFormat.PCM, SAMPLES, 8000)
        assert data[:4] == b"RIFF"


class TestVorbis:
    def test_mono_encoder_with_quality(self, adapter: CodecAdapter) -> None:
        data: bytes = adapter.encode(OutputFormat.VORBIS, SAMPLES, 48000, quality=7)

        assert data == b"OggS-fake"
        encoder = FakeVorbisEncoder.instances[0]
        assert encoder.args == (48000, 1, 7)
        assert len(encoder.fed) == 1
        assert len(encoder.fed[0]) == 1
        np.testing.assert_array_equal(encoder.fed[0][0], SAMPLES)

    def test_default_quality(self, adapter: CodecAdapter) -> None:
        adapter.encode(OutputFormat.VORBIS, SAMPLES, 48000)
        assert FakeVorbisEncoder.instances[0].args[2] == 3

    def test_missing_service_raises(self) -> None:
        with pytest.raises(MissingServiceError, match="Ogg Vorbis"):
            CodecAdapter(CodecServices(mp3=FakeMp3Encoder)).encode(OutputFormat.VORBIS, SAMPLES, 44100)


class TestMp3:
    def test_fixed_bitrate_mono(self, adapter: CodecAdapter) -> None:
        adapter.encode(OutputFormat.MP3, SAMPLES, 22050)
        assert FakeMp3Encoder.instances[0].args == (1, 22050, MP3_BITRATE_KBPS)
        assert MP3_BITRATE_KBPS == 128

    def test_feeds_asymmetric_quantized_samples(self, adapter: CodecAdapter) -> None:
        adapter.encode(OutputFormat.MP3, SAMPLES, 44100)
        kind, pcm = FakeMp3Encoder.instances[0].calls[0]
        assert kind == "encode"
        assert pcm.dtype == np.int16
        np.testing.assert_array_equal(pcm, quantize_pcm16(SAMPLES))
        assert pcm.tolist() == [0, 16383, -16384, 32767, -32768, 32767]

    def test_body_then_flush_order(self, adapter: CodecAdapter) -> None:
        assert adapter.encode(OutputFormat.MP3, SAMPLES, 44100) == b"frames-tail"
        assert [c[0] for c in FakeMp3Encoder.instances[0].calls] == ["encode", "flush"]

    def test_empty_chunks_skipped(self, adapter: CodecAdapter) -> None:
        FakeMp3Encoder.body = b""
        assert adapter.encode(OutputFormat.MP3, SAMPLES, 44100) == b"-tail"

    def test_missing_service_raises(self) -> None:
        with pytest.raises(MissingServiceError, match="MP3"):
            CodecAdapter().encode(OutputFormat.MP3, SAMPLES, 44100)


class TestAvailableFormats:
    def test_pcm_only_without_services(self) -> None:
        assert CodecAdapter().available_formats() == [OutputFormat.PCM]

    def test_all_formats_with_services(self, adapter: CodecAdapter) -> None:
        assert adapter.available_formats() == [OutputFormat.PCM, OutputFormat.VORBIS, OutputFormat.MP3]
