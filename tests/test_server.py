import io
import zipfile

import numpy as np
import pytest
import soundfile as sf

from infrastructure.audio import SoundfilePydubDecoder
from looptrim.codecs import CodecAdapter
from looptrim.core import TrimEncodePipeline
from server import app

SAMPLE_RATE: int = 8000


def make_wav_bytes(duration: float = 1.0) -> bytes:
    t: np.ndarray = np.arange(int(SAMPLE_RATE * duration)) / SAMPLE_RATE
    buf: io.BytesIO = io.BytesIO()
    sf.write(buf, (0.5 * np.sin(2 * np.pi * 100 * t)).astype(np.float32), SAMPLE_RATE, format="WAV")
    return buf.getvalue()


@pytest.fixture
def client(monkeypatch):
    pipeline = TrimEncodePipeline(SoundfilePydubDecoder(use_ffmpeg=False), CodecAdapter())
    monkeypatch.setitem(app.config, "LOOP_PIPELINE", pipeline)
    app.config["TESTING"] = True
    with app.test_client() as test_client:
        yield test_client


def post_batch(client, uploads: list, **form):
    data: dict = {key: str(value) for key, value in form.items()}
    data["files[]"] = [(io.BytesIO(content), name) for name, content in uploads]
    return client.post("/batch-trim", data=data, content_type="multipart/form-data")


class TestBatchTrim:
    def test_zip_skips_failed_files(self, client) -> None:
        uploads = [
            ("a.wav", make_wav_bytes()),
            ("b.wav", b"not audio"),
            ("c.wav", make_wav_bytes()),
        ]

        response = post_batch(client, uploads, start=0.2, end=0.6, radius=100)

        assert response.status_code == 200
        assert response.mimetype == "application/zip"
        assert response.headers["X-Loop-Total"] == "3"
        assert response.headers["X-Loop-Succeeded"] == "2"
        assert response.headers["X-Loop-Failed"] == "1"
        with zipfile.ZipFile(io.BytesIO(response.data)) as zf:
            assert zf.namelist() == ["01_a_loop.wav", "03_c_loop.wav", "run_log.txt"]
            assert zf.read("01_a_loop.wav")[:4] == b"RIFF"
            run_log: str = zf.read("run_log.txt").decode("utf-8")
        assert "--- processing: b.wav ---" in run_log
        assert "[error] b.wav:" in run_log

    def test_end_before_start_is_400(self, client) -> None:
        response = post_batch(client, [("a.wav", make_wav_bytes())], start=1.0, end=0.5)
        assert response.status_code == 400
        assert "End time must be after start time" in response.get_json()["error"]

    def test_no_files_is_400(self, client) -> None:
        response = client.post("/batch-trim", data={"start": "0", "end": "1"})
        assert response.status_code == 400

    def test_negative_radius_is_400(self, client) -> None:
        response = post_batch(client, [("a.wav", make_wav_bytes())], start=0, end=0.5, radius=-5)
        assert response.status_code == 400

    def test_nothing_succeeded_is_422(self, client) -> None:
        response = post_batch(client, [("a.wav", make_wav_bytes())], start=0, end=0.5, format="mp3")

        assert response.status_code == 422
        failures: list = response.get_json()["failures"]
        assert failures[0]["filename"] == "a.wav"
        assert failures[0]["type"] == "MissingServiceError"

    def test_unknown_format_fails_per_file(self, client) -> None:
        response = post_batch(client, [("a.wav", make_wav_bytes())], start=0, end=0.5, format="flac")
        assert response.status_code == 422
        assert response.get_json()["failures"][0]["type"] == "UnsupportedFormatError"

    def test_filenames_are_sanitized(self, client) -> None:
        response = post_batch(client, [("../../etc/evil.wav", make_wav_bytes())], start=0, end=0.5)
        with zipfile.ZipFile(io.BytesIO(response.data)) as zf:
            assert zf.namelist()[0] == "01_evil_loop.wav"

    def test_too_many_files_is_400(self, client) -> None:
        uploads = [(f"f{i}.wav", b"x") for i in range(21)]
        response = post_batch(client, uploads, start=0, end=1)
        assert response.status_code == 400

    def test_security_headers(self, client) -> None:
        response = post_batch(client, [("a.wav", make_wav_bytes())], start=0, end=0.5)
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"


class TestFormats:
    def test_lists_every_format_with_availability(self, client) -> None:
        response = client.get("/formats")

        assert response.status_code == 200
        formats: dict = {f["name"]: f for f in response.get_json()["formats"]}
        assert set(formats) == {"wav", "ogg", "mp3"}
        assert formats["wav"]["available"] is True
        assert formats["ogg"]["available"] is False
        assert formats["mp3"]["extension"] == ".mp3"

    def test_unknown_route_is_json_404(self, client) -> None:
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.get_json() == {"error": "Not found."}
