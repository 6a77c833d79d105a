# server.py
import logging
import os
import re
from pathlib import Path
from typing import List

from flask import Flask, jsonify, request, send_file
from flask_cors import CORS

from application.dto.batch_dto import BatchSummary, EncodeParameters, InputFile, RunResult
from infrastructure.audio import build_pipeline
from infrastructure.web.zip_builder import build_batch_zip
from looptrim.batch import BatchRunner
from looptrim.errors import ConfigurationError
from looptrim.models import OutputFormat
from looptrim.run_log import RunLog
from looptrim.utils import DEFAULT_PARAMS, validate_batch

# ── Logging ──────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("loop_trimmer")

# ── Flask app ────────────────────────────────────────────────────────
app = Flask(__name__)

# Upload size limit (100 MB hard cap)
MAX_UPLOAD_BYTES: int = 100 * 1024 * 1024
app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_BYTES

# Restrict CORS to own origin
CORS(app, resources={
    r"/batch-trim": {"origins": ["http://localhost:5000", "http://127.0.0.1:5000"]},
    r"/formats":    {"origins": ["http://localhost:5000", "http://127.0.0.1:5000"]},
})

app.config["SECRET_KEY"] = os.environ.get("FLASK_SECRET_KEY") or os.urandom(32)

# Decoder + encoder services, probed once at startup
app.config["LOOP_PIPELINE"] = build_pipeline()

MAX_FILES_PER_BATCH: int = 20


# ════════════════════════════════════════════════════════════════════
# Form helpers
# ════════════════════════════════════════════════════════════════════

def _sanitize_filename(name: str) -> str:
    """Strip path components, control chars, and limit length."""
    name = Path(name).name
    name = re.sub(r"[^\w\s\-.]", "", name)
    name = re.sub(r"\.{2,}", ".", name)
    return name[:128].strip()


def _safe_float(value, default: float) -> float:
    """Parse float from form input, never raise."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _safe_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _failure_json(results: List[RunResult]) -> list:
    return [
        {"filename": r.filename, "error": r.reason, "type": r.error_type}
        for r in results
        if not r.ok
    ]


# ════════════════════════════════════════════════════════════════════
# Routes
# ════════════════════════════════════════════════════════════════════

@app.route("/formats", methods=["GET"])
def list_formats():
    """
    GET /formats
    Returns: { formats: [{ name, extension, mimetype, available }] }
    """
    available = app.config["LOOP_PIPELINE"].codecs.available_formats()
    return jsonify({
        "formats": [
            {
                "name":      fmt.value,
                "extension": fmt.extension,
                "mimetype":  fmt.mimetype,
                "available": fmt in available,
            }
            for fmt in OutputFormat
        ]
    })


@app.route("/batch-trim", methods=["POST"])
def batch_trim():
    """
    POST /batch-trim
    Form fields:
      - files[]  : audio files (multipart)
      - start    : loop start in seconds
      - end      : loop end in seconds
      - radius   : zero-cross search radius in samples (default 4000)
      - format   : wav | ogg | mp3 (default wav)
      - quality  : Ogg Vorbis quality 0-10 (default 3)
    Returns: ZIP of exported loops plus run_log.txt,
             or JSON error (400 bad settings, 422 nothing succeeded).
    """
    uploads = request.files.getlist("files[]") or request.files.getlist("files")

    if len(uploads) > MAX_FILES_PER_BATCH:
        return jsonify({"error": f"Maximum {MAX_FILES_PER_BATCH} files per batch."}), 400

    files: List[InputFile] = [
        InputFile(
            name=_sanitize_filename(upload.filename or "") or f"upload_{i}",
            data=upload.read(),
        )
        for i, upload in enumerate(uploads, start=1)
    ]

    try:
        params: EncodeParameters = validate_batch(
            files,
            start_seconds=_safe_float(request.form.get("start"), DEFAULT_PARAMS["start"]),
            end_seconds=_safe_float(request.form.get("end"), DEFAULT_PARAMS["end"]),
            search_radius=_safe_int(request.form.get("radius"), DEFAULT_PARAMS["radius"]),
            output_format=request.form.get("format", DEFAULT_PARAMS["format"]),
            quality=request.form.get("quality"),
        )
    except ConfigurationError as exc:
        return jsonify({"error": exc.message}), 400

    logger.info(
        "batch accepted ip=%s files=%d format=%s",
        request.remote_addr, len(files), params.output_format,
    )

    log: RunLog = RunLog()
    results: List[RunResult] = BatchRunner(app.config["LOOP_PIPELINE"], log=log).run(files, params)
    summary: BatchSummary = BatchSummary.from_results(results)

    if summary.succeeded == 0:
        return jsonify({
            "error": "No file could be processed.",
            "failures": _failure_json(results),
        }), 422

    zip_buffer = build_batch_zip(results, run_log=log.text())
    response = send_file(
        zip_buffer,
        mimetype="application/zip",
        as_attachment=True,
        download_name="loops.zip",
    )
    response.headers["X-Loop-Total"] = str(summary.total)
    response.headers["X-Loop-Succeeded"] = str(summary.succeeded)
    response.headers["X-Loop-Failed"] = str(summary.failed)
    return response


# ════════════════════════════════════════════════════════════════════
# Error handlers & Security headers
# ════════════════════════════════════════════════════════════════════

@app.errorhandler(413)
def request_entity_too_large(e):
    return jsonify({"error": "Upload too large. Maximum size is 100 MB."}), 413


@app.errorhandler(404)
def not_found(e):
    return jsonify({"error": "Not found."}), 404


@app.errorhandler(Exception)
def handle_exception(e):
    """Generic handler: never leak internal details to client."""
    logger.error("unhandled exception: %s", e, exc_info=True)
    return jsonify({"error": "An internal error occurred."}), 500


@app.after_request
def set_security_headers(response):
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# ════════════════════════════════════════════════════════════════════
# Entry point
# ════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    debug_mode = os.environ.get("FLASK_DEBUG", "false").lower() == "true"
    app.run(debug=debug_mode, port=5000)
