# infrastructure/web/zip_builder.py
# Builds ZIP archives in-memory from batch results.

import io
import zipfile
from typing import List, Optional

from application.dto.batch_dto import RunResult

RUN_LOG_NAME: str = "run_log.txt"


def build_zip(file_entries: List[dict]) -> io.BytesIO:
    """
    Build a ZIP archive in memory.

    Args:
        file_entries: list of dicts with keys:
            - "name": desired filename in the ZIP archive
            - "data": file contents as bytes

    Returns:
        io.BytesIO containing the ZIP data, seeked to position 0.
    """
    buffer = io.BytesIO()

    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for entry in file_entries:
            zf.writestr(entry["name"], entry["data"])

    buffer.seek(0)
    return buffer


def build_batch_zip(results: List[RunResult], run_log: Optional[str] = None) -> io.BytesIO:
    """
    Build a ZIP from batch results.

    Only successful results are included, numbered by input position
    (e.g. ``01_take_loop.wav``, ``03_pad_loop.wav`` when the second input
    failed). The run log, when given, is added as ``run_log.txt``.
    """
    entries: List[dict] = []

    for i, result in enumerate(results, start=1):
        if not result.ok:
            continue
        entries.append(
            {
                "name": f"{i:02d}_{result.output_filename}",
                "data": result.output_bytes,
            }
        )

    if run_log is not None:
        entries.append({"name": RUN_LOG_NAME, "data": run_log.encode("utf-8")})

    return build_zip(entries)
