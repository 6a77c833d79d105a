# application/dto/batch_dto.py
# Data Transfer Objects for batch loop-trim requests and results.

import os
from dataclasses import dataclass, field
from typing import List, Optional, Union

from looptrim.models import TimeRange


@dataclass(frozen=True)
class EncodeParameters:
    """Batch-wide settings, shared read-only by every file."""
    time_range: TimeRange
    output_format: str = "wav"     # resolved per file; unknown names fail that file
    vorbis_quality: int = 3        # 0–10
    search_radius: int = 4000      # samples


@dataclass
class InputFile:
    """One batch input. Bytes are read lazily unless given up front."""
    name: str
    path: Optional[str] = None
    data: Optional[bytes] = field(default=None, repr=False)

    @classmethod
    def from_path(cls, path: str) -> "InputFile":
        return cls(name=os.path.basename(path), path=path)

    def read_bytes(self) -> bytes:
        if self.data is not None:
            return self.data
        if self.path is None:
            raise ValueError(f"Input '{self.name}' has neither data nor a path.")
        with open(self.path, "rb") as fh:
            return fh.read()


@dataclass
class RunSuccess:
    """Result for a file that produced output."""
    filename: str
    output_filename: str
    output_bytes: bytes = field(repr=False)
    start_index: int = 0
    end_index: int = 0
    sample_rate: int = 0
    ok: bool = field(default=True, init=False)


@dataclass
class RunFailure:
    """Result for a file that was skipped."""
    filename: str
    reason: str
    error_type: str = "error"
    ok: bool = field(default=False, init=False)


RunResult = Union[RunSuccess, RunFailure]


@dataclass
class BatchSummary:
    total: int = 0
    succeeded: int = 0
    failed: int = 0

    @classmethod
    def from_results(cls, results: List[RunResult]) -> "BatchSummary":
        succeeded: int = sum(1 for r in results if r.ok)
        return cls(total=len(results), succeeded=succeeded, failed=len(results) - succeeded)
