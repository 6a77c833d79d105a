import logging
from typing import List

logger = logging.getLogger("loop_trimmer")


class RunLog:
    """Append-only, per-run log. Every line is mirrored to the module logger."""

    def __init__(self) -> None:
        self._lines: List[str] = []

    def info(self, message: str) -> None:
        self._lines.append(message)
        logger.info("%s", message)

    def error(self, message: str) -> None:
        self._lines.append(f"[error] {message}")
        logger.error("%s", message)

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def text(self) -> str:
        return "\n".join(self._lines) + ("\n" if self._lines else "")

    def __len__(self) -> int:
        return len(self._lines)
