import logging
from typing import Callable, List, Optional, Sequence

from application.dto.batch_dto import (
    EncodeParameters,
    InputFile,
    RunFailure,
    RunResult,
    RunSuccess,
)
from looptrim.core import TrimEncodePipeline
from looptrim.errors import DecodeError, LoopTrimError
from looptrim.run_log import RunLog

logger = logging.getLogger("loop_trimmer")


class BatchRunner:
    """
    Runs input files through the pipeline one after another.

    A failing file becomes a RunFailure and the batch carries on. Results,
    log lines and ``on_result`` calls all follow input order.
    """

    def __init__(self, pipeline: TrimEncodePipeline, log: Optional[RunLog] = None) -> None:
        self.pipeline: TrimEncodePipeline = pipeline
        self.log: RunLog = log if log is not None else RunLog()

    def run(
        self,
        files: Sequence[InputFile],
        params: EncodeParameters,
        on_result: Optional[Callable[[RunResult], None]] = None,
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
    ) -> List[RunResult]:
        """
        Process every file in *files* with the shared *params*.

        Args:
            files:             Inputs, already checked by ``validate_batch``.
            params:            Batch-wide encode settings.
            on_result:         Called with each result as soon as it is known.
            progress_callback: Per-file stage callback (step_idx, total, name).

        Returns:
            One RunResult per input, in input order.
        """
        tr = params.time_range
        self.log.info(f"files: {len(files)}")
        self.log.info(
            f"settings: start={tr.start_seconds}s, end={tr.end_seconds}s, "
            f"radius={params.search_radius} samples, format={params.output_format}"
        )

        results: List[RunResult] = []
        for input_file in files:
            result: RunResult = self._run_one(input_file, params, progress_callback)
            results.append(result)
            if on_result:
                on_result(result)

        self.log.info("--- all files processed ---")
        return results

    def _run_one(
        self,
        input_file: InputFile,
        params: EncodeParameters,
        progress_callback: Optional[Callable[[int, int, str], None]],
    ) -> RunResult:
        self.log.info(f"--- processing: {input_file.name} ---")
        try:
            success: RunSuccess = self.pipeline.process(
                input_file, params, log=self.log, progress_callback=progress_callback
            )
        except OSError as exc:
            return self._fail(input_file, DecodeError(f"Could not read input: {exc}"))
        except LoopTrimError as exc:
            return self._fail(input_file, exc)
        except Exception as exc:
            logger.exception("unexpected failure file=%s", input_file.name)
            return self._fail(input_file, exc)

        self.log.info(f"  done: {success.output_filename}")
        return success

    def _fail(self, input_file: InputFile, exc: Exception) -> RunFailure:
        reason: str = str(exc) or type(exc).__name__
        self.log.error(f"{input_file.name}: {reason}")
        return RunFailure(
            filename=input_file.name,
            reason=reason,
            error_type=type(exc).__name__,
        )
