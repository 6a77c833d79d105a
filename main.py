#!/usr/bin/env python3
"""
Loop Trimmer CLI
Cut a sample-accurate loop out of one or more recordings and export it as mono.

Usage:
    python main.py take.wav --start 1.5 --end 3.5
    python main.py *.flac --start 0 --end 2 --format ogg --quality 6
    python main.py drums.mp3 --start 4 --end 8 --radius 0 --output-dir loops/
"""

import argparse
import os
import sys
import time
from typing import List, Optional, Set

from tqdm import tqdm

from application.dto.batch_dto import BatchSummary, EncodeParameters, InputFile, RunResult
from infrastructure.audio import build_pipeline
from looptrim.batch import BatchRunner
from looptrim.errors import ConfigurationError
from looptrim.printer import OutputPrinter
from looptrim.run_log import RunLog
from looptrim.utils import DEFAULT_PARAMS, SUPPORTED_INPUT_FORMATS, validate_batch

EXIT_OK: int = 0
EXIT_FILE_FAILED: int = 1
EXIT_CONFIG_ERROR: int = 2


def build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="looptrim",
        description="Trim recordings to a loop region at zero crossings and export mono audio.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py take.wav --start 1.5 --end 3.5
  python main.py a.flac b.flac --start 0 --end 2 --format ogg --quality 6
  python main.py drums.mp3 --start 4 --end 8 --format mp3 --output-dir loops/

Parameter guide:
  --radius   0    = cut exactly at the given times
             4000 = snap to the nearest zero crossing within 4000 samples
  --quality  0    = smallest Ogg file | 10 = best Ogg quality
        """,
    )

    parser.add_argument(
        "inputs",
        metavar="INPUT",
        nargs="+",
        help="Audio files to trim (.wav, .flac, .ogg, .mp3, .aac, .m4a, ...).",
    )

    range_group = parser.add_argument_group("Loop Range")
    range_group.add_argument(
        "--start",
        "-s",
        type=float,
        default=DEFAULT_PARAMS["start"],
        metavar="SECONDS",
        help=f"Loop start in seconds (default: {DEFAULT_PARAMS['start']}).",
    )
    range_group.add_argument(
        "--end",
        "-e",
        type=float,
        default=DEFAULT_PARAMS["end"],
        metavar="SECONDS",
        help="Loop end in seconds. Must be greater than --start.",
    )
    range_group.add_argument(
        "--radius",
        "-r",
        type=int,
        default=DEFAULT_PARAMS["radius"],
        metavar="SAMPLES",
        help=f"Zero-crossing search radius in samples (default: {DEFAULT_PARAMS['radius']}).",
    )

    out_group = parser.add_argument_group("Output Options")
    out_group.add_argument(
        "--format",
        "-f",
        type=str,
        default=DEFAULT_PARAMS["format"],
        metavar="FORMAT",
        help="Output format: wav, ogg or mp3 (default: wav).",
    )
    out_group.add_argument(
        "--quality",
        "-q",
        type=str,
        default=str(DEFAULT_PARAMS["quality"]),
        metavar="Q",
        help=f"Ogg Vorbis quality 0-10 (default: {DEFAULT_PARAMS['quality']}).",
    )
    out_group.add_argument(
        "--output-dir",
        "-o",
        type=str,
        default=None,
        metavar="DIR",
        help="Directory for exported loops (default: next to each input).",
    )
    out_group.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all output except errors.",
    )
    out_group.add_argument(
        "--no-color",
        "-n",
        action="store_true",
        help="Disable colored output (also auto-disabled when NO_COLOR env var is set).",
    )

    return parser


def _output_path(input_file: InputFile, output_filename: str, output_dir: Optional[str]) -> str:
    if output_dir is not None:
        return os.path.join(output_dir, output_filename)
    source_dir: str = os.path.dirname(input_file.path or "")
    return os.path.join(source_dir, output_filename)


def _write_output(out_path: str, data: bytes) -> None:
    """Write through a sibling .part file; a failed write leaves nothing behind."""
    tmp_path: str = f"{out_path}.part"
    try:
        with open(tmp_path, "wb") as fh:
            fh.write(data)
        os.replace(tmp_path, out_path)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def _unrecognized_inputs(files: List[InputFile]) -> List[str]:
    return [
        f.name for f in files
        if os.path.splitext(f.name)[1].lower() not in SUPPORTED_INPUT_FORMATS
    ]


def main(argv: Optional[List[str]] = None) -> int:
    parser: argparse.ArgumentParser = build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    printer: OutputPrinter = OutputPrinter(quiet=args.quiet, no_color=args.no_color)
    files: List[InputFile] = [InputFile.from_path(p) for p in args.inputs]

    try:
        params: EncodeParameters = validate_batch(
            files,
            start_seconds=args.start,
            end_seconds=args.end,
            search_radius=args.radius,
            output_format=args.format,
            quality=args.quality,
        )
    except ConfigurationError as exc:
        printer.error(str(exc))
        return EXIT_CONFIG_ERROR

    if args.output_dir is not None and not os.path.isdir(args.output_dir):
        printer.error(
            f"Output directory does not exist: '{args.output_dir}'.",
            hint="Create the directory first, or choose an existing path.",
        )
        return EXIT_CONFIG_ERROR

    unrecognized: List[str] = _unrecognized_inputs(files)
    if unrecognized:
        printer.warning(
            f"Unrecognized input extension: {', '.join(unrecognized)}",
            hint=f"Expected one of {', '.join(sorted(SUPPORTED_INPUT_FORMATS))}; decoding is still attempted.",
        )
    printer.info(f"Trimming {len(files)} file(s) to {params.output_format}")

    runner: BatchRunner = BatchRunner(build_pipeline(), log=RunLog())
    seen: List[RunResult] = []
    written: Set[str] = set()
    write_failures: List[str] = []
    start_time: float = time.time()

    with tqdm(total=len(files), desc="Processing", unit="file", disable=args.quiet) as pbar:

        def on_step(step_idx: int, total: int, name: str) -> None:
            pbar.set_description(name)

        def on_result(result: RunResult) -> None:
            # Results arrive in input order, so the position identifies the file
            input_file: InputFile = files[len(seen)]
            seen.append(result)
            pbar.update(1)
            if not result.ok:
                printer.file_failed(result.filename, result.reason)
                return
            out_path: str = _output_path(input_file, result.output_filename, args.output_dir)
            key: str = os.path.normcase(os.path.abspath(out_path))
            try:
                if key in written:
                    write_failures.append(result.filename)
                    printer.file_failed(
                        result.filename,
                        f"Output '{out_path}' was already written by an earlier input in this batch.\n"
                        f"    → Rename one of the inputs or run them separately.",
                    )
                    return
                try:
                    _write_output(out_path, result.output_bytes)
                except OSError as exc:
                    write_failures.append(result.filename)
                    printer.file_failed(result.filename, f"Could not write output: {exc}")
                    return
                written.add(key)
                printer.file_done(result.filename, out_path)
            finally:
                # written or dropped, either way the encoded bytes are released here
                result.output_bytes = b""

        results: List[RunResult] = runner.run(
            files, params, on_result=on_result, progress_callback=on_step
        )

    summary: BatchSummary = BatchSummary.from_results(results)
    failed: int = summary.failed + len(write_failures)
    printer.summary(
        total=summary.total,
        succeeded=summary.total - failed,
        failed=failed,
        elapsed=time.time() - start_time,
    )
    return EXIT_FILE_FAILED if failed else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
