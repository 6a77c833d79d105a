from enum import Enum
from typing import Callable, List, Optional

import numpy as np

from application.dto.batch_dto import EncodeParameters, InputFile, RunSuccess
from application.ports.audio_decoder_port import IAudioDecoder
from looptrim.codecs import CodecAdapter
from looptrim.downmix import downmix_to_mono
from looptrim.errors import RangeRejectedError
from looptrim.models import DecodedAudio, OutputFormat, SampleIndexRange
from looptrim.run_log import RunLog
from looptrim.utils import get_output_filename, seconds_to_index
from looptrim.zero_cross import find_nearest_zero_cross


class PipelineStage(Enum):
    DECODING = "Decoding audio"
    LOCATING_CROSSINGS = "Locating zero crossings"
    DOWNMIXING = "Downmixing to mono"
    ENCODING = "Encoding output"
    DONE = "Done"
    REJECTED = "Rejected"


# Stages reported to progress callbacks, in order
STEPS: List[PipelineStage] = [
    PipelineStage.DECODING,
    PipelineStage.LOCATING_CROSSINGS,
    PipelineStage.DOWNMIXING,
    PipelineStage.ENCODING,
    PipelineStage.DONE,
]


def locate_cut_points(
    audio: DecodedAudio, params: EncodeParameters
) -> tuple[SampleIndexRange, SampleIndexRange]:
    """
    Map the requested time range to sample indices and snap both ends to
    zero crossings of channel 0.

    Returns:
        (raw range, adjusted range). The adjusted range is not validated.
    """
    frames: int = audio.frame_count
    rate: int = audio.sample_rate

    raw: SampleIndexRange = SampleIndexRange(
        start_index=seconds_to_index(params.time_range.start_seconds, rate, frames),
        end_index=seconds_to_index(params.time_range.end_seconds, rate, frames),
    )

    reference: np.ndarray = audio.channel(0)
    adjusted: SampleIndexRange = SampleIndexRange(
        start_index=find_nearest_zero_cross(reference, raw.start_index, params.search_radius),
        end_index=find_nearest_zero_cross(reference, raw.end_index, params.search_radius),
    )
    return raw, adjusted


class TrimEncodePipeline:
    """
    Decode → locate crossings → downmix → encode, for one file at a time.

    The pipeline keeps no per-file state between calls; the decoder and codec
    services are injected so hosts without an encoder backend get a
    MissingServiceError rather than a crash.
    """

    def __init__(self, decoder: IAudioDecoder, codecs: Optional[CodecAdapter] = None) -> None:
        self.decoder: IAudioDecoder = decoder
        self.codecs: CodecAdapter = codecs or CodecAdapter()

    def process(
        self,
        input_file: InputFile,
        params: EncodeParameters,
        log: Optional[RunLog] = None,
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
    ) -> RunSuccess:
        """
        Run one file through the pipeline.

        Args:
            input_file:        File to trim.
            params:            Batch-wide encode settings.
            log:               Run log to append progress lines to.
            progress_callback: Optional callback (step_idx, total_steps, step_name).

        Returns:
            RunSuccess holding the encoded bytes and derived file name.

        Raises:
            UnsupportedFormatError, DecodeError, RangeRejectedError,
            MissingServiceError.
        """
        log = log if log is not None else RunLog()
        total_steps: int = len(STEPS)

        def _report(stage: PipelineStage) -> None:
            if progress_callback:
                progress_callback(STEPS.index(stage), total_steps, stage.value)

        output_format: OutputFormat = OutputFormat.from_name(params.output_format)

        # [1] Decode
        _report(PipelineStage.DECODING)
        audio: DecodedAudio = self.decoder.decode(input_file.read_bytes(), input_file.name)
        rate: int = audio.sample_rate

        # [2] Zero-cross search on channel 0
        _report(PipelineStage.LOCATING_CROSSINGS)
        raw, adjusted = locate_cut_points(audio, params)

        if adjusted.end_index <= adjusted.start_index:
            if progress_callback:
                progress_callback(total_steps - 1, total_steps, PipelineStage.REJECTED.value)
            raise RangeRejectedError(adjusted.start_index, adjusted.end_index)

        requested = params.time_range
        log.info(f"  requested: {requested.start_seconds:.3f}s - {requested.end_seconds:.3f}s")
        log.info(
            f"  adjusted : {adjusted.start_index / rate:.3f}s - {adjusted.end_index / rate:.3f}s"
        )
        log.info(
            f"  samples  : start={adjusted.start_index}, end={adjusted.end_index}, "
            f"length={adjusted.length} (raw {raw.start_index}-{raw.end_index})"
        )

        # [3] Downmix
        _report(PipelineStage.DOWNMIXING)
        mono: np.ndarray = downmix_to_mono(audio, adjusted.start_index, adjusted.end_index)
        del audio

        # [4] Encode
        _report(PipelineStage.ENCODING)
        if output_format is OutputFormat.VORBIS:
            log.info(f"  ogg quality: q={params.vorbis_quality}")
        elif output_format is OutputFormat.MP3:
            log.info("  encoding mp3 (128 kbps)")
        encoded: bytes = self.codecs.encode(
            output_format, mono, rate, quality=params.vorbis_quality
        )

        _report(PipelineStage.DONE)
        return RunSuccess(
            filename=input_file.name,
            output_filename=get_output_filename(input_file.name, output_format.extension),
            output_bytes=encoded,
            start_index=adjusted.start_index,
            end_index=adjusted.end_index,
            sample_rate=rate,
        )
