# infrastructure/audio/services.py
# Wires the concrete decoder/encoders into the core, skipping any backend
# the host cannot run.

import logging

from looptrim.codecs import CodecAdapter, CodecServices
from looptrim.core import TrimEncodePipeline

from .pydub_mp3_encoder import PydubMp3Encoder, mp3_available
from .soundfile_pydub_decoder import SoundfilePydubDecoder
from .soundfile_vorbis_encoder import SoundfileVorbisEncoder, vorbis_available

logger = logging.getLogger("loop_trimmer")


def default_codec_services() -> CodecServices:
    vorbis = SoundfileVorbisEncoder if vorbis_available() else None
    mp3 = PydubMp3Encoder if mp3_available() else None
    if vorbis is None:
        logger.warning("Ogg Vorbis encoding unavailable (libsndfile lacks OGG/VORBIS)")
    if mp3 is None:
        logger.warning("MP3 encoding unavailable (ffmpeg not found)")
    return CodecServices(vorbis=vorbis, mp3=mp3)


def build_pipeline() -> TrimEncodePipeline:
    """Pipeline with the default decoder and whatever encoders the host supports."""
    return TrimEncodePipeline(
        decoder=SoundfilePydubDecoder(),
        codecs=CodecAdapter(default_codec_services()),
    )
